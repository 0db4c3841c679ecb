"""Desktop notification adapters."""

from __future__ import annotations

import json
import logging
import shutil
import sys
from dataclasses import dataclass, field

from assetpipe.core.notify import Notification, Notifier
from assetpipe.tools.base import ToolRunner


@dataclass(slots=True)
class NotifySendNotifier:
    """Linux desktop notifications through ``notify-send``."""

    runner: ToolRunner
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    async def notify(self, notification: Notification) -> None:
        result = await self.runner.run(
            "notify-send", ["--app-name=assetpipe", notification.title, notification.message]
        )
        if not result.ok:
            self.logger.debug("notify-send failed: %s", result.diagnostics())


@dataclass(slots=True)
class OsascriptNotifier:
    """macOS notifications through ``osascript``."""

    runner: ToolRunner
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    async def notify(self, notification: Notification) -> None:
        script = (
            f"display notification {json.dumps(notification.message)} "
            f"with title {json.dumps(notification.title)}"
        )
        result = await self.runner.run("osascript", ["-e", script])
        if not result.ok:
            self.logger.debug("osascript failed: %s", result.diagnostics())


@dataclass(slots=True)
class LogNotifier:
    """Writes notifications to the log when no desktop transport is available."""

    logger: logging.Logger

    async def notify(self, notification: Notification) -> None:
        self.logger.error("%s: %s", notification.title, notification.message)


class NullNotifier:
    async def notify(self, notification: Notification) -> None:
        return None


def default_notifier(runner: ToolRunner, logger: logging.Logger, *, enabled: bool) -> Notifier:
    """Pick the desktop transport available on this platform."""

    if not enabled:
        return NullNotifier()
    if sys.platform == "darwin" and shutil.which("osascript"):
        return OsascriptNotifier(runner=runner, logger=logger)
    if sys.platform.startswith("linux") and shutil.which("notify-send"):
        return NotifySendNotifier(runner=runner, logger=logger)
    return LogNotifier(logger=logger)
