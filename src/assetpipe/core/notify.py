"""Failure notification channel threaded into every task action."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from assetpipe.core.errors import COMPILE_ERRORS

DEFAULT_TITLE = "Compile Error"
MAX_RECORDED_ERRORS = 20
MESSAGE_TEMPLATE = "{message}"


@dataclass(frozen=True, slots=True)
class Notification:
    """Human-readable failure notification."""

    title: str
    message: str


class Notifier(Protocol):
    """Delivers notifications to the desktop or another sink."""

    async def notify(self, notification: Notification) -> None:
        """Deliver a notification."""


def format_notification(
    error: BaseException, *, title: str = DEFAULT_TITLE, template: str = MESSAGE_TEMPLATE
) -> Notification:
    """Render an error into a notification using ``{message}`` and ``{error_type}``."""

    message = str(error).strip() or error.__class__.__name__
    return Notification(
        title=title,
        message=template.format(message=message, error_type=error.__class__.__name__),
    )


@dataclass(slots=True)
class ErrorChannel:
    """Per-task error channel.

    ``fail`` always notifies and ends the channel. A tolerant channel (watch mode)
    then records compile errors and returns; anything else is re-raised to become
    the task's failure.

    A long watch session can report many errors through one channel. ``errors``
    keeps the first one and the most recent ones, up to ``MAX_RECORDED_ERRORS``;
    ``reported`` counts all of them.
    """

    task: str
    notifier: Notifier
    logger: logging.Logger
    tolerant: bool = False
    title: str = DEFAULT_TITLE
    errors: list[BaseException] = field(default_factory=list)
    ended: asyncio.Event = field(default_factory=asyncio.Event)
    reported: int = 0

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    def swallowed(self, error: BaseException) -> bool:
        return self.tolerant and isinstance(error, COMPILE_ERRORS)

    async def fail(self, error: BaseException) -> None:
        notification = format_notification(error, title=self.title)
        try:
            await self.notifier.notify(notification)
        except Exception as exc:  # pylint: disable=broad-except
            self.logger.warning("Unable to deliver notification for '%s': %s", self.task, exc)

        if len(self.errors) >= MAX_RECORDED_ERRORS:
            del self.errors[1]
        self.errors.append(error)
        self.reported += 1
        self.ended.set()

        if self.swallowed(error):
            self.logger.error("'%s' reported %s: %s", self.task, type(error).__name__, error)
            return
        raise error
