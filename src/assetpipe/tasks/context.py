"""Shared state handed to every task action."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console

from assetpipe.config import Config
from assetpipe.core.layout import ProjectLayout, RunMode
from assetpipe.serve import LiveReloadHub
from assetpipe.tasks.watch import FileWatcher
from assetpipe.tools import BundleRequest, ToolSet

if TYPE_CHECKING:
    from assetpipe.core.executor import TaskExecutor


@dataclass(slots=True)
class BuildContext:
    """Configuration, layout, tools and long-lived resources of one invocation."""

    config: Config
    layout: ProjectLayout
    mode: RunMode
    tools: ToolSet
    logger: logging.Logger
    console: Console = field(default_factory=Console)
    hub: LiveReloadHub = field(default_factory=LiveReloadHub)
    watcher: FileWatcher | None = None
    _resources: contextlib.AsyncExitStack = field(
        default_factory=contextlib.AsyncExitStack, init=False
    )
    _background: bool = field(default=False, init=False)

    def bundle_request(self) -> BundleRequest:
        """Bundler parameters for the current run mode."""

        scripts = self.config.scripts
        return BundleRequest(
            entries=tuple(self.layout.scripts_source / entry for entry in scripts.entries),
            extensions=tuple(scripts.extensions),
            transforms=tuple(scripts.transforms),
            debug=self.mode.source_maps,
            full_paths=self.mode.source_maps,
        )

    def ensure_watcher(self, executor: TaskExecutor) -> FileWatcher:
        if self.watcher is None:
            self.watcher = FileWatcher(
                layout=self.layout,
                executor=executor,
                hub=self.hub,
                logger=self.logger,
                debounce_ms=self.config.watch.debounce_ms,
            )
        return self.watcher

    def keep_alive(self, close: Callable[[], Awaitable[None]]) -> None:
        """Register a background resource that stays up until :meth:`aclose`."""

        self._resources.push_async_callback(close)
        self._background = True

    @property
    def has_background_work(self) -> bool:
        return self._background or bool(self.watcher and self.watcher.rules)

    async def hold(self) -> None:
        """Serve background work until cancelled."""

        if self.watcher is not None and self.watcher.rules:
            await self.watcher.run()
        else:
            await asyncio.Event().wait()

    async def aclose(self) -> None:
        await self._resources.aclose()
        self._background = False

