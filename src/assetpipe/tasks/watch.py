"""File watching, watch rules and the watch/serve tasks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from watchfiles import awatch

from assetpipe.core.errors import TaskFailedError
from assetpipe.core.executor import TaskContext, TaskExecutor
from assetpipe.core.globs import GlobPattern
from assetpipe.core.layout import ProjectLayout
from assetpipe.serve import DevServer, LiveReloadHub, create_app


@dataclass(frozen=True, slots=True)
class WatchRule:
    """Tasks to re-run, and whether to reload, when files matching ``pattern`` change."""

    pattern: GlobPattern
    tasks: tuple[str, ...] = ()
    reload: bool = False
    name: str = ""


@dataclass(slots=True)
class FileWatcher:
    """Maps batches of file changes onto watch rules.

    Each rule fires at most once per batch, however many of its files changed.
    Rules fire independently of one another; a failing rule never stops the
    watcher.
    """

    layout: ProjectLayout
    executor: TaskExecutor
    hub: LiveReloadHub
    logger: logging.Logger
    debounce_ms: int = 200
    rules: list[WatchRule] = field(default_factory=list)

    def register(self, rule: WatchRule) -> None:
        self.rules.append(rule)
        self.logger.debug("Watching %s", rule.pattern.pattern)

    def matching(self, changed: Iterable[Path | str]) -> list[WatchRule]:
        relative = {self.layout.relative(Path(path)) for path in changed}
        return [
            rule for rule in self.rules if any(rule.pattern.matches(item) for item in relative)
        ]

    async def dispatch(self, changed: Iterable[Path | str]) -> list[WatchRule]:
        """Fire every rule matched by the changed paths; returns the rules fired."""

        fired = self.matching(changed)
        if fired:
            await asyncio.gather(*(self._fire(rule) for rule in fired))
        return fired

    async def _fire(self, rule: WatchRule) -> None:
        if rule.tasks:
            try:
                await self.executor.run(rule.tasks, tolerant=True)
            except TaskFailedError as exc:
                self.logger.error(
                    "Watch rule %s failed: %s", rule.name or rule.pattern.pattern, exc
                )
                return
        if rule.reload:
            await self.hub.reload()

    def roots(self) -> list[Path]:
        """Existing directories that cover every registered pattern."""

        roots: set[Path] = set()
        for rule in self.rules:
            base = self.layout.root / rule.pattern.base
            if base.is_dir():
                roots.add(base)
        return sorted(roots)

    async def run(self) -> None:
        """Watch for changes until cancelled."""

        roots = self.roots()
        if not roots:
            self.logger.warning("No watched directories exist; waiting without watching.")
            await asyncio.Event().wait()
            return

        self.logger.info("Watching %s", ", ".join(self.layout.relative(root) for root in roots))
        async for changes in awatch(*roots, debounce=self.debounce_ms, step=50):
            await self.dispatch(path for _, path in changes)


def _register(ctx: TaskContext, rule: WatchRule) -> None:
    ctx.build.ensure_watcher(ctx.executor).register(rule)


def watch_styles(ctx: TaskContext) -> None:
    _register(
        ctx,
        WatchRule(
            pattern=ctx.build.layout.watch_styles,
            tasks=("build:styles",),
            reload=True,
            name="styles",
        ),
    )


def watch_images(ctx: TaskContext) -> None:
    _register(ctx, WatchRule(pattern=ctx.build.layout.watch_images, reload=True, name="images"))


def watch_views(ctx: TaskContext) -> None:
    _register(ctx, WatchRule(pattern=ctx.build.layout.watch_views, reload=True, name="views"))


async def serve(ctx: TaskContext) -> None:
    """Start the development server on the public directory."""

    build = ctx.build
    settings = build.config.serve
    app = create_app(build.layout.public_dir, build.hub, live_reload=settings.live_reload)
    server = DevServer(app=app, host=settings.host, port=settings.port, logger=ctx.logger)
    await server.start()
    build.keep_alive(server.stop)


async def watch(ctx: TaskContext) -> None:
    """Build, serve and rebuild on change; never returns on its own."""

    await ctx.run(
        "clean",
        ("copy:fonts", "build:styles", "watchify"),
        "serve",
        ("watch:styles", "watch:images", "watch:views"),
        tolerant=True,
    )
    await ctx.build.hold()
