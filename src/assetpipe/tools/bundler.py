"""Script bundler adapters (browserify and watchify)."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import shutil
import tempfile
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from assetpipe.core.errors import SourceCompileError
from assetpipe.tools.base import ToolRunner

logger = logging.getLogger(__name__)

_WRITTEN = re.compile(r"\d+ bytes written to ")
# node runtime chatter (deprecation notices, npm warnings) that is not a build error
_NOISE = re.compile(r"^\(node:\d+\)|^\(Use `node --trace|^npm WARN|\bWarning:", re.IGNORECASE)
_ERROR_FLUSH_SECONDS = 0.2


@dataclass(frozen=True, slots=True)
class BundleRequest:
    """Bundler invocation parameters."""

    entries: tuple[Path, ...]
    extensions: tuple[str, ...] = (".js", ".jsx")
    transforms: tuple[str, ...] = ("babelify",)
    debug: bool = True
    full_paths: bool = True


@dataclass(frozen=True, slots=True)
class BundleOutput:
    """Bundled script text; debug bundles carry an inline source map."""

    code: str


UpdateHook = Callable[[BundleOutput], Awaitable[None]]
ErrorHook = Callable[[SourceCompileError], Awaitable[None]]


class Bundler(Protocol):
    """One-shot bundler."""

    async def bundle(self, request: BundleRequest) -> BundleOutput:
        """Bundle the request's entry points, raising SourceCompileError on failure."""


class BundleWatch(Protocol):
    """Handle for a running incremental bundler."""

    async def close(self) -> None:
        """Stop watching and release the bundler process."""


class WatchingBundler(Protocol):
    """Incremental bundler that keeps its dependency cache warm between rebuilds."""

    async def watch(
        self, request: BundleRequest, on_update: UpdateHook, on_error: ErrorHook
    ) -> BundleWatch:
        """Start watching; return once the initial bundle has been delivered or failed."""


def bundle_arguments(request: BundleRequest) -> list[str]:
    args = [str(entry) for entry in request.entries]
    for extension in request.extensions:
        args.append(f"--extension={extension}")
    for transform in request.transforms:
        args.extend(["--transform", transform])
    if request.debug:
        args.append("--debug")
    if request.full_paths:
        args.append("--full-paths")
    return args


@dataclass(slots=True)
class BrowserifyBundler:
    """Runs ``browserify`` once and captures the bundle from stdout."""

    runner: ToolRunner
    tool: str = "browserify"

    async def bundle(self, request: BundleRequest) -> BundleOutput:
        result = await self.runner.run(self.tool, bundle_arguments(request))
        if not result.ok:
            raise SourceCompileError(result.diagnostics())
        return BundleOutput(code=result.stdout_text)


@dataclass(slots=True)
class WatchifyBundler:
    """Runs ``watchify`` as a long-lived process that rebundles on source changes."""

    runner: ToolRunner
    tool: str = "watchify"

    async def watch(
        self, request: BundleRequest, on_update: UpdateHook, on_error: ErrorHook
    ) -> WatchifySession:
        workdir = Path(tempfile.mkdtemp(prefix="assetpipe-watchify-"))
        output = workdir / "bundle.js"
        try:
            process = await self.runner.spawn(
                self.tool, [*bundle_arguments(request), "--outfile", str(output), "--verbose"]
            )
        except BaseException:
            shutil.rmtree(workdir, ignore_errors=True)
            raise
        session = WatchifySession(
            process=process,
            workdir=workdir,
            output=output,
            on_update=on_update,
            on_error=on_error,
        )
        await session.start()
        return session


@dataclass(slots=True)
class WatchifySession:
    """Reads watchify's verbose stream and forwards rebuilds and errors."""

    process: asyncio.subprocess.Process
    workdir: Path
    output: Path
    on_update: UpdateHook
    on_error: ErrorHook
    _first_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _reader: asyncio.Task[None] | None = field(default=None, init=False)
    _closing: bool = field(default=False, init=False)

    async def start(self) -> None:
        self._reader = asyncio.create_task(self._read_events())
        await self._first_event.wait()

    async def close(self) -> None:
        self._closing = True
        if self.process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                self.process.terminate()
            try:
                await asyncio.wait_for(self.process.wait(), timeout=5.0)
            except TimeoutError:
                with contextlib.suppress(ProcessLookupError):
                    self.process.kill()
                await self.process.wait()
        if self._reader is not None:
            self._reader.cancel()
            await asyncio.gather(self._reader, return_exceptions=True)
        shutil.rmtree(self.workdir, ignore_errors=True)

    async def _read_events(self) -> None:
        stream = self.process.stderr
        if stream is None:  # pragma: no cover - spawn always pipes stderr
            self._first_event.set()
            return

        pending: list[str] = []
        try:
            while True:
                try:
                    raw = await asyncio.wait_for(
                        stream.readline(), timeout=_ERROR_FLUSH_SECONDS if pending else None
                    )
                except TimeoutError:
                    await self._flush_errors(pending)
                    continue
                if not raw:
                    break
                line = raw.decode("utf-8", errors="replace").rstrip()
                if _WRITTEN.search(line):
                    pending.clear()
                    code = await asyncio.to_thread(self.output.read_text, encoding="utf-8")
                    await self.on_update(BundleOutput(code=code))
                    self._first_event.set()
                elif _NOISE.search(line):
                    logger.debug("watchify: %s", line)
                elif line:
                    pending.append(line)

            await self._flush_errors(pending)
            returncode = await self.process.wait()
            if not self._closing:
                await self.on_error(
                    SourceCompileError(f"watchify exited with status {returncode}")
                )
        finally:
            self._first_event.set()

    async def _flush_errors(self, pending: list[str]) -> None:
        if not pending:
            return
        message = "\n".join(pending)
        pending.clear()
        await self.on_error(SourceCompileError(message))
        self._first_event.set()
