"""Subprocess plumbing shared by the external tool adapters."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from assetpipe.core.errors import ToolNotFoundError

logger = logging.getLogger(__name__)

# Package that provides each executable, used in install hints.
PACKAGES: dict[str, str] = {
    "browserify": "browserify",
    "watchify": "watchify",
    "sass": "sass",
    "postcss": "postcss-cli",
    "uglifyjs": "uglify-js",
    "csso": "csso-cli",
    "eslint": "eslint",
    "stylelint": "stylelint",
}


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Captured result of a finished tool process."""

    argv: tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    def diagnostics(self) -> str:
        """Return the most useful error text the tool produced."""

        text = self.stderr_text.strip() or self.stdout_text.strip()
        return text or f"{self.argv[0]} exited with status {self.returncode}"


@dataclass(slots=True)
class ToolRunner:
    """Locates and runs external executables for a project.

    Commands resolve from configuration overrides first, then the project's
    ``node_modules/.bin``, then ``PATH``.
    """

    root: Path
    overrides: Mapping[str, Sequence[str]] = field(default_factory=dict)
    env: Mapping[str, str] | None = None

    def command(self, name: str) -> list[str]:
        override = self.overrides.get(name)
        if override:
            return list(override)

        local = self.root / "node_modules" / ".bin" / name
        if local.is_file():
            return [str(local)]

        found = shutil.which(name)
        if found:
            return [found]

        package = PACKAGES.get(name)
        hint = f" (npm install --save-dev {package})" if package else ""
        raise ToolNotFoundError(f"Unable to locate '{name}'{hint}.")

    def _environment(self, extra: Mapping[str, str] | None) -> dict[str, str]:
        merged = dict(os.environ)
        if self.env:
            merged.update(self.env)
        if extra:
            merged.update(extra)
        return merged

    async def run(
        self,
        name: str,
        args: Sequence[str],
        *,
        input: bytes | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ToolResult:
        """Run a tool to completion and capture its output."""

        argv = [*self.command(name), *args]
        logger.debug("Running %s", " ".join(argv))
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(self.root),
                stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._environment(env),
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(f"Unable to start '{name}': {exc}") from exc

        stdout, stderr = await process.communicate(input)
        return ToolResult(
            argv=tuple(argv),
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout or b"",
            stderr=stderr or b"",
        )

    async def spawn(
        self,
        name: str,
        args: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> asyncio.subprocess.Process:
        """Start a long-running tool with piped stdout and stderr."""

        argv = [*self.command(name), *args]
        logger.debug("Spawning %s", " ".join(argv))
        try:
            return await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(self.root),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._environment(env),
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(f"Unable to start '{name}': {exc}") from exc
