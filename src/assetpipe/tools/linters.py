"""Linter adapters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from assetpipe.core.errors import BuildError
from assetpipe.tools.base import ToolResult, ToolRunner


@dataclass(frozen=True, slots=True)
class LintReport:
    """Outcome of one linter run."""

    linter: str
    ok: bool
    output: str = ""
    files: int = 0


class Linter(Protocol):
    name: str

    async def lint(self, files: Sequence[Path]) -> LintReport:
        """Lint ``files``; violations give ``ok=False``, crashes raise BuildError."""


def _report(
    name: str, result: ToolResult, files: Sequence[Path], violation_codes: set[int]
) -> LintReport:
    if result.ok:
        return LintReport(linter=name, ok=True, output=result.stdout_text.strip(), files=len(files))
    if result.returncode in violation_codes:
        output = result.stdout_text.strip() or result.stderr_text.strip()
        return LintReport(linter=name, ok=False, output=output, files=len(files))
    raise BuildError(f"{name} failed to run: {result.diagnostics()}")


@dataclass(slots=True)
class EslintLinter:
    runner: ToolRunner
    name: str = "eslint"

    async def lint(self, files: Sequence[Path]) -> LintReport:
        if not files:
            return LintReport(linter=self.name, ok=True)
        result = await self.runner.run(
            "eslint", ["--format", "stylish", *(str(path) for path in files)]
        )
        return _report(self.name, result, files, {1})


@dataclass(slots=True)
class StylelintLinter:
    runner: ToolRunner
    syntax: str | None = "postcss-scss"
    name: str = "stylelint"

    async def lint(self, files: Sequence[Path]) -> LintReport:
        if not files:
            return LintReport(linter=self.name, ok=True)
        args = ["--formatter", "string"]
        if self.syntax:
            args.extend(["--custom-syntax", self.syntax])
        args.extend(str(path) for path in files)
        result = await self.runner.run("stylelint", args)
        return _report(self.name, result, files, {2})


@dataclass(slots=True)
class ScssLintLinter:
    """Ruby scss-lint, optionally through ``bundle exec``."""

    runner: ToolRunner
    bundle_exec: bool = True
    name: str = "scss-lint"

    async def lint(self, files: Sequence[Path]) -> LintReport:
        if not files:
            return LintReport(linter=self.name, ok=True)
        paths = [str(path) for path in files]
        if self.bundle_exec:
            result = await self.runner.run("bundle", ["exec", "scss-lint", *paths])
        else:
            result = await self.runner.run("scss-lint", paths)
        return _report(self.name, result, files, {1, 2})
