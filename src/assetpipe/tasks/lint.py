"""Lint tasks."""

from __future__ import annotations

import asyncio
from pathlib import Path

from assetpipe.core.errors import LintViolation
from assetpipe.core.executor import TaskContext
from assetpipe.core.globs import GlobPattern
from assetpipe.core.graph import TaskAction
from assetpipe.tools import Linter, LintReport
from assetpipe.ui import render_lint_report


async def _collect(pattern: GlobPattern, root: Path) -> list[Path]:
    return await asyncio.to_thread(lambda: list(pattern.iter_files(root)))


def _publish(ctx: TaskContext, report: LintReport) -> None:
    render_lint_report(ctx.build.console, report)
    if not report.ok:
        raise LintViolation(report.linter, f"{report.linter} reported problems")


async def lint_scripts(ctx: TaskContext) -> None:
    layout = ctx.build.layout
    files = await _collect(layout.script_sources, layout.root)
    _publish(ctx, await ctx.build.tools.script_linter.lint(files))


def style_lint_task(linter_name: str) -> TaskAction:
    """Build the action that lints stylesheets with the named linter."""

    async def lint_styles(ctx: TaskContext) -> None:
        linter: Linter = ctx.build.tools.style_linters[linter_name]
        layout = ctx.build.layout
        files = await _collect(layout.style_sources, layout.root)
        _publish(ctx, await linter.lint(files))

    lint_styles.__name__ = f"lint_{linter_name.replace('-', '_')}"
    return lint_styles
