"""Build tasks and the default task graph."""

from __future__ import annotations

import logging

from assetpipe.core.executor import TaskContext, TaskExecutor
from assetpipe.core.graph import TaskDefinition, TaskGraph

from .clean import clean
from .context import BuildContext
from .copy import copy_fonts
from .lint import lint_scripts, style_lint_task
from .scripts import build_scripts, watch_scripts
from .styles import build_styles
from .watch import FileWatcher, WatchRule, serve, watch_images, watch_styles, watch_views
from .watch import watch as watch_session

STYLE_LINTERS = ("stylelint", "scss-lint")


async def build(ctx: TaskContext) -> None:
    await ctx.run("clean", ("copy:fonts", "build:styles", "build:scripts"))


async def default(ctx: TaskContext) -> None:
    await ctx.run("lint", "build")


def build_task_graph(style_linter: str = "stylelint") -> TaskGraph:
    """Return the task graph; ``lint`` aggregates eslint and ``style_linter``."""

    definitions = [
        TaskDefinition("clean", clean, description="Empty the generated output directories."),
        TaskDefinition("copy:fonts", copy_fonts, description="Copy font files into public/."),
        TaskDefinition(
            "build:scripts", build_scripts, description="Bundle the script entry points."
        ),
        TaskDefinition("build:styles", build_styles, description="Compile the stylesheets."),
        TaskDefinition(
            "watchify", watch_scripts, description="Rebundle scripts incrementally on change."
        ),
        TaskDefinition("serve", serve, description="Serve public/ with live reload."),
        TaskDefinition(
            "watch:styles", watch_styles, description="Rebuild styles when stylesheets change."
        ),
        TaskDefinition("watch:images", watch_images, description="Reload when images change."),
        TaskDefinition("watch:views", watch_views, description="Reload when HTML views change."),
        TaskDefinition(
            "watch", watch_session, description="Build, serve and rebuild on change."
        ),
        TaskDefinition(
            "build", build, description="Clean, then build fonts, styles and scripts."
        ),
        TaskDefinition("lint:eslint", lint_scripts, description="Lint scripts with eslint."),
    ]
    for name in STYLE_LINTERS:
        definitions.append(
            TaskDefinition(
                f"lint:{name}", style_lint_task(name), description=f"Lint stylesheets with {name}."
            )
        )
    definitions.extend(
        [
            TaskDefinition(
                "lint",
                dependencies=("lint:eslint", f"lint:{style_linter}"),
                description="Run every configured linter.",
            ),
            TaskDefinition("default", default, description="Lint, then build."),
        ]
    )
    return TaskGraph.of(definitions)


def create_executor(
    context: BuildContext, graph: TaskGraph, logger: logging.Logger | None = None
) -> TaskExecutor:
    return TaskExecutor(
        graph=graph,
        build=context,
        notifier=context.tools.notifier,
        logger=logger or context.logger,
        notification_title=context.config.notify.title,
    )


__all__ = [
    "BuildContext",
    "FileWatcher",
    "STYLE_LINTERS",
    "WatchRule",
    "build_task_graph",
    "create_executor",
]
