"""Command line interface for Assetpipe."""

from __future__ import annotations

import asyncio
import logging
import pathlib
import signal
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

from assetpipe import get_version
from assetpipe.config import Config, load_config
from assetpipe.core import LayoutError, ProjectLayout, RunMode, TaskExecutor, TaskFailedError
from assetpipe.logging import configure_logging
from assetpipe.tasks import BuildContext, build_task_graph, create_executor
from assetpipe.tools import ToolSet
from assetpipe.ui import render_task_table

DEFAULT_TASK = "default"


def _load_environment(env_file: Optional[pathlib.Path]) -> None:
    """Load environment variables from .env files."""

    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=True)
    else:
        load_dotenv(override=False)


def _prepare_logging(
    config: Config,
    override_path: Optional[pathlib.Path],
    override_level: Optional[str],
    console: Console,
) -> logging.Logger:
    """Configure logging based on configuration and overrides."""

    return configure_logging(
        log_path=override_path or config.logging.path,
        level=(override_level or config.logging.level).upper(),
        mirror_to_console=True,
        console=console,
    )


def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event
) -> list[tuple[str, int, object]]:
    installed: list[tuple[str, int, object]] = []

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(("loop", sig, None))
        except NotImplementedError:
            previous = signal.getsignal(sig)

            def _handler(*_args):  # type: ignore[no-untyped-def]
                loop.call_soon_threadsafe(stop_event.set)

            signal.signal(sig, _handler)
            installed.append(("signal", sig, previous))
    return installed


def _restore_signal_handlers(
    loop: asyncio.AbstractEventLoop, installed: list[tuple[str, int, object]]
) -> None:
    for kind, sig, previous in installed:
        if kind == "loop":
            loop.remove_signal_handler(sig)
        else:
            signal.signal(sig, previous)


async def run_task(build: BuildContext, executor: TaskExecutor, name: str) -> bool:
    """Run ``name``, then keep any background work alive; False when the task failed."""

    try:
        await executor.run(name)
        if build.has_background_work:
            await build.hold()
        return True
    except TaskFailedError as exc:
        build.logger.error("Task '%s' failed: %s", exc.task, exc.cause)
        return False
    finally:
        await build.aclose()


async def _run_until_signalled(build: BuildContext, executor: TaskExecutor, name: str) -> bool:
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    installed = _install_signal_handlers(loop, stop_event)
    work = asyncio.create_task(run_task(build, executor, name))
    stopper = asyncio.create_task(stop_event.wait())
    try:
        done, _ = await asyncio.wait({work, stopper}, return_when=asyncio.FIRST_COMPLETED)
        if work in done:
            return work.result()
        build.logger.info("Interrupted; shutting down.")
        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        return True
    finally:
        stopper.cancel()
        await asyncio.gather(stopper, return_exceptions=True)
        _restore_signal_handlers(loop, installed)


app = typer.Typer(
    name="assetpipe",
    help="Build, lint, serve and watch front-end assets.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    """Print the package version and exit when requested."""

    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.command()
def main(
    task: Optional[str] = typer.Argument(
        None,
        metavar="[TASK]",
        help=f"Task to run (default: '{DEFAULT_TASK}'). See --tasks.",
    ),
    production: bool = typer.Option(
        False,
        "--production",
        help="Minify output and omit source maps.",
    ),
    config: Optional[pathlib.Path] = typer.Option(
        None,
        "--config",
        metavar="PATH",
        help="Path to YAML configuration file (used exclusively).",
    ),
    env_file: Optional[pathlib.Path] = typer.Option(
        None,
        "--env-file",
        metavar="PATH",
        help="Load environment variables from .env-style file before execution.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        metavar="LEVEL",
        help="Override the configured log level (debug, info, warn, error).",
    ),
    log_path: Optional[pathlib.Path] = typer.Option(
        None,
        "--log-path",
        metavar="PATH",
        help="Override the base directory or file for log output.",
    ),
    list_tasks: bool = typer.Option(
        False,
        "--tasks",
        help="List the available tasks and exit.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show Assetpipe version and exit.",
    ),
) -> None:
    """Run a build task in the current project directory."""

    _load_environment(env_file)

    try:
        config_obj = load_config(config)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    graph = build_task_graph(config_obj.lint.style_linter)
    console = Console()
    if list_tasks:
        render_task_table(console, graph)
        raise typer.Exit()

    name = task or DEFAULT_TASK
    if name not in graph:
        raise typer.BadParameter(
            f"Unknown task '{name}'. Run with --tasks to list tasks.", param_hint="TASK"
        )

    try:
        layout = ProjectLayout.from_settings(pathlib.Path.cwd(), config_obj.layout)
    except LayoutError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    logger = _prepare_logging(config_obj, log_path, log_level, console)
    mode = RunMode.from_flag(production)
    build = BuildContext(
        config=config_obj,
        layout=layout,
        mode=mode,
        tools=ToolSet.from_config(config_obj, layout.root, logger),
        logger=logger,
        console=console,
    )
    executor = create_executor(build, graph)
    logger.debug("Configuration loaded from %s", ", ".join(config_obj.loaded_from) or "defaults")
    logger.info("Running '%s' in %s mode", name, mode.value)

    if not asyncio.run(_run_until_signalled(build, executor, name)):
        raise typer.Exit(code=1)
