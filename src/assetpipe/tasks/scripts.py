"""Script bundle tasks."""

from __future__ import annotations

from pathlib import Path

from assetpipe.core.errors import AssetIOError, BuildError, SourceCompileError
from assetpipe.core.executor import TaskContext
from assetpipe.tasks.context import BuildContext
from assetpipe.tasks.output import write_compiled
from assetpipe.tools import BundleOutput


async def write_bundle(build: BuildContext, output: BundleOutput) -> list[Path]:
    """Write the bundle (and its map in development) to the scripts output."""

    target = build.layout.scripts_output / build.config.scripts.bundle_name
    return await write_compiled(
        target,
        output.code,
        "js",
        source_maps=build.mode.source_maps,
        minifier=build.tools.script_minifier if build.mode.is_production else None,
    )


async def build_scripts(ctx: TaskContext) -> None:
    """Bundle the entry points once."""

    build = ctx.build
    try:
        output = await build.tools.bundler.bundle(build.bundle_request())
        await write_bundle(build, output)
    except SourceCompileError as exc:
        await ctx.errors.fail(exc)


async def watch_scripts(ctx: TaskContext) -> None:
    """Start the incremental bundler and keep it running in the background.

    The first bundle is written silently. Every later rebuild is written, logged and
    followed by a reload of the bundle only. Compile errors are notified; the
    bundler keeps watching.
    """

    build = ctx.build
    startup_errors: list[BuildError] = []
    started = False

    async def on_update(output: BundleOutput) -> None:
        try:
            paths = await write_bundle(build, output)
        except AssetIOError as exc:
            ctx.logger.error("watchify: %s", exc)
            return
        if not started:
            return
        ctx.logger.info("Updated JavaScript sources")
        await build.hub.reload(build.layout.public_url_path(paths[0]))

    async def on_error(error: SourceCompileError) -> None:
        try:
            await ctx.errors.fail(error)
        except BuildError as exc:
            if started:
                ctx.logger.error("watchify: %s", exc)
            else:
                startup_errors.append(exc)

    session = await build.tools.watching_bundler.watch(
        build.bundle_request(), on_update, on_error
    )
    started = True
    build.keep_alive(session.close)
    if startup_errors:
        raise startup_errors[0]
