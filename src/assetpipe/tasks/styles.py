"""Stylesheet build task."""

from __future__ import annotations

from pathlib import Path

from assetpipe.core.errors import StyleCompileError
from assetpipe.core.executor import TaskContext
from assetpipe.tasks.context import BuildContext
from assetpipe.tasks.output import write_compiled


def stylesheet_sources(build: BuildContext) -> list[Path]:
    """Entry stylesheets; partials (``_name.scss``) are only compiled via imports."""

    layout = build.layout
    return [
        path
        for path in layout.style_sources.iter_files(layout.root)
        if not path.name.startswith("_")
    ]


async def compile_stylesheet(build: BuildContext, source: Path) -> list[Path]:
    """Compile, prefix and write one stylesheet; returns the files written."""

    layout = build.layout
    tools = build.tools
    maps = build.mode.source_maps

    css = await tools.style_compiler.compile(
        source, source_map=maps, load_paths=(layout.styles_source,)
    )
    css = await tools.prefixer.prefix(css, browsers=build.config.styles.browsers, source_map=maps)

    target = (layout.styles_output / source.relative_to(layout.styles_source)).with_suffix(".css")
    return await write_compiled(
        target,
        css,
        "css",
        source_maps=maps,
        minifier=tools.css_minifier if build.mode.is_production else None,
    )


async def build_styles(ctx: TaskContext) -> None:
    build = ctx.build
    written: list[Path] = []
    try:
        for source in stylesheet_sources(build):
            written.extend(await compile_stylesheet(build, source))
    except StyleCompileError as exc:
        await ctx.errors.fail(exc)
        return
    ctx.logger.debug("Wrote %s stylesheet files", len(written))
