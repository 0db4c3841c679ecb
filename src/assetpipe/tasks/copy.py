"""Copy third-party font files into the public tree."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from assetpipe.core.errors import AssetIOError
from assetpipe.core.executor import TaskContext
from assetpipe.core.layout import ProjectLayout


def copy_font_files(layout: ProjectLayout) -> list[Path]:
    """Copy every font asset, keeping its path relative to the fonts source."""

    source = layout.fonts_source
    if not source.is_dir():
        raise AssetIOError(f"Font directory not found: {layout.relative(source)}")

    copied: list[Path] = []
    try:
        for path in layout.font_assets.iter_files(layout.root):
            target = layout.fonts_output / path.relative_to(source)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
            copied.append(target)
    except OSError as exc:
        raise AssetIOError(f"Unable to copy fonts: {exc}") from exc
    return copied


async def copy_fonts(ctx: TaskContext) -> None:
    copied = await asyncio.to_thread(copy_font_files, ctx.build.layout)
    ctx.logger.debug("Copied %s font files", len(copied))
