"""Writing build artefacts and their source maps."""

from __future__ import annotations

import asyncio
from pathlib import Path

from assetpipe.core.errors import AssetIOError
from assetpipe.tools import Minifier
from assetpipe.tools.sourcemaps import Kind, extract_inline_map, link_external_map, render_map


async def write_output(path: Path, text: str) -> None:
    """Write a build artefact, creating parent directories as needed."""

    def _write() -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    try:
        await asyncio.to_thread(_write)
    except OSError as exc:
        raise AssetIOError(f"Unable to write {path}: {exc}") from exc


async def remove_output(path: Path) -> None:
    try:
        await asyncio.to_thread(path.unlink, missing_ok=True)
    except OSError as exc:
        raise AssetIOError(f"Unable to remove {path}: {exc}") from exc


async def write_compiled(
    target: Path,
    code: str,
    kind: Kind,
    *,
    source_maps: bool,
    minifier: Minifier | None = None,
) -> list[Path]:
    """Write compiled ``code`` to ``target``.

    With ``source_maps`` an inline map is moved to ``<target>.map`` and referenced
    from the output. Otherwise the code is minified (when building without maps and
    a minifier is given), any inline map is dropped and a stale ``.map`` from an
    earlier build is removed.
    """

    map_target = target.with_name(f"{target.name}.map")
    extracted = extract_inline_map(code, kind)

    if source_maps and extracted.source_map is not None:
        await write_output(target, link_external_map(extracted.code, map_target.name, kind))
        await write_output(map_target, render_map(extracted.source_map, target.name))
        return [target, map_target]

    body = extracted.code
    if not source_maps and minifier is not None:
        body = await minifier.minify(body)
    await remove_output(map_target)
    await write_output(target, body)
    return [target]
