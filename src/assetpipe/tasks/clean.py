"""Remove generated output."""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Iterable
from pathlib import Path

from assetpipe.core.errors import AssetIOError
from assetpipe.core.executor import TaskContext


def clean_outputs(targets: Iterable[Path]) -> int:
    """Delete everything inside each target directory; the directories themselves stay.

    Missing targets are skipped. Returns the number of top-level entries removed.
    """

    removed = 0
    for directory in targets:
        if not directory.is_dir():
            continue
        try:
            for entry in sorted(directory.iterdir()):
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
        except OSError as exc:
            raise AssetIOError(f"Unable to clean {directory}: {exc}") from exc
    return removed


async def clean(ctx: TaskContext) -> None:
    targets = ctx.build.layout.clean_targets()
    removed = await asyncio.to_thread(clean_outputs, targets)
    ctx.logger.debug("Removed %s entries from %s output directories", removed, len(targets))
