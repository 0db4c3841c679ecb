"""Tests for the clean and copy:fonts tasks."""

from __future__ import annotations

import pytest

from assetpipe.core import AssetIOError, TaskFailedError, TaskStatus
from assetpipe.tasks.clean import clean_outputs


@pytest.mark.asyncio
async def test_clean_empties_only_output_directories(project, make_build, make_executor):
    (project / "public/scripts").mkdir(parents=True)
    (project / "public/scripts/bundle.js").write_text("old", encoding="utf-8")
    (project / "public/styles/nested").mkdir(parents=True)
    (project / "public/styles/nested/main.css").write_text("old", encoding="utf-8")
    (project / "public/favicon.ico").write_text("icon", encoding="utf-8")
    build = make_build()

    await make_executor(build).run("clean")

    assert list((project / "public/scripts").iterdir()) == []
    assert list((project / "public/styles").iterdir()) == []
    assert (project / "public/index.html").exists()
    assert (project / "public/favicon.ico").exists()
    assert (project / "src/scripts/app.js").exists()


@pytest.mark.asyncio
async def test_clean_is_idempotent(make_build, make_executor):
    executor = make_executor(make_build())

    await executor.run("clean")
    await executor.run("clean")

    assert [o.status for o in executor.outcomes] == [TaskStatus.OK, TaskStatus.OK]


def test_clean_outputs_counts_entries(tmp_path):
    target = tmp_path / "out"
    (target / "dir").mkdir(parents=True)
    (target / "file.txt").write_text("x", encoding="utf-8")

    assert clean_outputs([target, tmp_path / "missing"]) == 2
    assert target.is_dir()
    assert clean_outputs([target]) == 0


@pytest.mark.asyncio
async def test_copy_fonts_preserves_relative_paths(project, make_build, make_executor):
    await make_executor(make_build()).run("copy:fonts")

    fonts = project / "public/fonts/bootstrap"
    assert (fonts / "glyphicons.woff").read_text(encoding="utf-8") == "woff"
    assert (fonts / "glyphicons.ttf").exists()


@pytest.mark.asyncio
async def test_copy_fonts_without_source_fails(project, make_build, make_executor):
    import shutil

    shutil.rmtree(project / "node_modules")
    executor = make_executor(make_build())

    with pytest.raises(TaskFailedError) as excinfo:
        await executor.run("copy:fonts", tolerant=True)

    assert isinstance(excinfo.value.cause, AssetIOError)
