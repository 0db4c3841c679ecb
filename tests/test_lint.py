"""Tests for the lint tasks."""

from __future__ import annotations

import pytest

from assetpipe.config import Config, ConfigModel
from assetpipe.core import LintViolation, TaskFailedError


@pytest.mark.asyncio
async def test_clean_sources_pass(project, make_build, make_executor):
    build = make_build()

    await make_executor(build).run("lint")

    root = project.resolve()
    linted = [p.relative_to(root).as_posix() for p in build.tools.script_linter.seen[0]]
    assert linted == ["src/scripts/app.js", "src/scripts/util.jsx"]
    styles = build.tools.style_linters["stylelint"].seen[0]
    assert {p.name for p in styles} == {"main.scss", "_partial.scss"}
    assert build.tools.style_linters["scss-lint"].seen == []
    assert "eslint" in build.console.file.getvalue()


@pytest.mark.asyncio
async def test_violations_fail_lint(make_build, make_executor):
    build = make_build()
    build.tools.script_linter.ok = False
    build.tools.script_linter.output = "app.js\n  1:1  error  Unexpected console statement"

    with pytest.raises(TaskFailedError) as excinfo:
        await make_executor(build).run("lint")

    assert isinstance(excinfo.value.cause, LintViolation)
    assert excinfo.value.cause.linter == "eslint"
    assert "Unexpected console statement" in build.console.file.getvalue()


@pytest.mark.asyncio
async def test_configured_style_linter(make_build, make_executor):
    model = ConfigModel.model_validate({"lint": {"style_linter": "scss-lint"}})
    config = Config(model=model, raw={})
    build = make_build(config=config)
    build.tools.style_linters["scss-lint"].ok = False

    with pytest.raises(TaskFailedError) as excinfo:
        await make_executor(build).run("lint")

    assert excinfo.value.cause.linter == "scss-lint"
    assert build.tools.style_linters["stylelint"].seen == []


@pytest.mark.asyncio
async def test_default_lints_before_building(project, make_build, make_executor):
    build = make_build()
    build.tools.style_linters["stylelint"].ok = False
    executor = make_executor(build)

    with pytest.raises(TaskFailedError):
        await executor.run("default")

    assert executor.outcome("clean") is None
    assert not (project / "public/scripts/bundle.js").exists()

    build.tools.style_linters["stylelint"].ok = True
    await executor.run("default")

    assert (project / "public/scripts/bundle.js").exists()
    assert (project / "public/styles/main.css").exists()
    assert (project / "public/fonts/bootstrap/glyphicons.woff").exists()
