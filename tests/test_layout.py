"""Tests for the project layout and run mode."""

from __future__ import annotations

from pathlib import Path

import pytest

from assetpipe.config import LayoutSettings
from assetpipe.core import LayoutError, ProjectLayout, RunMode


def test_default_layout(tmp_path):
    layout = ProjectLayout.from_settings(tmp_path, LayoutSettings())
    root = tmp_path.resolve()

    assert layout.source_dir == root / "src"
    assert layout.public_dir == root / "public"
    assert layout.scripts_output == root / "public/scripts"
    assert layout.styles_output == root / "public/styles"
    assert layout.fonts_output == root / "public/fonts"
    assert layout.fonts_source == root / "node_modules/bootstrap-sass/assets/fonts"
    assert layout.clean_targets() == (
        layout.scripts_output,
        layout.styles_output,
        layout.fonts_output,
    )


def test_clean_targets_never_include_roots(tmp_path):
    layout = ProjectLayout.from_settings(tmp_path, LayoutSettings())

    for target in layout.clean_targets():
        assert target != layout.public_dir
        assert layout.public_dir in target.parents
        assert layout.source_dir not in target.parents


def test_overlapping_roots_rejected(tmp_path):
    with pytest.raises(LayoutError):
        ProjectLayout.from_settings(
            tmp_path, LayoutSettings(source_dir="web", public_dir="web/public")
        )


def test_output_outside_public_rejected(tmp_path):
    root = tmp_path.resolve()
    with pytest.raises(LayoutError):
        ProjectLayout(
            root=root,
            source_dir=root / "src",
            public_dir=root / "public",
            images_source=root / "src/images",
            styles_source=root / "src/styles",
            scripts_source=root / "src/scripts",
            fonts_source=root / "fonts",
            fonts_output=root / "public/fonts",
            styles_output=root / "public",
            scripts_output=root / "public/scripts",
        )


def test_globs_and_paths(tmp_path):
    layout = ProjectLayout.from_settings(tmp_path, LayoutSettings())

    assert layout.style_sources.pattern == "src/styles/**/*.{sass,scss}"
    assert layout.script_sources.matches("src/scripts/app.jsx")
    assert layout.watch_styles.matches("src/styles/components/_button.scss")
    assert not layout.watch_styles.matches("src/styles/legacy.sass")
    assert layout.watch_views.matches("public/about/index.html")
    assert layout.relative(layout.styles_output / "main.css") == "public/styles/main.css"
    assert layout.relative(Path("src/app.js")) == "src/app.js"
    assert layout.public_url_path(layout.scripts_output / "bundle.js") == "scripts/bundle.js"


def test_run_mode():
    assert RunMode.from_flag(True) is RunMode.PRODUCTION
    assert RunMode.from_flag(False) is RunMode.DEVELOPMENT
    assert RunMode.DEVELOPMENT.source_maps
    assert not RunMode.PRODUCTION.source_maps
    assert RunMode.PRODUCTION.is_production
