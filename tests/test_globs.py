"""Tests for project-relative glob patterns."""

from __future__ import annotations

import pytest

from assetpipe.core.globs import GlobPattern, expand_braces


def test_expand_braces():
    assert expand_braces("src/**/*.{js,jsx}") == ["src/**/*.js", "src/**/*.jsx"]
    assert expand_braces("{a,b}/{c,d}") == ["a/c", "a/d", "b/c", "b/d"]
    assert expand_braces("plain") == ["plain"]


@pytest.mark.parametrize(
    "pattern,path,expected",
    [
        ("src/styles/**/*.scss", "src/styles/main.scss", True),
        ("src/styles/**/*.scss", "src/styles/deep/nested/_x.scss", True),
        ("src/styles/**/*.scss", "src/styles/main.sass", False),
        ("src/styles/**/*.scss", "src/scripts/main.scss", False),
        ("src/scripts/**/*.{js,jsx}", "src/scripts/components/App.jsx", True),
        ("src/scripts/*.js", "src/scripts/nested/app.js", False),
        ("public/**/*.html", "public/index.html", True),
        ("public/**/*.html", "public/scripts/bundle.js", False),
        ("vendor/fonts/**", "vendor/fonts/bootstrap/glyph.woff", True),
        ("vendor/fonts/**", "vendor/fontsx/glyph.woff", False),
        ("./src/a?.js", "src/ab.js", True),
    ],
)
def test_matches(pattern, path, expected):
    assert GlobPattern(pattern).matches(path) is expected


def test_base_is_static_prefix():
    assert GlobPattern("src/styles/**/*.scss").base == "src/styles"
    assert GlobPattern("vendor/fonts/**").base == "vendor/fonts"
    assert GlobPattern("src/app.js").base == "src"
    assert GlobPattern("*.js").base == ""


def test_iter_files_sorted_and_filtered(tmp_path):
    for name in ("b.scss", "a.scss", "nested/c.scss", "skip.css"):
        path = tmp_path / "styles" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")

    found = list(GlobPattern("styles/**/*.scss").iter_files(tmp_path))

    assert [p.relative_to(tmp_path).as_posix() for p in found] == [
        "styles/a.scss",
        "styles/b.scss",
        "styles/nested/c.scss",
    ]
    assert list(GlobPattern("missing/**/*.scss").iter_files(tmp_path)) == []
