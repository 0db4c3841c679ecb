"""Assetpipe: build, lint, serve and watch front-end assets."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path

DISTRIBUTION = "assetpipe"

# src/assetpipe/__init__.py -> repository root
_CHECKOUT_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _checkout_version(pyproject: Path) -> str | None:
    if not pyproject.is_file():
        return None
    try:
        with pyproject.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):  # pragma: no cover - unreadable checkout
        return None
    if project.get("name") != DISTRIBUTION:
        return None
    version = str(project.get("version", "")).strip()
    return version or None


@lru_cache(maxsize=1)
def get_version() -> str:
    """Return the version, preferring a source checkout's ``pyproject.toml``.

    Editable installs keep stale metadata after a version bump; the checkout wins so
    ``assetpipe --version`` matches the tree being run.
    """

    version = _checkout_version(_CHECKOUT_PYPROJECT)
    if version is not None:
        return version
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError as exc:  # pragma: no cover - not installed
        raise RuntimeError("Unable to determine the assetpipe version.") from exc


__all__ = ["DISTRIBUTION", "get_version"]
