"""Project layout and run mode."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from assetpipe.config import LayoutSettings
from assetpipe.core.errors import LayoutError
from assetpipe.core.globs import GlobPattern


class RunMode(str, Enum):
    """Development vs production behaviour switch."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def from_flag(cls, production: bool) -> RunMode:
        return cls.PRODUCTION if production else cls.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self is RunMode.PRODUCTION

    @property
    def source_maps(self) -> bool:
        return self is RunMode.DEVELOPMENT


@dataclass(frozen=True, slots=True)
class ProjectLayout:
    """Fixed directory layout of a front-end project.

    Output directories are always strict children of ``public_dir`` and source
    directories strict children of ``source_dir``; construction fails otherwise.
    Only :meth:`clean_targets` is ever handed to the clean task.
    """

    root: Path
    source_dir: Path
    public_dir: Path
    images_source: Path
    styles_source: Path
    scripts_source: Path
    fonts_source: Path
    fonts_output: Path
    styles_output: Path
    scripts_output: Path

    def __post_init__(self) -> None:
        for path in (self.images_source, self.styles_source, self.scripts_source):
            _require_child(path, self.source_dir, "source")
        for path in (self.fonts_output, self.styles_output, self.scripts_output):
            _require_child(path, self.public_dir, "output")
        if _is_within(self.public_dir, self.source_dir) or _is_within(
            self.source_dir, self.public_dir
        ):
            raise LayoutError("Source and public roots must not contain one another.")

    @classmethod
    def from_settings(cls, root: Path, settings: LayoutSettings) -> ProjectLayout:
        """Derive every layout path from the project root and layout settings."""

        base = root.resolve()
        source = base / settings.source_dir
        public = base / settings.public_dir
        return cls(
            root=base,
            source_dir=source,
            public_dir=public,
            images_source=source / settings.images_subdir,
            styles_source=source / settings.styles_subdir,
            scripts_source=source / settings.scripts_subdir,
            fonts_source=base / settings.fonts_source,
            fonts_output=public / settings.fonts_subdir,
            styles_output=public / settings.styles_subdir,
            scripts_output=public / settings.scripts_subdir,
        )

    def clean_targets(self) -> tuple[Path, ...]:
        """Return the output directories whose contents the clean task removes."""

        return (self.scripts_output, self.styles_output, self.fonts_output)

    def relative(self, path: Path) -> str:
        """Return ``path`` relative to the project root as a POSIX string."""

        resolved = path if path.is_absolute() else self.root / path
        for candidate in (resolved, resolved.resolve()):
            try:
                return candidate.relative_to(self.root).as_posix()
            except ValueError:
                continue
        return resolved.as_posix()

    def public_url_path(self, path: Path) -> str:
        """Return the URL path of an output file under the public root."""

        return path.relative_to(self.public_dir).as_posix()

    def _glob(self, directory: Path, suffix: str) -> GlobPattern:
        return GlobPattern(f"{self.relative(directory)}/{suffix}")

    @property
    def script_sources(self) -> GlobPattern:
        return self._glob(self.scripts_source, "**/*.{js,jsx}")

    @property
    def style_sources(self) -> GlobPattern:
        return self._glob(self.styles_source, "**/*.{sass,scss}")

    @property
    def font_assets(self) -> GlobPattern:
        return self._glob(self.fonts_source, "**")

    @property
    def watch_styles(self) -> GlobPattern:
        return self._glob(self.styles_source, "**/*.scss")

    @property
    def watch_images(self) -> GlobPattern:
        return self._glob(self.images_source, "**/*")

    @property
    def watch_views(self) -> GlobPattern:
        return self._glob(self.public_dir, "**/*.html")


def _is_within(path: Path, parent: Path) -> bool:
    return path == parent or parent in path.parents


def _require_child(path: Path, parent: Path, kind: str) -> None:
    if path == parent or parent not in path.parents:
        raise LayoutError(f"{kind.capitalize()} path {path} must be a child of {parent}.")
