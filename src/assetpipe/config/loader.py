"""Configuration loading for Assetpipe."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path, PurePosixPath
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
LOCAL_CONFIG_PATH = Path("config/local.yaml")

DEFAULT_BROWSERS: tuple[str, ...] = (
    "ie >= 10",
    "ie_mob >= 10",
    "ff >= 30",
    "chrome >= 34",
    "safari >= 7",
    "opera >= 23",
    "ios >= 7",
    "android >= 4.4",
    "bb >= 10",
    "and_chr >= 34",
)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    path: Path | None = None
    level: str = Field(default="info")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("Logging level must be a string.")
        normalized = value.strip().lower()
        if normalized not in {"debug", "info", "warn", "warning", "error", "critical"}:
            raise ValueError(f"Unsupported logging level: {value!r}")
        return normalized


class LayoutSettings(BaseModel):
    """Directory layout of the front-end project, relative to the project root."""

    model_config = ConfigDict(extra="forbid")

    source_dir: str = "src"
    public_dir: str = "public"
    images_subdir: str = "images"
    styles_subdir: str = "styles"
    scripts_subdir: str = "scripts"
    fonts_subdir: str = "fonts"
    fonts_source: str = "node_modules/bootstrap-sass/assets/fonts"

    @field_validator(
        "source_dir",
        "public_dir",
        "images_subdir",
        "styles_subdir",
        "scripts_subdir",
        "fonts_subdir",
        "fonts_source",
    )
    @classmethod
    def _relative_path(cls, value: str) -> str:
        cleaned = value.strip().strip("/")
        if not cleaned or cleaned == ".":
            raise ValueError("Layout paths must be non-empty relative paths.")
        parts = PurePosixPath(cleaned).parts
        if ".." in parts:
            raise ValueError(f"Layout path {value!r} must not contain '..'.")
        return cleaned


class ScriptSettings(BaseModel):
    """Bundler configuration."""

    model_config = ConfigDict(extra="forbid")

    entries: list[str] = Field(default_factory=lambda: ["app.js"])
    bundle_name: str = "bundle.js"
    extensions: list[str] = Field(default_factory=lambda: [".js", ".jsx"])
    transforms: list[str] = Field(default_factory=lambda: ["babelify"])

    @field_validator("entries")
    @classmethod
    def _require_entries(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value if item and item.strip()]
        if not cleaned:
            raise ValueError("At least one script entry point is required.")
        return cleaned

    @field_validator("extensions")
    @classmethod
    def _dotted(cls, value: list[str]) -> list[str]:
        return [item if item.startswith(".") else f".{item}" for item in value]


class StyleSettings(BaseModel):
    """Stylesheet pipeline configuration."""

    model_config = ConfigDict(extra="forbid")

    browsers: list[str] = Field(default_factory=lambda: list(DEFAULT_BROWSERS))


class LintSettings(BaseModel):
    """Linter selection."""

    model_config = ConfigDict(extra="forbid")

    style_linter: Literal["stylelint", "scss-lint"] = "stylelint"
    stylelint_syntax: str = "postcss-scss"
    scss_lint_bundle_exec: bool = True


class ServeSettings(BaseModel):
    """Development server configuration."""

    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=0, le=65535)
    live_reload: bool = True


class WatchSettings(BaseModel):
    """File watcher configuration."""

    model_config = ConfigDict(extra="forbid")

    debounce_ms: int = Field(default=200, ge=0)


class NotifySettings(BaseModel):
    """Desktop notification configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    title: str = "Compile Error"


class ConfigModel(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    version: int = 1
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    scripts: ScriptSettings = Field(default_factory=ScriptSettings)
    styles: StyleSettings = Field(default_factory=StyleSettings)
    lint: LintSettings = Field(default_factory=LintSettings)
    serve: ServeSettings = Field(default_factory=ServeSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    notify: NotifySettings = Field(default_factory=NotifySettings)
    tools: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("tools", mode="before")
    @classmethod
    def _normalize_tools(cls, value: Any) -> dict[str, list[str]]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise TypeError("tools must be a mapping of tool name -> command.")
        normalized: dict[str, list[str]] = {}
        for name, command in value.items():
            if isinstance(command, str):
                command = command.split()
            if not isinstance(command, list) or not command:
                raise ValueError(f"Command for tool {name!r} must be a non-empty string or list.")
            normalized[str(name)] = [str(part) for part in command]
        return normalized


@dataclass(slots=True)
class Config:
    """Validated configuration with convenience helpers."""

    model: ConfigModel
    raw: Mapping[str, Any] = field(repr=False)
    loaded_from: tuple[str, ...] = field(default_factory=tuple, repr=False)

    @property
    def logging(self) -> LoggingSettings:
        return self.model.logging

    @property
    def layout(self) -> LayoutSettings:
        return self.model.layout

    @property
    def scripts(self) -> ScriptSettings:
        return self.model.scripts

    @property
    def styles(self) -> StyleSettings:
        return self.model.styles

    @property
    def lint(self) -> LintSettings:
        return self.model.lint

    @property
    def serve(self) -> ServeSettings:
        return self.model.serve

    @property
    def watch(self) -> WatchSettings:
        return self.model.watch

    @property
    def notify(self) -> NotifySettings:
        return self.model.notify

    def tool_command(self, name: str) -> list[str] | None:
        """Return the configured command override for a tool, if any."""

        command = self.model.tools.get(name)
        return list(command) if command else None

    def model_dump(self) -> Mapping[str, Any]:
        """Expose the parsed configuration as a mapping."""

        return self.model.model_dump()

    @classmethod
    def defaults(cls) -> Config:
        """Build a configuration from model defaults only."""

        model = ConfigModel()
        return cls(model=model, raw=model.model_dump())


def load_config(path: Path | None = None) -> Config:
    """Load configuration from defaults/local overrides, or from an explicit config document."""

    merged: dict[str, Any] = {}
    loaded_from: list[str] = []

    if path is not None:
        override_path = _resolve_path(path)
        if override_path is None or not override_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        merged = _merge_dicts(merged, _read_yaml(override_path))
        loaded_from.append(str(override_path))
    else:
        default_candidate = _resolve_path(DEFAULT_CONFIG_PATH)
        packaged_default = _resolve_packaged_path(DEFAULT_CONFIG_PATH)
        if default_candidate and default_candidate.exists():
            merged = _merge_dicts(merged, _read_yaml(default_candidate))
            loaded_from.append(str(default_candidate))
        elif packaged_default and packaged_default.exists():
            merged = _merge_dicts(merged, _read_yaml(packaged_default))
            loaded_from.append(str(packaged_default))
        else:
            packaged_payload = _read_packaged_yaml("assetpipe.config", "default.yaml")
            if packaged_payload is not None:
                merged = _merge_dicts(merged, packaged_payload)
                loaded_from.append("assetpipe.config:default.yaml")

        local_candidate = _resolve_path(LOCAL_CONFIG_PATH)
        if local_candidate and local_candidate.exists():
            merged = _merge_dicts(merged, _read_yaml(local_candidate))
            loaded_from.append(str(local_candidate))

    try:
        model = ConfigModel.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    return Config(model=model, raw=merged, loaded_from=tuple(loaded_from))


def _resolve_path(path: Path) -> Path | None:
    """Resolve configuration paths relative to the current working directory."""

    if path is None:
        return None
    return path if path.is_absolute() else Path.cwd() / path


def _resolve_packaged_path(path: Path) -> Path | None:
    """Resolve paths embedded in packaged binaries (e.g., PyInstaller)."""

    base = getattr(sys, "_MEIPASS", None)
    if not base:
        return None
    return Path(base) / path


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML file into a dictionary."""

    content = path.read_text(encoding="utf-8")
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must define a mapping at the top level.")
    return data


def _read_packaged_yaml(package: str, name: str) -> dict[str, Any] | None:
    """Read YAML embedded in a Python package via importlib.resources."""

    try:
        content = resources.files(package).joinpath(name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Packaged configuration {package}:{name} must define a mapping at the top level."
        )
    return data


def _merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two dictionaries, with override values taking precedence."""

    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result
