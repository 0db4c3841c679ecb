"""Configuration utilities for Assetpipe."""

from .loader import (
    DEFAULT_BROWSERS,
    Config,
    ConfigModel,
    LayoutSettings,
    LintSettings,
    ScriptSettings,
    ServeSettings,
    StyleSettings,
    load_config,
)

__all__ = [
    "DEFAULT_BROWSERS",
    "Config",
    "ConfigModel",
    "LayoutSettings",
    "LintSettings",
    "ScriptSettings",
    "ServeSettings",
    "StyleSettings",
    "load_config",
]
