"""External collaborators used by build tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from assetpipe.config import Config
from assetpipe.core.notify import Notifier

from .base import ToolResult, ToolRunner
from .bundler import (
    BrowserifyBundler,
    BundleOutput,
    BundleRequest,
    Bundler,
    BundleWatch,
    WatchifyBundler,
    WatchingBundler,
)
from .linters import EslintLinter, Linter, LintReport, ScssLintLinter, StylelintLinter
from .notifier import LogNotifier, NullNotifier, default_notifier
from .styles import (
    AutoprefixerPrefixer,
    CssoMinifier,
    Minifier,
    Prefixer,
    SassCompiler,
    StyleCompiler,
    UglifyMinifier,
)


@dataclass(slots=True)
class ToolSet:
    """The collaborators a build uses; swap any of them for an in-process fake."""

    bundler: Bundler
    watching_bundler: WatchingBundler
    style_compiler: StyleCompiler
    prefixer: Prefixer
    css_minifier: Minifier
    script_minifier: Minifier
    script_linter: Linter
    style_linters: dict[str, Linter] = field(default_factory=dict)
    notifier: Notifier = field(default_factory=NullNotifier)

    @classmethod
    def from_config(cls, config: Config, root: Path, logger: logging.Logger) -> ToolSet:
        runner = ToolRunner(root=root, overrides=dict(config.model.tools))
        return cls(
            bundler=BrowserifyBundler(runner=runner),
            watching_bundler=WatchifyBundler(runner=runner),
            style_compiler=SassCompiler(runner=runner),
            prefixer=AutoprefixerPrefixer(runner=runner),
            css_minifier=CssoMinifier(runner=runner),
            script_minifier=UglifyMinifier(runner=runner),
            script_linter=EslintLinter(runner=runner),
            style_linters={
                "stylelint": StylelintLinter(runner=runner, syntax=config.lint.stylelint_syntax),
                "scss-lint": ScssLintLinter(
                    runner=runner, bundle_exec=config.lint.scss_lint_bundle_exec
                ),
            },
            notifier=default_notifier(runner, logger, enabled=config.notify.enabled),
        )


__all__ = [
    "AutoprefixerPrefixer",
    "BrowserifyBundler",
    "BundleOutput",
    "BundleRequest",
    "BundleWatch",
    "Bundler",
    "CssoMinifier",
    "EslintLinter",
    "LintReport",
    "Linter",
    "LogNotifier",
    "Minifier",
    "NullNotifier",
    "Prefixer",
    "SassCompiler",
    "ScssLintLinter",
    "StyleCompiler",
    "StylelintLinter",
    "ToolResult",
    "ToolRunner",
    "ToolSet",
    "UglifyMinifier",
    "WatchifyBundler",
    "WatchingBundler",
]
