"""Stylesheet compiler, vendor prefixer and minifier adapters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from assetpipe.core.errors import SourceCompileError, StyleCompileError
from assetpipe.tools.base import ToolRunner


class StyleCompiler(Protocol):
    async def compile(
        self, source: Path, *, source_map: bool, load_paths: Sequence[Path] = ()
    ) -> str:
        """Compile one stylesheet to CSS; embed an inline map when ``source_map``."""


class Prefixer(Protocol):
    async def prefix(self, css: str, *, browsers: Sequence[str], source_map: bool) -> str:
        """Add vendor prefixes for ``browsers``, carrying any inline map through."""


class Minifier(Protocol):
    async def minify(self, code: str) -> str:
        """Return a minified copy of ``code``."""


@dataclass(slots=True)
class SassCompiler:
    """Dart Sass command-line compiler writing CSS to stdout."""

    runner: ToolRunner
    tool: str = "sass"

    async def compile(
        self, source: Path, *, source_map: bool, load_paths: Sequence[Path] = ()
    ) -> str:
        args = [f"--load-path={path}" for path in load_paths]
        if source_map:
            args.extend(["--embed-source-map", "--embed-sources"])
        else:
            args.append("--no-source-map")
        args.append(str(source))
        result = await self.runner.run(self.tool, args)
        if not result.ok:
            raise StyleCompileError(result.diagnostics())
        return result.stdout_text


@dataclass(slots=True)
class AutoprefixerPrefixer:
    """``postcss --use autoprefixer`` over stdin, browsers passed via BROWSERSLIST."""

    runner: ToolRunner
    tool: str = "postcss"

    async def prefix(self, css: str, *, browsers: Sequence[str], source_map: bool) -> str:
        args = ["--use", "autoprefixer"]
        if not source_map:
            args.append("--no-map")
        result = await self.runner.run(
            self.tool,
            args,
            input=css.encode("utf-8"),
            env={"BROWSERSLIST": ", ".join(browsers)},
        )
        if not result.ok:
            raise StyleCompileError(result.diagnostics())
        return result.stdout_text


@dataclass(slots=True)
class CssoMinifier:
    runner: ToolRunner
    tool: str = "csso"

    async def minify(self, code: str) -> str:
        result = await self.runner.run(self.tool, [], input=code.encode("utf-8"))
        if not result.ok:
            raise StyleCompileError(result.diagnostics())
        return result.stdout_text


@dataclass(slots=True)
class UglifyMinifier:
    runner: ToolRunner
    tool: str = "uglifyjs"

    async def minify(self, code: str) -> str:
        result = await self.runner.run(
            self.tool, ["--compress", "--mangle"], input=code.encode("utf-8")
        )
        if not result.ok:
            raise SourceCompileError(result.diagnostics())
        return result.stdout_text
