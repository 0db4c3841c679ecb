"""Shared fixtures: a throwaway front-end project and in-process tool fakes."""

from __future__ import annotations

import base64
import io
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from rich.console import Console

from assetpipe.config import Config
from assetpipe.core import ProjectLayout, RunMode, SourceCompileError, StyleCompileError
from assetpipe.core.notify import Notification
from assetpipe.tasks import BuildContext, build_task_graph, create_executor
from assetpipe.tools import BundleOutput, BundleRequest, LintReport, ToolSet


def inline_map(kind: str, sources: Sequence[str]) -> str:
    payload = json.dumps({"version": 3, "sources": list(sources), "mappings": "AAAA"})
    encoded = base64.b64encode(payload.encode("utf-8")).decode("ascii")
    uri = f"data:application/json;charset=utf-8;base64,{encoded}"
    if kind == "css":
        return f"\n/*# sourceMappingURL={uri} */\n"
    return f"\n//# sourceMappingURL={uri}\n"


@dataclass
class RecordingNotifier:
    notifications: list[Notification] = field(default_factory=list)

    async def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)


@dataclass
class FakeBundler:
    """Concatenates entry files; an entry containing ``SYNTAX ERROR`` fails."""

    requests: list[BundleRequest] = field(default_factory=list)

    async def bundle(self, request: BundleRequest) -> BundleOutput:
        self.requests.append(request)
        return BundleOutput(code=_bundle(request))


def _bundle(request: BundleRequest) -> str:
    parts = []
    for entry in request.entries:
        text = entry.read_text(encoding="utf-8")
        if "SYNTAX ERROR" in text:
            raise SourceCompileError(f"{entry.name}: Unexpected token (1:0)")
        parts.append(text.strip())
    code = "\n".join(parts) + "\n"
    if request.debug:
        code += inline_map("js", [str(entry) for entry in request.entries])
    return code


@dataclass
class FakeWatch:
    closed: bool = False

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeWatchingBundler:
    """Delivers the initial bundle immediately; tests push later rebuilds."""

    request: BundleRequest | None = None
    handle: FakeWatch | None = None
    on_update: object = None
    on_error: object = None

    async def watch(self, request, on_update, on_error) -> FakeWatch:
        self.request = request
        self.on_update = on_update
        self.on_error = on_error
        self.handle = FakeWatch()
        await self.rebuild()
        return self.handle

    async def rebuild(self) -> None:
        try:
            output = BundleOutput(code=_bundle(self.request))
        except SourceCompileError as exc:
            await self.on_error(exc)
            return
        await self.on_update(output)


@dataclass
class FakeStyleCompiler:
    """Echoes the stylesheet; a source containing ``SYNTAX ERROR`` fails."""

    compiled: list[Path] = field(default_factory=list)

    async def compile(self, source: Path, *, source_map: bool, load_paths=()) -> str:
        self.compiled.append(source)
        text = source.read_text(encoding="utf-8")
        if "SYNTAX ERROR" in text:
            raise StyleCompileError(f"{source.name}: expected \"{{\".")
        css = f"/* {source.name} */\n{text.strip()}\n"
        if source_map:
            css += inline_map("css", [str(source)])
        return css


@dataclass
class FakePrefixer:
    browsers: list[tuple[str, ...]] = field(default_factory=list)

    async def prefix(self, css: str, *, browsers, source_map: bool) -> str:
        self.browsers.append(tuple(browsers))
        return css.replace("display: flex", "display: -webkit-flex; display: flex")


@dataclass
class FakeMinifier:
    calls: int = 0

    async def minify(self, code: str) -> str:
        self.calls += 1
        return "".join(line.strip() for line in code.splitlines())


@dataclass
class FakeLinter:
    name: str
    ok: bool = True
    output: str = ""
    seen: list[list[Path]] = field(default_factory=list)

    async def lint(self, files) -> LintReport:
        self.seen.append(list(files))
        return LintReport(linter=self.name, ok=self.ok, output=self.output, files=len(files))


def fake_tools() -> ToolSet:
    return ToolSet(
        bundler=FakeBundler(),
        watching_bundler=FakeWatchingBundler(),
        style_compiler=FakeStyleCompiler(),
        prefixer=FakePrefixer(),
        css_minifier=FakeMinifier(),
        script_minifier=FakeMinifier(),
        script_linter=FakeLinter("eslint"),
        style_linters={"stylelint": FakeLinter("stylelint"), "scss-lint": FakeLinter("scss-lint")},
        notifier=RecordingNotifier(),
    )


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A minimal project tree with default layout."""

    _write(tmp_path / "src/scripts/app.js", "import './util';\nconsole.log('app');\n")
    _write(tmp_path / "src/scripts/util.jsx", "export default () => <div />;\n")
    _write(tmp_path / "src/styles/main.scss", "@import 'partial';\n.a { display: flex }\n")
    _write(tmp_path / "src/styles/_partial.scss", "$brand: #333;\n")
    _write(tmp_path / "src/images/logo.png", "png")
    _write(tmp_path / "public/index.html", "<html><body><h1>Hi</h1></body></html>\n")
    fonts = tmp_path / "node_modules/bootstrap-sass/assets/fonts/bootstrap"
    _write(fonts / "glyphicons.woff", "woff")
    _write(fonts / "glyphicons.ttf", "ttf")
    return tmp_path


@pytest.fixture
def make_build(project: Path):
    """Factory for a BuildContext over ``project`` with fake tools."""

    def factory(mode: RunMode = RunMode.DEVELOPMENT, config: Config | None = None) -> BuildContext:
        config = config or Config.defaults()
        return BuildContext(
            config=config,
            layout=ProjectLayout.from_settings(project, config.layout),
            mode=mode,
            tools=fake_tools(),
            logger=logging.getLogger("assetpipe-tests"),
            console=Console(file=io.StringIO(), width=120, color_system=None),
        )

    return factory


@pytest.fixture
def make_executor():
    def factory(build: BuildContext):
        return create_executor(build, build_task_graph(build.config.lint.style_linter))

    return factory


@pytest.fixture
def inline_source_map():
    """The ``inline_map(kind, sources)`` helper, for tests that build map comments."""

    return inline_map
