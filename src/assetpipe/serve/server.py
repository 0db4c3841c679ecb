"""Static file server for the public directory, with a live-reload channel."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, HTMLResponse, Response

from assetpipe.core.errors import AssetIOError
from assetpipe.serve.reload import LiveReloadHub

LIVERELOAD_PATH = "/__livereload"
CLIENT_SCRIPT_PATH = "/__livereload.js"
NO_CACHE = {"Cache-Control": "no-cache"}

CLIENT_SCRIPT = """\
(function () {
  var url = (location.protocol === "https:" ? "wss://" : "ws://") + location.host + "%(path)s";
  function swapStylesheet(path) {
    var swapped = false;
    document.querySelectorAll('link[rel="stylesheet"]').forEach(function (link) {
      var href = (link.getAttribute("href") || "").split("?")[0];
      if (href.replace(/^\\//, "") === path) {
        link.href = href + "?v=" + Date.now();
        swapped = true;
      }
    });
    return swapped;
  }
  function connect() {
    var socket = new WebSocket(url);
    socket.onmessage = function (event) {
      var data = JSON.parse(event.data);
      if (data.type !== "reload") return;
      if (data.path && /\\.css$/.test(data.path) && swapStylesheet(data.path)) return;
      location.reload();
    };
    socket.onclose = function () { setTimeout(connect, 1000); };
  }
  connect();
})();
""" % {"path": LIVERELOAD_PATH}


def inject_snippet(html: str, snippet: str) -> str:
    """Insert ``snippet`` before the closing body tag, or append it."""

    index = html.lower().rfind("</body>")
    if index == -1:
        return html + snippet
    return html[:index] + snippet + html[index:]


def _resolve(public_dir: Path, request_path: str) -> Path | None:
    root = public_dir.resolve()
    candidate = (root / request_path).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    if candidate.is_dir():
        candidate = candidate / "index.html"
    return candidate if candidate.is_file() else None


def create_app(public_dir: Path, hub: LiveReloadHub, *, live_reload: bool = True) -> FastAPI:
    """Build the FastAPI application serving ``public_dir``."""

    app = FastAPI(title="assetpipe", docs_url=None, redoc_url=None, openapi_url=None)
    snippet = f'<script src="{CLIENT_SCRIPT_PATH}"></script>'

    @app.get(CLIENT_SCRIPT_PATH, include_in_schema=False)
    async def client_script() -> Response:
        return Response(CLIENT_SCRIPT, media_type="application/javascript", headers=NO_CACHE)

    @app.websocket(LIVERELOAD_PATH)
    async def livereload(websocket: WebSocket) -> None:
        await hub.connect(websocket)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            await hub.disconnect(websocket)

    @app.get("/{request_path:path}", include_in_schema=False)
    async def static_file(request_path: str) -> Response:
        target = _resolve(public_dir, request_path)
        if target is None:
            raise HTTPException(status_code=404, detail="Not Found")
        if live_reload and target.suffix.lower() in {".html", ".htm"}:
            html = await asyncio.to_thread(target.read_text, encoding="utf-8", errors="replace")
            return HTMLResponse(inject_snippet(html, snippet), headers=NO_CACHE)
        return FileResponse(target, headers=NO_CACHE)

    return app


class _Server(uvicorn.Server):
    """uvicorn server that leaves signal handling to the CLI."""

    def install_signal_handlers(self) -> None:  # uvicorn < 0.29
        return None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:  # uvicorn >= 0.29
        yield


@dataclass(slots=True)
class DevServer:
    """Runs the app under uvicorn inside the current event loop."""

    app: FastAPI
    host: str = "127.0.0.1"
    port: int = 3000
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    _server: _Server | None = field(default=None, init=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False)
    _socket: socket.socket | None = field(default=None, init=False)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def start(self) -> None:
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError as exc:
            sock.close()
            raise AssetIOError(f"Unable to listen on {self.host}:{self.port}: {exc}") from exc
        self.port = sock.getsockname()[1]
        self._socket = sock

        config = uvicorn.Config(self.app, log_level="warning", lifespan="off")
        self._server = _Server(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[sock]))
        while not self._server.started:
            if self._task.done():
                self._task.result()
                raise AssetIOError(f"Development server on {self.url} stopped during startup.")
            await asyncio.sleep(0.05)
        self.logger.info("Development server listening at %s", self.url)

    async def stop(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
        if self._socket is not None:
            self._socket.close()
        self._server = None
        self._task = None
        self._socket = None
