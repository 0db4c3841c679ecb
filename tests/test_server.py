"""Tests for the development server and live reload."""

from __future__ import annotations

import socket
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from assetpipe.core import AssetIOError
from assetpipe.serve import DevServer, LiveReloadHub, create_app, inject_snippet
from assetpipe.serve.server import CLIENT_SCRIPT_PATH, _resolve


@pytest.fixture
def public(tmp_path):
    root = tmp_path / "public"
    (root / "styles").mkdir(parents=True)
    (root / "index.html").write_text("<html><body><p>hi</p></body></html>", encoding="utf-8")
    (root / "styles/main.css").write_text(".a{color:red}", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")
    return root


def test_index_gets_reload_snippet(public):
    client = TestClient(create_app(public, LiveReloadHub()))

    response = client.get("/")

    assert response.status_code == 200
    assert response.text == (
        f'<html><body><p>hi</p><script src="{CLIENT_SCRIPT_PATH}"></script></body></html>'
    )
    assert response.headers["cache-control"] == "no-cache"


def test_static_files_and_missing(public):
    client = TestClient(create_app(public, LiveReloadHub()))

    css = client.get("/styles/main.css")

    assert css.status_code == 200
    assert css.text == ".a{color:red}"
    assert css.headers["content-type"].startswith("text/css")
    assert client.get("/styles/other.css").status_code == 404


def test_client_script_served(public):
    client = TestClient(create_app(public, LiveReloadHub()))

    response = client.get(CLIENT_SCRIPT_PATH)

    assert response.status_code == 200
    assert "/__livereload" in response.text
    assert response.headers["content-type"].startswith("application/javascript")


def test_live_reload_can_be_disabled(public):
    client = TestClient(create_app(public, LiveReloadHub(), live_reload=False))

    assert "__livereload" not in client.get("/index.html").text


def test_resolve_stays_inside_public(public):
    assert _resolve(public, "../secret.txt") is None
    assert _resolve(public, "") == (public / "index.html").resolve()
    assert _resolve(public, "styles") is None


def test_inject_snippet_without_body():
    assert inject_snippet("<p>x</p>", "<s>") == "<p>x</p><s>"
    assert inject_snippet("<BODY></BODY>", "<s>") == "<BODY><s></BODY>"


def test_reload_is_broadcast(public):
    hub = LiveReloadHub()
    app = create_app(public, hub)

    with TestClient(app) as client:
        with client.websocket_connect("/__livereload") as websocket:
            deadline = time.monotonic() + 2
            while hub.connection_count == 0 and time.monotonic() < deadline:
                time.sleep(0.01)
            assert hub.connection_count == 1

            client.portal.call(hub.reload, "styles/main.css")
            assert websocket.receive_json() == {"type": "reload", "path": "styles/main.css"}

            client.portal.call(hub.reload)
            assert websocket.receive_json() == {"type": "reload"}

    assert list(hub.history)[-1] == {"type": "reload"}


@pytest.mark.asyncio
async def test_reload_without_clients_is_recorded():
    hub = LiveReloadHub()

    await hub.reload()

    assert list(hub.history) == [{"type": "reload"}]


@pytest.mark.asyncio
async def test_dev_server_serves_over_http(public):
    server = DevServer(app=create_app(public, LiveReloadHub()), port=0)
    await server.start()
    try:
        assert server.port != 0
        async with httpx.AsyncClient(base_url=server.url) as client:
            response = await client.get("/")
        assert response.status_code == 200
        assert CLIENT_SCRIPT_PATH in response.text
    finally:
        await server.stop()


@pytest.mark.asyncio
async def test_dev_server_port_in_use(public):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen()
    try:
        server = DevServer(app=create_app(public, LiveReloadHub()), port=blocker.getsockname()[1])
        with pytest.raises(AssetIOError):
            await server.start()
    finally:
        blocker.close()
