"""Live-reload connection hub."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from typing import Any

logger = logging.getLogger(__name__)

# Seconds to wait on a single client before treating it as gone.
SEND_TIMEOUT = 5.0


class LiveReloadHub:
    """Tracks connected browser clients and pushes reload messages to them."""

    def __init__(self) -> None:
        self._connections: list[Any] = []
        self._lock = asyncio.Lock()
        self.history: deque[dict[str, str]] = deque(maxlen=50)

    async def connect(self, websocket: Any) -> None:
        """Accept and register a WebSocket client."""

        await websocket.accept()
        async with self._lock:
            self._connections.append(websocket)
        logger.debug("Live-reload client connected (%s total)", len(self._connections))

    async def disconnect(self, websocket: Any) -> None:
        async with self._lock:
            if websocket in self._connections:
                self._connections.remove(websocket)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def reload(self, path: str | None = None) -> None:
        """Tell every client to reload; ``path`` scopes the reload to one resource."""

        payload = {"type": "reload"}
        if path:
            payload["path"] = path
        self.history.append(payload)

        async with self._lock:
            connections = list(self._connections)
        if not connections:
            return

        message = json.dumps(payload)
        dead = []
        for websocket in connections:
            try:
                await asyncio.wait_for(websocket.send_text(message), timeout=SEND_TIMEOUT)
            except Exception:  # pylint: disable=broad-except
                dead.append(websocket)
        if dead:
            async with self._lock:
                for websocket in dead:
                    if websocket in self._connections:
                        self._connections.remove(websocket)
        logger.debug(
            "Sent reload%s to %s client(s)",
            f" for {path}" if path else "",
            len(connections) - len(dead),
        )
