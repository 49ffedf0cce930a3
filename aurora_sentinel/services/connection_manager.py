"""Tracks dashboard WebSocket clients and broadcasts JSON to them."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manager for UI WebSocket connections on the engine's event loop."""

    def __init__(self) -> None:
        self._connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.append(websocket)
        logger.info("Dashboard client connected (%d total)", len(self._connections))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.remove(websocket)
            logger.info("Dashboard client disconnected (%d remaining)", len(self._connections))

    @property
    def active_count(self) -> int:
        return len(self._connections)

    async def broadcast_json(self, data: dict[str, Any]) -> None:
        """Send a JSON payload to every connected client; drop the ones that fail."""
        for ws in list(self._connections):
            try:
                await ws.send_json(data)
            except Exception as exc:
                logger.debug("Dropping dashboard client after send failure: %s", exc)
                self.disconnect(ws)
