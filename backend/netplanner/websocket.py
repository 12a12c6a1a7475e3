"""
Canvas update channel.

Every connected canvas receives the controller's domain events in the
order they were raised. A client that lost track (after a reconnect, say)
sends {"type": "resync"} and gets the full topology back.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks canvas clients and fans editor events out to them."""

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self.active_connections.append(websocket)
        logger.debug("Canvas client connected (%d total)", self.connection_count)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            if websocket in self.active_connections:
                self.active_connections.remove(websocket)

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> bool:
        """Send to one client, dropping it if the socket is gone."""
        try:
            await websocket.send_json(message)
        except (WebSocketDisconnect, RuntimeError):
            await self.disconnect(websocket)
            return False
        return True

    async def broadcast_events(self, events: list[dict[str, Any]]) -> None:
        """Deliver drained controller events to every client, in order."""
        if not events or not self.active_connections:
            return

        async with self._lock:
            clients = list(self.active_connections)

        for websocket in clients:
            for event in events:
                if not await self.send(websocket, event):
                    break


async def websocket_endpoint(websocket: WebSocket) -> None:
    """Serve one canvas client until it disconnects."""
    ws_manager: ConnectionManager = websocket.app.state.ws_manager
    controller = websocket.app.state.session.controller
    await ws_manager.connect(websocket)

    await ws_manager.send(
        websocket,
        {
            "type": "connected",
            "message": "Connected to Network Planner",
            "revision": controller.graph.revision,
        },
    )

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                continue
            if not isinstance(message, dict):
                continue

            if message.get("type") == "ping":
                await ws_manager.send(websocket, {"type": "pong"})
            elif message.get("type") == "resync":
                topology = controller.topology().model_dump(mode="json", by_alias=True)
                await ws_manager.send(websocket, {"type": "topology", **topology})
    except WebSocketDisconnect:
        await ws_manager.disconnect(websocket)
