"""Helpers shared by the API routers."""

from __future__ import annotations

from fastapi import HTTPException

from netplanner.editor.controller import InteractionController
from netplanner.errors import (
    DuplicateNode,
    NetPlannerError,
    SnapshotNotFound,
    StorageIOError,
    UnknownCandidate,
    UnknownConnectionType,
    UnknownEdge,
    UnknownNode,
)
from netplanner.websocket import ConnectionManager

STATUS_BY_ERROR: list[tuple[type[NetPlannerError], int]] = [
    (UnknownNode, 404),
    (UnknownEdge, 404),
    (UnknownCandidate, 404),
    (SnapshotNotFound, 404),
    (DuplicateNode, 409),
    (UnknownConnectionType, 422),
    (StorageIOError, 503),
]


def to_http(error: NetPlannerError) -> HTTPException:
    """Map an editor error onto the HTTP status the client sees."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            detail = str(error)
            if status_code == 503:
                detail = f"Snapshot storage failed, try again: {error}"
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=400, detail=str(error))


async def publish(controller: InteractionController, ws_manager: ConnectionManager) -> None:
    """Push the controller's pending events to canvas clients."""
    await ws_manager.broadcast_events(controller.drain_events())
