"""Device candidate API routes."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks

from ..dependencies import BearerToken, Controller, Session, WsManager
from ..errors import NetPlannerError
from ..inventory.sync import CandidateNode
from ..models.base import CamelModel
from ..models.node import Node, Position
from .common import publish, to_http

router = APIRouter()


class CandidateList(CamelModel):
    candidates: list[CandidateNode] = []
    error: Optional[str] = None
    last_synced_at: Optional[datetime] = None
    refreshing: bool = False
    configured: bool = False


class PlaceRequest(CamelModel):
    position: Optional[Position] = None


def _candidate_list(session, query: str | None = None) -> CandidateList:
    sync = session.sync
    return CandidateList(
        candidates=sync.search(query),
        error=str(sync.last_error) if sync.last_error else None,
        last_synced_at=sync.last_synced_at,
        refreshing=sync.refreshing,
        configured=sync.is_configured,
    )


@router.get("/devices/candidates", response_model=CandidateList)
async def list_candidates(session: Session, q: Optional[str] = None):
    """List synced devices not yet committed, filtered by hostname or OS."""
    return _candidate_list(session, q)


@router.post("/devices/refresh", response_model=CandidateList, status_code=202)
async def refresh_candidates(
    session: Session,
    controller: Controller,
    ws_manager: WsManager,
    token: BearerToken,
    background_tasks: BackgroundTasks,
    wait: bool = False,
):
    """
    Re-fetch the device inventory.

    By default the fetch runs after the response is sent and clients
    hear about the result over the WebSocket; wait=true blocks until it
    completes.
    """
    if wait:
        await controller.refresh_candidates(token)
        await publish(controller, ws_manager)
        return _candidate_list(session)

    async def _refresh() -> None:
        await controller.refresh_candidates(token)
        await publish(controller, ws_manager)

    background_tasks.add_task(_refresh)
    return _candidate_list(session)


@router.post("/devices/{device_id}/place", response_model=Node, status_code=201)
async def place_candidate(
    device_id: str,
    body: PlaceRequest,
    controller: Controller,
    ws_manager: WsManager,
):
    """Drop a synced device onto the canvas."""
    try:
        node = controller.place_candidate(device_id, body.position)
    except NetPlannerError as e:
        raise to_http(e)
    await publish(controller, ws_manager)
    return node
