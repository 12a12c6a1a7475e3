"""Snapshot API routes."""

from typing import Optional

from fastapi import APIRouter

from ..dependencies import Controller, WsManager
from ..errors import NetPlannerError
from ..models.base import CamelModel
from ..models.topology import SnapshotLoadResult, SnapshotSummary
from .common import publish, to_http

router = APIRouter(prefix="/snapshots", tags=["snapshots"])


class SnapshotCreate(CamelModel):
    name: Optional[str] = None


@router.get("", response_model=list[SnapshotSummary])
async def list_snapshots(controller: Controller):
    """List stored snapshots, oldest first."""
    try:
        return await controller.list_snapshots()
    except NetPlannerError as e:
        raise to_http(e)


@router.post("", response_model=SnapshotSummary, status_code=201)
async def save_snapshot(body: SnapshotCreate, controller: Controller):
    """Save the live graph under a name. Names need not be unique."""
    try:
        snapshot = await controller.save_snapshot(body.name)
        summaries = await controller.list_snapshots()
    except NetPlannerError as e:
        raise to_http(e)

    index = next((s.index for s in summaries if s.id == snapshot.id), len(summaries) - 1)
    return SnapshotSummary(
        index=index,
        id=snapshot.id,
        name=snapshot.name,
        saved_at=snapshot.saved_at,
        node_count=len(snapshot.nodes),
        edge_count=len(snapshot.edges),
    )


@router.post("/autosave/load", response_model=SnapshotLoadResult)
async def load_autosave(controller: Controller, ws_manager: WsManager):
    """Restore the autosave slot."""
    try:
        result = await controller.load_autosave()
    except NetPlannerError as e:
        raise to_http(e)
    await publish(controller, ws_manager)
    return result


@router.post("/{ref}/load", response_model=SnapshotLoadResult)
async def load_snapshot(ref: str, controller: Controller, ws_manager: WsManager):
    """
    Replace the live graph with a snapshot, by id or list index.

    Entries that fail validation are skipped and listed in the response.
    """
    try:
        result = await controller.load_snapshot(ref)
    except NetPlannerError as e:
        raise to_http(e)
    await publish(controller, ws_manager)
    return result


@router.delete("/{ref}")
async def delete_snapshot(ref: str, controller: Controller):
    """Delete a snapshot by id or list index; missing ones report absent."""
    try:
        deleted = await controller.delete_snapshot(ref)
    except NetPlannerError as e:
        raise to_http(e)
    return {"status": "deleted" if deleted else "absent", "ref": ref}
