"""Topology editing API routes."""

from typing import Optional

from fastapi import APIRouter, HTTPException

from ..dependencies import Controller, WsManager
from ..editor import connection_types
from ..editor.connection_types import ConnectionProfile
from ..errors import NetPlannerError
from ..models.base import CamelModel
from ..models.edge import ConnectionType, Edge, Handle
from ..models.node import Node, NodeKind, NodeStatus, Position
from ..models.topology import Topology, TopologySummary
from .common import publish, to_http

router = APIRouter()


class NodeCreate(CamelModel):
    kind: NodeKind
    label: Optional[str] = None
    position: Optional[Position] = None


class PositionUpdate(CamelModel):
    position: Optional[Position] = None


class DragResult(CamelModel):
    node: Optional[Node] = None
    corrections: dict[str, Position] = {}


class EdgeCreate(CamelModel):
    source_node_id: str
    target_node_id: str
    source_handle: Handle
    target_handle: Handle
    connection_type: Optional[str] = None


class EdgeUpdate(CamelModel):
    label: Optional[str] = None


class ConnectionTypeUpdate(CamelModel):
    connection_type: str


class NodeSelection(CamelModel):
    additive: bool = False


class EditorStatus(CamelModel):
    state: str
    connection_type: ConnectionType
    current_name: Optional[str] = None
    selected_edge_id: Optional[str] = None
    selected_node_ids: list[str] = []
    revision: int = 0


def _status(controller) -> EditorStatus:
    return EditorStatus(
        state=controller.state.value,
        connection_type=controller.connection_type,
        current_name=controller.current_name,
        selected_edge_id=controller.selected_edge_id,
        selected_node_ids=controller.selected_node_ids,
        revision=controller.graph.revision,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────────────────


@router.get("/topology", response_model=Topology)
async def get_topology(controller: Controller):
    """Get every node and edge, with the stroke style of each edge."""
    return controller.topology()


@router.get("/topology/summary", response_model=TopologySummary)
async def get_topology_summary(controller: Controller):
    """Get quick node/edge counts."""
    nodes = controller.graph.nodes
    return TopologySummary(
        total_nodes=len(nodes),
        total_edges=controller.graph.edge_count,
        nodes_online=sum(1 for n in nodes if n.status == NodeStatus.ONLINE),
        nodes_idle=sum(1 for n in nodes if n.status == NodeStatus.IDLE),
        nodes_offline=sum(1 for n in nodes if n.status == NodeStatus.OFFLINE),
    )


@router.get("/topology/search", response_model=list[Node])
async def search_nodes(controller: Controller, q: str = ""):
    """Nodes whose label matches the query, for canvas highlighting."""
    return controller.graph.list_matching_nodes(q)


@router.get("/connection-types", response_model=list[ConnectionProfile])
async def list_connection_types():
    """Get the connection type catalog."""
    return connection_types.catalog()


@router.get("/editor", response_model=EditorStatus)
async def get_editor_status(controller: Controller):
    """Get the interaction state, selection and active connection type."""
    return _status(controller)


@router.put("/editor/connection-type", response_model=EditorStatus)
async def set_connection_type(body: ConnectionTypeUpdate, controller: Controller):
    """Choose the connection type new edges are created with."""
    try:
        controller.set_connection_type(body.connection_type)
    except NetPlannerError as e:
        raise to_http(e)
    return _status(controller)


# ─────────────────────────────────────────────────────────────────────────────
# Nodes
# ─────────────────────────────────────────────────────────────────────────────


@router.post("/nodes", response_model=Node, status_code=201)
async def add_node(body: NodeCreate, controller: Controller, ws_manager: WsManager):
    """Add a palette node."""
    node = controller.add_palette_node(body.kind, body.label, body.position)
    await publish(controller, ws_manager)
    return node


@router.delete("/nodes/{node_id}")
async def remove_node(node_id: str, controller: Controller, ws_manager: WsManager):
    """Delete a node and every edge attached to it."""
    if not controller.graph.has_node(node_id):
        raise HTTPException(status_code=404, detail=f"Node '{node_id}' not found")

    removed_edges = controller.remove_node(node_id)
    await publish(controller, ws_manager)
    return {"status": "deleted", "node_id": node_id, "removed_edges": removed_edges}


@router.post("/nodes/{node_id}/drag", response_model=DragResult)
async def drag_node(node_id: str, body: PositionUpdate, controller: Controller):
    """Move a node mid-drag. Stale calls for deleted nodes return no node."""
    if body.position is None:
        raise HTTPException(status_code=422, detail="Position required while dragging")
    return DragResult(node=controller.drag_to(node_id, body.position))


@router.post("/nodes/{node_id}/drop", response_model=DragResult)
async def drop_node(
    node_id: str, body: PositionUpdate, controller: Controller, ws_manager: WsManager
):
    """End a drag: commit the position and settle overlapping nodes."""
    corrections = controller.end_drag(node_id, body.position)
    await publish(controller, ws_manager)
    return DragResult(node=controller.graph.get_node(node_id), corrections=corrections)


@router.post("/nodes/select-all", response_model=EditorStatus)
async def select_all_nodes(controller: Controller):
    controller.select_all_nodes()
    return _status(controller)


@router.post("/nodes/{node_id}/select", response_model=EditorStatus)
async def select_node(node_id: str, body: NodeSelection, controller: Controller):
    """Select a node; additive toggles it in the current selection."""
    try:
        controller.select_node(node_id, additive=body.additive)
    except NetPlannerError as e:
        raise to_http(e)
    return _status(controller)


@router.delete("/selection/nodes")
async def delete_selected_nodes(controller: Controller, ws_manager: WsManager):
    """Delete every selected node, cascading to their edges."""
    removed = controller.delete_selected_nodes()
    await publish(controller, ws_manager)
    return {"status": "deleted", "node_ids": removed}


@router.post("/selection/clear", response_model=EditorStatus)
async def clear_selection(controller: Controller):
    controller.deselect()
    return _status(controller)


# ─────────────────────────────────────────────────────────────────────────────
# Edges
# ─────────────────────────────────────────────────────────────────────────────


@router.post("/edges", response_model=Edge, status_code=201)
async def add_edge(body: EdgeCreate, controller: Controller, ws_manager: WsManager):
    """Connect two node handles with the chosen (or active) connection type."""
    try:
        edge = controller.connect(
            body.source_node_id,
            body.source_handle,
            body.target_node_id,
            body.target_handle,
            body.connection_type,
        )
    except NetPlannerError as e:
        raise to_http(e)
    await publish(controller, ws_manager)
    return edge


@router.post("/edges/{edge_id}/select", response_model=EditorStatus)
async def select_edge(edge_id: str, controller: Controller):
    try:
        controller.select_edge(edge_id)
    except NetPlannerError as e:
        raise to_http(e)
    return _status(controller)


@router.patch("/edges/{edge_id}", response_model=Edge)
async def update_edge(
    edge_id: str, body: EdgeUpdate, controller: Controller, ws_manager: WsManager
):
    """Change an edge label."""
    try:
        edge = controller.set_edge_label(edge_id, body.label)
    except NetPlannerError as e:
        raise to_http(e)
    await publish(controller, ws_manager)
    return edge


@router.delete("/edges/{edge_id}")
async def remove_edge(edge_id: str, controller: Controller, ws_manager: WsManager):
    """Delete an edge. Deleting an edge that is already gone succeeds."""
    removed = controller.remove_edge(edge_id)
    await publish(controller, ws_manager)
    return {"status": "deleted" if removed else "absent", "edge_id": edge_id}


# ─────────────────────────────────────────────────────────────────────────────
# Layout
# ─────────────────────────────────────────────────────────────────────────────


@router.post("/layout/{command}", response_model=list[Node])
async def run_layout(command: str, controller: Controller, ws_manager: WsManager):
    """Run auto-arrange, align-horizontal or align-vertical over all nodes."""
    try:
        nodes = controller.run_layout(command)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    await publish(controller, ws_manager)
    return nodes
