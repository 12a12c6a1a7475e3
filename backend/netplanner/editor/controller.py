"""
Interaction Controller

Translates canvas gestures into Graph Model calls and coordinates the
other editor components. One controller drives one editing session.

States:
    IDLE -> DRAGGING -> (drag end: settle pass) -> IDLE
    IDLE -> CONNECTING -> (release on a handle: new edge | empty space) -> IDLE
    IDLE -> EDGE_SELECTED -> (delete | deselect) -> IDLE
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Any

from netplanner.config import EditorConfig, LayoutConfig
from netplanner.editor import collision, connection_types, layout
from netplanner.editor.graph import GraphModel
from netplanner.errors import UnknownCandidate, UnknownEdge, UnknownNode
from netplanner.inventory.sync import CandidateNode, DeviceSyncAdapter
from netplanner.models.edge import ConnectionType, Edge, Handle
from netplanner.models.node import DEFAULT_LABELS, Node, NodeKind, Position
from netplanner.models.topology import (
    SnapshotLoadResult,
    SnapshotSummary,
    StyledEdge,
    Topology,
    TopologySnapshot,
)
from netplanner.storage.snapshots import SnapshotRef, SnapshotStore

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    CONNECTING = "connecting"
    EDGE_SELECTED = "edge_selected"


# Domain event types pushed to canvas clients
NODE_POSITION_COMMITTED = "node_position_committed"
GRAPH_CHANGED = "graph_changed"
CANDIDATES_UPDATED = "candidates_updated"


class InteractionController:
    """Gesture-level API over a single graph-editing session."""

    def __init__(
        self,
        graph: GraphModel,
        store: SnapshotStore,
        sync: DeviceSyncAdapter,
        editor_config: EditorConfig | None = None,
        layout_config: LayoutConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.graph = graph
        self.store = store
        self.sync = sync
        self.editor_config = editor_config or EditorConfig()
        self.layout_config = layout_config or LayoutConfig()
        self._rng = rng or random.Random()

        self.state = EditorState.IDLE
        self.connection_type = ConnectionType(self.editor_config.default_connection_type)
        self.current_name: str | None = None
        self.selected_edge_id: str | None = None
        self.selected_node_ids: list[str] = []

        self._drag_node_id: str | None = None
        self._pending_connection: tuple[str, Handle] | None = None
        self._autosaved_revision: int | None = None
        self._events: list[dict[str, Any]] = []

    # ─────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────

    def _emit(self, event_type: str, **payload: Any) -> None:
        self._events.append({"type": event_type, "revision": self.graph.revision, **payload})

    def drain_events(self) -> list[dict[str, Any]]:
        """Return and forget the events raised since the last call."""
        events, self._events = self._events, []
        return events

    # ─────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────

    def topology(self) -> Topology:
        """Render-agnostic node/edge collection with edge stroke styles."""
        edges = [
            StyledEdge(
                **edge.model_dump(),
                style=connection_types.resolve(edge.connection_type).stroke_style(),
            )
            for edge in self.graph.edges
        ]
        return Topology(
            nodes=self.graph.nodes,
            edges=edges,
            revision=self.graph.revision,
            node_count=self.graph.node_count,
            edge_count=self.graph.edge_count,
        )

    # ─────────────────────────────────────────────────────────────
    # Node creation
    # ─────────────────────────────────────────────────────────────

    def _random_position(self) -> Position:
        box = self.editor_config.placement
        return Position(
            x=self._rng.uniform(box.x_min, box.x_max),
            y=self._rng.uniform(box.y_min, box.y_max),
        )

    def add_palette_node(
        self,
        kind: NodeKind,
        label: str | None = None,
        position: Position | None = None,
    ) -> Node:
        """Drop a placeholder device from the palette."""
        kind = NodeKind(kind)
        node = self.graph.add_node(
            kind,
            label or DEFAULT_LABELS[kind],
            position or self._random_position(),
        )
        self._emit(GRAPH_CHANGED, action="node_added", node_id=node.id)
        return node

    def place_candidate(self, device_id: str, position: Position | None = None) -> Node:
        """Commit a synced inventory device to the canvas."""
        candidate: CandidateNode | None = self.sync.get_candidate(device_id)
        if candidate is None:
            raise UnknownCandidate(device_id)

        node = self.graph.add_node(
            candidate.kind,
            candidate.label,
            position or self._random_position(),
            device_info=candidate.device_info,
            status=candidate.status,
            node_id=candidate.node_id,
        )
        self._emit(GRAPH_CHANGED, action="node_added", node_id=node.id)
        return node

    async def refresh_candidates(self, token: str | None = None) -> list[CandidateNode]:
        candidates = await self.sync.refresh(token)
        self._emit(
            CANDIDATES_UPDATED,
            count=len(candidates),
            error=str(self.sync.last_error) if self.sync.last_error else None,
        )
        return candidates

    # ─────────────────────────────────────────────────────────────
    # Dragging
    # ─────────────────────────────────────────────────────────────

    def _snap(self, position: Position) -> Position:
        position = Position.model_validate(position)
        if self.editor_config.snap_to_grid:
            return layout.snap_to_grid(position, self.editor_config.snap_grid)
        return position

    def begin_drag(self, node_id: str) -> bool:
        if not self.graph.has_node(node_id):
            return False
        self._pending_connection = None
        # Node selection survives a drag; an edge selection does not
        self.selected_edge_id = None
        self._drag_node_id = node_id
        self.state = EditorState.DRAGGING
        return True

    def drag_to(self, node_id: str, position: Position) -> Node | None:
        """Move a node mid-drag. No collision correction happens here."""
        if self.state != EditorState.DRAGGING or self._drag_node_id != node_id:
            if not self.begin_drag(node_id):
                return None
        return self.graph.update_node_position(node_id, self._snap(position))

    def end_drag(self, node_id: str, position: Position | None = None) -> dict[str, Position]:
        """
        Commit the final drag position and settle overlaps.

        Returns the corrections the settle pass applied. A drag end for a
        node that has since been deleted is ignored.
        """
        self._drag_node_id = None
        self.state = EditorState.IDLE

        if position is not None:
            node = self.graph.update_node_position(node_id, self._snap(position))
        else:
            node = self.graph.get_node(node_id)
        if node is None:
            logger.debug("Ignoring drag end for missing node %s", node_id)
            return {}

        self._emit(
            NODE_POSITION_COMMITTED,
            node_id=node.id,
            position=node.position.model_dump(),
        )
        return self.settle()

    def settle(self) -> dict[str, Position]:
        """Run the collision-avoidance pass over the whole graph."""
        corrections = collision.settle(
            self.graph.nodes,
            min_distance=self.editor_config.min_distance,
            passes=self.editor_config.settle_passes,
        )
        if corrections:
            self.graph.apply_positions(corrections)
            self._emit(
                GRAPH_CHANGED,
                action="nodes_settled",
                node_ids=list(corrections),
            )
        return corrections

    # ─────────────────────────────────────────────────────────────
    # Connecting
    # ─────────────────────────────────────────────────────────────

    def set_connection_type(self, connection_type: ConnectionType | str) -> ConnectionType:
        self.connection_type = connection_types.resolve(connection_type).connection_type
        return self.connection_type

    def begin_connection(self, node_id: str, handle: Handle | str) -> None:
        if not self.graph.has_node(node_id):
            raise UnknownNode(node_id)
        self._clear_selection()
        self._pending_connection = (node_id, Handle(handle))
        self.state = EditorState.CONNECTING

    def cancel_connection(self) -> None:
        self._pending_connection = None
        if self.state == EditorState.CONNECTING:
            self.state = EditorState.IDLE

    def complete_connection(
        self,
        target_node_id: str | None,
        target_handle: Handle | str | None = None,
    ) -> Edge | None:
        """
        Finish a connection drag.

        Releasing over empty space (no target) creates nothing. A target
        that no longer exists raises UnknownNode; either way the
        controller returns to IDLE.
        """
        pending = self._pending_connection
        self.cancel_connection()
        if pending is None or target_node_id is None or target_handle is None:
            return None

        source_node_id, source_handle = pending
        edge = self.graph.add_edge(
            source_node_id,
            target_node_id,
            source_handle,
            target_handle,
            self.connection_type,
        )
        self._emit(GRAPH_CHANGED, action="edge_added", edge_id=edge.id)
        return edge

    def connect(
        self,
        source_node_id: str,
        source_handle: Handle | str,
        target_node_id: str,
        target_handle: Handle | str,
        connection_type: ConnectionType | str | None = None,
    ) -> Edge:
        """
        One-shot connection gesture.

        An explicit connection type applies to this edge only; the active
        type used by drag-to-connect is left as it is.
        """
        self.cancel_connection()
        edge = self.graph.add_edge(
            source_node_id,
            target_node_id,
            source_handle,
            target_handle,
            self.connection_type if connection_type is None else connection_type,
        )
        self._emit(GRAPH_CHANGED, action="edge_added", edge_id=edge.id)
        return edge

    # ─────────────────────────────────────────────────────────────
    # Selection
    # ─────────────────────────────────────────────────────────────

    def _clear_selection(self) -> None:
        self.selected_edge_id = None
        self.selected_node_ids = []

    def deselect(self) -> None:
        """Escape: drop any selection and pending connection."""
        self._clear_selection()
        self._pending_connection = None
        self.state = EditorState.IDLE

    def select_edge(self, edge_id: str) -> Edge:
        edge = self.graph.get_edge(edge_id)
        if edge is None:
            raise UnknownEdge(edge_id)
        self._clear_selection()
        self._pending_connection = None
        self.selected_edge_id = edge_id
        self.state = EditorState.EDGE_SELECTED
        return edge

    def delete_selected_edge(self) -> bool:
        edge_id = self.selected_edge_id
        self.deselect()
        if edge_id is None:
            return False
        return self.remove_edge(edge_id)

    def set_selected_edge_label(self, label: str | None) -> Edge | None:
        """Rename the selected edge; the selection stays active."""
        if self.selected_edge_id is None:
            return None
        return self.set_edge_label(self.selected_edge_id, label)

    def select_node(self, node_id: str, additive: bool = False) -> list[str]:
        """Click selects one node; additive (ctrl-click) toggles membership."""
        if not self.graph.has_node(node_id):
            raise UnknownNode(node_id)

        if self.state in (EditorState.EDGE_SELECTED, EditorState.CONNECTING):
            self.deselect()

        if not additive:
            self.selected_node_ids = [node_id]
        elif node_id in self.selected_node_ids:
            self.selected_node_ids.remove(node_id)
        else:
            self.selected_node_ids.append(node_id)
        return list(self.selected_node_ids)

    def select_all_nodes(self) -> list[str]:
        if self.state == EditorState.EDGE_SELECTED:
            self.deselect()
        self.selected_node_ids = [n.id for n in self.graph.nodes]
        return list(self.selected_node_ids)

    def delete_selected_nodes(self) -> list[str]:
        """Delete key: remove the selected nodes and their edges."""
        removed = []
        for node_id in list(self.selected_node_ids):
            if self.graph.has_node(node_id):
                self.remove_node(node_id)
                removed.append(node_id)
        self.selected_node_ids = []
        return removed

    # ─────────────────────────────────────────────────────────────
    # Direct mutations
    # ─────────────────────────────────────────────────────────────

    def remove_node(self, node_id: str) -> list[str]:
        """Remove a node; returns the ids of the edges removed with it."""
        if not self.graph.has_node(node_id):
            return []

        removed_edges = self.graph.remove_node(node_id)
        if node_id in self.selected_node_ids:
            self.selected_node_ids.remove(node_id)
        if self.selected_edge_id in removed_edges:
            self.deselect()
        if self._drag_node_id == node_id:
            self._drag_node_id = None
            self.state = EditorState.IDLE
        if self._pending_connection and self._pending_connection[0] == node_id:
            self.cancel_connection()

        self._emit(
            GRAPH_CHANGED,
            action="node_removed",
            node_id=node_id,
            edge_ids=removed_edges,
        )
        return removed_edges

    def remove_edge(self, edge_id: str) -> bool:
        removed = self.graph.remove_edge(edge_id)
        if self.selected_edge_id == edge_id:
            self.deselect()
        if removed:
            self._emit(GRAPH_CHANGED, action="edge_removed", edge_id=edge_id)
        return removed

    def set_edge_label(self, edge_id: str, label: str | None) -> Edge:
        edge = self.graph.set_edge_label(edge_id, label)
        self._emit(GRAPH_CHANGED, action="edge_updated", edge_id=edge_id)
        return edge

    # ─────────────────────────────────────────────────────────────
    # Layout commands
    # ─────────────────────────────────────────────────────────────

    def _apply_layout(self, nodes: list[Node], command: str) -> list[Node]:
        self.graph.apply_positions({n.id: n.position for n in nodes})
        self._emit(GRAPH_CHANGED, action="layout", command=command)
        return self.graph.nodes

    def auto_arrange(self) -> list[Node]:
        cfg = self.layout_config
        arranged = layout.auto_arrange(
            self.graph.nodes,
            columns=cfg.columns,
            column_spacing=cfg.column_spacing,
            row_spacing=cfg.row_spacing,
            x_offset=cfg.x_offset,
            y_offset=cfg.y_offset,
        )
        return self._apply_layout(arranged, "auto-arrange")

    def align_horizontally(self) -> list[Node]:
        return self._apply_layout(layout.align_horizontally(self.graph.nodes), "align-horizontal")

    def align_vertically(self) -> list[Node]:
        return self._apply_layout(layout.align_vertically(self.graph.nodes), "align-vertical")

    def run_layout(self, command: str) -> list[Node]:
        """Dispatch a layout command by name."""
        handlers = {
            "auto-arrange": self.auto_arrange,
            "align-horizontal": self.align_horizontally,
            "align-vertical": self.align_vertically,
        }
        if command not in handlers:
            raise ValueError(f"Unknown layout command '{command}'")
        return handlers[command]()

    # ─────────────────────────────────────────────────────────────
    # Snapshots
    # ─────────────────────────────────────────────────────────────

    async def save_snapshot(self, name: str | None = None) -> TopologySnapshot:
        """Persist the live graph. A storage failure leaves the graph untouched."""
        return await self.store.save(name, self.graph.nodes, self.graph.edges)

    async def list_snapshots(self) -> list[SnapshotSummary]:
        return await self.store.summaries()

    def _restore(self, result: SnapshotLoadResult) -> SnapshotLoadResult:
        self.deselect()
        self._drag_node_id = None
        self.graph.replace(result.nodes, result.edges)
        self.current_name = result.name or None
        self._emit(
            GRAPH_CHANGED,
            action="snapshot_loaded",
            snapshot_id=result.snapshot_id,
            skipped=len(result.skipped),
        )
        return result

    async def load_snapshot(self, ref: SnapshotRef) -> SnapshotLoadResult:
        """Replace the live graph with a stored snapshot."""
        result = await self.store.load(ref)
        logger.info("Loaded snapshot '%s'", result.name)
        return self._restore(result)

    async def delete_snapshot(self, ref: SnapshotRef) -> bool:
        return await self.store.delete(ref)

    async def load_autosave(self) -> SnapshotLoadResult:
        return self._restore(await self.store.load_autosave())

    async def autosave_if_dirty(self) -> bool:
        """Write the autosave slot when the graph changed since the last write."""
        revision = self.graph.revision
        if revision == self._autosaved_revision:
            return False
        if self.graph.node_count == 0 and self.graph.edge_count == 0:
            return False

        await self.store.autosave(self.current_name, self.graph.nodes, self.graph.edges)
        self._autosaved_revision = revision
        return True
