"""
Graph Model

Canonical node/edge state of one editing session. Every mutation goes
through this class; it performs no I/O.
"""

from __future__ import annotations

import itertools
import time
from typing import Iterable, Mapping

from netplanner.editor import connection_types
from netplanner.errors import DuplicateNode, UnknownEdge, UnknownNode
from netplanner.models.edge import ConnectionType, Edge, Handle
from netplanner.models.node import DeviceInfo, Node, NodeKind, NodeStatus, Position


def _now_millis() -> int:
    return int(time.time() * 1000)


class GraphModel:
    """
    Ordered node and edge collections.

    Insertion order is kept; it is the order layout commands and the
    collision sweep walk the nodes in.
    """

    def __init__(self, clock=_now_millis):
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        self._counter = itertools.count(1)
        self._clock = clock
        self.revision = 0

    # ─────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges.values())

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Edge | None:
        return self._edges.get(edge_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def edges_for_node(self, node_id: str) -> list[Edge]:
        """Edges with the node as source or target."""
        return [
            e for e in self._edges.values()
            if e.source_node_id == node_id or e.target_node_id == node_id
        ]

    def list_matching_nodes(self, query: str) -> list[Node]:
        """Nodes whose label contains the query (case-insensitive)."""
        needle = query.strip().lower()
        if not needle:
            return self.nodes
        return [n for n in self._nodes.values() if needle in n.label.lower()]

    # ─────────────────────────────────────────────────────────────
    # Nodes
    # ─────────────────────────────────────────────────────────────

    def _next_node_id(self) -> str:
        while True:
            node_id = f"node-{next(self._counter)}"
            if node_id not in self._nodes:
                return node_id

    def add_node(
        self,
        kind: NodeKind,
        label: str,
        position: Position,
        device_info: DeviceInfo | None = None,
        status: NodeStatus = NodeStatus.OFFLINE,
        node_id: str | None = None,
    ) -> Node:
        """
        Create and insert a node.

        Manual nodes get a counter-based id; callers placing inventory
        devices pass their own prefixed id, which must be unused.
        """
        if node_id is None:
            node_id = self._next_node_id()
        elif node_id in self._nodes:
            raise DuplicateNode(node_id)

        node = Node(
            id=node_id,
            kind=kind,
            label=label,
            position=Position.model_validate(position),
            status=status,
            device_info=device_info,
        )
        self._nodes[node.id] = node
        self.revision += 1
        return node

    def update_node_position(self, node_id: str, position: Position) -> Node | None:
        """Move a node. Unknown ids are ignored so stale drag callbacks are harmless."""
        node = self._nodes.get(node_id)
        if node is None:
            return None

        position = Position.model_validate(position)
        if node.position == position:
            return node

        node = node.model_copy(update={"position": position})
        self._nodes[node_id] = node
        self.revision += 1
        return node

    def apply_positions(self, positions: Mapping[str, Position]) -> list[Node]:
        """Write a batch of positions, skipping ids no longer present."""
        moved = []
        for node_id, position in positions.items():
            node = self.update_node_position(node_id, position)
            if node is not None:
                moved.append(node)
        return moved

    def remove_node(self, node_id: str) -> list[str]:
        """
        Remove a node and every edge touching it.

        Returns the ids of the cascaded edges. Removing an absent node
        is a no-op.
        """
        if node_id not in self._nodes:
            return []

        removed_edges = [e.id for e in self.edges_for_node(node_id)]
        for edge_id in removed_edges:
            del self._edges[edge_id]
        del self._nodes[node_id]
        self.revision += 1
        return removed_edges

    # ─────────────────────────────────────────────────────────────
    # Edges
    # ─────────────────────────────────────────────────────────────

    def _edge_id(self, source_node_id: str, target_node_id: str) -> str:
        base = f"edge-{source_node_id}-{target_node_id}-{self._clock()}"
        edge_id = base
        suffix = 1
        while edge_id in self._edges:
            edge_id = f"{base}-{suffix}"
            suffix += 1
        return edge_id

    def add_edge(
        self,
        source_node_id: str,
        target_node_id: str,
        source_handle: Handle | str,
        target_handle: Handle | str,
        connection_type: ConnectionType | str,
    ) -> Edge:
        """
        Connect two existing nodes.

        Raises UnknownNode when either endpoint is missing and
        UnknownConnectionType when the type is not registered. Nothing is
        inserted on failure.
        """
        for node_id in (source_node_id, target_node_id):
            if node_id not in self._nodes:
                raise UnknownNode(node_id)

        profile = connection_types.resolve(connection_type)

        edge = Edge(
            id=self._edge_id(source_node_id, target_node_id),
            source_node_id=source_node_id,
            target_node_id=target_node_id,
            source_handle=Handle(source_handle),
            target_handle=Handle(target_handle),
            connection_type=profile.connection_type,
        )
        self._edges[edge.id] = edge
        self.revision += 1
        return edge

    def remove_edge(self, edge_id: str) -> bool:
        """Remove an edge. Returns False when it was already gone."""
        if self._edges.pop(edge_id, None) is None:
            return False
        self.revision += 1
        return True

    def set_edge_label(self, edge_id: str, label: str | None) -> Edge:
        edge = self._edges.get(edge_id)
        if edge is None:
            raise UnknownEdge(edge_id)

        edge = edge.model_copy(update={"label": label or None})
        self._edges[edge_id] = edge
        self.revision += 1
        return edge

    # ─────────────────────────────────────────────────────────────
    # Bulk
    # ─────────────────────────────────────────────────────────────

    def replace(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> list[Edge]:
        """
        Replace the whole graph, as a snapshot load does.

        Edges whose endpoints are not in the new node set are dropped and
        returned.
        """
        new_nodes: dict[str, Node] = {}
        for node in nodes:
            new_nodes[node.id] = node

        new_edges: dict[str, Edge] = {}
        dropped = []
        for edge in edges:
            if edge.source_node_id in new_nodes and edge.target_node_id in new_nodes:
                new_edges[edge.id] = edge
            else:
                dropped.append(edge)

        self._nodes = new_nodes
        self._edges = new_edges
        self.revision += 1
        return dropped

    def clear(self) -> None:
        self.replace([], [])
