"""Topology and snapshot models."""

from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from .base import CamelModel
from .edge import Edge
from .node import Node


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TopologySnapshot(CamelModel):
    """A named, persisted copy of the full node/edge graph."""

    id: str
    name: str
    nodes: list[Node] = []
    edges: list[Edge] = []
    saved_at: datetime = Field(default_factory=utcnow)


class SnapshotSummary(CamelModel):
    """Lightweight snapshot entry for the load dialog."""

    index: int
    id: str
    name: str
    saved_at: datetime
    node_count: int = 0
    edge_count: int = 0


class SkippedEntry(CamelModel):
    """A stored node or edge that could not be restored."""

    kind: str  # node or edge
    id: str | None = None
    reason: str


class SnapshotLoadResult(CamelModel):
    """The valid subset of a stored snapshot, ready to replace the graph."""

    snapshot_id: str
    name: str
    nodes: list[Node] = []
    edges: list[Edge] = []
    skipped: list[SkippedEntry] = []


class StyledEdge(Edge):
    """Edge annotated with the stroke profile of its connection type."""

    style: dict[str, Any] = {}


class Topology(CamelModel):
    """Render-agnostic node/edge collection emitted to the canvas."""

    nodes: list[Node] = []
    edges: list[StyledEdge] = []
    revision: int = 0
    node_count: int = 0
    edge_count: int = 0


class TopologySummary(CamelModel):
    """Quick counts for the editor header."""

    total_nodes: int = 0
    total_edges: int = 0
    nodes_online: int = 0
    nodes_idle: int = 0
    nodes_offline: int = 0
