# Pydantic models
from .node import DeviceInfo, Node, NodeKind, NodeStatus, Position
from .edge import ConnectionType, Edge, Handle
from .topology import (
    SkippedEntry,
    SnapshotLoadResult,
    SnapshotSummary,
    StyledEdge,
    Topology,
    TopologySnapshot,
    TopologySummary,
)

__all__ = [
    "DeviceInfo",
    "Node",
    "NodeKind",
    "NodeStatus",
    "Position",
    "ConnectionType",
    "Edge",
    "Handle",
    "SkippedEntry",
    "SnapshotLoadResult",
    "SnapshotSummary",
    "StyledEdge",
    "Topology",
    "TopologySnapshot",
    "TopologySummary",
]
