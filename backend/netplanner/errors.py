"""Typed errors raised by the topology editor core."""

from __future__ import annotations


class NetPlannerError(Exception):
    """Base class for editor errors."""


class UnknownNode(NetPlannerError):
    def __init__(self, node_id: str):
        super().__init__(f"Node '{node_id}' not found")
        self.node_id = node_id


class UnknownEdge(NetPlannerError):
    def __init__(self, edge_id: str):
        super().__init__(f"Edge '{edge_id}' not found")
        self.edge_id = edge_id


class DuplicateNode(NetPlannerError):
    def __init__(self, node_id: str):
        super().__init__(f"Node '{node_id}' already exists")
        self.node_id = node_id


class UnknownConnectionType(NetPlannerError):
    """An edge carries a connection type absent from the registry."""

    def __init__(self, connection_type: str):
        super().__init__(f"Unknown connection type '{connection_type}'")
        self.connection_type = connection_type


class SyncFailure(NetPlannerError):
    """The device inventory could not be fetched."""


class SnapshotNotFound(NetPlannerError):
    def __init__(self, ref: int | str):
        super().__init__(f"Snapshot '{ref}' not found")
        self.ref = ref


class StorageIOError(NetPlannerError):
    """The snapshot medium could not be read or written."""


class UnknownCandidate(NetPlannerError):
    """No synced inventory device has the given id."""

    def __init__(self, device_id: str):
        super().__init__(f"Device '{device_id}' is not in the candidate list")
        self.device_id = device_id
