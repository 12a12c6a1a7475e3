"""Snapshot persistence."""

from netplanner.storage.backends import (
    JsonFileBackend,
    MemoryBackend,
    RedisBackend,
    SnapshotBackend,
)
from netplanner.storage.snapshots import SnapshotStore, restore_graph

__all__ = [
    "JsonFileBackend",
    "MemoryBackend",
    "RedisBackend",
    "SnapshotBackend",
    "SnapshotStore",
    "restore_graph",
]
