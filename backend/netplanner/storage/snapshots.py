"""
Snapshot Store

Named topology snapshots kept in a durable medium. Snapshots accumulate
in insertion order (oldest first); saving under an existing name appends
another entry rather than replacing the first.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from netplanner.editor import connection_types
from netplanner.errors import SnapshotNotFound
from netplanner.models.edge import Edge
from netplanner.models.node import Node
from netplanner.models.topology import (
    SkippedEntry,
    SnapshotLoadResult,
    SnapshotSummary,
    TopologySnapshot,
    utcnow,
)
from netplanner.storage.backends import SnapshotBackend

logger = logging.getLogger(__name__)

SnapshotRef = int | str


def default_snapshot_name() -> str:
    return f"Topology {int(time.time() * 1000)}"


def _serialize(snapshot: TopologySnapshot) -> dict[str, Any]:
    return snapshot.model_dump(mode="json", by_alias=True)


def _find(records: list[dict[str, Any]], ref: SnapshotRef) -> int | None:
    """Index of the record a ref points at: an id, or a list position."""
    if isinstance(ref, str):
        for index, record in enumerate(records):
            if record.get("id") == ref:
                return index
        if not ref.isdigit():
            return None
        ref = int(ref)

    if 0 <= ref < len(records):
        return ref
    return None


def restore_graph(
    raw_nodes: Iterable[Any], raw_edges: Iterable[Any]
) -> tuple[list[Node], list[Edge], list[SkippedEntry]]:
    """
    Validate stored nodes and edges, keeping every entry that is sound.

    Invalid nodes, edges whose connection type is no longer registered and
    edges that would dangle are skipped and reported.
    """
    skipped: list[SkippedEntry] = []

    nodes: dict[str, Node] = {}
    for raw in raw_nodes:
        raw_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            node = Node.model_validate(raw)
        except ValidationError as e:
            skipped.append(SkippedEntry(kind="node", id=raw_id, reason=f"invalid node: {e.error_count()} errors"))
            continue
        if node.id in nodes:
            skipped.append(SkippedEntry(kind="node", id=node.id, reason="duplicate node id"))
            continue
        nodes[node.id] = node

    edges: list[Edge] = []
    seen_edges: set[str] = set()
    for raw in raw_edges:
        if not isinstance(raw, dict):
            skipped.append(SkippedEntry(kind="edge", reason="invalid edge"))
            continue

        raw_id = raw.get("id")
        raw_type = raw.get("connectionType", raw.get("connection_type"))
        if not connection_types.is_known(raw_type):
            skipped.append(SkippedEntry(kind="edge", id=raw_id, reason=f"unknown connection type '{raw_type}'"))
            continue

        try:
            edge = Edge.model_validate(raw)
        except ValidationError as e:
            skipped.append(SkippedEntry(kind="edge", id=raw_id, reason=f"invalid edge: {e.error_count()} errors"))
            continue

        if edge.source_node_id not in nodes or edge.target_node_id not in nodes:
            skipped.append(SkippedEntry(kind="edge", id=edge.id, reason="endpoint node missing"))
            continue
        if edge.id in seen_edges:
            skipped.append(SkippedEntry(kind="edge", id=edge.id, reason="duplicate edge id"))
            continue
        seen_edges.add(edge.id)
        edges.append(edge)

    return list(nodes.values()), edges, skipped


class SnapshotStore:
    """Save, list, load and delete named snapshots."""

    def __init__(
        self,
        backend: SnapshotBackend,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._backend = backend
        self._clock = clock
        self._lock = asyncio.Lock()

    async def save(
        self, name: str | None, nodes: Iterable[Node], edges: Iterable[Edge]
    ) -> TopologySnapshot:
        """Append a snapshot of the given graph."""
        snapshot = TopologySnapshot(
            id=uuid.uuid4().hex,
            name=(name or "").strip() or default_snapshot_name(),
            nodes=list(nodes),
            edges=list(edges),
            saved_at=self._clock(),
        )
        async with self._lock:
            records = await self._backend.read_all()
            records.append(_serialize(snapshot))
            await self._backend.write_all(records)

        logger.info(
            "Saved snapshot '%s' (%d nodes, %d edges)",
            snapshot.name, len(snapshot.nodes), len(snapshot.edges),
        )
        return snapshot

    async def list(self) -> list[TopologySnapshot]:
        """All stored snapshots, oldest first. Unreadable records are left out."""
        records = await self._backend.read_all()
        snapshots = []
        for record in records:
            try:
                snapshots.append(TopologySnapshot.model_validate(record))
            except ValidationError:
                logger.warning("Unreadable snapshot record %s", record.get("id") if isinstance(record, dict) else None)
        return snapshots

    async def summaries(self) -> list[SnapshotSummary]:
        """Light listing with the list position of each record."""
        records = await self._backend.read_all()
        summaries = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                continue
            try:
                summaries.append(
                    SnapshotSummary(
                        index=index,
                        id=record.get("id") or str(index),
                        name=record.get("name") or "",
                        saved_at=record.get("savedAt") or record.get("timestamp"),
                        node_count=len(record.get("nodes") or []),
                        edge_count=len(record.get("edges") or []),
                    )
                )
            except ValidationError:
                logger.warning("Snapshot record %d has no valid timestamp", index)
        return summaries

    async def load(self, ref: SnapshotRef) -> SnapshotLoadResult:
        """Return the restorable part of a stored snapshot."""
        records = await self._backend.read_all()
        index = _find(records, ref)
        if index is None:
            raise SnapshotNotFound(ref)

        return self._restore(records[index], fallback_id=str(index))

    async def delete(self, ref: SnapshotRef) -> bool:
        """Remove a snapshot. Returns False when it was already gone."""
        async with self._lock:
            records = await self._backend.read_all()
            index = _find(records, ref)
            if index is None:
                return False
            removed = records.pop(index)
            await self._backend.write_all(records)

        logger.info("Deleted snapshot '%s'", removed.get("name"))
        return True

    async def autosave(
        self, name: str | None, nodes: Iterable[Node], edges: Iterable[Edge]
    ) -> TopologySnapshot:
        """Overwrite the single autosave slot."""
        snapshot = TopologySnapshot(
            id="autosave",
            name=(name or "").strip() or "Auto-saved",
            nodes=list(nodes),
            edges=list(edges),
            saved_at=self._clock(),
        )
        async with self._lock:
            await self._backend.write_autosave(_serialize(snapshot))
        logger.debug("Autosaved %d nodes, %d edges", len(snapshot.nodes), len(snapshot.edges))
        return snapshot

    async def load_autosave(self) -> SnapshotLoadResult:
        async with self._lock:
            record = await self._backend.read_autosave()
        if record is None:
            raise SnapshotNotFound("autosave")
        return self._restore(record, fallback_id="autosave")

    def _restore(self, record: Any, fallback_id: str) -> SnapshotLoadResult:
        if not isinstance(record, dict):
            raise SnapshotNotFound(fallback_id)

        nodes, edges, skipped = restore_graph(
            record.get("nodes") or [], record.get("edges") or []
        )
        if skipped:
            logger.warning(
                "Snapshot '%s' loaded partially: %d entries skipped",
                record.get("name"), len(skipped),
            )
        return SnapshotLoadResult(
            snapshot_id=record.get("id") or fallback_id,
            name=record.get("name") or "",
            nodes=nodes,
            edges=edges,
            skipped=skipped,
        )
