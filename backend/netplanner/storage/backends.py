"""
Snapshot storage mediums.

A medium stores a list of raw snapshot records plus one autosave slot.
Every failure is reported as StorageIOError.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Protocol

from redis.exceptions import RedisError

from netplanner.cache import RedisCache
from netplanner.errors import StorageIOError

logger = logging.getLogger(__name__)


class SnapshotBackend(Protocol):
    async def read_all(self) -> list[dict[str, Any]]: ...

    async def write_all(self, records: list[dict[str, Any]]) -> None: ...

    async def read_autosave(self) -> dict[str, Any] | None: ...

    async def write_autosave(self, record: dict[str, Any]) -> None: ...


class MemoryBackend:
    """Process-local medium, for tests and throwaway sessions."""

    def __init__(self):
        self._records: list[dict[str, Any]] = []
        self._autosave: dict[str, Any] | None = None

    async def read_all(self) -> list[dict[str, Any]]:
        return json.loads(json.dumps(self._records))

    async def write_all(self, records: list[dict[str, Any]]) -> None:
        self._records = json.loads(json.dumps(records))

    async def read_autosave(self) -> dict[str, Any] | None:
        return json.loads(json.dumps(self._autosave)) if self._autosave else None

    async def write_autosave(self, record: dict[str, Any]) -> None:
        self._autosave = json.loads(json.dumps(record))


class JsonFileBackend:
    """
    One JSON document on disk: {"topologies": [...], "autosave": {...}}.

    Writes go to a temporary file that replaces the document, so a
    failed write leaves the previous contents intact. Each update is a
    read-modify-write of the whole document and holds the instance lock.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"topologies": [], "autosave": None}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageIOError(f"Cannot read {self.path}: {e}") from e

        if isinstance(document, list):
            # Bare list written by older versions
            document = {"topologies": document, "autosave": None}
        if not isinstance(document, dict):
            raise StorageIOError(f"Unexpected snapshot document in {self.path}")
        document.setdefault("topologies", [])
        document.setdefault("autosave", None)
        return document

    def _write_document(self, document: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageIOError(f"Cannot write {self.path}: {e}") from e

    def _update(self, key: str, value: Any) -> None:
        with self._lock:
            document = self._read_document()
            document[key] = value
            self._write_document(document)

    def _read_key(self, key: str) -> Any:
        with self._lock:
            return self._read_document()[key]

    async def read_all(self) -> list[dict[str, Any]]:
        return list(await asyncio.to_thread(self._read_key, "topologies"))

    async def write_all(self, records: list[dict[str, Any]]) -> None:
        await asyncio.to_thread(self._update, "topologies", records)

    async def read_autosave(self) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read_key, "autosave")

    async def write_autosave(self, record: dict[str, Any]) -> None:
        await asyncio.to_thread(self._update, "autosave", record)


class RedisBackend:
    """Snapshot list and autosave slot kept as JSON values in Redis."""

    def __init__(self, cache: RedisCache, key: str, autosave_key: str):
        self._cache = cache
        self._key = key
        self._autosave_key = autosave_key

    async def read_all(self) -> list[dict[str, Any]]:
        try:
            records = await self._cache.get_json(self._key)
        except (RedisError, RuntimeError, json.JSONDecodeError) as e:
            raise StorageIOError(f"Cannot read snapshots from Redis: {e}") from e
        return records if isinstance(records, list) else []

    async def write_all(self, records: list[dict[str, Any]]) -> None:
        try:
            await self._cache.set_json(self._key, records)
        except (RedisError, RuntimeError) as e:
            raise StorageIOError(f"Cannot write snapshots to Redis: {e}") from e

    async def read_autosave(self) -> dict[str, Any] | None:
        try:
            record = await self._cache.get_json(self._autosave_key)
        except (RedisError, RuntimeError, json.JSONDecodeError) as e:
            raise StorageIOError(f"Cannot read autosave from Redis: {e}") from e
        return record if isinstance(record, dict) else None

    async def write_autosave(self, record: dict[str, Any]) -> None:
        try:
            await self._cache.set_json(self._autosave_key, record)
        except (RedisError, RuntimeError) as e:
            raise StorageIOError(f"Cannot write autosave to Redis: {e}") from e
