"""
Editor session wiring.

An EditorSession owns one graph and the components that read and write
it. It is created when the app starts and discarded on shutdown; nothing
keeps graph state at module level.
"""

from __future__ import annotations

import logging

from netplanner.cache import RedisCache
from netplanner.config import AppConfig, Settings, resolve_path
from netplanner.editor.controller import InteractionController
from netplanner.editor.graph import GraphModel
from netplanner.inventory.sync import DeviceSyncAdapter
from netplanner.storage.backends import (
    JsonFileBackend,
    MemoryBackend,
    RedisBackend,
    SnapshotBackend,
)
from netplanner.storage.snapshots import SnapshotStore

logger = logging.getLogger(__name__)


class EditorSession:
    """Graph model plus its controller, sync adapter and snapshot store."""

    def __init__(
        self,
        config: AppConfig,
        backend: SnapshotBackend,
        sync: DeviceSyncAdapter | None = None,
        cache: RedisCache | None = None,
    ):
        self.config = config
        self.cache = cache
        self.graph = GraphModel()
        self.store = SnapshotStore(backend)
        self.sync = sync or DeviceSyncAdapter(config.inventory)
        self.controller = InteractionController(
            self.graph,
            self.store,
            self.sync,
            editor_config=config.editor,
            layout_config=config.layout,
        )

    async def open(self) -> None:
        if self.cache:
            await self.cache.connect()

    async def close(self) -> None:
        await self.sync.close()
        if self.cache:
            await self.cache.disconnect()


def build_backend(
    config: AppConfig, settings: Settings
) -> tuple[SnapshotBackend, RedisCache | None]:
    """Pick the snapshot medium named in the config."""
    snapshots = config.snapshots
    if snapshots.backend == "redis":
        cache = RedisCache(settings.redis_url)
        return RedisBackend(cache, snapshots.redis_key, snapshots.autosave_key), cache
    if snapshots.backend == "memory":
        return MemoryBackend(), None
    if snapshots.backend != "file":
        logger.warning("Unknown snapshot backend '%s', using file", snapshots.backend)
    return JsonFileBackend(resolve_path(snapshots.path)), None


def create_session(config: AppConfig, settings: Settings) -> EditorSession:
    backend, cache = build_backend(config, settings)
    return EditorSession(config, backend, cache=cache)
