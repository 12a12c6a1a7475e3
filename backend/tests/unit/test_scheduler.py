"""Tests for the background job scheduler."""

import pytest

from netplanner.config import AppConfig, InventoryConfig, SnapshotConfig
from netplanner.errors import StorageIOError
from netplanner.models.node import NodeKind
from netplanner.scheduler import EditorScheduler
from netplanner.session import EditorSession
from netplanner.storage.backends import MemoryBackend


@pytest.fixture
def session(app_config, sync_adapter):
    return EditorSession(app_config, MemoryBackend(), sync=sync_adapter)


@pytest.mark.asyncio
async def test_start_registers_enabled_jobs(session):
    scheduler = EditorScheduler(session)
    scheduler.start()
    try:
        assert scheduler.running
        assert scheduler._scheduler.get_job("refresh_candidates") is not None
        assert scheduler._scheduler.get_job("autosave") is not None
    finally:
        await scheduler.stop()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_disabled_jobs_not_registered(sync_adapter):
    config = AppConfig(
        inventory=InventoryConfig(),
        snapshots=SnapshotConfig(autosave_interval=0),
    )
    scheduler = EditorScheduler(EditorSession(config, MemoryBackend(), sync=sync_adapter))
    scheduler.start()
    try:
        assert scheduler._scheduler.get_jobs() == []
    finally:
        await scheduler.stop()


@pytest.mark.asyncio
async def test_refresh_job_broadcasts_events(session):
    received = []

    async def broadcast(events):
        received.extend(events)

    await EditorScheduler(session, broadcast).refresh_candidates()

    assert len(session.sync.candidates) == 3
    assert [e["type"] for e in received] == ["candidates_updated"]
    assert received[0]["count"] == 3


@pytest.mark.asyncio
async def test_autosave_job(session):
    scheduler = EditorScheduler(session)
    session.controller.add_palette_node(NodeKind.PC)

    await scheduler.autosave()

    result = await session.store.load_autosave()
    assert len(result.nodes) == 1


@pytest.mark.asyncio
async def test_autosave_job_logs_storage_errors(session, monkeypatch, caplog):
    async def broken(record):
        raise StorageIOError("disk full")

    monkeypatch.setattr(session.store._backend, "write_autosave", broken)
    session.controller.add_palette_node(NodeKind.PC)

    await EditorScheduler(session).autosave()

    assert "Autosave failed" in caplog.text
