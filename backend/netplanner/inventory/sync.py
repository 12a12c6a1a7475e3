"""
Device Sync Adapter

Turns the inventory device list into candidate nodes the operator can
drop onto the canvas. Fetch failures leave an empty candidate list and a
recorded error; manual editing is never blocked by them.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx

from netplanner.config import InventoryConfig
from netplanner.errors import SyncFailure
from netplanner.inventory.client import InventoryClient, InventoryDevice
from netplanner.models.base import CamelModel
from netplanner.models.node import DeviceInfo, NodeKind, NodeStatus

logger = logging.getLogger(__name__)

DEVICE_ID_PREFIX = "device-"


class CandidateNode(CamelModel):
    """A device-sync descriptor not yet committed to the graph."""

    device_id: str
    node_id: str
    kind: NodeKind = NodeKind.MONITORED_DEVICE
    label: str
    status: NodeStatus = NodeStatus.OFFLINE
    device_info: DeviceInfo
    last_seen: datetime | None = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def derive_status(
    last_seen: datetime | None,
    now: datetime | None = None,
    online_minutes: int = 5,
    idle_minutes: int = 30,
) -> NodeStatus:
    """Status from how recently the device last reported in."""
    if last_seen is None:
        return NodeStatus.OFFLINE

    now = now or utcnow()
    # Naive timestamps from the inventory are UTC
    if last_seen.tzinfo is None:
        last_seen = last_seen.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    age = now - last_seen
    if age < timedelta(minutes=online_minutes):
        return NodeStatus.ONLINE
    if age < timedelta(minutes=idle_minutes):
        return NodeStatus.IDLE
    return NodeStatus.OFFLINE


def device_node_id(device_id: str) -> str:
    return f"{DEVICE_ID_PREFIX}{device_id}"


def to_candidate(
    device: InventoryDevice,
    now: datetime | None = None,
    online_minutes: int = 5,
    idle_minutes: int = 30,
) -> CandidateNode:
    """Map one inventory record to a candidate node."""
    return CandidateNode(
        device_id=device.device_id,
        node_id=device_node_id(device.device_id),
        label=device.hostname or device.device_id,
        status=derive_status(device.last_seen, now, online_minutes, idle_minutes),
        device_info=DeviceInfo(
            os=device.os_name,
            alert_count=0,
            app_count=device.app_count,
        ),
        last_seen=device.last_seen,
    )


class DeviceSyncAdapter:
    """Holds the latest candidate list; last write wins."""

    def __init__(
        self,
        config: InventoryConfig,
        client_factory: Callable[..., InventoryClient] = InventoryClient,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._config = config
        self._client_factory = client_factory
        self._clock = clock
        self._candidates: list[CandidateNode] = []
        self._pending: set[asyncio.Task] = set()
        self.last_error: SyncFailure | None = None
        self.last_synced_at: datetime | None = None

    @property
    def candidates(self) -> list[CandidateNode]:
        return list(self._candidates)

    @property
    def is_configured(self) -> bool:
        return bool(self._config.url)

    @property
    def refreshing(self) -> bool:
        return any(not t.done() for t in self._pending)

    def get_candidate(self, device_id: str) -> CandidateNode | None:
        for candidate in self._candidates:
            if candidate.device_id == device_id:
                return candidate
        return None

    def search(self, query: str | None) -> list[CandidateNode]:
        """Candidates whose hostname or OS name contains the query."""
        if not query or not query.strip():
            return self.candidates

        needle = query.strip().lower()
        matches = []
        for candidate in self._candidates:
            haystacks = (candidate.label, candidate.device_info.os or "")
            if any(needle in h.lower() for h in haystacks):
                matches.append(candidate)
        return matches

    async def _fetch(self, token: str | None) -> list[InventoryDevice]:
        if not self.is_configured:
            raise SyncFailure("Device inventory URL is not configured")

        try:
            async with self._client_factory(
                base_url=self._config.url,
                token=token or self._config.token,
                timeout=self._config.timeout,
                config=self._config,
            ) as client:
                return await client.get_devices()
        except httpx.HTTPStatusError as e:
            raise SyncFailure(
                f"Inventory API returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SyncFailure(f"Inventory API unreachable: {e}") from e
        except ValueError as e:
            raise SyncFailure(f"Malformed inventory response: {e}") from e

    async def refresh(self, token: str | None = None) -> list[CandidateNode]:
        """
        Fetch the device list and rebuild the candidates.

        Never raises: a failure empties the list and is kept in last_error.
        """
        try:
            devices = await self._fetch(token)
        except SyncFailure as e:
            logger.warning("Device sync failed: %s", e)
            self._candidates = []
            self.last_error = e
            return []

        now = self._clock()
        self._candidates = [
            to_candidate(
                d, now, self._config.online_minutes, self._config.idle_minutes
            )
            for d in devices
        ]
        self.last_error = None
        self.last_synced_at = now
        logger.debug("Synced %d inventory devices", len(self._candidates))
        return self.candidates

    def refresh_in_background(self, token: str | None = None) -> asyncio.Task:
        """Start a refresh without waiting for it."""
        task = asyncio.create_task(self.refresh(token))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def close(self) -> None:
        """Cancel in-flight refreshes."""
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._pending.clear()
