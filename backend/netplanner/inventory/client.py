"""
Device Inventory API Client

Reads the monitored-device list the editor offers as drop-in candidates.
The endpoint answers either a bare JSON array or {"value": [...]}.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from netplanner.config import InventoryConfig, get_config

logger = logging.getLogger(__name__)


class InventoryDevice(BaseModel):
    """Device record from the inventory API"""
    device_id: str = Field(validation_alias=AliasChoices("deviceId", "device_id"))
    hostname: str | None = None
    os_name: str | None = Field(
        default=None, validation_alias=AliasChoices("osName", "os_name")
    )
    last_seen: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("lastSeenTimestamp", "last_seen", "lastSeen"),
    )
    app_count: int = Field(
        default=0, validation_alias=AliasChoices("appCount", "app_count")
    )

    @field_validator("device_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Some inventories number their devices
        return str(value) if isinstance(value, int) else value

    @field_validator("app_count", mode="before")
    @classmethod
    def _null_count(cls, value: Any) -> Any:
        return 0 if value is None else value


def parse_devices(payload: Any) -> list[InventoryDevice]:
    """
    Accept a bare array or a {"value": [...]} envelope.

    Records that fail validation are skipped with a warning; only a
    payload that is not a list at all is an error.
    """
    if isinstance(payload, dict):
        payload = payload.get("value", [])
    if not isinstance(payload, list):
        raise ValueError(f"Unexpected inventory payload: {type(payload).__name__}")
    devices = []
    for index, record in enumerate(payload):
        try:
            devices.append(InventoryDevice.model_validate(record))
        except ValidationError as e:
            device_id = record.get("deviceId", record.get("device_id")) if isinstance(record, dict) else None
            logger.warning(
                "Skipping inventory record %d (%s): %d errors",
                index, device_id, e.error_count(),
            )
    return devices


class InventoryClient:
    """
    Async client for the device inventory API

    Usage:
        async with InventoryClient(token=token) as client:
            devices = await client.get_devices()
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        config: InventoryConfig | None = None,
    ):
        config = config or get_config().inventory
        self.base_url = (base_url or config.url).rstrip("/")
        self.token = token or config.token
        self.timeout = timeout or config.timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "InventoryClient":
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args) -> None:
        if self._client:
            await self._client.aclose()

    async def _get(self, endpoint: str, params: dict | None = None) -> Any:
        """Make GET request to the inventory API"""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        response = await self._client.get(endpoint, params=params)
        response.raise_for_status()
        return response.json()

    async def get_devices(self) -> list[InventoryDevice]:
        """Get all monitored devices"""
        return parse_devices(await self._get("/devices"))

    async def health_check(self) -> bool:
        """Test API connectivity"""
        try:
            await self._get("/devices")
            return True
        except (httpx.HTTPError, ValueError):
            return False
