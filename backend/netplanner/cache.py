"""Redis connection used by the Redis snapshot medium."""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as redis


class RedisCache:
    """Async Redis client holding JSON documents under plain string keys."""

    def __init__(self, url: str):
        self._url = url
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        self._client = redis.from_url(
            self._url,
            encoding="utf-8",
            decode_responses=True,
        )

    async def disconnect(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        if not self._client:
            raise RuntimeError("Redis client not connected")
        return self._client

    async def get_json(self, key: str) -> Any:
        """Decode the JSON stored at key; a missing key reads as None."""
        value = await self.client.get(key)
        return json.loads(value) if value else None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        payload = json.dumps(value)
        if ttl:
            await self.client.setex(key, ttl, payload)
        else:
            await self.client.set(key, payload)
