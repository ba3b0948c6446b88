"""
Key-value document store.

Every piece of application state is a JSON document under a string key.
The interface offers atomic single-key get / set / delete plus a prefix
scan; there are no multi-key transactions.

Backends:
  - SqlKeyValueStore: one table (``key``, ``value`` JSON) via async SQLAlchemy
  - RedisKeyValueStore: plain string keys holding JSON text
  - InMemoryKeyValueStore: a dict, for development and tests
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import redis.asyncio as aioredis
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncEngine

from storefront.db.base import Base
from storefront.db.session import build_engine, build_session_factory
from storefront.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


def _clone(value: Any) -> Any:
    """Round-trip through JSON so callers never share mutable state with the store."""
    return json.loads(json.dumps(value))


class KeyValueStore(ABC):
    """Abstract interface for key-value backends."""

    async def initialize(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the document at ``key`` or ``None``."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Create or overwrite the document at ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error."""

    @abstractmethod
    async def get_by_prefix(self, prefix: str) -> list[Any]:
        """Return the documents whose key starts with ``prefix``, ordered by key."""

    async def mget(self, keys: list[str]) -> list[Any | None]:
        return [await self.get(k) for k in keys]

    async def ping(self) -> bool:
        await self.get("__ping__")
        return True


# ── In-memory ───────────────────────────────────────────────────────
class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return None if value is None else _clone(value)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = _clone(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        return [_clone(self._data[k]) for k in sorted(self._data) if k.startswith(prefix)]


# ── SQL (SQLAlchemy async) ──────────────────────────────────────────
def _escape_like(prefix: str) -> str:
    return prefix.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")


class SqlKeyValueStore(KeyValueStore):
    def __init__(self, database_url: str | None = None, engine: AsyncEngine | None = None) -> None:
        if engine is None:
            if database_url is None:
                raise ValueError("database_url or engine is required")
            engine = build_engine(database_url)
        self._engine = engine
        self._session_factory = build_session_factory(engine)

    async def initialize(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Key-value table '%s' initialised", KeyValueEntry.__tablename__)

    async def close(self) -> None:
        await self._engine.dispose()

    async def get(self, key: str) -> Any | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KeyValueEntry.value).where(KeyValueEntry.key == key)
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> None:
        async with self._session_factory() as session:
            await session.merge(KeyValueEntry(key=key, value=value))
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
            await session.commit()

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KeyValueEntry.key, KeyValueEntry.value)
                .where(KeyValueEntry.key.like(f"{_escape_like(prefix)}%", escape="\\"))
                .order_by(KeyValueEntry.key)
            )
            # LIKE is case-insensitive on SQLite; keep the match exact
            return [value for key, value in result.all() if key.startswith(prefix)]

    async def mget(self, keys: list[str]) -> list[Any | None]:
        if not keys:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(KeyValueEntry.key, KeyValueEntry.value).where(KeyValueEntry.key.in_(keys))
            )
            found = {k: v for k, v in result.all()}
        return [found.get(k) for k in keys]

    async def ping(self) -> bool:
        async with self._session_factory() as session:
            await session.execute(select(1))
        return True


# ── Redis ───────────────────────────────────────────────────────────
def _escape_glob(prefix: str) -> str:
    return "".join("\\" + c if c in "*?[]\\" else c for c in prefix)


class RedisKeyValueStore(KeyValueStore):
    def __init__(self, redis_url: str, namespace: str = "storefront:") -> None:
        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._ns = namespace

    async def close(self) -> None:
        await self._client.aclose()

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(self._ns + key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        await self._client.set(self._ns + key, json.dumps(value))

    async def delete(self, key: str) -> None:
        await self._client.delete(self._ns + key)

    async def get_by_prefix(self, prefix: str) -> list[Any]:
        pattern = _escape_glob(self._ns + prefix) + "*"
        keys = sorted([k async for k in self._client.scan_iter(match=pattern)])
        if not keys:
            return []
        return [json.loads(raw) for raw in await self._client.mget(keys) if raw is not None]

    async def mget(self, keys: list[str]) -> list[Any | None]:
        if not keys:
            return []
        raws = await self._client.mget([self._ns + k for k in keys])
        return [None if raw is None else json.loads(raw) for raw in raws]

    async def ping(self) -> bool:
        return bool(await self._client.ping())
