"""
Catalog store: product records plus the ``products:list`` id index.

Each product lives at ``product:{id}``; ``products:list`` keeps the ordered
ids of live products. The two are updated with separate single-key writes,
so index read-modify-write sequences inside this process are serialised by
a lock and ``reconcile_index`` rebuilds the index from a prefix scan to
repair drift left by other writers.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from weakref import WeakKeyDictionary

from storefront.core.clock import Clock, to_iso, utc_now
from storefront.core.exceptions import NotFoundError
from storefront.db.kv import KeyValueStore
from storefront.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

INDEX_KEY = "products:list"
_index_locks: WeakKeyDictionary[KeyValueStore, asyncio.Lock] = WeakKeyDictionary()


def product_key(product_id: str) -> str:
    return f"product:{product_id}"


class CatalogService:
    def __init__(self, store: KeyValueStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock
        self._lock = _index_locks.setdefault(store, asyncio.Lock())

    async def _index(self) -> list[str]:
        return list(await self._store.get(INDEX_KEY) or [])

    async def list(self) -> list[dict]:
        ids = await self._index()
        products = await self._store.mget([product_key(i) for i in ids])
        return [p for p in products if p is not None]

    async def get(self, product_id: str) -> dict:
        product = await self._store.get(product_key(product_id))
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def create(self, body: ProductCreate, created_by: str) -> dict:
        product = body.to_document()
        product.update(
            {
                "id": str(uuid.uuid4()),
                "createdBy": created_by,
                "createdAt": to_iso(self._clock()),
            }
        )
        await self._store.set(product_key(product["id"]), product)

        async with self._lock:
            ids = await self._index()
            ids.append(product["id"])
            await self._store.set(INDEX_KEY, ids)

        logger.info("Created product %s (%s) by %s", product["id"], product["name"], created_by)
        return product

    async def update(self, product_id: str, body: ProductUpdate) -> dict:
        product = await self.get(product_id)
        product.update(body.model_dump(by_alias=True, exclude_unset=True))
        product["updatedAt"] = to_iso(self._clock())
        await self._store.set(product_key(product_id), product)
        logger.info("Updated product %s", product_id)
        return product

    async def delete(self, product_id: str) -> None:
        await self._store.delete(product_key(product_id))

        async with self._lock:
            ids = await self._index()
            await self._store.set(INDEX_KEY, [i for i in ids if i != product_id])

        logger.info("Deleted product %s", product_id)

    async def reconcile_index(self) -> list[str]:
        """Make the index and the product records agree again.

        Existing order is kept for ids that still have a record; records
        missing from the index are appended oldest first.
        """
        async with self._lock:
            ids = await self._index()
            records = [
                p for p in await self._store.get_by_prefix("product:")
                if isinstance(p, dict) and p.get("id")
            ]
            live = {p["id"] for p in records}

            kept = [i for i in dict.fromkeys(ids) if i in live]
            orphans = sorted(
                (p for p in records if p["id"] not in set(kept)),
                key=lambda p: p.get("createdAt") or "",
            )
            rebuilt = kept + [p["id"] for p in orphans]

            if rebuilt != ids:
                await self._store.set(INDEX_KEY, rebuilt)
                logger.info(
                    "Product index reconciled: %d dangling removed, %d orphans added",
                    len(ids) - len(kept),
                    len(orphans),
                )
            return rebuilt
