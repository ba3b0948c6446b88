"""
Cart engine: one ``cart:{userId}`` document per user.

Adding a product that is already in the cart increases its quantity, so
a cart never holds two entries for the same product. Every mutation
writes the whole cart back as a single key.
"""

from __future__ import annotations

import logging

from storefront.core.clock import Clock, to_iso, utc_now
from storefront.db.kv import KeyValueStore

logger = logging.getLogger(__name__)


def cart_key(user_id: str) -> str:
    return f"cart:{user_id}"


def _empty_cart() -> dict:
    return {"items": []}


class CartService:
    def __init__(self, store: KeyValueStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    async def get(self, user_id: str) -> dict:
        """Return the stored cart, or an empty one without creating it."""
        return await self._store.get(cart_key(user_id)) or _empty_cart()

    async def add(self, user_id: str, product_id: str, quantity: int) -> dict:
        cart = await self.get(user_id)

        existing = next((i for i in cart["items"] if i["productId"] == product_id), None)
        if existing is not None:
            existing["quantity"] += quantity
        else:
            cart["items"].append(
                {
                    "productId": product_id,
                    "quantity": quantity,
                    "addedAt": to_iso(self._clock()),
                }
            )

        await self._store.set(cart_key(user_id), cart)
        logger.debug("Cart %s: +%d x %s", user_id, quantity, product_id)
        return cart

    async def remove(self, user_id: str, product_id: str) -> dict:
        cart = await self.get(user_id)
        cart["items"] = [i for i in cart["items"] if i["productId"] != product_id]
        await self._store.set(cart_key(user_id), cart)
        return cart

    async def clear(self, user_id: str) -> dict:
        cart = _empty_cart()
        await self._store.set(cart_key(user_id), cart)
        return cart
