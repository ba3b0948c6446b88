"""Pydantic schemas for the shopping cart."""

from __future__ import annotations

from pydantic import BaseModel, Field

from storefront.schemas.base import CamelModel


class AddToCartRequest(CamelModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


class CartItem(CamelModel):
    product_id: str
    quantity: int
    added_at: str


class Cart(BaseModel):
    items: list[CartItem] = []


class CartResponse(BaseModel):
    cart: Cart


class CartUpdatedResponse(BaseModel):
    success: bool = True
    cart: Cart
