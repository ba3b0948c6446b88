"""
Cart endpoints: any authenticated caller, always scoped to their own cart.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.api.v1.deps import get_cart_service, get_current_identity
from storefront.schemas.base import SuccessResponse
from storefront.schemas.cart import AddToCartRequest, CartResponse, CartUpdatedResponse
from storefront.services.cart import CartService
from storefront.services.identity import Identity

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    identity: Identity = Depends(get_current_identity),
    carts: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse(cart=await carts.get(identity.id))


@router.post("", response_model=CartUpdatedResponse)
async def add_to_cart(
    body: AddToCartRequest,
    identity: Identity = Depends(get_current_identity),
    carts: CartService = Depends(get_cart_service),
) -> CartUpdatedResponse:
    """Add a product; an existing entry has its quantity increased."""
    cart = await carts.add(identity.id, body.product_id, body.quantity)
    return CartUpdatedResponse(cart=cart)


@router.delete("/{product_id}", response_model=CartUpdatedResponse)
async def remove_from_cart(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    carts: CartService = Depends(get_cart_service),
) -> CartUpdatedResponse:
    return CartUpdatedResponse(cart=await carts.remove(identity.id, product_id))


@router.delete("", response_model=SuccessResponse)
async def clear_cart(
    identity: Identity = Depends(get_current_identity),
    carts: CartService = Depends(get_cart_service),
) -> SuccessResponse:
    await carts.clear(identity.id)
    return SuccessResponse()
