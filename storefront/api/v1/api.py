"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from storefront.api.v1.endpoints import (admin, attendance, auth, cart, health,
                                         products, profile, storage)

api_router = APIRouter()

# Liveness
api_router.include_router(health.router)

# Registration, login, refresh, current user
api_router.include_router(auth.router)

# Catalog, cart, profile
api_router.include_router(products.router)
api_router.include_router(cart.router)
api_router.include_router(profile.router)

# Employee clock
api_router.include_router(attendance.router)

# Owner / member dashboard
api_router.include_router(admin.router)

# Signed downloads
api_router.include_router(storage.router)
