"""
FastAPI dependencies: backends, services and auth guards.

Backends are read from ``app.state`` (populated by the lifespan) so tests
can swap them for in-memory fakes with ``app.dependency_overrides``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

from fastapi import Cookie, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from storefront.core.clock import Clock, utc_now
from storefront.core.config import settings
from storefront.core.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from storefront.db.kv import KeyValueStore
from storefront.services.attendance import AttendanceService
from storefront.services.cart import CartService
from storefront.services.catalog import CatalogService
from storefront.services.identity import Identity, IdentityProvider
from storefront.services.storage import ObjectStorage
from storefront.services.users import UserService

# auto_error=False so we can fall back to the cookie when the header is missing
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Backends ────────────────────────────────────────────────────────
def get_store(request: Request) -> KeyValueStore:
    return request.app.state.store


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_object_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_clock() -> Clock:
    return utc_now


# ── Services ────────────────────────────────────────────────────────
def get_catalog_service(
    store: KeyValueStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> CatalogService:
    return CatalogService(store, clock)


def get_cart_service(
    store: KeyValueStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> CartService:
    return CartService(store, clock)


def get_attendance_service(
    store: KeyValueStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> AttendanceService:
    return AttendanceService(store, clock, strict=settings.ATTENDANCE_STRICT_TRANSITIONS)


def get_user_service(
    store: KeyValueStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
    clock: Clock = Depends(get_clock),
) -> UserService:
    return UserService(store, identity, clock)


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """Resolve the bearer token (header first, then cookie) to an identity."""
    final_token = token
    if not final_token and access_token:
        # Cookie is set as "Bearer <token>"
        final_token = access_token.removeprefix("Bearer ").strip()

    if not final_token:
        raise UnauthorizedError("No authorization token")

    identity = await identity_provider.get_user(final_token)
    if identity is None:
        raise UnauthorizedError()
    return identity


async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
) -> dict | None:
    """Stored user record for the caller, or ``None`` if none was written."""
    return await users.get(identity.id)


def require_roles(*roles: str, message: str = "Insufficient permissions") -> Callable:
    """Build a dependency admitting only callers whose stored role is in ``roles``."""
    allowed = frozenset(roles)

    async def _guard(user: dict | None = Depends(get_current_user)) -> dict:
        if user is None or user.get("role") not in allowed:
            raise ForbiddenError(message)
        return user

    return _guard


require_catalog_editor = require_roles("member", "owner")
require_owner = require_roles("owner")
require_staff = require_roles("owner", "member")


def guarded_body(model: type[BaseModel], guard: Callable) -> Callable:
    """Build a dependency that parses the JSON body as ``model`` once ``guard`` has passed.

    A body declared as a route parameter is decoded before any dependency
    runs; reading it here keeps the role check ahead of body errors.
    """

    async def _body(request: Request, _user: dict = Depends(guard)) -> BaseModel:
        try:
            raw = await request.json()
        except ValueError:
            raise ValidationError("Invalid JSON body") from None
        try:
            return model.model_validate(raw)
        except PydanticValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False)) from exc

    return _body
