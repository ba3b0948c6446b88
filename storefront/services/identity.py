"""
Identity provider: account credentials and bearer tokens.

The rest of the application only sees the ``IdentityProvider`` interface:
create an account, sign in, resolve an access token, refresh a session.
``LocalIdentityProvider`` keeps bcrypt-hashed credentials in the key-value
store under ``identity:{email}`` and issues HS256 JWTs.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from storefront.core.clock import to_iso, utc_now
from storefront.core.security import (create_access_token, create_refresh_token,
                                      decode_access_token, decode_refresh_token,
                                      get_password_hash, verify_password)
from storefront.db.kv import KeyValueStore

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Raised when the provider rejects an operation."""


@dataclass
class Identity:
    id: str
    email: str
    metadata: dict = field(default_factory=dict)


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str
    user_id: str


class IdentityProvider(ABC):
    @abstractmethod
    async def create_user(self, email: str, password: str, metadata: dict | None = None) -> Identity:
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> TokenPair:
        ...

    @abstractmethod
    async def get_user(self, access_token: str) -> Identity | None:
        ...

    @abstractmethod
    async def refresh(self, refresh_token: str) -> TokenPair:
        ...

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        ...


def _identity_key(email: str) -> str:
    return f"identity:{email.strip().lower()}"


class LocalIdentityProvider(IdentityProvider):
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def create_user(self, email: str, password: str, metadata: dict | None = None) -> Identity:
        email = email.strip().lower()
        if not password:
            raise IdentityError("Password must not be empty")
        if await self._store.get(_identity_key(email)) is not None:
            raise IdentityError("A user with this email address has already been registered")

        record = {
            "id": str(uuid.uuid4()),
            "email": email,
            "hashedPassword": get_password_hash(password),
            "metadata": metadata or {},
            "createdAt": to_iso(utc_now()),
        }
        await self._store.set(_identity_key(email), record)
        await self._store.set(f"identity:id:{record['id']}", email)
        logger.info("Identity created for %s", email)
        return Identity(id=record["id"], email=email, metadata=record["metadata"])

    async def sign_in(self, email: str, password: str) -> TokenPair:
        record = await self._store.get(_identity_key(email))
        if record is None or not verify_password(password, record["hashedPassword"]):
            raise IdentityError("Invalid login credentials")
        return self._issue(record["id"], record["email"])

    async def get_user(self, access_token: str) -> Identity | None:
        payload = decode_access_token(access_token)
        if payload is None or payload.get("sub") is None:
            return None
        email = await self._store.get(f"identity:id:{payload['sub']}")
        if email is None:
            return None
        record = await self._store.get(_identity_key(email))
        if record is None:
            return None
        return Identity(id=record["id"], email=record["email"], metadata=record.get("metadata", {}))

    async def refresh(self, refresh_token: str) -> TokenPair:
        payload = decode_refresh_token(refresh_token)
        if payload is None:
            raise IdentityError("Invalid or expired refresh token")
        email = await self._store.get(f"identity:id:{payload.get('sub')}")
        if email is None:
            raise IdentityError("User not found")
        return self._issue(payload["sub"], email)

    async def delete_user(self, user_id: str) -> None:
        email = await self._store.get(f"identity:id:{user_id}")
        if email is not None:
            await self._store.delete(_identity_key(email))
        await self._store.delete(f"identity:id:{user_id}")
        logger.info("Identity removed for %s", user_id)

    @staticmethod
    def _issue(user_id: str, email: str) -> TokenPair:
        return TokenPair(
            access_token=create_access_token(user_id, email=email),
            refresh_token=create_refresh_token(user_id),
            user_id=user_id,
        )
