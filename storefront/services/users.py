"""
User directory: registration, profile edits, profile photos, listing.

``user:{id}`` holds the profile; ``user:email:{email}`` maps an address back
to its id. Scans of ``user:`` therefore return both, and only dict values
carrying an ``id`` are real users.
"""

from __future__ import annotations

import base64
import binascii
import logging

from storefront.core.clock import Clock, to_iso, utc_now
from storefront.core.exceptions import NotFoundError, UploadError, ValidationError
from storefront.db.kv import KeyValueStore
from storefront.schemas.user import VALID_ROLES, ProfileUpdate, RegisterRequest
from storefront.services.identity import Identity, IdentityError, IdentityProvider
from storefront.services.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

EDITABLE_PROFILE_FIELDS = frozenset({"name", "profilePhoto"})


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def _decode_image(image_data: str) -> bytes:
    """Accept a data URL (``data:image/png;base64,...``) or bare base64."""
    payload = image_data
    if image_data.startswith("data:"):
        _header, sep, payload = image_data.partition(",")
        if not sep:
            raise ValidationError("Invalid image data")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid image data") from exc


class UserService:
    def __init__(
        self,
        store: KeyValueStore,
        identity: IdentityProvider,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._identity = identity
        self._clock = clock

    async def register(self, body: RegisterRequest) -> dict:
        if not (body.email and body.password and body.name and body.role):
            raise ValidationError("Missing required fields")
        if body.role not in VALID_ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(VALID_ROLES)}")

        email = body.email.strip().lower()
        try:
            identity = await self._identity.create_user(
                email, body.password, {"name": body.name, "role": body.role}
            )
        except IdentityError as exc:
            raise ValidationError(f"Registration error: {exc}") from exc

        user = {
            "id": identity.id,
            "email": email,
            "name": body.name,
            "role": body.role,
            "createdAt": to_iso(self._clock()),
            "profilePhoto": None,
        }
        try:
            await self._store.set(user_key(identity.id), user)
            await self._store.set(f"user:email:{email}", identity.id)
        except Exception:
            logger.exception("Could not store user record for %s; removing identity", email)
            await self._store.delete(user_key(identity.id))
            await self._identity.delete_user(identity.id)
            raise
        logger.info("Registered %s as %s", email, body.role)
        return user

    async def get(self, user_id: str) -> dict | None:
        return await self._store.get(user_key(user_id))

    async def get_current(self, identity: Identity) -> dict:
        user = await self.get(identity.id)
        return user or {"id": identity.id, "email": identity.email}

    async def update_profile(self, user_id: str, changes: ProfileUpdate) -> dict:
        updates = changes.model_dump(by_alias=True, exclude_unset=True)
        disallowed = set(updates) - EDITABLE_PROFILE_FIELDS
        if disallowed:
            raise ValidationError(f"Fields not editable: {', '.join(sorted(disallowed))}")

        user = await self.get(user_id)
        if user is None:
            raise NotFoundError("User not found")

        user.update(updates)
        user["updatedAt"] = to_iso(self._clock())
        await self._store.set(user_key(user_id), user)
        logger.info("Profile updated for %s: %s", user_id, sorted(updates))
        return user

    async def upload_photo(
        self,
        user_id: str,
        image_data: str,
        file_name: str,
        storage: ObjectStorage,
        bucket: str,
        expires_in: int,
    ) -> str:
        if not file_name or "/" in file_name or "\\" in file_name or file_name in (".", ".."):
            raise ValidationError("Invalid file name")

        user = await self.get(user_id)
        if user is None:
            raise NotFoundError("User not found")

        data = _decode_image(image_data)
        path = f"{user_id}/{file_name}"
        try:
            await storage.upload(bucket, path, data, upsert=True)
            photo_url = await storage.create_signed_url(bucket, path, expires_in)
        except (StorageError, OSError) as exc:
            logger.error("Photo upload failed for %s at %s/%s: %s", user_id, bucket, path, exc)
            raise UploadError("Upload error: could not store the image") from exc

        user["profilePhoto"] = photo_url
        await self._store.set(user_key(user_id), user)
        return photo_url

    async def list_users(self) -> list[dict]:
        return [u for u in await self._store.get_by_prefix("user:") if isinstance(u, dict) and u.get("id")]
