"""
Profile endpoints: the caller edits their own name and photo.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.api.v1.deps import (get_current_identity, get_object_storage,
                                    get_user_service)
from storefront.core.config import settings
from storefront.schemas.user import (PhotoUpload, PhotoUploadResponse, ProfileUpdate,
                                     UserUpdatedResponse)
from storefront.services.identity import Identity
from storefront.services.storage import ObjectStorage
from storefront.services.users import UserService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.put("", response_model=UserUpdatedResponse)
async def update_profile(
    body: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
) -> UserUpdatedResponse:
    """Update ``name`` and/or ``profilePhoto``; other fields are rejected."""
    return UserUpdatedResponse(user=await users.update_profile(identity.id, body))


@router.post("/photo", response_model=PhotoUploadResponse)
async def upload_profile_photo(
    body: PhotoUpload,
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
    storage: ObjectStorage = Depends(get_object_storage),
) -> PhotoUploadResponse:
    """Store a base64 image and point the profile at a signed URL for it."""
    photo_url = await users.upload_photo(
        identity.id,
        body.image_data,
        body.file_name,
        storage=storage,
        bucket=settings.PROFILES_BUCKET,
        expires_in=settings.SIGNED_URL_EXPIRE_SECONDS,
    )
    return PhotoUploadResponse(photo_url=photo_url)
