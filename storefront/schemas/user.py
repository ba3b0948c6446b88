"""Pydantic schemas for users, registration and profile updates."""

from __future__ import annotations

from pydantic import BaseModel

from storefront.schemas.base import CamelModel

VALID_ROLES = ("customer", "employee", "member", "owner")


class RegisterRequest(BaseModel):
    # Presence is checked by the user service so the error matches the
    # registration contract ("Missing required fields").
    email: str | None = None
    password: str | None = None
    name: str | None = None
    role: str | None = None


class RegisterResponse(CamelModel):
    success: bool = True
    user_id: str
    message: str


class UserRead(CamelModel):
    id: str
    email: str
    name: str | None = None
    role: str | None = None
    created_at: str | None = None
    profile_photo: str | None = None
    updated_at: str | None = None


class UserResponse(BaseModel):
    user: UserRead


class UserUpdatedResponse(BaseModel):
    success: bool = True
    user: UserRead


class UserListResponse(BaseModel):
    users: list[UserRead]


class ProfileUpdate(CamelModel):
    """Only these fields are caller-editable; anything else is rejected."""

    name: str | None = None
    profile_photo: str | None = None

    model_config = {"extra": "forbid"}


class PhotoUpload(CamelModel):
    image_data: str
    file_name: str


class PhotoUploadResponse(CamelModel):
    success: bool = True
    photo_url: str


class ExportResponse(CamelModel):
    success: bool = True
    file_name: str
    data: str
