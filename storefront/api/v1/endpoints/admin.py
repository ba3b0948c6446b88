"""
Owner / member views over the user directory.
"""

from __future__ import annotations

import base64
import logging

from fastapi import APIRouter, Depends

from storefront.api.v1.deps import get_user_service, require_roles, require_staff
from storefront.schemas.user import ExportResponse, UserListResponse
from storefront.services.export import export_users
from storefront.services.users import UserService

router = APIRouter(tags=["admin"])
logger = logging.getLogger(__name__)

_can_export = require_roles("owner", message="Only owners can export user data")


@router.get("/users", response_model=UserListResponse)
async def list_users(
    _staff: dict = Depends(require_staff),
    users: UserService = Depends(get_user_service),
) -> UserListResponse:
    return UserListResponse(users=await users.list_users())


@router.get("/export/users", response_model=ExportResponse)
async def export_users_xlsx(
    owner: dict = Depends(_can_export),
    users: UserService = Depends(get_user_service),
) -> ExportResponse:
    """Spreadsheet of all users, base64-encoded for the dashboard download."""
    all_users = await users.list_users()
    workbook = export_users(all_users)
    logger.info("User export (%d rows) by %s", len(all_users), owner["id"])
    return ExportResponse(file_name="users.xlsx", data=base64.b64encode(workbook).decode("ascii"))
