"""
Signed object downloads: the target of URLs issued by object storage.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from storefront.api.v1.deps import get_object_storage
from storefront.core.exceptions import NotFoundError
from storefront.services.storage import ObjectStorage, StorageError

router = APIRouter(prefix="/storage", tags=["storage"])


@router.get("/{bucket}/{path:path}")
async def download_object(
    bucket: str,
    path: str,
    token: str = Query(...),
    storage: ObjectStorage = Depends(get_object_storage),
) -> FileResponse:
    try:
        local_path = await storage.open(bucket, path, token)
    except StorageError as exc:
        raise NotFoundError("Object not found") from exc
    return FileResponse(local_path)
