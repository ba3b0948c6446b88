"""
Object storage: named buckets of binary objects with signed download URLs.

``LocalObjectStorage`` maps each bucket onto a directory under a root path.
Signed URLs point back at the API's ``/storage`` route and carry a short
JWT binding the bucket, the object path and an expiry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from storefront.core.security import create_download_token, decode_download_token

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised for invalid paths, missing objects, bad signatures."""


class ObjectStorage(ABC):
    @abstractmethod
    async def ensure_bucket(self, name: str) -> None:
        ...

    @abstractmethod
    async def upload(self, bucket: str, path: str, data: bytes, upsert: bool = False) -> None:
        ...

    @abstractmethod
    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        ...

    @abstractmethod
    async def open(self, bucket: str, path: str, token: str) -> Path:
        """Validate a signed-URL token and return the object's local path."""


def _safe_parts(path: str) -> tuple[str, ...]:
    parts = PurePosixPath(path).parts
    if not parts or any(p in ("", ".", "..") or "\\" in p for p in parts) or parts[0] == "/":
        raise StorageError(f"Invalid object path: {path!r}")
    return parts


class LocalObjectStorage(ObjectStorage):
    def __init__(self, root: str | Path, url_prefix: str) -> None:
        self._root = Path(root).resolve()
        self._url_prefix = url_prefix.rstrip("/")

    def _bucket_dir(self, bucket: str) -> Path:
        bucket_dir = self._root / _safe_parts(bucket)[0]
        if not bucket_dir.is_dir():
            raise StorageError(f"Bucket not found: {bucket}")
        return bucket_dir

    def _object_path(self, bucket: str, path: str) -> Path:
        return self._bucket_dir(bucket).joinpath(*_safe_parts(path))

    async def ensure_bucket(self, name: str) -> None:
        bucket_dir = self._root / _safe_parts(name)[0]
        if not bucket_dir.is_dir():
            bucket_dir.mkdir(parents=True)
            logger.info("Created bucket: %s", name)

    async def upload(self, bucket: str, path: str, data: bytes, upsert: bool = False) -> None:
        target = self._object_path(bucket, path)
        if target.exists() and not upsert:
            raise StorageError(f"Object already exists: {bucket}/{path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored %d bytes at %s/%s", len(data), bucket, path)

    async def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        if not self._object_path(bucket, path).is_file():
            raise StorageError(f"Object not found: {bucket}/{path}")
        token = create_download_token(bucket, path, expires_in)
        return f"{self._url_prefix}/{quote(bucket)}/{quote(path)}?token={token}"

    async def open(self, bucket: str, path: str, token: str) -> Path:
        payload = decode_download_token(token)
        if payload is None or payload.get("bucket") != bucket or payload.get("path") != path:
            raise StorageError("Invalid or expired signature")
        target = self._object_path(bucket, path)
        if not target.is_file():
            raise StorageError(f"Object not found: {bucket}/{path}")
        return target
