"""Object storage abstraction for person photos."""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from google.cloud import storage as gcs_storage
from google.cloud.exceptions import GoogleCloudError, NotFound

from phonebook.core.config import Settings, settings as default_settings
from phonebook.core.exceptions import ObjectStorageError

logger = logging.getLogger(__name__)

PUBLIC_URL_TEMPLATE = "https://firebasestorage.googleapis.com/v0/b/{bucket}/o/{path}?alt=media"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredObject:
    """Reference returned by the store after a successful upload."""

    bucket: str
    full_path: str


class ObjectStore(Protocol):
    async def upload(self, key: str, content: bytes, content_type: str) -> StoredObject:
        ...

    async def delete(self, key: str) -> None:
        ...


def public_url(stored: StoredObject) -> str:
    """Build the dereferenceable locator for an uploaded object."""

    return PUBLIC_URL_TEMPLATE.format(bucket=stored.bucket, path=quote(stored.full_path, safe=""))


def generate_unique_image_filename(original_name: Optional[str]) -> str:
    """Derive a storage key from the uploaded file name.

    The millisecond timestamp and random suffix make collisions unlikely but
    not impossible.
    """

    name = Path(original_name or "").name
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._") or "image.jpg"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{safe_name}"


class ObjectStorageClient:
    """Persist person photos to GCS, S3, or local disk."""

    def __init__(self, config: Settings | None = None) -> None:
        self.settings = config or default_settings
        self.backend = (self.settings.STORAGE_BACKEND or "local").lower()
        self._s3 = None
        self._gcs_bucket = None
        self._local_root: Optional[Path] = None

        if self.backend == "s3":
            if not self.settings.S3_BUCKET_NAME:
                raise ObjectStorageError("S3_BUCKET_NAME required for S3 storage backend")
            self._s3 = boto3.client(
                "s3",
                region_name=self.settings.S3_REGION,
                endpoint_url=str(self.settings.S3_ENDPOINT_URL) if self.settings.S3_ENDPOINT_URL else None,
            )
        elif self.backend == "gcs":
            if not self.settings.GCS_BUCKET_NAME:
                raise ObjectStorageError("GCS_BUCKET_NAME required for GCS storage backend")
            if self.settings.GOOGLE_APPLICATION_CREDENTIALS:
                client = gcs_storage.Client.from_service_account_json(str(self.settings.GOOGLE_APPLICATION_CREDENTIALS))
            else:
                client = gcs_storage.Client()
            self._gcs_bucket = client.bucket(self.settings.GCS_BUCKET_NAME)
        else:
            self._local_root = Path(self.settings.LOCAL_STORAGE_PATH)
            self._local_root.mkdir(parents=True, exist_ok=True)

    @property
    def bucket_name(self) -> str:
        if self.backend == "s3":
            return self.settings.S3_BUCKET_NAME or ""
        if self.backend == "gcs":
            return self.settings.GCS_BUCKET_NAME or ""
        return "local"

    async def upload(self, key: str, content: bytes, content_type: str) -> StoredObject:
        if self.backend == "s3":
            await self._upload_s3(key, content, content_type)
        elif self.backend == "gcs":
            await self._upload_gcs(key, content, content_type)
        else:
            await self._upload_local(key, content)
        logger.info("Stored photo %s in %s backend", key, self.backend)
        return StoredObject(bucket=self.bucket_name, full_path=key)

    async def delete(self, key: str) -> None:
        if self.backend == "s3":
            await self._delete_s3(key)
        elif self.backend == "gcs":
            await self._delete_gcs(key)
        else:
            await self._delete_local(key)
        logger.info("Deleted photo %s from %s backend", key, self.backend)

    async def _upload_s3(self, key: str, content: bytes, content_type: str) -> None:
        def upload() -> None:
            try:
                self._s3.put_object(
                    Bucket=self.settings.S3_BUCKET_NAME,
                    Key=key,
                    Body=content,
                    ContentType=content_type,
                )
            except (ClientError, BotoCoreError) as exc:
                raise ObjectStorageError(f"S3 upload failed: {exc}") from exc

        await asyncio.to_thread(upload)

    async def _delete_s3(self, key: str) -> None:
        def delete() -> None:
            try:
                self._s3.delete_object(Bucket=self.settings.S3_BUCKET_NAME, Key=key)
            except (ClientError, BotoCoreError) as exc:
                raise ObjectStorageError(f"S3 delete failed: {exc}") from exc

        await asyncio.to_thread(delete)

    async def _upload_gcs(self, key: str, content: bytes, content_type: str) -> None:
        def upload() -> None:
            try:
                blob = self._gcs_bucket.blob(key)
                blob.upload_from_string(content, content_type=content_type)
            except GoogleCloudError as exc:
                raise ObjectStorageError(f"GCS upload failed: {exc}") from exc

        await asyncio.to_thread(upload)

    async def _delete_gcs(self, key: str) -> None:
        def delete() -> None:
            try:
                self._gcs_bucket.blob(key).delete()
            except NotFound as exc:
                raise ObjectStorageError(f"GCS object {key} does not exist") from exc
            except GoogleCloudError as exc:
                raise ObjectStorageError(f"GCS delete failed: {exc}") from exc

        await asyncio.to_thread(delete)

    async def _upload_local(self, key: str, content: bytes) -> None:
        destination = self._local_path(key)

        def write() -> None:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "wb") as handle:
                handle.write(content)

        await asyncio.to_thread(write)

    async def _delete_local(self, key: str) -> None:
        target = self._local_path(key)

        def remove() -> None:
            try:
                target.unlink()
            except FileNotFoundError as exc:
                raise ObjectStorageError(f"Local object {key} does not exist") from exc

        await asyncio.to_thread(remove)

    def _local_path(self, key: str) -> Path:
        root = (self._local_root or Path("storage")).resolve()
        destination = (root / key).resolve()
        if root not in destination.parents:
            raise ObjectStorageError(f"Refusing to access {key} outside the storage root")
        return destination


__all__ = [
    "ObjectStorageClient",
    "ObjectStore",
    "StoredObject",
    "generate_unique_image_filename",
    "public_url",
]
