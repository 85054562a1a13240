"""
Object-URL store: two short text blobs per course, kept in an Azure blob
container next to the relational store.

    {courseId}/content-url.txt
    {courseId}/media-url.txt

Values read from here take precedence over the Course row's own columns.
"""
from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient, ContainerClient

from ..config import settings
from ..errors import ObjectStoreError

logger = logging.getLogger(__name__)

CONTENT_URL_BLOB = "content-url.txt"
MEDIA_URL_BLOB = "media-url.txt"


def blob_name(course_id: str, kind: str) -> str:
    return f"{course_id}/{kind}"


class BlobObjectUrlStore:
    """Course URL blobs in one container. Every SDK failure surfaces as ObjectStoreError."""

    def __init__(self, container: ContainerClient):
        self.container = container
        self._container_ready = False

    async def _ensure_container(self) -> None:
        if self._container_ready:
            return
        try:
            await self.container.create_container()
            logger.info("Created blob container %s", self.container.container_name)
        except ResourceExistsError:
            pass
        self._container_ready = True

    async def _write(self, course_id: str, kind: str, value: str) -> None:
        try:
            await self._ensure_container()
            blob = self.container.get_blob_client(blob_name(course_id, kind))
            await blob.upload_blob(
                value.encode("utf-8"),
                overwrite=True,
                content_settings=ContentSettings(content_type="text/plain"),
            )
        except AzureError as e:
            raise ObjectStoreError(f"Could not write {kind} for course {course_id}: {e}") from e
        logger.info("Saved %s for course %s", kind, course_id)

    async def _read(self, course_id: str, kind: str) -> Optional[str]:
        try:
            await self._ensure_container()
            blob = self.container.get_blob_client(blob_name(course_id, kind))
            downloader = await blob.download_blob(encoding="UTF-8")
            return await downloader.readall()
        except ResourceNotFoundError:
            return None
        except AzureError as e:
            raise ObjectStoreError(f"Could not read {kind} for course {course_id}: {e}") from e

    async def _delete(self, course_id: str, kind: str) -> bool:
        try:
            await self._ensure_container()
            await self.container.delete_blob(blob_name(course_id, kind))
            return True
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            raise ObjectStoreError(f"Could not delete {kind} for course {course_id}: {e}") from e

    async def save_content_url(self, course_id: str, value: str) -> None:
        await self._write(course_id, CONTENT_URL_BLOB, value)

    async def save_media_url(self, course_id: str, value: str) -> None:
        await self._write(course_id, MEDIA_URL_BLOB, value)

    async def get_course_urls(self, course_id: str) -> tuple[Optional[str], Optional[str]]:
        """Returns (content_url, media_url); either is None when its blob is absent."""
        content_url = await self._read(course_id, CONTENT_URL_BLOB)
        media_url = await self._read(course_id, MEDIA_URL_BLOB)
        return content_url, media_url

    async def delete_content_url(self, course_id: str) -> bool:
        return await self._delete(course_id, CONTENT_URL_BLOB)

    async def delete_media_url(self, course_id: str) -> bool:
        return await self._delete(course_id, MEDIA_URL_BLOB)

    async def delete_course_urls(self, course_id: str) -> bool:
        """Removes both blobs; True if at least one of them existed."""
        deleted_content = await self._delete(course_id, CONTENT_URL_BLOB)
        deleted_media = await self._delete(course_id, MEDIA_URL_BLOB)
        return deleted_content or deleted_media


async def get_object_url_store() -> AsyncIterator[BlobObjectUrlStore]:
    """Per-request store dependency; the service client is closed when the request ends."""
    if not settings.AZURE_STORAGE_CONNECTION_STRING:
        raise ObjectStoreError("Azure Storage connection string is not configured")
    try:
        service = BlobServiceClient.from_connection_string(settings.AZURE_STORAGE_CONNECTION_STRING)
    except (AzureError, ValueError) as e:
        raise ObjectStoreError(f"Invalid Azure Storage connection string: {e}") from e
    async with service:
        yield BlobObjectUrlStore(service.get_container_client(settings.AZURE_BLOB_CONTAINER_NAME))
