"""Storage service for Supabase Storage operations."""

import re
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from tender_filing.core.config import settings
from tender_filing.core.exceptions import StorageError
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass(frozen=True)
class StoredObject:
    """Where an uploaded object ended up."""

    key: str
    bucket: str
    url: str


def generate_storage_key(project_id: str, folder_path: str, file_name: str) -> str:
    """Build ``<project>/<folder>/<epoch ms>-<sanitized name>``.

    The timestamp keeps keys unique when two documents share a display name.
    Empty, "." and ".." folder segments are dropped so a key never leaves the
    project prefix.
    """
    clean_name = _UNSAFE_KEY_CHARS.sub("_", file_name)
    parts = [project_id]
    parts.extend(
        segment for segment in folder_path.split("/") if segment not in ("", ".", "..")
    )
    parts.append(f"{int(time.time() * 1000)}-{clean_name}")
    return "/".join(parts)


class StorageService:
    """Service for managing files in Supabase storage."""

    def __init__(self, bucket: Optional[str] = None):
        self.url = settings.supabase_url.rstrip("/")
        self.service_role_key = settings.supabase_service_role_key
        self.bucket = bucket or settings.supabase.bucket
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

    def public_url(self, key: str) -> str:
        return f"{self.base_api_url}/object/public/{self.bucket}/{key}"

    async def put(self, content: bytes, key: str, content_type: str) -> StoredObject:
        """Upload bytes under ``key``; existing objects are never overwritten.

        Args:
            content: Raw file bytes
            key: Object key inside the bucket
            content_type: MIME type sent with the object

        Returns:
            StoredObject with the key, bucket and public URL

        Raises:
            StorageError: If the upload is rejected or the request fails
        """
        upload_url = f"{self.base_api_url}/object/{self.bucket}/{key}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    upload_url,
                    headers={
                        **self.headers,
                        "Content-Type": content_type,
                        "x-upsert": "false",
                    },
                    content=content,
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage upload error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to Supabase: {response.text}",
                extra={"bucket": self.bucket, "key": key, "status_code": response.status_code}
            )
            raise StorageError(f"Upload failed: {response.text}")

        return StoredObject(key=key, bucket=self.bucket, url=self.public_url(key))

    async def signed_download_url(self, key: str, expires_in: Optional[int] = None) -> Optional[str]:
        """Generate a signed download URL, or None if it cannot be produced.

        Listing screens call this for every document, so a missing object or
        a storage outage degrades to None instead of raising.
        """
        url = f"{self.base_api_url}/object/sign/{self.bucket}/{key}"
        ttl = expires_in or settings.supabase.signed_url_ttl

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    headers=self.headers,
                    json={"expiresIn": ttl},
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.warning(f"Failed to generate signed URL for key {key!r}: {str(e)}")
            return None

        if response.status_code != 200:
            LOGGER.warning(
                f"Failed to generate signed URL for key {key!r}: {response.text}",
                extra={"bucket": self.bucket, "status_code": response.status_code},
            )
            return None

        try:
            signed_path = response.json().get("signedURL")
        except (ValueError, AttributeError):
            LOGGER.warning(
                f"Supabase returned an unreadable body when signing key {key!r}",
                extra={"bucket": self.bucket, "body": response.text[:200]},
            )
            return None
        if not signed_path:
            LOGGER.warning(f"Supabase response did not contain signedURL for key {key!r}")
            return None

        # Supabase returns a path relative to /storage/v1
        if signed_path.startswith("/"):
            if signed_path.startswith("/storage/v1"):
                return f"{self.url}{signed_path}"
            return f"{self.base_api_url}{signed_path}"
        return signed_path

    async def delete(self, key: str) -> None:
        """Remove an object.

        Raises:
            StorageError: If the request fails or is rejected
        """
        url = f"{self.base_api_url}/object/{self.bucket}"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    "DELETE",
                    url,
                    headers=self.headers,
                    json={"prefixes": [key]},
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            raise StorageError(f"Storage delete error: {str(e)}", original_error=e)

        if response.status_code != 200:
            raise StorageError(f"Delete failed: {response.text}")
