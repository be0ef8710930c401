# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles file uploads to a public Supabase Storage bucket.
#
# Every upload gets a unique key: <folder>/<slugified-name>-<uuid4><ext>,
# so two uploads of "Report.pdf" never overwrite each other.
# =============================================================================

import base64
import logging
import mimetypes
import re
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse
from uuid import uuid4

import httpx
from slugify import slugify
from supabase import Client

from app.config import settings
from app.exceptions import StorageUploadError
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50


def create_unique_filename(filename: str) -> str:
    """
    Make a URL-safe, collision-free object name.

    Example:
        create_unique_filename("My Report (final).PDF")
        # "my-report-final-1b4e28ba-2fa1-11d2-883f-0016d3cca427.PDF"
    """
    path = PurePosixPath(filename)
    extension = path.suffix
    stem = filename[: -len(extension)] if extension else filename

    safe_name = slugify(stem, max_length=MAX_NAME_LENGTH, separator="-") or "file"
    return f"{safe_name[:MAX_NAME_LENGTH]}-{uuid4()}{extension}"


def get_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


class StorageService:
    """
    Service for Supabase Storage operations.

    Attributes:
        bucket: Name of the public bucket files are written to
    """

    def __init__(self, client: Client | None = None, bucket: str | None = None):
        self.client = client if client is not None else SupabaseClient.get_client()
        self.bucket = bucket or settings.STORAGE_BUCKET

    def upload_file(
        self,
        content: bytes,
        filename: str,
        folder: str = "",
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """
        Upload bytes under a unique key.

        Args:
            content: File bytes
            filename: Original filename (slugified, uuid appended)
            folder: Optional key prefix, e.g. "uploads"
            content_type: MIME type; guessed from filename if omitted

        Returns:
            Dict with key, public_url and size

        Raises:
            StorageUploadError: If upload fails
        """
        unique_name = create_unique_filename(filename)
        key = f"{folder.strip('/')}/{unique_name}" if folder else unique_name

        try:
            self.client.storage.from_(self.bucket).upload(
                path=key,
                file=content,
                file_options={"content-type": content_type or get_content_type(filename)},
            )
        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e))

        logger.info(f"Uploaded file to storage: {key} ({len(content)} bytes)")
        return {
            "key": key,
            "public_url": self.get_public_url(key),
            "size": len(content),
        }

    def upload_base64_file(
        self,
        data: str,
        filename: str,
        folder: str = "",
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """Upload base64 data, with or without a data: URL prefix."""
        raw = re.sub(r"^data:.*?;base64,", "", data)
        return self.upload_file(base64.b64decode(raw), filename, folder, content_type)

    def upload_from_url(
        self,
        url: str,
        filename: str | None = None,
        folder: str = "",
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """
        Download a file and re-host it in storage.

        The filename defaults to the last path segment of the URL.
        """
        try:
            response = httpx.get(url, timeout=60, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise StorageUploadError(f"Failed to fetch file: {e}")

        if not filename:
            filename = PurePosixPath(urlparse(url).path).name or "file"

        return self.upload_file(
            response.content,
            filename,
            folder=folder,
            content_type=content_type or response.headers.get("content-type"),
        )

    def get_public_url(self, key: str) -> str:
        return self.client.storage.from_(self.bucket).get_public_url(key)

    def delete_file(self, key: str) -> None:
        self.client.storage.from_(self.bucket).remove([key])
        logger.info(f"Deleted file from storage: {key}")
