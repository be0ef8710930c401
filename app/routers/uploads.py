# =============================================================================
# app/routers/uploads.py - File Upload Endpoint
# =============================================================================
# Stores a file in the public bucket and returns its URL, e.g. for avatars.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from app.auth import AuthUser, get_current_user
from app.config import settings
from app.dependencies import StorageServiceDep
from app.exceptions import FileTooLargeError, InvalidFileTypeError

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_CONTENT_TYPES = [
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/plain",
    "text/markdown",
]
UPLOAD_FOLDER = "uploads"


@router.post("")
async def upload_file(
    file: Annotated[UploadFile, File(description="File to upload")],
    storage: StorageServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Upload a file to storage.

    This endpoint:
    1. Validates the content type against the allowlist
    2. Validates the size against MAX_UPLOAD_SIZE_MB
    3. Stores it under uploads/ with a unique name

    Returns the storage key, public URL and size.
    """
    # Parameters such as "; charset=utf-8" are ignored
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidFileTypeError(content_type or "unknown", ALLOWED_CONTENT_TYPES)

    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise FileTooLargeError(len(content) / (1024 * 1024), settings.MAX_UPLOAD_SIZE_MB)

    logger.info(f"User {user.id} uploading {file.filename} ({len(content)} bytes)")

    result = storage.upload_file(
        content,
        file.filename or "file",
        folder=UPLOAD_FOLDER,
        content_type=content_type,
    )
    return {
        "key": result["key"],
        "public_url": result["public_url"],
        "size": result["size"],
        "content_type": content_type,
    }
