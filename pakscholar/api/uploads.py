"""Image upload handling for prompt submissions.

Persists at most one attachment to transient storage. The session that
receives the path owns the file from then on and removes it on cleanup.
"""

import asyncio
import logging
import uuid
from pathlib import Path

from fastapi import HTTPException, UploadFile, status

from pakscholar.streaming.attachments import remove_attachment
from pakscholar.streaming.errors import InputValidationError

logger = logging.getLogger(__name__)

IMAGE_TYPE_PREFIX = "image/"


async def _read_and_validate_size(file: UploadFile, max_bytes: int) -> bytes:
    """Read file content and validate size.

    Args:
        file: The uploaded file.
        max_bytes: Largest accepted size.

    Returns:
        File content as bytes.

    Raises:
        HTTPException: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > max_bytes:
        size_mb = len(content) / (1024 * 1024)
        limit_mb = max_bytes / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File size ({size_mb:.1f}MB) exceeds maximum allowed ({limit_mb:.0f}MB)",
        )

    return content


async def store_upload(file: UploadFile, upload_dir: Path, max_bytes: int) -> tuple[Path, str]:
    """Persist an uploaded file under a random name.

    Returns:
        The stored path and the declared content type.
    """
    content = await _read_and_validate_size(file, max_bytes)

    upload_dir.mkdir(parents=True, exist_ok=True)
    path = upload_dir / uuid.uuid4().hex
    await asyncio.to_thread(path.write_bytes, content)

    logger.info(f"Stored upload {file.filename!r} ({len(content)} bytes) at {path}")
    return path, file.content_type or "application/octet-stream"


def validate_image(path: Path, content_type: str, filename: str | None) -> None:
    """Reject non-image attachments, removing the stored file.

    Raises:
        InputValidationError: If the content type is not an image type.
    """
    if content_type.startswith(IMAGE_TYPE_PREFIX):
        return
    logger.info(f"[INVALID_FILE] User uploaded non-image: {filename} ({content_type})")
    remove_attachment(path, "INVALID_FILE")
    raise InputValidationError("Only image files (JPEG, PNG, GIF, WEBP) are supported.")
