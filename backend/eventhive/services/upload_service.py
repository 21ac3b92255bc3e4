"""
Image uploads stored on local disk under UPLOAD_DIR.

Only JPEG, PNG and WebP are accepted, up to UPLOAD_MAX_BYTES. Stored names are
random, so a client can never choose the path it writes to.
"""

import asyncio
import uuid
from pathlib import Path

from fastapi import UploadFile

from eventhive.core.config import get_settings
from eventhive.core.exceptions import ValidationError
from eventhive.core.logging import get_logger

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def _upload_dir() -> Path:
    return Path(get_settings().UPLOAD_DIR)


async def save_upload(file: UploadFile) -> dict:
    settings = get_settings()
    extension = ALLOWED_CONTENT_TYPES.get(file.content_type or "")
    if extension is None:
        raise ValidationError("Invalid file type. Only JPEG, PNG and WebP images are allowed")

    content = await file.read(settings.UPLOAD_MAX_BYTES + 1)
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > settings.UPLOAD_MAX_BYTES:
        raise ValidationError(
            f"File too large. Maximum size is {settings.UPLOAD_MAX_BYTES // (1024 * 1024)}MB"
        )

    filename = f"{uuid.uuid4().hex}{extension}"
    target_dir = _upload_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread((target_dir / filename).write_bytes, content)

    logger.info("file_uploaded", filename=filename, size=len(content), content_type=file.content_type)
    return {"success": True, "url": f"/uploads/{filename}", "filename": filename}


def _safe_name(filename: str) -> str:
    name = Path(filename).name
    if not filename or name != filename or name in (".", ".."):
        raise ValidationError("Invalid filename")
    return name


async def delete_upload(filename: str) -> bool:
    """Delete a stored upload. A missing file is not an error; returns whether it existed."""
    path = _upload_dir() / _safe_name(filename)
    existed = path.is_file()
    if existed:
        await asyncio.to_thread(path.unlink, True)

    logger.info("file_deleted", filename=filename, existed=existed)
    return existed
