import logging
import random
import time
from pathlib import Path, PurePosixPath

from fastapi import UploadFile

from college_events.config import settings
from college_events.exceptions import NotFoundError, PayloadTooLargeError
from college_events.utils.filesystem import ensure_upload_dir, sanitize_filename

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads/"


def has_upload(file: UploadFile | None) -> bool:
    # Browsers send an empty part with no filename when no file was picked
    return file is not None and bool(file.filename)


def unique_filename(original_name: str | None) -> str:
    suffix = sanitize_filename(PurePosixPath(original_name or "").suffix)
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{suffix}"


async def store_attachment(file: UploadFile) -> str:
    """Persist an uploaded image and return its ``/uploads/<name>`` path."""
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise PayloadTooLargeError(f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    stored_name = unique_filename(file.filename)
    target = ensure_upload_dir() / stored_name
    target.write_bytes(b"".join(chunks))
    logger.debug("Stored attachment %s (%d bytes)", stored_name, size)
    return f"{UPLOAD_URL_PREFIX}{stored_name}"


def attachment_path(image_url: str) -> Path:
    return settings.upload_dir / PurePosixPath(image_url).name


def discard_attachment(image_url: str | None):
    """Best-effort removal of a stored attachment. Failures are only logged."""
    if not image_url:
        return
    path = attachment_path(image_url)
    try:
        path.unlink()
        logger.info("Deleted attachment %s", path.name)
    except OSError as exc:
        logger.error("Failed to delete image %s: %s", path, exc)


def resolve_upload(filename: str) -> Path:
    if not filename or PurePosixPath(filename).name != filename or filename in (".", ".."):
        raise NotFoundError("File not found")
    path = settings.upload_dir / filename
    if not path.is_file():
        raise NotFoundError("File not found")
    return path
