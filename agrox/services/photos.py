"""
Activity photo uploads (selfies and odometer shots).

Every check runs before storage is touched; only the stored path is kept on
the activity row, never a public URL.
"""
import uuid
from typing import Optional

import structlog

from ..config import settings
from ..errors import AppError
from ..storage.provider import StorageProvider


logger = structlog.get_logger(__name__)

PHOTO_PREFIXES = ("start", "end", "start-odometer", "end-odometer")

# Accepted raster formats and the extension stored for each
RASTER_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/heic": "heic",
    "image/heif": "heif",
}


class ActivityPhotoError(AppError):
    def __init__(self, code: str):
        super().__init__(code, status_code=400)


def is_raster_image(content_type: Optional[str]) -> bool:
    return (content_type or "").split(";")[0].strip().lower() in RASTER_IMAGE_TYPES


def validate_image(content_type: Optional[str], size: int) -> None:
    # An empty content type counts as invalid
    if not is_raster_image(content_type):
        raise ActivityPhotoError("invalid_image_type")
    if size <= 0:
        raise ActivityPhotoError("empty_image")
    if size > settings.max_photo_bytes:
        raise ActivityPhotoError("image_too_large")


def build_photo_path(user_id: uuid.UUID, prefix: str, content_type: str) -> str:
    # {uid}/{uuid}-{prefix}.{ext}; the uid folder is what storage policies scope on
    ext = RASTER_IMAGE_TYPES.get(content_type, "jpg")
    return f"{user_id}/{uuid.uuid4()}-{prefix}.{ext}"


def upload_activity_photo(
    storage: StorageProvider,
    user_id: uuid.UUID,
    prefix: str,
    data: bytes,
    content_type: Optional[str],
) -> str:
    if prefix not in PHOTO_PREFIXES:
        raise AppError("invalid_photo_prefix", status_code=400)
    validate_image(content_type, len(data))
    path = build_photo_path(user_id, prefix, content_type)
    stored = storage.upload(settings.activity_photos_bucket, path, data, content_type, upsert=False)
    logger.info("activity_photo_uploaded", user_id=str(user_id), prefix=prefix, size=len(data))
    return stored


def owns_photo_path(user_id: uuid.UUID, path: Optional[str]) -> bool:
    return bool(path) and path.startswith(f"{user_id}/") and ".." not in path
