"""
Local filesystem storage provider for development and tests.
Mirrors the bucket/path layout of the hosted storage and hands out
HMAC-signed, expiring URLs served by ``/files/local``.
"""
import hashlib
import hmac
import time
from typing import List, Optional
from pathlib import Path
from urllib.parse import quote

import structlog

from ..config import settings
from ..errors import StorageError
from .provider import StorageProvider


logger = structlog.get_logger(__name__)


class LocalStorageProvider(StorageProvider):
    """Local filesystem storage provider for development."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.local_storage_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, bucket: str, path: str) -> Path:
        """Get the local filesystem path for a bucket object."""
        clean_bucket = bucket.strip("/").replace("..", "")
        clean_path = path.lstrip("/").replace("..", "").replace("\\", "/")
        return self.base_dir / clean_bucket / clean_path

    def _sign(self, bucket: str, path: str, exp: int) -> str:
        msg = f"{bucket}/{path}:{exp}".encode("utf-8")
        return hmac.new(settings.jwt_secret.encode("utf-8"), msg, hashlib.sha256).hexdigest()

    def upload(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = False) -> str:
        target = self._get_path(bucket, path)
        if target.exists() and not upsert:
            raise StorageError("The resource already exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        logger.info("local_storage_upload", bucket=bucket, size=len(data), content_type=content_type)
        return path

    def remove(self, bucket: str, paths: List[str]) -> None:
        # Missing objects are ignored, like the hosted API
        for p in paths:
            target = self._get_path(bucket, p)
            if target.exists():
                target.unlink()

    def create_signed_url(self, bucket: str, path: str, expires_s: int) -> Optional[str]:
        if not self.exists(bucket, path):
            return None
        exp = int(time.time()) + expires_s
        sig = self._sign(bucket, path, exp)
        return f"{settings.public_base_url}/files/local/{quote(bucket)}/{quote(path.lstrip('/'))}?exp={exp}&sig={sig}"

    def verify_signature(self, bucket: str, path: str, exp: int, sig: str) -> bool:
        if exp < int(time.time()):
            return False
        return hmac.compare_digest(self._sign(bucket, path, exp), sig or "")

    def read(self, bucket: str, path: str) -> bytes:
        return self._get_path(bucket, path).read_bytes()

    def exists(self, bucket: str, path: str) -> bool:
        """Check if an object exists locally."""
        return self._get_path(bucket, path).is_file()
