from typing import List, Optional


class StorageProvider:
    """Bucket/path object storage as used for activity photos and user documents."""

    def upload(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = False) -> str:
        raise NotImplementedError

    def remove(self, bucket: str, paths: List[str]) -> None:
        raise NotImplementedError

    def create_signed_url(self, bucket: str, path: str, expires_s: int) -> Optional[str]:
        raise NotImplementedError

    def exists(self, bucket: str, path: str) -> bool:
        raise NotImplementedError
