"""
Hosted object storage (Supabase Storage REST API).
"""
from typing import List, Optional
from urllib.parse import quote

import httpx

from ..config import settings
from ..errors import StorageError
from .provider import StorageProvider


class SupabaseStorageProvider(StorageProvider):
    def __init__(self, base_url: Optional[str] = None, service_key: Optional[str] = None) -> None:
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.service_key = service_key or settings.supabase_service_role_key
        if not self.service_key:
            raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY must be set")

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.service_key}", "apikey": self.service_key}

    def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}/storage/v1/{endpoint.lstrip('/')}"
        headers = self._headers()
        headers.update(kwargs.pop("headers", {}))
        try:
            with httpx.Client(timeout=30.0) as client:
                response = client.request(method, url, headers=headers, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPError as e:
            raise StorageError(f"storage {method} {endpoint.split('/')[0]} failed: {e}") from e

    def upload(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool = False) -> str:
        self._request(
            "POST",
            f"object/{bucket}/{quote(path)}",
            content=data,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "Cache-Control": "max-age=3600",
                "x-upsert": "true" if upsert else "false",
            },
        )
        return path

    def remove(self, bucket: str, paths: List[str]) -> None:
        if not paths:
            return
        self._request("DELETE", f"object/{bucket}", json={"prefixes": paths})

    def create_signed_url(self, bucket: str, path: str, expires_s: int) -> Optional[str]:
        response = self._request("POST", f"object/sign/{bucket}/{quote(path)}", json={"expiresIn": expires_s})
        signed = (response.json() or {}).get("signedURL")
        if not signed:
            return None
        return f"{self.base_url}/storage/v1{signed}"

    def exists(self, bucket: str, path: str) -> bool:
        with httpx.Client(timeout=30.0) as client:
            response = client.head(
                f"{self.base_url}/storage/v1/object/authenticated/{bucket}/{quote(path)}",
                headers=self._headers(),
            )
            return response.status_code == 200
