import mimetypes
import posixpath

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..config import settings
from ..storage.local_provider import LocalStorageProvider
from ..storage.supabase_provider import SupabaseStorageProvider
from ..storage.provider import StorageProvider


router = APIRouter(prefix="/files", tags=["files"])


def get_storage() -> StorageProvider:
    """
    Get storage provider based on configuration.
    Uses the hosted storage API when STORAGE_PROVIDER=supabase,
    the local filesystem otherwise (development).
    """
    if settings.storage_provider == "supabase":
        return SupabaseStorageProvider()
    return LocalStorageProvider()


@router.get("/local/{bucket}/{path:path}")
def local_download(bucket: str, path: str, exp: int, sig: str, storage: StorageProvider = Depends(get_storage)):
    """Serves objects from the local provider behind its signed, expiring URLs."""
    if not isinstance(storage, LocalStorageProvider):
        raise HTTPException(status_code=404, detail="Not found")
    if not storage.verify_signature(bucket, path, exp, sig):
        raise HTTPException(status_code=403, detail="Invalid or expired link")
    if not storage.exists(bucket, path):
        raise HTTPException(status_code=404, detail="Not found")
    media_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    file_name = posixpath.basename(path).replace('"', "")
    headers = {
        "Cache-Control": "private, max-age=60",
        "Content-Disposition": f'attachment; filename="{file_name}"',
        "X-Content-Type-Options": "nosniff",
    }
    return Response(content=storage.read(bucket, path), media_type=media_type, headers=headers)
