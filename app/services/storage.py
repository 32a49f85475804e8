#app\services\storage.py
import logging
import time

import requests

from app.core.config import settings
from app.core.errors import PermissionDenied, StorageError

logger = logging.getLogger(__name__)

def public_url(path: str) -> str:
    return f"{settings.supabase_url}/storage/v1/object/public/{settings.supabase_bucket}/{path}"

def upload_image(data: bytes, content_type: str, path: str) -> str:
    """Uploads to Supabase Storage via REST; returns public URL (bucket must be public)."""
    if not (settings.supabase_url and settings.supabase_service_role):
        raise StorageError("Photo storage is not configured")
    url = f"{settings.supabase_url}/storage/v1/object/{settings.supabase_bucket}/{path}"
    try:
        r = requests.post(url, headers={
            "Authorization": f"Bearer {settings.supabase_service_role}",
            "Content-Type": content_type,
        }, data=data, timeout=30)
        r.raise_for_status()
    except requests.RequestException as e:
        logger.error("photo upload failed for %s", path, exc_info=True)
        raise StorageError(f"Photo upload failed: {e}") from e
    return public_url(path)

def make_object_key(owner_id: int, filename: str, now: float | None = None) -> str:
    """``<owner>/<epoch millis>.<ext>``; the first path segment is the ownership prefix."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
    millis = int((now if now is not None else time.time()) * 1000)
    return f"{owner_id}/{millis}.{ext}"

def owns_object(owner_id: int, path: str) -> bool:
    return path.split("/", 1)[0] == str(owner_id)

def delete_object(owner_id: int, path: str) -> None:
    """Removes one of the owner's photos; the key's first segment must be ``owner_id``."""
    if not owns_object(owner_id, path):
        raise PermissionDenied("You can only delete your own photos")
    if not (settings.supabase_url and settings.supabase_service_role):
        raise StorageError("Photo storage is not configured")
    url = f"{settings.supabase_url}/storage/v1/object/{settings.supabase_bucket}/{path}"
    try:
        r = requests.delete(url, headers={
            "Authorization": f"Bearer {settings.supabase_service_role}",
        }, timeout=30)
        r.raise_for_status()
    except requests.RequestException as e:
        logger.error("photo delete failed for %s", path, exc_info=True)
        raise StorageError(f"Photo delete failed: {e}") from e
