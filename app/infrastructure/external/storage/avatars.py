"""Avatar storage: names objects per user and maps URLs back to storage refs."""

from __future__ import annotations

import mimetypes

from cuid2 import cuid_wrapper

from app.infrastructure.external.storage.protocol import StorageProtocol
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_cuid = cuid_wrapper()

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def avatar_storage_ref(user_id: str, content_type: str) -> str:
    """Return a fresh object name avatars/{user_id}/{cuid}{ext}."""
    ext = _EXTENSIONS.get(content_type) or mimetypes.guess_extension(content_type) or ""
    return f"avatars/{user_id}/{_cuid()}{ext}"


class AvatarStorageService:
    """IAvatarStorage over a storage backend."""

    def __init__(self, backend: StorageProtocol) -> None:
        self._backend = backend

    async def upload_avatar(self, user_id: str, content: bytes, content_type: str) -> str:
        storage_ref = avatar_storage_ref(user_id, content_type)
        url = await self._backend.upload(content, storage_ref, content_type)
        logger.info("Uploaded avatar for user %s to %s", user_id, storage_ref)
        return url

    async def delete_by_url(self, url: str) -> bool:
        storage_ref = self._backend.storage_ref_from_url(url)
        if storage_ref is None:
            logger.debug("Avatar URL not served by this backend, skipping delete: %s", url)
            return False
        return await self._backend.delete(storage_ref)
