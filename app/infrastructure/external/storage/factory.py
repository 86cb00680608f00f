"""Build the avatar store for the configured STORAGE_BACKEND."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.infrastructure.external.storage.avatars import AvatarStorageService
from app.infrastructure.external.storage.local_storage import LocalStorageService
from app.infrastructure.external.storage.protocol import StorageProtocol

if TYPE_CHECKING:
    from app.core.config import Settings


def create_storage_backend(settings: Settings) -> StorageProtocol:
    """Local disk or S3; Settings validation already rejected other values."""
    if settings.storage_backend == "s3":
        # boto3 is only imported when the s3 backend is selected
        from app.infrastructure.external.storage.s3_storage import S3StorageService

        secret = settings.s3_secret_key
        return S3StorageService(
            bucket=settings.s3_bucket or "",
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            access_key=settings.s3_access_key,
            secret_key=secret.get_secret_value() if secret else None,
        )
    return LocalStorageService(settings.storage_root, base_url=settings.storage_base_url)


def create_avatar_storage(settings: Settings) -> AvatarStorageService:
    return AvatarStorageService(create_storage_backend(settings))
