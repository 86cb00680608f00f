"""Avatar image storage on local disk or an S3-compatible bucket.

The backend is chosen by STORAGE_BACKEND; boto3 is imported only for s3.
"""

from app.infrastructure.external.storage.avatars import (
    AvatarStorageService,
    avatar_storage_ref,
)
from app.infrastructure.external.storage.factory import (
    create_avatar_storage,
    create_storage_backend,
)
from app.infrastructure.external.storage.protocol import StorageProtocol

__all__ = [
    "AvatarStorageService",
    "StorageProtocol",
    "avatar_storage_ref",
    "create_avatar_storage",
    "create_storage_backend",
]
