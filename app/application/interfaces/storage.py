"""Storage interface (port) for avatar images."""

from __future__ import annotations

from typing import Protocol


class IAvatarStorage(Protocol):
    """Protocol for storing user avatar images and addressing them by URL."""

    async def upload_avatar(self, user_id: str, content: bytes, content_type: str) -> str:
        """Store the image and return its public URL."""

    async def delete_by_url(self, url: str) -> bool:
        """Delete the object a URL points to. False if not found or not ours."""
