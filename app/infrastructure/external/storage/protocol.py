"""Object storage seen by the avatar service. Implementations: local disk, S3."""

from typing import Protocol


class StorageProtocol(Protocol):
    """A public-read object store addressed by storage refs (relative keys)."""

    async def upload(self, content: bytes, storage_ref: str, content_type: str) -> str:
        """Store content under storage_ref and return its public URL."""
        ...

    async def delete(self, storage_ref: str) -> bool:
        """Remove the object; False when there was nothing to remove."""
        ...

    def public_url(self, storage_ref: str) -> str: ...

    def storage_ref_from_url(self, url: str) -> str | None:
        """Inverse of public_url; None for URLs this store does not serve."""
        ...
