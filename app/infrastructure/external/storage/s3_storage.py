"""Avatar images in an S3-compatible bucket (AWS S3, MinIO, Spaces)."""

from __future__ import annotations

import asyncio
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.infrastructure.exceptions import StorageDeleteError, StorageUploadError

# Avatar keys are never reused (fresh cuid per upload), so objects can be cached forever.
_CACHE_CONTROL = "public, max-age=31536000, immutable"
_MISSING = frozenset({"404", "NoSuchKey", "NotFound"})


class S3StorageService:
    """Bucket-backed store; boto3 calls run in a worker thread.

    Public URLs are virtual-hosted (https://{bucket}.s3.{region}.amazonaws.com/{key})
    or path-style ({endpoint}/{bucket}/{key}) when a custom endpoint is set.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        self._client = boto3.client(
            "s3",
            region_name=region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )

    @property
    def _url_prefix(self) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/"

    def _head(self, storage_ref: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=storage_ref)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING:
                return False
            raise
        return True

    async def upload(self, content: bytes, storage_ref: str, content_type: str) -> str:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=storage_ref,
                Body=content,
                ContentType=content_type,
                CacheControl=_CACHE_CONTROL,
                ServerSideEncryption="AES256",
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageUploadError(storage_ref, str(e)) from e
        return self.public_url(storage_ref)

    async def delete(self, storage_ref: str) -> bool:
        def _delete() -> bool:
            if not self._head(storage_ref):
                return False
            self._client.delete_object(Bucket=self.bucket, Key=storage_ref)
            return True

        try:
            return await asyncio.to_thread(_delete)
        except (ClientError, BotoCoreError) as e:
            raise StorageDeleteError(storage_ref, str(e)) from e

    def public_url(self, storage_ref: str) -> str:
        return f"{self._url_prefix}{storage_ref}"

    def storage_ref_from_url(self, url: str) -> str | None:
        if not url.startswith(self._url_prefix):
            return None
        path = unquote(urlparse(url).path)
        prefix_path = urlparse(self._url_prefix).path
        return path[len(prefix_path):] or None
