"""Avatar images on local disk, served by the app under /media/."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from urllib.parse import unquote, urlparse

import aiofiles
import aiofiles.os

from app.infrastructure.exceptions import (
    StorageDeleteError,
    StoragePermissionError,
    StorageUploadError,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

PUBLIC_PREFIX = "/media/"


class LocalStorageService:
    """Files under storage_root, published as {base_url}/media/{storage_ref}.

    Refs must stay inside storage_root. A file appears atomically (temp file
    in the target directory, then rename) so a concurrent GET never sees a
    partial image. Directories emptied by a delete are removed.
    """

    def __init__(self, storage_root: str, base_url: str | None = None) -> None:
        self.storage_root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else ""
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _resolve(self, storage_ref: str) -> Path:
        path = (self.storage_root / storage_ref).resolve()
        if path == self.storage_root or not path.is_relative_to(self.storage_root):
            raise StoragePermissionError(storage_ref, "path_validation")
        return path

    async def upload(self, content: bytes, storage_ref: str, content_type: str) -> str:
        target = self._resolve(storage_ref)
        try:
            target.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".upload-")
            os.close(fd)
            try:
                async with aiofiles.open(tmp_name, "wb") as f:
                    await f.write(content)
                os.chmod(tmp_name, 0o644)
                await aiofiles.os.replace(tmp_name, target)
            finally:
                leftover = Path(tmp_name)
                if leftover.exists():
                    leftover.unlink()
        except OSError as e:
            raise StorageUploadError(storage_ref, str(e)) from e
        logger.debug("Stored %s (%s, %d bytes)", storage_ref, content_type, len(content))
        return self.public_url(storage_ref)

    def _prune_empty_dirs(self, start: Path) -> None:
        for directory in (start, *start.parents):
            if directory == self.storage_root or self.storage_root not in directory.parents:
                return
            try:
                directory.rmdir()
            except OSError:
                return

    async def delete(self, storage_ref: str) -> bool:
        path = self._resolve(storage_ref)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageDeleteError(storage_ref, str(e)) from e
        self._prune_empty_dirs(path.parent)
        return True

    def public_url(self, storage_ref: str) -> str:
        return f"{self.base_url}{PUBLIC_PREFIX}{storage_ref}"

    def storage_ref_from_url(self, url: str) -> str | None:
        if self.base_url and not url.startswith(f"{self.base_url}{PUBLIC_PREFIX}"):
            return None
        path = unquote(urlparse(url).path)
        if not path.startswith(PUBLIC_PREFIX):
            return None
        return path[len(PUBLIC_PREFIX):] or None
