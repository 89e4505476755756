"""Local filesystem storage implementation."""

from pathlib import Path
from uuid import uuid4

import aiofiles

from .base import AbstractStorage
from .exceptions import FileDeleteError, FileReadError, FileWriteError, StorageFileNotFoundError


class LocalStorage(AbstractStorage):
    """Local filesystem storage provider, one file per key."""

    def __init__(self, base_path: str | Path) -> None:
        """Initialize local storage with base path.

        Args:
            base_path: Base directory path for stored values
        """
        self.base_path = Path(base_path)

    def _get_full_path(self, key: str) -> Path:
        return self.base_path / key

    async def write(self, key: str, content: str) -> None:
        """Write text content to local storage.

        The value is written to a temporary sibling file first and then
        renamed over the target, so readers never see a half-written blob.
        Each write gets its own temporary file; overlapping writes to one
        key end with the last rename.
        """
        path = self._get_full_path(key)
        tmp_path = path.with_name(f"{path.name}.{uuid4().hex}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(content)
            tmp_path.replace(path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            msg = f"Failed to write local storage key: {key}"
            raise FileWriteError(msg) from e

    async def read(self, key: str) -> str:
        """Return the text stored under a key."""
        path = self._get_full_path(key)
        if not path.exists():
            msg = f"Key not found: {key}"
            raise StorageFileNotFoundError(msg)
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                return await f.read()
        except OSError as e:
            msg = f"Failed to read local storage key: {key}"
            raise FileReadError(msg) from e

    async def delete(self, key: str) -> None:
        """Delete a key from local storage."""
        try:
            path = self._get_full_path(key)
            if path.exists():
                path.unlink()
        except OSError as e:
            msg = f"Failed to delete local storage key: {key}"
            raise FileDeleteError(msg) from e
