"""Uploaded bytes on local disk, addressed by storage key."""

import os
import secrets
import time
from pathlib import Path

import aiofiles
import aiofiles.os


class InvalidStorageKeyError(ValueError):
    pass


class BlobStore:
    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def new_key(original_name: str) -> str:
        """Unique on-disk name: millisecond timestamp, random suffix, original extension."""
        ext = os.path.splitext(original_name)[1].lower()
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9):09d}"
        return unique_suffix + ext

    def path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path.parent != self.root:
            raise InvalidStorageKeyError(f"Storage key escapes uploads dir: {key!r}")
        return path

    async def save(self, key: str, data: bytes) -> Path:
        path = self.path_for(key)
        async with aiofiles.open(path, "wb") as out_file:
            await out_file.write(data)
        return path

    async def exists(self, key: str) -> bool:
        return await aiofiles.os.path.isfile(self.path_for(key))

    async def delete(self, key: str) -> bool:
        """Remove the blob. Returns False when it was already gone."""
        path = self.path_for(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        return True
