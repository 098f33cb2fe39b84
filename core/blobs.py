"""Binary object storage for listing images.

Two backends share one contract:
- LocalBlobStore: writes under a root directory, serves URIs from a base URL
- InMemoryBlobStore: dict-backed, for tests and dev

``delete`` raises on failure; callers that treat deletion as best-effort
catch and log.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles
import aiofiles.os

BLOB_ROOT = os.getenv("BLOB_ROOT", "./media")
BLOB_BASE_URL = os.getenv("BLOB_BASE_URL", "http://localhost:8000/media")


class BlobNotFoundError(Exception):
    """The URI does not point at a stored object."""


class BlobStore(ABC):
    """Async object store keyed by path, addressed by URI."""

    @abstractmethod
    async def store(self, data: bytes, content_type: str, path: str) -> str:
        """Persist ``data`` under ``path`` and return its public URI."""

    @abstractmethod
    async def delete(self, uri: str) -> None:
        """Remove the object behind ``uri``."""


class InMemoryBlobStore(BlobStore):
    """Keeps objects in a dict. ``fail_deletes`` simulates a flaky backend."""

    def __init__(self, base_url: str = "memory://blobs", fail_deletes: bool = False):
        self.base_url = base_url.rstrip("/")
        self.fail_deletes = fail_deletes
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def store(self, data: bytes, content_type: str, path: str) -> str:
        uri = f"{self.base_url}/{path}"
        self.objects[uri] = (data, content_type)
        return uri

    async def delete(self, uri: str) -> None:
        if self.fail_deletes:
            raise OSError(f"delete refused for {uri}")
        if self.objects.pop(uri, None) is None:
            raise BlobNotFoundError(uri)


class LocalBlobStore(BlobStore):
    """Filesystem store using aiofiles."""

    def __init__(self, root: str = BLOB_ROOT, base_url: str = BLOB_BASE_URL):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path_for(self, uri: str) -> Path:
        prefix = f"{self.base_url}/"
        if not uri.startswith(prefix):
            raise BlobNotFoundError(uri)
        return self.root / uri[len(prefix):]

    async def store(self, data: bytes, content_type: str, path: str) -> str:
        target = self.root / path
        await aiofiles.os.makedirs(target.parent, exist_ok=True)
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        return f"{self.base_url}/{path}"

    async def delete(self, uri: str) -> None:
        target = self._path_for(uri)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError as exc:
            raise BlobNotFoundError(uri) from exc
