"""
Local directory blob store.

Each bundle is one file in a flat directory, named by its key:

{base_path}/
  0000000000.jsonl
  0000000100.jsonl
  ...
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..exceptions import StorageIOError, StoreError
from .base import BlobStore, ObjectReader, WalkAction, WalkVisitor

logger = logging.getLogger(__name__)


class LocalObjectReader(ObjectReader):
    """Line reader over an open aiofiles binary handle."""

    def __init__(self, handle: Any, path: Path) -> None:
        self._handle = handle
        self._path = path

    async def readline(self) -> bytes:
        try:
            return await self._handle.readline()
        except OSError as e:
            raise StorageIOError("read_object", str(self._path), e) from e


class LocalBlobStore(BlobStore):
    """Blob store backed by a local directory.

    The directory is created on first write; listing a directory that does
    not exist yet yields no keys.
    """

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        self.url = f"file://{self.base_path}"

    def _object_path(self, key: str) -> Path:
        if not key or key.startswith("/") or ".." in Path(key).parts:
            raise StorageIOError("resolve_key", key)
        return self.base_path / key

    async def walk(self, prefix: str, visitor: WalkVisitor) -> None:
        if not await aiofiles.os.path.isdir(self.base_path):
            logger.debug(f"Store directory {self.base_path} does not exist, nothing to walk")
            return

        # Directory entries come back unordered, so keys are sorted before the
        # first visit. Only names under the prefix are kept.
        try:
            names = await aiofiles.os.listdir(self.base_path)
        except OSError as e:
            raise StoreError(f"Unable to list {self.base_path}", self.url, e) from e

        for name in sorted(n for n in names if n.startswith(prefix)):
            if name.startswith(".tmp_"):
                continue
            if await visitor(name) is WalkAction.STOP:
                logger.debug(f"Walk stopped by visitor at {name}")
                return

    @asynccontextmanager
    async def open_object(self, key: str) -> AsyncIterator[ObjectReader]:
        path = self._object_path(key)
        try:
            handle = await aiofiles.open(path, "rb")
        except OSError as e:
            raise StorageIOError("open_object", str(path), e) from e

        try:
            yield LocalObjectReader(handle, path)
        finally:
            await handle.close()

    async def write_object(self, key: str, data: bytes) -> None:
        """Write an object atomically using temp file + rename."""
        path = self._object_path(key)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
        except OSError as e:
            raise StorageIOError("create_directory", str(path.parent), e) from e

        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
        try:
            os.close(fd)
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
                await f.flush()
            await aiofiles.os.replace(temp_path, path)
        except OSError as e:
            try:
                await aiofiles.os.remove(temp_path)
            except OSError:
                pass
            raise StorageIOError("write_object", str(path), e) from e

    async def object_exists(self, key: str) -> bool:
        return await aiofiles.os.path.isfile(self._object_path(key))
