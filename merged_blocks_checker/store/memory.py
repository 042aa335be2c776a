"""In-memory blob store, for tests and small fixtures."""

from __future__ import annotations

import io
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from ..exceptions import StorageIOError
from .base import BlobStore, ObjectReader, WalkAction, WalkVisitor


class MemoryObjectReader(ObjectReader):
    def __init__(self, data: bytes) -> None:
        self._buffer = io.BytesIO(data)

    async def readline(self) -> bytes:
        return self._buffer.readline()


class InMemoryBlobStore(BlobStore):
    """Dict-backed store.

    ``walk_calls`` and ``opened_keys`` record what a check touched, which lets
    tests assert prefix pruning and early stops.
    """

    def __init__(self, objects: dict[str, bytes] | None = None, url: str = "memory://") -> None:
        self.url = url
        self._objects: dict[str, bytes] = dict(objects or {})
        self.walk_calls: list[str] = []
        self.listed_keys: list[str] = []
        self.opened_keys: list[str] = []

    async def walk(self, prefix: str, visitor: WalkVisitor) -> None:
        self.walk_calls.append(prefix)
        for key in sorted(k for k in self._objects if k.startswith(prefix)):
            self.listed_keys.append(key)
            if await visitor(key) is WalkAction.STOP:
                return

    @asynccontextmanager
    async def open_object(self, key: str) -> AsyncIterator[ObjectReader]:
        if key not in self._objects:
            raise StorageIOError("open_object", key, FileNotFoundError(key))
        self.opened_keys.append(key)
        yield MemoryObjectReader(self._objects[key])

    async def write_object(self, key: str, data: bytes) -> None:
        self._objects[key] = bytes(data)

    async def object_exists(self, key: str) -> bool:
        return key in self._objects

    def keys(self) -> list[str]:
        return sorted(self._objects)
