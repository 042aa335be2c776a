"""
Abstract blob store interface.

Defines the contract the checker needs from a merged-blocks store:
ordered key listing under a prefix with cooperative early stop, and
streaming reads of individual objects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from enum import Enum


class WalkAction(Enum):
    """Result returned by a walk visitor for each listed key."""

    CONTINUE = "continue"
    STOP = "stop"


WalkVisitor = Callable[[str], Awaitable[WalkAction]]


class ObjectReader(ABC):
    """Streaming, line-oriented reader over one store object."""

    @abstractmethod
    async def readline(self) -> bytes:
        """Read the next line, including its terminator.

        Returns:
            The line, or ``b""`` at end of stream
        """
        ...

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_lines()

    async def _iter_lines(self) -> AsyncIterator[bytes]:
        while True:
            line = await self.readline()
            if not line:
                return
            yield line


class BlobStore(ABC):
    """Abstract interface for blob stores holding merged-block bundles.

    Keys are listed in lexicographic order. With fixed-width zero-padded
    bundle keys this is also numeric order, which the continuity check
    depends on.
    """

    url: str

    @abstractmethod
    async def walk(self, prefix: str, visitor: WalkVisitor) -> None:
        """List keys starting with ``prefix`` in order, calling ``visitor`` on each.

        The walk ends when keys are exhausted or the visitor returns
        ``WalkAction.STOP``.

        Raises:
            StoreError: If the listing itself fails
        """
        ...

    @abstractmethod
    def open_object(self, key: str) -> AbstractAsyncContextManager[ObjectReader]:
        """Open an object for streaming read.

        Usage::

            async with store.open_object(key) as reader:
                async for line in reader:
                    ...

        Raises:
            StorageIOError: If the object cannot be opened or read
        """
        ...

    @abstractmethod
    async def write_object(self, key: str, data: bytes) -> None:
        """Write (or replace) an object.

        Raises:
            StorageIOError: If the write fails
        """
        ...

    @abstractmethod
    async def object_exists(self, key: str) -> bool:
        """Check whether an object exists."""
        ...

    async def close(self) -> None:
        """Release store resources (no-op by default)."""
        return None
