"""
Blob stores holding merged-block bundles.

Example:
    >>> from merged_blocks_checker.store import open_store
    >>> store = open_store("file:///data/merged-blocks")
"""

from __future__ import annotations

from ..exceptions import StoreConstructionError
from .base import BlobStore, ObjectReader, WalkAction, WalkVisitor
from .local import LocalBlobStore
from .memory import InMemoryBlobStore


def open_store(url: str) -> BlobStore:
    """Create a store from a URL.

    ``file://path`` and bare paths give a LocalBlobStore, ``memory://`` an
    empty InMemoryBlobStore.

    Raises:
        StoreConstructionError: For empty URLs or unsupported schemes
    """
    if not url:
        raise StoreConstructionError(url, "empty store URL")

    scheme, sep, rest = url.partition("://")
    if not sep:
        return LocalBlobStore(url)
    if scheme == "file":
        if not rest:
            raise StoreConstructionError(url, "missing path")
        return LocalBlobStore(rest)
    if scheme == "memory":
        return InMemoryBlobStore(url=url)

    raise StoreConstructionError(url, f"unsupported scheme {scheme!r}")


__all__ = [
    "BlobStore",
    "ObjectReader",
    "WalkAction",
    "WalkVisitor",
    "LocalBlobStore",
    "InMemoryBlobStore",
    "open_store",
]
