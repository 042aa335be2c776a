"""
Bundle decoders.

A decoder turns one bundle object into blocks, one at a time, so a bundle
is never loaded whole. The default format is JSONL: one block per line.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from ..exceptions import BlockDecodeError
from ..store.base import ObjectReader
from .types import Block


class BlockDecoder(ABC):
    """Sequential decoder for a single bundle."""

    @abstractmethod
    def decode(self, reader: ObjectReader, key: str = "") -> AsyncIterator[Block]:
        """Yield the bundle's blocks in stored order.

        Args:
            reader: Open reader on the bundle object
            key: Bundle key, used for error context

        Raises:
            BlockDecodeError: When the stream is corrupt; blocks yielded before
                the error remain valid
        """
        ...


class JsonlBlockDecoder(BlockDecoder):
    """Decodes bundles stored as JSON lines."""

    async def decode(self, reader: ObjectReader, key: str = "") -> AsyncIterator[Block]:
        blocks_read = 0
        async for raw in reader:
            line = raw.strip()
            if not line:
                continue

            try:
                data = json.loads(line)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise BlockDecodeError(key, blocks_read, f"invalid JSON: {e}") from e
            if not isinstance(data, dict):
                raise BlockDecodeError(key, blocks_read, "block is not a JSON object")

            try:
                block = Block.from_dict(data)
            except KeyError as e:
                raise BlockDecodeError(key, blocks_read, f"missing field {e}") from e
            except (TypeError, ValueError) as e:
                raise BlockDecodeError(key, blocks_read, str(e)) from e

            blocks_read += 1
            yield block
