"""
Bundle writer.

Encodes runs of blocks into bundle objects in the JSONL format read by
``JsonlBlockDecoder`` and stores them under their bundle key.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from ..keys import BundleKeyParser, FixedWidthDecimalKeyParser
from ..ranges import round_to_bundle_start
from ..store.base import BlobStore
from .types import Block


class BundleWriter:
    """Creates bundle objects from blocks.

    Blocks handed to one bundle must be in increasing number order and all
    belong to the same bundle.
    """

    def __init__(
        self,
        store: BlobStore,
        bundle_size: int = 100,
        key_parser: BundleKeyParser | None = None,
    ) -> None:
        """Initialize the bundle writer.

        Args:
            store: Destination store
            bundle_size: Blocks per bundle
            key_parser: Key format (default: 10-digit zero-padded decimal)
        """
        if bundle_size < 1:
            raise ValueError(f"bundle_size must be >= 1, got {bundle_size}")
        self.store = store
        self.bundle_size = bundle_size
        self.key_parser = key_parser or FixedWidthDecimalKeyParser()

    @staticmethod
    def encode(blocks: Iterable[Block]) -> bytes:
        """Encode blocks as JSON lines."""
        lines = [json.dumps(block.to_dict(), sort_keys=True) for block in blocks]
        return ("\n".join(lines) + "\n").encode() if lines else b""

    def bundle_base(self, blocks: list[Block]) -> int:
        """Validate a bundle's blocks and return its base number."""
        if not blocks:
            raise ValueError("Cannot derive a bundle base from an empty block list")

        base = round_to_bundle_start(blocks[0].number, self.bundle_size)
        previous = -1
        for block in blocks:
            if block.number <= previous:
                raise ValueError(
                    f"Blocks must be in increasing order, got #{block.number} after #{previous}"
                )
            if round_to_bundle_start(block.number, self.bundle_size) != base:
                raise ValueError(f"Block #{block.number} does not belong to bundle {base}")
            previous = block.number
        return base

    async def write_bundle(self, blocks: list[Block], base_number: int | None = None) -> str:
        """Write one bundle.

        Args:
            blocks: Blocks of the bundle
            base_number: Explicit base (required for an empty bundle)

        Returns:
            The key the bundle was written under
        """
        if base_number is None:
            base_number = self.bundle_base(blocks)
        elif blocks and self.bundle_base(blocks) != base_number:
            raise ValueError(f"Blocks do not belong to bundle {base_number}")

        key = self.key_parser.format(base_number)
        await self.store.write_object(key, self.encode(blocks))
        return key

    async def write_blocks(self, blocks: Iterable[Block]) -> list[str]:
        """Split an ordered block stream into bundles and write each one.

        Returns:
            Keys written, in order
        """
        keys: list[str] = []
        pending: list[Block] = []
        current_base: int | None = None

        for block in blocks:
            base = round_to_bundle_start(block.number, self.bundle_size)
            if current_base is not None and base != current_base:
                keys.append(await self.write_bundle(pending, current_base))
                pending = []
            current_base = base
            pending.append(block)

        if pending:
            keys.append(await self.write_bundle(pending, current_base))
        return keys
