"""
Merged-block bundle model.

A bundle is one store object holding a contiguous run of blocks.
"""

from .codec import BlockDecoder, JsonlBlockDecoder
from .render import BlockObserver, format_block_stats, render_block_json, stats_printer
from .types import Block, BlockRef
from .writer import BundleWriter

__all__ = [
    # Block types
    "Block",
    "BlockRef",
    # Codec
    "BlockDecoder",
    "JsonlBlockDecoder",
    "BundleWriter",
    # Rendering
    "BlockObserver",
    "format_block_stats",
    "render_block_json",
    "stats_printer",
]
