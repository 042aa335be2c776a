"""
Merged Blocks Checker

Integrity checks for merged-block archives: fixed-size bundles of
consecutive blocks stored as individual objects in a blob store.

Detects:
- Holes: bundles missing from the numeric sequence
- Fork breakage: decoded blocks that do not link back to the last irreversible block
- Incomplete coverage of the requested range

Usage:

    >>> from merged_blocks_checker import BlockRange, check_merged_blocks, open_store
    >>> store = open_store("file:///data/merged-blocks")
    >>> summary = await check_merged_blocks(store, 100, BlockRange(0, 1_000_000))
    >>> summary.hole_found
    False

Deep checks decode every block and verify chain linkability:

    >>> summary = await check_merged_blocks(
    ...     store, 100, BlockRange.parse("0:+10000"), print_details="stats"
    ... )
"""

from .blocks import Block, BlockDecoder, BlockRef, BundleWriter, JsonlBlockDecoder
from .check import (
    CheckSummary,
    ContinuityTracker,
    EventKind,
    ForkLinkabilityTracker,
    PrintDetails,
    ReportEvent,
    Reporter,
    SegmentValidator,
    check_merged_blocks,
    run_check,
)
from .config import CheckConfig
from .exceptions import (
    BlockDecodeError,
    CheckerError,
    ConfigError,
    InvalidRangeError,
    StorageIOError,
    StoreConstructionError,
    StoreError,
)
from .forkdb import ForkDatabase, LinkedForkDatabase
from .keys import BundleKeyParser, FixedWidthDecimalKeyParser
from .ranges import (
    BlockRange,
    round_to_bundle_end,
    round_to_bundle_start,
    walk_block_prefix,
)
from .store import BlobStore, InMemoryBlobStore, LocalBlobStore, WalkAction, open_store

__all__ = [
    # Entry points
    "check_merged_blocks",
    "run_check",
    "CheckConfig",
    # Ranges and keys
    "BlockRange",
    "round_to_bundle_start",
    "round_to_bundle_end",
    "walk_block_prefix",
    "BundleKeyParser",
    "FixedWidthDecimalKeyParser",
    # Check components
    "ContinuityTracker",
    "ForkLinkabilityTracker",
    "SegmentValidator",
    "Reporter",
    "ReportEvent",
    "EventKind",
    "CheckSummary",
    "PrintDetails",
    # Collaborators
    "BlobStore",
    "LocalBlobStore",
    "InMemoryBlobStore",
    "WalkAction",
    "open_store",
    "Block",
    "BlockRef",
    "BlockDecoder",
    "JsonlBlockDecoder",
    "BundleWriter",
    "ForkDatabase",
    "LinkedForkDatabase",
    # Exceptions
    "CheckerError",
    "InvalidRangeError",
    "ConfigError",
    "StoreError",
    "StoreConstructionError",
    "StorageIOError",
    "BlockDecodeError",
]

__version__ = "0.1.0"
