"""
Merged blocks check orchestration.

Wires the range, prefix pruning, continuity tracking and (for deep
checks) segment validation around one ordered store walk, then renders
the summary. Bundles are processed strictly one after the other: both
hole detection and fork linkability depend on that order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TextIO

from ..blocks.codec import BlockDecoder
from ..blocks.render import BlockObserver, stats_printer
from ..exceptions import CheckerError, StoreError
from ..forkdb import ForkDatabase
from ..keys import BundleKeyParser, FixedWidthDecimalKeyParser
from ..logging_utils import CheckLoggerAdapter
from ..ranges import BlockRange, require_resolved, walk_block_prefix
from ..store import BlobStore, open_store
from .continuity import PROGRESS_INTERVAL, ContinuityTracker
from .forks import ForkLinkabilityTracker
from .modes import PrintDetails
from .report import CheckSummary, Reporter, ReportListener
from .segment import SegmentValidator

if TYPE_CHECKING:
    from ..config import CheckConfig

logger = logging.getLogger(__name__)


async def check_merged_blocks(
    store: BlobStore,
    bundle_size: int,
    block_range: BlockRange,
    *,
    print_details: PrintDetails | str = PrintDetails.NONE,
    block_printer: BlockObserver | None = None,
    key_parser: BundleKeyParser | None = None,
    decoder: BlockDecoder | None = None,
    fork_db: ForkDatabase | None = None,
    first_streamable_block: int = 0,
    progress_interval: int = PROGRESS_INTERVAL,
    out: TextIO | None = None,
    listener: ReportListener | None = None,
) -> CheckSummary:
    """Check a merged-blocks store for holes and fork breakage.

    Args:
        store: Store holding the bundles
        bundle_size: Blocks per bundle
        block_range: Range to check; must be resolved
        print_details: NONE lists keys only; STATS and FULL decode every block
        block_printer: Observer called per block in STATS mode
            (default: one-line summaries written to ``out``)
        key_parser: Bundle key format (default: 10-digit zero-padded decimal)
        decoder: Bundle decoder (default: JSONL)
        fork_db: Linking strategy for deep checks (default: LinkedForkDatabase)
        first_streamable_block: Lowest block the archive is expected to hold
        progress_interval: Bundles between progress coverage lines
        out: Report destination (default: stdout)
        listener: Receives every report event as it is emitted

    Returns:
        The run's summary

    Raises:
        InvalidRangeError: If the range is not resolved
        StoreError: If the store cannot be listed
    """
    require_resolved(block_range)
    if bundle_size < 1:
        raise ValueError(f"bundle_size must be >= 1, got {bundle_size}")

    print_details = PrintDetails.parse(print_details)
    key_parser = key_parser or FixedWidthDecimalKeyParser()
    log = CheckLoggerAdapter(logger, {"store_url": store.url, "bundle_size": bundle_size})

    reporter = Reporter(out=out, listener=listener)
    reporter.start(store.url, print_details.reads_blocks)

    validator: SegmentValidator | None = None
    if print_details.reads_blocks:
        if print_details is PrintDetails.STATS and block_printer is None:
            block_printer = stats_printer(out)
        validator = SegmentValidator(
            store,
            block_range,
            bundle_size,
            reporter,
            ForkLinkabilityTracker(reporter, fork_db),
            print_details=print_details,
            block_printer=block_printer,
            decoder=decoder,
            first_streamable_block=first_streamable_block,
        )

    tracker = ContinuityTracker(
        block_range,
        bundle_size,
        reporter,
        segment_validator=validator,
        key_parser=key_parser,
        progress_interval=progress_interval,
    )

    walk_prefix = walk_block_prefix(block_range, bundle_size, key_parser.width)
    log.debug(
        "Walking merged blocks",
        extra={"block_range": str(block_range), "walk_prefix": walk_prefix},
    )

    try:
        await store.walk(walk_prefix, tracker.visit)
    except CheckerError:
        raise
    except OSError as e:
        raise StoreError(f"Unable to walk store {store.url}", store.url, e) from e

    tracker.finish()
    summary = reporter.summarize(
        block_range, tracker.state, tracker.fork_state, first_streamable_block
    )
    reporter.render_summary(summary)

    log.info(
        f"Checked {summary.bundle_count} bundles, holes found: {summary.hole_found}",
        extra={"summary": summary.to_dict()},
    )
    return summary


async def run_check(
    config: CheckConfig,
    *,
    out: TextIO | None = None,
    listener: ReportListener | None = None,
    block_printer: BlockObserver | None = None,
) -> CheckSummary:
    """Build the store described by ``config`` and run the check.

    Raises:
        StoreConstructionError: If the store URL cannot be used
    """
    store = open_store(config.resolved_store_url())
    try:
        return await check_merged_blocks(
            store,
            config.bundle_size,
            config.block_range,
            print_details=config.print_details,
            block_printer=block_printer,
            key_parser=FixedWidthDecimalKeyParser(config.key_width),
            first_streamable_block=config.first_streamable_block,
            progress_interval=config.progress_interval,
            out=out,
            listener=listener,
        )
    finally:
        await store.close()
