"""
Continuity (hole) detection over the ordered bundle listing.

Bundle keys arrive in increasing numeric order. Each bundle is compared
with the base expected after the previous one; a mismatch closes the
current covered run and reports the missing span. Covered runs are also
flushed every ``progress_interval`` bundles, so the tracker holds a single
open run no matter how large the archive is.
"""

from __future__ import annotations

import logging

from ..keys import BundleKeyParser, FixedWidthDecimalKeyParser
from ..ranges import BlockRange, round_to_bundle_end
from ..store.base import WalkAction
from .report import Reporter
from .segment import SegmentValidator
from .state import ForkTrackingState, TrackingState

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 10_000


class ContinuityTracker:
    """Walk visitor classifying the archive as contiguous or holed.

    When a segment validator is given (deep validation), every in-range
    bundle is decoded and the observed span comes from its blocks; otherwise
    it comes from the bundle's nominal span.
    """

    def __init__(
        self,
        block_range: BlockRange,
        bundle_size: int,
        reporter: Reporter,
        segment_validator: SegmentValidator | None = None,
        key_parser: BundleKeyParser | None = None,
        state: TrackingState | None = None,
        progress_interval: int = PROGRESS_INTERVAL,
    ) -> None:
        if bundle_size < 1:
            raise ValueError(f"bundle_size must be >= 1, got {bundle_size}")
        if progress_interval < 1:
            raise ValueError(f"progress_interval must be >= 1, got {progress_interval}")

        self.block_range = block_range
        self.bundle_size = bundle_size
        self.reporter = reporter
        self.segment_validator = segment_validator
        self.key_parser = key_parser or FixedWidthDecimalKeyParser()
        self.state = state if state is not None else TrackingState.start(block_range, bundle_size)
        self.progress_interval = progress_interval

    @property
    def fork_state(self) -> ForkTrackingState | None:
        if self.segment_validator is None:
            return None
        return self.segment_validator.fork_tracker.state

    async def visit(self, key: str) -> WalkAction:
        """Store walk visitor: parse the key and observe the bundle."""
        base_number = self.key_parser.parse(key)
        if base_number is None:
            logger.debug(f"Skipping non-bundle key {key}")
            return WalkAction.CONTINUE

        logger.debug(f"Received merged blocks {key}")
        return await self.observe_bundle(key, base_number)

    async def observe_bundle(self, key: str, base_number: int) -> WalkAction:
        """Process one bundle, in increasing base number order.

        Returns:
            WalkAction.STOP once the closed range's upper bound is reached
        """
        size = self.bundle_size
        state = self.state

        if base_number + size - 1 < self.block_range.start:
            logger.debug(
                f"Bundle {base_number} ends before range start {self.block_range.start}, ignoring"
            )
            return WalkAction.CONTINUE

        if base_number < state.expected_next_base:
            self.reporter.overlapping_bundle(key, base_number, state.expected_next_base)
            return WalkAction.CONTINUE

        state.bundle_count += 1

        if base_number != state.expected_next_base:
            # The first bundle has no previous run to close
            if state.bundle_count > 1:
                self._flush_covered(
                    state.current_run_start,
                    round_to_bundle_end(state.expected_next_base - size, size),
                )
            self.reporter.missing(
                state.expected_next_base, round_to_bundle_end(base_number - size, size)
            )
            state.current_run_start = base_number
            state.hole_found = True

        state.expected_next_base = base_number + size

        if self.segment_validator is not None:
            segment = await self.segment_validator.validate(key, base_number)
            if segment.lowest_block_seen is not None and segment.highest_block_seen is not None:
                state.observe_span(segment.lowest_block_seen, segment.highest_block_seen)
        else:
            state.observe_span(base_number, base_number + size - 1)

        if state.bundle_count % self.progress_interval == 0:
            self._flush_covered(state.current_run_start, round_to_bundle_end(base_number, size))
            state.current_run_start = base_number + size

        stop = self.block_range.stop
        if stop is not None and round_to_bundle_end(base_number, size) >= stop - 1:
            logger.debug(f"Bundle {base_number} reaches range stop {stop}, stopping walk")
            state.stopped_early = True
            return WalkAction.STOP

        return WalkAction.CONTINUE

    def finish(self) -> None:
        """Report the trailing run once the walk has ended."""
        state = self.state
        highest = state.highest_block_seen
        if highest is None or state.current_run_start > highest:
            return

        fork_state = self.fork_state
        if fork_state is not None and fork_state.broken_before(highest):
            self.reporter.fork_issue(
                state.current_run_start, highest, fork_state.last_linked_number
            )
        else:
            self.reporter.covered(state.current_run_start, highest)

    def _flush_covered(self, start: int, end: int) -> None:
        if start <= end:
            self.reporter.covered(start, end)
