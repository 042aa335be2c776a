"""
Mutable state of one check run.

A state object is created when a run starts, owned by the single task
walking the store, mutated as bundles and blocks are observed, and read
once when the summary is rendered. It is never persisted. Its size does
not depend on how many bundles were walked.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..blocks.types import Block
from ..ranges import BlockRange, round_to_bundle_start


@dataclass
class ForkTrackingState:
    """Linkability progress of the decoded block stream.

    Attributes:
        last_linked_block: Most recent block that resolved back to the LIB
        first_unlinkable_block: First block of the current unlinkable run
        unlinkable_run_length: Length of the current unlinkable run
        unlinkable_total: Unlinkable blocks seen over the whole run
    """

    last_linked_block: Block | None = None
    first_unlinkable_block: Block | None = None
    unlinkable_run_length: int = 0
    unlinkable_total: int = 0

    @property
    def last_linked_number(self) -> int | None:
        if self.last_linked_block is None:
            return None
        return self.last_linked_block.number

    def broken_before(self, highest_block: int) -> bool:
        """Whether linking stopped before ``highest_block`` was reached."""
        if self.last_linked_block is None:
            return self.unlinkable_total > 0
        return self.last_linked_block.number < highest_block


@dataclass
class TrackingState:
    """Continuity progress of the bundle walk.

    Attributes:
        expected_next_base: Base number the next bundle should have
        current_run_start: First block of the run not reported yet
        lowest_block_seen: Lowest block number observed (None before any bundle)
        highest_block_seen: Highest block number observed
        hole_found: Whether any missing bundle was detected
        bundle_count: In-range bundles processed
        stopped_early: Whether the walk stopped at the range's upper bound
    """

    expected_next_base: int
    current_run_start: int
    lowest_block_seen: int | None = None
    highest_block_seen: int | None = None
    hole_found: bool = False
    bundle_count: int = 0
    stopped_early: bool = False

    @classmethod
    def start(cls, block_range: BlockRange, bundle_size: int) -> TrackingState:
        return cls(
            expected_next_base=round_to_bundle_start(block_range.start, bundle_size),
            current_run_start=block_range.start,
        )

    def observe_span(self, lowest: int, highest: int) -> None:
        """Widen the observed block span."""
        if self.lowest_block_seen is None or lowest < self.lowest_block_seen:
            self.lowest_block_seen = lowest
        if self.highest_block_seen is None or highest > self.highest_block_seen:
            self.highest_block_seen = highest
