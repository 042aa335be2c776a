"""
Check report: incremental coverage lines and the end-of-run summary.

Lines are written as soon as they are known, so a check over hundreds of
millions of blocks gives feedback while it runs. The reporter keeps only
counters; events are forwarded to an optional listener and then dropped.
"""

from __future__ import annotations

import logging
import sys
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TextIO

from ..ranges import BlockRange, closed_range_label, pretty_block_num, reproc_range
from .state import ForkTrackingState, TrackingState

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Kinds of report events."""

    # Ranges
    COVERED = "covered"
    MISSING = "missing"
    FORK_ISSUE = "fork_issue"

    # Informational warnings
    SHORT_SEGMENT = "short_segment"
    UNLINKABLE_BLOCK = "unlinkable_block"
    LARGE_UNLINKABLE_GAP = "large_unlinkable_gap"
    OVERLAPPING_BUNDLE = "overlapping_bundle"
    UNPRINTABLE_BLOCK = "unprintable_block"

    # Per-bundle recoverable errors
    UNREADABLE_SEGMENT = "unreadable_segment"


RANGE_KINDS = frozenset({EventKind.COVERED, EventKind.MISSING, EventKind.FORK_ISSUE})


@dataclass(frozen=True)
class ReportEvent:
    """A single report line and its structured content.

    Attributes:
        kind: Event kind
        line: Rendered human-readable line
        start: First block of the span (range events)
        end: Last block of the span, inclusive (range events)
        key: Bundle key the event is about, if any
        block_number: Block the event is about, if any
    """

    kind: EventKind
    line: str
    start: int | None = None
    end: int | None = None
    key: str | None = None
    block_number: int | None = None


ReportListener = Callable[[ReportEvent], None]


@dataclass
class CheckSummary:
    """Final verdict of a check run."""

    block_range: BlockRange
    hole_found: bool
    bundle_count: int
    lowest_block_seen: int | None
    highest_block_seen: int | None
    incomplete_range: bool
    fork_issue: bool
    last_linkable_block: int | None
    stopped_early: bool = False
    unreadable_segments: int = 0
    warnings: dict[str, int] = field(default_factory=dict)

    @property
    def clean(self) -> bool:
        return not (
            self.hole_found
            or self.fork_issue
            or self.incomplete_range
            or self.unreadable_segments
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "block_range": str(self.block_range),
            "hole_found": self.hole_found,
            "bundle_count": self.bundle_count,
            "lowest_block_seen": self.lowest_block_seen,
            "highest_block_seen": self.highest_block_seen,
            "incomplete_range": self.incomplete_range,
            "fork_issue": self.fork_issue,
            "last_linkable_block": self.last_linkable_block,
            "stopped_early": self.stopped_early,
            "unreadable_segments": self.unreadable_segments,
            "warnings": dict(self.warnings),
        }


class Reporter:
    """Writes report lines and accumulates the run's verdict counters."""

    def __init__(self, out: TextIO | None = None, listener: ReportListener | None = None) -> None:
        self._out = out
        self._listener = listener
        self.counts: Counter[EventKind] = Counter()

    def _emit(self, event: ReportEvent) -> None:
        self.counts[event.kind] += 1
        self.write(event.line)
        if self._listener is not None:
            self._listener(event)

    def write(self, line: str = "") -> None:
        print(line, file=self._out or sys.stdout)

    def start(self, store_url: str, reads_blocks: bool) -> None:
        self.write(f"Checking block holes on {store_url}")
        if reads_blocks:
            self.write(
                "Detailed printing requested: All block files will be read and checked "
                "for continuity. This may take a while..."
            )

    # Ranges

    def covered(self, start: int, end: int) -> None:
        self._emit(
            ReportEvent(EventKind.COVERED, f"✅ Range {closed_range_label(start, end)}", start, end)
        )

    def missing(self, start: int, end: int) -> None:
        line = f"❌ Range {closed_range_label(start, end)} (Missing, [{reproc_range(start, end)}])"
        self._emit(ReportEvent(EventKind.MISSING, line, start, end))

    def fork_issue(self, start: int, end: int, last_linkable: int | None) -> None:
        last = "none" if last_linkable is None else str(last_linkable)
        line = (
            f"🔶 Range {closed_range_label(start, end)} has issues with forks, "
            f"last linkable block number: {last}"
        )
        self._emit(
            ReportEvent(EventKind.FORK_ISSUE, line, start, end, block_number=last_linkable)
        )

    # Warnings

    def short_segment(self, key: str, count: int, expected: int) -> None:
        line = (
            f"🔶 Segment {key} contained only {count} blocks (< {expected}), "
            "this can happen on some chains"
        )
        self._emit(ReportEvent(EventKind.SHORT_SEGMENT, line, key=key))

    def unlinkable_block(self, number: int) -> None:
        line = f"🔶 Block #{number} is not linkable at this point"
        self._emit(ReportEvent(EventKind.UNLINKABLE_BLOCK, line, block_number=number))

    def large_unlinkable_gap(
        self, run_length: int, last_linked: int | None, first_unlinkable: int
    ) -> None:
        last = "none" if last_linked is None else str(last_linked)
        line = (
            f"❌ Large gap of {run_length} unlinkable blocks found in chain. "
            f"Last linked block: {last}, first Unlinkable block: {first_unlinkable}."
        )
        self._emit(
            ReportEvent(
                EventKind.LARGE_UNLINKABLE_GAP,
                line,
                start=first_unlinkable,
                block_number=last_linked,
            )
        )

    def overlapping_bundle(self, key: str, base: int, expected: int) -> None:
        line = (
            f"🔶 Segment {key} (base {base}) overlaps blocks already covered, "
            f"expected base {expected}, skipping"
        )
        self._emit(ReportEvent(EventKind.OVERLAPPING_BUNDLE, line, key=key))

    def unprintable_block(self, label: str, number: int, error: Exception) -> None:
        line = f"❌ Unable to print full block {label}: {error}"
        self._emit(ReportEvent(EventKind.UNPRINTABLE_BLOCK, line, block_number=number))

    def unreadable_segment(
        self, key: str, error: Exception, blocks_read: int | None = None
    ) -> None:
        if blocks_read is None:
            line = f"❌ Unable to read blocks segment {key}: {error}"
        else:
            line = (
                f"❌ Unable to read all blocks from segment {key} "
                f"after reading {blocks_read} blocks: {error}"
            )
        self._emit(ReportEvent(EventKind.UNREADABLE_SEGMENT, line, key=key))

    # Summary

    def summarize(
        self,
        block_range: BlockRange,
        state: TrackingState,
        fork_state: ForkTrackingState | None,
        first_streamable_block: int = 0,
    ) -> CheckSummary:
        """Derive the final verdict from the run state."""
        lowest = state.lowest_block_seen
        highest = state.highest_block_seen

        if highest is None or lowest is None:
            incomplete = True
        elif block_range.stop is not None:
            incomplete = highest < block_range.stop - 1 or (
                lowest > block_range.start and lowest > first_streamable_block
            )
        else:
            incomplete = False

        last_linked = fork_state.last_linked_number if fork_state is not None else None
        fork_issue = False
        if fork_state is not None and highest is not None:
            fork_issue = fork_state.broken_before(highest)

        return CheckSummary(
            block_range=block_range,
            hole_found=state.hole_found,
            bundle_count=state.bundle_count,
            lowest_block_seen=lowest,
            highest_block_seen=highest,
            incomplete_range=incomplete,
            fork_issue=fork_issue,
            last_linkable_block=last_linked,
            stopped_early=state.stopped_early,
            unreadable_segments=self.counts[EventKind.UNREADABLE_SEGMENT],
            warnings={kind.value: n for kind, n in self.counts.items() if kind not in RANGE_KINDS},
        )

    def render_summary(self, summary: CheckSummary) -> None:
        logger.debug(
            "Checking incomplete range",
            extra={
                "block_range": str(summary.block_range),
                "range_unbounded": summary.block_range.is_open(),
                "lowest_block_seen": summary.lowest_block_seen,
                "highest_block_seen": summary.highest_block_seen,
            },
        )

        self.write()
        self.write("Summary:")

        if summary.highest_block_seen is None or summary.lowest_block_seen is None:
            self.write(f"> 🔶 No merged blocks found for range {summary.block_range}")
        elif summary.incomplete_range:
            self.write(
                f"> 🔶 Incomplete range {summary.block_range}, "
                f"started at block {pretty_block_num(summary.lowest_block_seen)} "
                f"and stopped at block: {pretty_block_num(summary.highest_block_seen)}"
            )

        if summary.hole_found:
            self.write("> 🆘 Holes found!")
        else:
            self.write("> 🆗 No hole found")

        if summary.unreadable_segments:
            self.write(f"> ❌ {summary.unreadable_segments} segment(s) could not be read")

        if summary.fork_issue:
            if summary.last_linkable_block is None:
                self.write("> 🔶 Fork issues found, no block could be linked")
            else:
                self.write(
                    "> 🔶 Fork issues found, last linkable block number: "
                    f"{summary.last_linkable_block}"
                )
