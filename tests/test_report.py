"""Tests for print modes and the reporter."""

from __future__ import annotations

import io

import pytest

from merged_blocks_checker.check import (
    EventKind,
    ForkTrackingState,
    PrintDetails,
    Reporter,
    TrackingState,
)
from merged_blocks_checker.ranges import BlockRange


class TestPrintDetails:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("none", PrintDetails.NONE), ("Stats", PrintDetails.STATS), (" FULL ", PrintDetails.FULL)],
    )
    def test_parse(self, name: str, expected: PrintDetails) -> None:
        assert PrintDetails.parse(name) is expected

    def test_parse_passes_members_through(self) -> None:
        assert PrintDetails.parse(PrintDetails.FULL) is PrintDetails.FULL

    def test_parse_invalid(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            PrintDetails.parse("verbose")

        assert str(exc_info.value) == "verbose is not a valid PrintDetails, try [none, stats, full]"

    def test_reads_blocks(self) -> None:
        assert not PrintDetails.NONE.reads_blocks
        assert PrintDetails.STATS.reads_blocks
        assert PrintDetails.FULL.reads_blocks


def make_state(block_range: BlockRange, lowest: int | None, highest: int | None) -> TrackingState:
    state = TrackingState.start(block_range, 100)
    if lowest is not None and highest is not None:
        state.observe_span(lowest, highest)
    return state


class TestReporter:
    def test_lines_and_counts(self, recorder) -> None:
        out = io.StringIO()
        reporter = Reporter(out=out, listener=recorder)

        reporter.covered(0, 199)
        reporter.missing(200, 299)
        reporter.short_segment("0000000300", 40, 100)

        assert out.getvalue().splitlines() == [
            "✅ Range #0 - #199",
            "❌ Range #200 - #299 (Missing, [200:300])",
            "🔶 Segment 0000000300 contained only 40 blocks (< 100), "
            "this can happen on some chains",
        ]
        assert reporter.counts[EventKind.COVERED] == 1
        assert len(recorder.events) == 3

    def test_fork_issue_without_linked_block(self) -> None:
        out = io.StringIO()
        Reporter(out=out).fork_issue(0, 99, None)

        assert out.getvalue() == (
            "🔶 Range #0 - #99 has issues with forks, last linkable block number: none\n"
        )

    def test_header(self) -> None:
        out = io.StringIO()
        reporter = Reporter(out=out)

        reporter.start("memory://", reads_blocks=False)
        assert out.getvalue() == "Checking block holes on memory://\n"

        reporter.start("memory://", reads_blocks=True)
        assert "All block files will be read" in out.getvalue()


class TestSummarize:
    def test_complete_closed_range(self) -> None:
        block_range = BlockRange(0, 300)
        summary = Reporter(out=io.StringIO()).summarize(
            block_range, make_state(block_range, 0, 299), None
        )

        assert not summary.incomplete_range
        assert not summary.fork_issue
        assert summary.clean

    def test_stops_short_of_range_end(self) -> None:
        block_range = BlockRange(0, 300)
        summary = Reporter(out=io.StringIO()).summarize(
            block_range, make_state(block_range, 0, 199), None
        )

        assert summary.incomplete_range

    def test_starts_after_range_start(self) -> None:
        block_range = BlockRange(0, 300)
        reporter = Reporter(out=io.StringIO())
        state = make_state(block_range, 100, 299)

        assert reporter.summarize(block_range, state, None).incomplete_range
        assert not reporter.summarize(
            block_range, state, None, first_streamable_block=100
        ).incomplete_range

    def test_open_range_is_never_incomplete(self) -> None:
        block_range = BlockRange(0)
        summary = Reporter(out=io.StringIO()).summarize(
            block_range, make_state(block_range, 500, 999), None
        )

        assert not summary.incomplete_range

    def test_nothing_seen_is_incomplete(self) -> None:
        block_range = BlockRange(0)
        summary = Reporter(out=io.StringIO()).summarize(
            block_range, make_state(block_range, None, None), ForkTrackingState()
        )

        assert summary.incomplete_range
        assert not summary.fork_issue

    def test_fork_issue(self, block) -> None:
        block_range = BlockRange(0, 300)
        fork_state = ForkTrackingState(last_linked_block=block(149), unlinkable_total=150)

        summary = Reporter(out=io.StringIO()).summarize(
            block_range, make_state(block_range, 0, 299), fork_state
        )

        assert summary.fork_issue
        assert summary.last_linkable_block == 149
        assert not summary.clean

    def test_warnings_exclude_ranges(self) -> None:
        reporter = Reporter(out=io.StringIO())
        reporter.covered(0, 99)
        reporter.unlinkable_block(5)
        reporter.unlinkable_block(6)

        block_range = BlockRange(0)
        summary = reporter.summarize(block_range, make_state(block_range, 0, 99), None)

        assert summary.warnings == {"unlinkable_block": 2}
        assert summary.to_dict()["warnings"] == {"unlinkable_block": 2}
        assert summary.to_dict()["block_range"] == "[0, +∞)"

    def test_unreadable_segment_fails_verdict(self) -> None:
        out = io.StringIO()
        reporter = Reporter(out=out)
        reporter.unreadable_segment("0000000100", ValueError("bad line"), 50)

        block_range = BlockRange(0)
        summary = reporter.summarize(block_range, make_state(block_range, 0, 149), None)
        reporter.render_summary(summary)

        assert summary.unreadable_segments == 1
        assert not summary.clean
        assert summary.to_dict()["unreadable_segments"] == 1
        assert out.getvalue().splitlines()[-2:] == [
            "> 🆗 No hole found",
            "> ❌ 1 segment(s) could not be read",
        ]
