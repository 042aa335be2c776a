"""End-to-end tests for the merged blocks check."""

from __future__ import annotations

import asyncio
import io
from pathlib import Path

import pytest

from merged_blocks_checker import (
    BlockRange,
    BundleWriter,
    CheckConfig,
    EventKind,
    InMemoryBlobStore,
    InvalidRangeError,
    LocalBlobStore,
    PrintDetails,
    check_merged_blocks,
    run_check,
)


async def run(store, block_range: BlockRange, **kwargs):
    out = io.StringIO()
    summary = await check_merged_blocks(store, 100, block_range, out=out, **kwargs)
    return summary, out.getvalue().splitlines()


class TestListingCheck:
    @pytest.mark.asyncio
    async def test_contiguous_range(self, bundle_store) -> None:
        store = await bundle_store([0, 100, 200])

        summary, lines = await run(store, BlockRange(0, 300))

        assert lines == [
            "Checking block holes on memory://",
            "✅ Range #0 - #299",
            "",
            "Summary:",
            "> 🆗 No hole found",
        ]
        assert summary.clean
        assert summary.bundle_count == 3
        assert summary.stopped_early

    @pytest.mark.asyncio
    async def test_hole(self, bundle_store) -> None:
        store = await bundle_store([0, 100, 300])

        summary, lines = await run(store, BlockRange(0, 400))

        assert lines[1:4] == [
            "✅ Range #0 - #199",
            "❌ Range #200 - #299 (Missing, [200:300])",
            "✅ Range #300 - #399",
        ]
        assert lines[-1] == "> 🆘 Holes found!"
        assert summary.hole_found
        assert not summary.clean

    @pytest.mark.asyncio
    async def test_repeated_runs_are_identical(self, bundle_store) -> None:
        store = await bundle_store([0, 100, 300, 400])

        first = await run(store, BlockRange(0, 500))
        second = await run(store, BlockRange(0, 500))

        assert first[1] == second[1]
        assert first[0].to_dict() == second[0].to_dict()

    @pytest.mark.asyncio
    async def test_incomplete_range(self, bundle_store) -> None:
        store = await bundle_store([0, 100])

        summary, lines = await run(store, BlockRange(0, 400))

        assert summary.incomplete_range
        assert not summary.stopped_early
        assert (
            "> 🔶 Incomplete range [0, 400), started at block #0 and stopped at block: #199"
            in lines
        )
        assert "> 🆗 No hole found" in lines

    @pytest.mark.asyncio
    async def test_no_blocks_found(self) -> None:
        summary, lines = await run(InMemoryBlobStore(), BlockRange(0, 400))

        assert summary.incomplete_range
        assert summary.highest_block_seen is None
        assert lines[1:] == [
            "",
            "Summary:",
            "> 🔶 No merged blocks found for range [0, 400)",
            "> 🆗 No hole found",
        ]

    @pytest.mark.asyncio
    async def test_first_streamable_block_is_not_incomplete(self, bundle_store) -> None:
        store = await bundle_store([100, 200])

        summary, _ = await run(store, BlockRange(100, 300), first_streamable_block=100)

        assert not summary.incomplete_range
        assert not summary.hole_found

    @pytest.mark.asyncio
    async def test_walk_prefix_prunes_listing(self, bundle_store) -> None:
        store = await bundle_store([0, 500, 1000, 1100])

        await run(store, BlockRange(1000, 1100))

        assert store.walk_calls == ["0000001"]
        assert store.listed_keys == ["0000001000"]

    @pytest.mark.asyncio
    async def test_listing_mode_reads_no_objects(self, bundle_store) -> None:
        store = await bundle_store([0, 100])

        await run(store, BlockRange(0, 200))

        assert store.opened_keys == []

    @pytest.mark.asyncio
    async def test_listener_receives_events(self, bundle_store, recorder) -> None:
        store = await bundle_store([0, 200])

        await run(store, BlockRange(0, 300), listener=recorder)

        assert recorder.spans(EventKind.COVERED, EventKind.MISSING) == [
            ("covered", 0, 99),
            ("missing", 100, 199),
            ("covered", 200, 299),
        ]

    @pytest.mark.asyncio
    async def test_unresolved_range(self, bundle_store) -> None:
        store = await bundle_store([0])

        with pytest.raises(InvalidRangeError):
            await run(store, BlockRange(-1000))

    @pytest.mark.asyncio
    async def test_invalid_bundle_size(self) -> None:
        with pytest.raises(ValueError):
            await check_merged_blocks(InMemoryBlobStore(), 0, BlockRange(0), out=io.StringIO())

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        class SlowStore(InMemoryBlobStore):
            async def walk(self, prefix, visitor):
                await asyncio.sleep(3600)

        task = asyncio.create_task(run(SlowStore(), BlockRange(0)))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestDeepCheck:
    @pytest.mark.asyncio
    async def test_clean_deep_check(self, bundle_store) -> None:
        store = await bundle_store([0, 100, 200])
        seen: list[int] = []

        summary, lines = await run(
            store,
            BlockRange(0, 300),
            print_details="stats",
            block_printer=lambda block: seen.append(block.number),
        )

        assert summary.clean
        assert summary.last_linkable_block == 299
        assert seen == list(range(300))
        assert lines[1].startswith("Detailed printing requested")
        assert "✅ Range #0 - #299" in lines

    @pytest.mark.asyncio
    async def test_default_stats_printer(self, bundle_store) -> None:
        store = await bundle_store([0])

        _, lines = await run(store, BlockRange(0, 100), print_details=PrintDetails.STATS)

        assert "Block #0 (0a) prev -1a, lib #0" in lines
        assert "Block #99 (99a) prev 98a, lib #89" in lines

    @pytest.mark.asyncio
    async def test_fork_break(self, chain, block) -> None:
        store = InMemoryBlobStore()
        writer = BundleWriter(store)
        await writer.write_bundle(chain(0, 100))
        broken = block(150, previous_id="149x")
        await writer.write_bundle(chain(100, 150) + [broken] + chain(151, 200))

        listing, _ = await run(store, BlockRange(0, 200), print_details=PrintDetails.NONE)
        assert listing.clean

        summary, lines = await run(
            store,
            BlockRange(0, 200),
            print_details=PrintDetails.STATS,
            block_printer=lambda block: None,
        )

        assert summary.fork_issue
        assert summary.last_linkable_block == 149
        assert not summary.hole_found
        assert (
            "🔶 Range #0 - #199 has issues with forks, last linkable block number: 149" in lines
        )
        assert "🔶 Block #150 is not linkable at this point" in lines
        assert lines[-1] == "> 🔶 Fork issues found, last linkable block number: 149"
        assert summary.warnings["unlinkable_block"] == 50

    @pytest.mark.asyncio
    async def test_unreadable_bundle_does_not_stop_walk(self, chain) -> None:
        store = InMemoryBlobStore({"0000000000": b"garbage\n"})
        await BundleWriter(store).write_bundle(chain(100, 200))

        summary, lines = await run(
            store, BlockRange(0, 200), print_details="stats", block_printer=lambda block: None
        )

        assert store.opened_keys == ["0000000000", "0000000100"]
        assert any(line.startswith("❌ Unable to read all blocks from segment") for line in lines)
        assert summary.warnings["unreadable_segment"] == 1
        assert (summary.lowest_block_seen, summary.highest_block_seen) == (100, 199)
        assert summary.incomplete_range
        assert not summary.hole_found
        assert summary.unreadable_segments == 1

    @pytest.mark.asyncio
    async def test_corrupt_tail_bundle_fails_verdict(self, chain) -> None:
        store = InMemoryBlobStore()
        await BundleWriter(store).write_bundle(chain(0, 100))
        data = BundleWriter.encode(chain(100, 150)) + b"{garbage\n"
        await store.write_object("0000000100", data)

        summary, lines = await run(
            store, BlockRange(0), print_details="stats", block_printer=lambda block: None
        )

        assert not summary.hole_found
        assert not summary.incomplete_range
        assert summary.unreadable_segments == 1
        assert not summary.clean
        assert lines[-2:] == ["> 🆗 No hole found", "> ❌ 1 segment(s) could not be read"]

    @pytest.mark.asyncio
    async def test_full_mode(self, bundle_store) -> None:
        store = await bundle_store([0])

        summary, lines = await run(store, BlockRange(0, 100), print_details="full")

        assert summary.clean
        assert sum(1 for line in lines if '"number":' in line) == 100


class TestRunCheck:
    @pytest.mark.asyncio
    async def test_local_store(self, tmp_path: Path, chain) -> None:
        store = LocalBlobStore(tmp_path / "storage" / "merged-blocks")
        await BundleWriter(store).write_blocks(chain(0, 300))

        config = CheckConfig(
            store_url="file://{data-dir}/storage/merged-blocks",
            block_range=BlockRange(0, 300),
            print_details=PrintDetails.STATS,
            data_dir=str(tmp_path),
        )
        out = io.StringIO()

        summary = await run_check(config, out=out, block_printer=lambda block: None)

        assert summary.clean
        assert summary.last_linkable_block == 299
        assert "✅ Range #0 - #299" in out.getvalue().splitlines()
        assert out.getvalue().startswith(f"Checking block holes on file://{tmp_path}")
