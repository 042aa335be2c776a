"""
Validation of a single bundle's block stream.

Decodes one bundle, keeps the blocks of the requested range, links each
of them through the fork tracker, renders them according to the print
mode and finally checks that the bundle held as many blocks as expected.
Read and decode failures end the segment but never the walk.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import aclosing
from dataclasses import dataclass

from ..blocks.codec import BlockDecoder, JsonlBlockDecoder
from ..blocks.render import BlockObserver, render_block_json
from ..blocks.types import Block
from ..exceptions import BlockDecodeError, StorageIOError
from ..ranges import BlockRange
from ..store.base import BlobStore
from .forks import ForkLinkabilityTracker
from .modes import PrintDetails
from .report import Reporter

logger = logging.getLogger(__name__)


@dataclass
class SegmentResult:
    """Outcome of validating one bundle."""

    key: str
    base_number: int
    block_count: int = 0
    expected_count: int = 0
    lowest_block_seen: int | None = None
    highest_block_seen: int | None = None
    error: Exception | None = None
    past_range_end: bool = False

    @property
    def short(self) -> bool:
        return self.error is None and self.block_count < self.expected_count

    def observe(self, number: int) -> None:
        if self.lowest_block_seen is None or number < self.lowest_block_seen:
            self.lowest_block_seen = number
        if self.highest_block_seen is None or number > self.highest_block_seen:
            self.highest_block_seen = number


class SegmentValidator:
    """Streams one bundle at a time through the fork tracker."""

    def __init__(
        self,
        store: BlobStore,
        block_range: BlockRange,
        bundle_size: int,
        reporter: Reporter,
        fork_tracker: ForkLinkabilityTracker,
        print_details: PrintDetails = PrintDetails.STATS,
        block_printer: BlockObserver | None = None,
        decoder: BlockDecoder | None = None,
        first_streamable_block: int = 0,
    ) -> None:
        self.store = store
        self.block_range = block_range
        self.bundle_size = bundle_size
        self.reporter = reporter
        self.fork_tracker = fork_tracker
        self.print_details = print_details
        self.block_printer = block_printer
        self.decoder = decoder or JsonlBlockDecoder()
        self.first_streamable_block = first_streamable_block

        self._render: Callable[[Block], None] = {
            PrintDetails.NONE: self._render_nothing,
            PrintDetails.STATS: self._render_stats,
            PrintDetails.FULL: self._render_full,
        }[print_details]

    def expected_block_count(self, base_number: int) -> int:
        """Blocks a complete bundle holds within the requested range.

        The bundle holding the first streamable block starts at that block,
        and bundles at either edge of the range only count their in-range part.
        """
        low = max(base_number, self.first_streamable_block, self.block_range.start)
        high = base_number + self.bundle_size
        if self.block_range.stop is not None:
            high = min(high, self.block_range.stop)
        return max(0, high - low)

    async def validate(self, key: str, base_number: int) -> SegmentResult:
        """Validate the bundle stored under ``key``."""
        result = SegmentResult(
            key=key,
            base_number=base_number,
            expected_count=self.expected_block_count(base_number),
        )
        stop = self.block_range.stop
        opened = False

        try:
            async with self.store.open_object(key) as reader:
                opened = True
                async with aclosing(self.decoder.decode(reader, key)) as blocks:
                    async for block in blocks:
                        if block.number < self.block_range.start:
                            continue
                        if stop is not None and block.number >= stop:
                            result.past_range_end = True
                            break

                        result.observe(block.number)
                        self.fork_tracker.observe(block)
                        result.block_count += 1
                        self._render(block)
        except StorageIOError as e:
            result.error = e
            self.reporter.unreadable_segment(key, e, result.block_count if opened else None)
            return result
        except BlockDecodeError as e:
            result.error = e
            self.reporter.unreadable_segment(key, e, result.block_count)
            return result

        if result.short:
            self.reporter.short_segment(key, result.block_count, result.expected_count)

        logger.debug(
            f"Validated segment {key}: {result.block_count}/{result.expected_count} blocks"
        )
        return result

    def _render_nothing(self, block: Block) -> None:
        return None

    def _render_stats(self, block: Block) -> None:
        if self.block_printer is not None:
            self.block_printer(block)

    def _render_full(self, block: Block) -> None:
        try:
            rendered = render_block_json(block)
        except (TypeError, ValueError) as e:
            self.reporter.unprintable_block(str(block.ref), block.number, e)
            return
        self.reporter.write(rendered)
