"""
Fork-linkability tracking over the decoded block stream.

Every decoded block is linked to its parent in the fork database and must
resolve back to the current LIB. Resolved blocks advance the LIB and purge
history older than it, so the links retained cover the reversible window
only, whatever the number of blocks scanned. During an unlinkable run the
LIB cannot advance, so dead links are dropped on each large gap step.
"""

from __future__ import annotations

import logging

from ..blocks.types import Block
from ..forkdb import ForkDatabase, LinkedForkDatabase
from .report import Reporter
from .state import ForkTrackingState

logger = logging.getLogger(__name__)

# An unlinkable run escalates to a large gap warning every this many blocks
LARGE_GAP_INTERVAL = 100


class ForkLinkabilityTracker:
    """Classifies decoded blocks as linked or unlinkable.

    Blocks must be observed in block-number order, within and across bundles.
    """

    def __init__(
        self,
        reporter: Reporter,
        fork_db: ForkDatabase | None = None,
        state: ForkTrackingState | None = None,
        large_gap_interval: int = LARGE_GAP_INTERVAL,
    ) -> None:
        """Initialize the tracker.

        Args:
            reporter: Receives unlinkable-block and large-gap warnings
            fork_db: Linking strategy (default: LinkedForkDatabase)
            state: Existing state to continue from (default: fresh state)
            large_gap_interval: Run length step for large gap warnings
        """
        self.reporter = reporter
        self.fork_db = fork_db if fork_db is not None else LinkedForkDatabase()
        self.state = state if state is not None else ForkTrackingState()
        self.large_gap_interval = large_gap_interval

    def observe(self, block: Block) -> bool:
        """Link one block.

        Returns:
            True if the block resolved back to the LIB
        """
        fork_db = self.fork_db
        state = self.state

        if not fork_db.has_lib():
            fork_db.init_lib(block)

        fork_db.add_link(block.ref, block.previous_id)

        if fork_db.reversible_segment(block.ref) is None:
            state.unlinkable_run_length += 1
            state.unlinkable_total += 1
            if state.first_unlinkable_block is None:
                state.first_unlinkable_block = block

            self.reporter.unlinkable_block(block.number)

            run = state.unlinkable_run_length
            if run > self.large_gap_interval - 1 and run % self.large_gap_interval == 0:
                last_linked = state.last_linked_block
                self.reporter.large_unlinkable_gap(
                    run,
                    last_linked.number if last_linked is not None else None,
                    state.first_unlinkable_block.number,
                )
                # The LIB is stuck, so dead history is dropped here instead
                dropped = fork_db.purge_unlinkable(block.number - self.large_gap_interval)
                if dropped:
                    logger.debug(f"Dropped {dropped} unlinkable links before #{block.number}")
            return False

        state.last_linked_block = block
        state.unlinkable_run_length = 0
        state.first_unlinkable_block = None

        fork_db.set_lib(block)
        lib = fork_db.lib
        if lib is not None:
            purged = fork_db.purge_before(lib.number)
            if purged:
                logger.debug(f"Purged {purged} links below LIB #{lib.number}")
        return True
