"""
Fork database: parent links between blocks and the last irreversible block.

The linkability tracker only needs the contract defined by ``ForkDatabase``.
How a "reversible segment" is resolved is a strategy decision left to the
implementation; ``LinkedForkDatabase`` is the default one and requires an
unbroken parent chain from the block back to the LIB.
"""

from __future__ import annotations

import heapq
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .blocks.types import Block, BlockRef

logger = logging.getLogger(__name__)


class ForkDatabase(ABC):
    """Contract used by the fork-linkability tracker."""

    @abstractmethod
    def has_lib(self) -> bool:
        ...

    @property
    @abstractmethod
    def lib(self) -> BlockRef | None:
        """The current last irreversible block, if initialized."""
        ...

    @abstractmethod
    def init_lib(self, block: Block) -> None:
        """Initialize the LIB from the first block observed."""
        ...

    @abstractmethod
    def add_link(self, ref: BlockRef, parent_id: str) -> bool:
        """Register a child -> parent link.

        Returns:
            True if the link was already known
        """
        ...

    @abstractmethod
    def reversible_segment(self, ref: BlockRef) -> list[BlockRef] | None:
        """Resolve the chain from the LIB (exclusive) up to ``ref`` (inclusive).

        Returns:
            Blocks ordered from oldest to newest (empty when ``ref`` is the LIB),
            or None when the block cannot be linked to the LIB yet
        """
        ...

    @abstractmethod
    def set_lib(self, block: Block) -> None:
        """Advance the LIB according to ``block.lib_num``."""
        ...

    @abstractmethod
    def purge_before(self, lib_num: int) -> int:
        """Forget links numbered below ``lib_num``.

        Returns:
            Number of links removed
        """
        ...

    @abstractmethod
    def purge_unlinkable(self, before: int) -> int:
        """Forget links numbered below ``before`` that can never resolve.

        Called while an unlinkable run lasts, when ``purge_before`` cannot
        run because the LIB no longer advances.

        Returns:
            Number of links removed
        """
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Number of links currently retained."""
        ...


@dataclass(frozen=True)
class _Link:
    number: int
    parent_id: str


class LinkedForkDatabase(ForkDatabase):
    """Default strategy: strict parent-chain resolution.

    A block resolves when following ``parent_id`` links from it reaches the
    LIB's id, never passing at or below the LIB's number on the way. Blocks
    numbered below the LIB never resolve. The LIB only moves forward, to the
    highest resolved ancestor not above the block's reported LIB number.

    Ids that failed to resolve are remembered, so the child of a dead block
    fails without walking the dead chain again. Blocks arrive in number
    order, and a failed id only revives if its own missing link shows up.
    """

    def __init__(self) -> None:
        self._links: dict[str, _Link] = {}
        self._by_number: list[tuple[int, str]] = []
        self._unresolvable: set[str] = set()
        self._lib: BlockRef | None = None

    def has_lib(self) -> bool:
        return self._lib is not None

    @property
    def lib(self) -> BlockRef | None:
        return self._lib

    def init_lib(self, block: Block) -> None:
        self._lib = block.ref
        logger.debug(f"Fork database LIB initialized at {self._lib}")

    def add_link(self, ref: BlockRef, parent_id: str) -> bool:
        if ref.id in self._links:
            return True
        if ref.id in self._unresolvable:
            # A missing link arrived, earlier failures may now resolve
            self._unresolvable.clear()
        self._links[ref.id] = _Link(ref.number, parent_id)
        heapq.heappush(self._by_number, (ref.number, ref.id))
        return False

    def reversible_segment(self, ref: BlockRef) -> list[BlockRef] | None:
        lib = self._lib
        if lib is None or ref.number < lib.number:
            return None

        segment: list[BlockRef] = []
        current_id = ref.id
        # Bounded by the number of links so a corrupt cycle cannot spin forever
        for _ in range(len(self._links) + 1):
            if current_id == lib.id:
                segment.reverse()
                return segment
            if current_id in self._unresolvable:
                break

            link = self._links.get(current_id)
            if link is None or link.number <= lib.number:
                self._unresolvable.add(current_id)
                break

            segment.append(BlockRef(current_id, link.number))
            current_id = link.parent_id

        self._unresolvable.update(item.id for item in segment)
        return None

    def set_lib(self, block: Block) -> None:
        lib = self._lib
        if lib is None:
            self.init_lib(block)
            return
        if block.lib_num <= lib.number:
            return

        segment = self.reversible_segment(block.ref)
        if segment is None:
            return

        for ref in reversed(segment):
            if ref.number <= block.lib_num:
                self._lib = ref
                return

    def purge_before(self, lib_num: int) -> int:
        removed = 0
        while self._by_number and self._by_number[0][0] < lib_num:
            number, block_id = heapq.heappop(self._by_number)
            link = self._links.get(block_id)
            if link is not None and link.number == number:
                del self._links[block_id]
                self._unresolvable.discard(block_id)
                removed += 1
        return removed

    def purge_unlinkable(self, before: int) -> int:
        stale = [
            block_id
            for block_id in self._unresolvable
            if block_id in self._links and self._links[block_id].number < before
        ]
        for block_id in stale:
            del self._links[block_id]

        # Children of dropped ids fail on the missing link, no need to keep them
        self._unresolvable.intersection_update(self._links)
        self._by_number = [(link.number, block_id) for block_id, link in self._links.items()]
        heapq.heapify(self._by_number)
        return len(stale)

    def __len__(self) -> int:
        return len(self._links)
