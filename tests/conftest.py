"""
Shared test configuration and fixtures.

Provides block chain factories and stores pre-populated with bundles.
Chains are deterministic: block ``n`` has id ``"{n}a"`` and links to
``"{n-1}a"``, so a test can break linkability by changing one id.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from merged_blocks_checker.blocks import Block, BundleWriter
from merged_blocks_checker.check import ReportEvent
from merged_blocks_checker.store import InMemoryBlobStore

LIB_LAG = 10

ENV_VARS = [
    "MERGED_BLOCKS_STORE_URL",
    "MERGED_BLOCKS_RANGE",
    "MERGED_BLOCKS_BUNDLE_SIZE",
    "MERGED_BLOCKS_PRINT",
    "MERGED_BLOCKS_FIRST_STREAMABLE_BLOCK",
    "MERGED_BLOCKS_PROGRESS_INTERVAL",
    "MERGED_BLOCKS_KEY_WIDTH",
    "MERGED_BLOCKS_DATA_DIR",
]


def chain_block(number: int, previous_id: str | None = None, suffix: str = "a") -> Block:
    """Build block ``number`` of a deterministic chain."""
    return Block(
        number=number,
        id=f"{number}{suffix}",
        previous_id=previous_id if previous_id is not None else f"{number - 1}a",
        lib_num=max(0, number - LIB_LAG),
    )


def make_chain(start: int, stop: int) -> list[Block]:
    """Blocks ``[start, stop)`` of the deterministic chain."""
    return [chain_block(n) for n in range(start, stop)]


@pytest.fixture
def chain() -> Callable[[int, int], list[Block]]:
    return make_chain


@pytest.fixture
def block() -> Callable[..., Block]:
    return chain_block


@pytest.fixture
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove MERGED_BLOCKS_* variables inherited from the shell."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def bundle_store() -> Callable[..., object]:
    """Factory building an in-memory store holding full bundles at the given bases."""

    async def _build(bases: list[int], bundle_size: int = 100) -> InMemoryBlobStore:
        store = InMemoryBlobStore()
        writer = BundleWriter(store, bundle_size=bundle_size)
        for base in bases:
            await writer.write_bundle(make_chain(base, base + bundle_size), base)
        return store

    return _build


class EventRecorder:
    """Listener collecting report events."""

    def __init__(self) -> None:
        self.events: list[ReportEvent] = []

    def __call__(self, event: ReportEvent) -> None:
        self.events.append(event)

    def of(self, *kinds: object) -> list[ReportEvent]:
        return [e for e in self.events if e.kind in kinds]

    def spans(self, *kinds: object) -> list[tuple[str, int | None, int | None]]:
        return [(e.kind.value, e.start, e.end) for e in self.of(*kinds)]


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()
