"""Per-block renderers used by the stats and full print modes."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from typing import TextIO

from .types import Block

BlockObserver = Callable[[Block], None]


def format_block_stats(block: Block) -> str:
    """One-line summary of a block."""
    line = f"Block #{block.number} ({block.id}) prev {block.previous_id}, lib #{block.lib_num}"
    if block.timestamp:
        line += f", at {block.timestamp}"
    if block.payload:
        line += f", {len(block.payload)} payload field(s)"
    return line


def stats_printer(out: TextIO | None = None) -> BlockObserver:
    """Build the default stats-mode observer writing summaries to ``out``."""

    def _print(block: Block) -> None:
        print(format_block_stats(block), file=out or sys.stdout)

    return _print


def render_block_json(block: Block) -> str:
    """Full structural rendering of a block as indented JSON.

    Raises:
        TypeError, ValueError: If the payload is not JSON-serializable
    """
    return json.dumps(block.to_dict(), indent=2, sort_keys=True)
