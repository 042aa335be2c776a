"""
Block ranges and bundle boundary arithmetic.

A bundle with base ``b`` covers block numbers ``[b, b + bundle_size - 1]``.
Ranges are inclusive at the start and exclusive at the stop.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InvalidRangeError

DEFAULT_KEY_WIDTH = 10


def round_to_bundle_start(number: int, bundle_size: int) -> int:
    """Round a block number down to the base of its bundle."""
    return number - (number % bundle_size)


def round_to_bundle_end(number: int, bundle_size: int) -> int:
    """Round a block number up to the last block of its bundle."""
    return round_to_bundle_start(number, bundle_size) + bundle_size - 1


def pretty_block_num(number: int) -> str:
    return f"#{number:,}"


@dataclass(frozen=True)
class BlockRange:
    """A block range ``[start, stop)``.

    Attributes:
        start: First block number (inclusive). Negative values are head-relative
            (e.g. ``-1000`` means "1000 blocks before head") and leave the
            range unresolved until a head is known.
        stop: Exclusive upper bound, or None for an open range
    """

    start: int
    stop: int | None = None

    def __post_init__(self) -> None:
        if self.stop is None:
            return
        if self.stop < 0:
            raise InvalidRangeError(f"Range stop must be positive, got {self.stop}", str(self))
        if self.start >= 0 and self.stop <= self.start:
            raise InvalidRangeError(
                f"Range stop {self.stop} must be greater than start {self.start}", str(self)
            )

    def is_open(self) -> bool:
        return self.stop is None

    def is_closed(self) -> bool:
        return self.stop is not None

    def is_resolved(self) -> bool:
        """Whether the range can drive a walk (absolute start, closed or open)."""
        return self.start >= 0

    def contains(self, number: int) -> bool:
        if number < self.start:
            return False
        return self.stop is None or number < self.stop

    def __str__(self) -> str:
        if self.stop is None:
            return f"[{self.start}, +∞)"
        return f"[{self.start}, {self.stop})"

    @classmethod
    def parse(cls, value: str) -> BlockRange:
        """Parse a ``start:stop`` range expression.

        Accepted forms: ``100:200``, ``100:`` (open), ``100:+50`` (stop
        relative to start), ``-1000:`` (head-relative start) and ``100``
        (same as ``100:``).

        Raises:
            InvalidRangeError: If the expression cannot be parsed
        """
        text = value.strip()
        if not text:
            raise InvalidRangeError("Empty block range", value)

        start_text, _, stop_text = text.partition(":")
        try:
            start = int(start_text)
        except ValueError:
            raise InvalidRangeError(f"Invalid range start {start_text!r}", value) from None

        stop_text = stop_text.strip()
        if not stop_text:
            return cls(start)

        try:
            if stop_text.startswith("+"):
                if start < 0:
                    raise InvalidRangeError(
                        "Relative stop requires an absolute start", value
                    )
                return cls(start, start + int(stop_text[1:]))
            return cls(start, int(stop_text))
        except ValueError:
            raise InvalidRangeError(f"Invalid range stop {stop_text!r}", value) from None


def closed_range_label(start: int, end: int) -> str:
    """Label an inclusive ``[start, end]`` span the way report lines show it."""
    return f"{pretty_block_num(start)} - {pretty_block_num(end)}"


def reproc_range(start: int, end: int) -> str:
    """The ``start:stop`` expression that re-processes an inclusive span."""
    return f"{start}:{end + 1}"


def require_resolved(block_range: BlockRange) -> None:
    if not block_range.is_resolved():
        raise InvalidRangeError(
            f"check merged blocks can only work with fully resolved range, got {block_range}",
            str(block_range),
        )


def walk_block_prefix(
    block_range: BlockRange,
    bundle_size: int,
    width: int = DEFAULT_KEY_WIDTH,
) -> str:
    """Shortest key prefix covering every bundle of a range.

    Both bounds are rounded to bundle boundaries and zero-padded to ``width``
    digits; their longest common leading prefix restricts the store listing
    without excluding any bundle of the range. Open ranges need a full listing.

    Args:
        block_range: Resolved block range
        bundle_size: Blocks per bundle
        width: Number of digits in bundle keys

    Returns:
        The common prefix, possibly empty
    """
    stop = block_range.stop
    if stop is None:
        return ""

    start_string = str(round_to_bundle_start(block_range.start, bundle_size)).zfill(width)
    end_string = str(round_to_bundle_end(stop - 1, bundle_size) + 1).zfill(width)

    for i, (left, right) in enumerate(zip(start_string, end_string)):
        if left != right:
            return start_string[:i]

    return start_string
