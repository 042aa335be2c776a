"""Print detail modes selecting how much work the check does per bundle."""

from __future__ import annotations

from enum import Enum


class PrintDetails(Enum):
    """How much of each bundle the check reads.

    NONE: listing only, continuity is checked from keys
    STATS: every block is decoded, linked and passed to the block observer
    FULL: every block is decoded, linked and rendered in full
    """

    NONE = "none"
    STATS = "stats"
    FULL = "full"

    @property
    def reads_blocks(self) -> bool:
        return self is not PrintDetails.NONE

    @classmethod
    def names(cls) -> list[str]:
        return [mode.value for mode in cls]

    @classmethod
    def parse(cls, name: str | PrintDetails) -> PrintDetails:
        """Parse a mode name, case-insensitively.

        Raises:
            ValueError: If the name is not a known mode
        """
        if isinstance(name, PrintDetails):
            return name
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(
                f"{name} is not a valid PrintDetails, try [{', '.join(cls.names())}]"
            ) from None
