"""
Bundle key parsing strategies.

Centralizes the key format knowledge so the walk never parses object
names directly. The default format is a fixed-width, zero-padded decimal
base number (``0000123400``, optionally with an extension such as
``0000123400.jsonl``), which makes lexicographic listing order equal to
numeric order.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from .ranges import DEFAULT_KEY_WIDTH


class BundleKeyParser(ABC):
    """Maps store keys to bundle base numbers and back."""

    width: int

    @abstractmethod
    def parse(self, key: str) -> int | None:
        """Extract the bundle base number from a key.

        Returns:
            The base number, or None when the key is not a bundle key
        """
        ...

    @abstractmethod
    def format(self, base_number: int) -> str:
        """Build the key for a bundle base number."""
        ...


class FixedWidthDecimalKeyParser(BundleKeyParser):
    """Keys holding a ``width``-digit zero-padded base number.

    Only the last path component is considered, so prefixed layouts such as
    ``merged/0000000100`` parse the same as ``0000000100``.
    """

    def __init__(self, width: int = DEFAULT_KEY_WIDTH, extension: str = "") -> None:
        if width < 1:
            raise ValueError(f"width must be >= 1, got {width}")
        self.width = width
        self.extension = extension
        self._pattern = re.compile(rf"(?<!\d)(\d{{{width}}})(?!\d)")

    def parse(self, key: str) -> int | None:
        name = key.rsplit("/", 1)[-1]
        match = self._pattern.search(name)
        if match is None:
            return None
        return int(match.group(1))

    def format(self, base_number: int) -> str:
        if base_number < 0:
            raise ValueError(f"Bundle base number must be >= 0, got {base_number}")
        return f"{base_number:0{self.width}d}{self.extension}"
