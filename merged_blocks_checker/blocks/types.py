"""
Block record types.

A merged-blocks bundle decodes into a sequence of blocks. The checker only
relies on the chain-linking fields (number, id, previous id, LIB number);
everything else a chain stores travels opaquely in ``payload``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BlockRef:
    """Reference to a block by id and number."""

    id: str
    number: int

    def __str__(self) -> str:
        return f"#{self.number} ({self.id})"


@dataclass
class Block:
    """A single decoded block.

    Attributes:
        number: Block height
        id: Block hash / identifier
        previous_id: Identifier of the parent block
        lib_num: Last irreversible block number reported when the block was produced
        timestamp: Optional producer timestamp (ISO 8601 string)
        payload: Chain-specific content, carried as-is
    """

    number: int
    id: str
    previous_id: str
    lib_num: int
    timestamp: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def ref(self) -> BlockRef:
        return BlockRef(id=self.id, number=self.number)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for storage."""
        result: dict[str, Any] = {
            "number": self.number,
            "id": self.id,
            "previous_id": self.previous_id,
            "lib_num": self.lib_num,
        }
        if self.timestamp is not None:
            result["timestamp"] = self.timestamp
        if self.payload:
            result["payload"] = self.payload
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Block:
        """Deserialize from dictionary.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a numeric field is not an integer
        """
        return cls(
            number=int(data["number"]),
            id=str(data["id"]),
            previous_id=str(data["previous_id"]),
            lib_num=int(data["lib_num"]),
            timestamp=data.get("timestamp"),
            payload=data.get("payload") or {},
        )
