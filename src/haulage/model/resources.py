"""Closed tag sets for resources and request targets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ResourceKind(StrEnum):
    """Kinds of resource a hauler can carry."""

    ENERGY = "energy"
    MINERAL = "mineral"
    POWER = "power"


class TargetKind(StrEnum):
    """What sort of thing a request points at.

    The kind decides which task actions reach the target: structures take
    transfers and withdrawals, drop sites take drops and pickups.
    """

    STRUCTURE = "structure"  # store-capable structure (storage, container, spawn)
    LINK = "link"  # structure that also takes part in the link network
    DROP_SITE = "drop_site"  # resource pile on the ground


@dataclass(frozen=True, order=True)
class Position:
    """A tile on the colony grid."""

    x: int
    y: int

    def range_to(self, other: Position) -> int:
        """Chebyshev range: diagonal moves cost the same as straight ones."""
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def __str__(self) -> str:
        return f"({self.x},{self.y})"
