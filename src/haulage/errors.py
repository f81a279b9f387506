"""Exception hierarchy and skip reasons for the logistics core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from haulage.model.resources import Position


class HaulageError(Exception):
    """Base for all haulage errors."""


class MissingTargetError(HaulageError):
    """A target id is not present in this tick's snapshot."""

    def __init__(self, target_id: str) -> None:
        super().__init__(f"Target '{target_id}' not found in snapshot")
        self.target_id = target_id


class UnreachableTargetError(HaulageError):
    """The distance oracle reports no route between two positions."""

    def __init__(self, origin: Position, destination: Position) -> None:
        super().__init__(f"No route from {origin} to {destination}")
        self.origin = origin
        self.destination = destination


class SkipReason:
    """Why an entity was left out of a tick's assignments."""

    MISSING_TARGET = "missing_target"
    UNREACHABLE = "unreachable"
    NO_ELIGIBLE_MATCH = "no_eligible_match"
    SATURATED = "saturated"
