"""LogisticsRequest dataclass: an outstanding transfer request for one target."""

from __future__ import annotations

from dataclasses import dataclass

from haulage.model.resources import ResourceKind, TargetKind


@dataclass
class LogisticsRequest:
    """A rate-based request to move one resource kind to or from a target.

    Amounts are signed: positive means the target wants to receive,
    negative means the target wants to be drained. ``offset`` is the amount
    captured at ``observed_tick``; ``rate`` is the change per tick after that.
    """

    target_id: str
    resource: ResourceKind
    rate: float = 0.0  # dAmount/dt, units per tick
    offset: float = 0.0
    observed_tick: int = 0
    last_seen_tick: int = 0
    target_kind: TargetKind = TargetKind.STRUCTURE
    multiplier: float = 1.0  # weight applied to the matching value

    @property
    def key(self) -> tuple[str, ResourceKind]:
        return (self.target_id, self.resource)

    @property
    def id(self) -> str:
        return f"{self.target_id}:{self.resource.value}"

    @property
    def is_input(self) -> bool:
        """True when the target is registered as a consumer."""
        return self.offset > 0 or (self.offset == 0 and self.rate > 0)
