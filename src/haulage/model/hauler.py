"""Hauler dataclass: a mobile carrying unit owned by a role controller."""

from __future__ import annotations

from dataclasses import dataclass, field

from haulage.model.resources import Position, ResourceKind


@dataclass
class Hauler:
    """A single carrying agent.

    The logistics core only reads position, capacity and cargo, and writes a
    fresh task chain when the hauler is idle.
    """

    # Identity
    id: str
    pos: Position

    # Cargo
    capacity: int
    carry: dict[ResourceKind, int] = field(default_factory=dict)

    # Movement
    move_speed: float = 1.0  # tiles per tick

    # Task state
    idle: bool = True
    task_target_id: str | None = None  # where a busy hauler is currently heading
    task_resource: ResourceKind | None = None
    task_request_target_id: str | None = None  # request target the whole chain serves
    task_request_resource: ResourceKind | None = None
    task_claim: float = 0.0  # amount promised to that request when the chain was bound

    def carried(self) -> int:
        """Total units carried across all resource kinds."""
        return sum(self.carry.values())

    def amount(self, resource: ResourceKind) -> int:
        return self.carry.get(resource, 0)

    def free_capacity(self) -> int:
        return max(0, self.capacity - self.carried())

    def cargo_kinds(self) -> list[ResourceKind]:
        """Resource kinds currently carried, in a stable order."""
        return sorted(kind for kind, amount in self.carry.items() if amount > 0)

    def heading_to(self, target_id: str) -> bool:
        """True when a busy hauler's current step or whole chain serves ``target_id``."""
        if self.idle:
            return False
        return target_id in (self.task_target_id, self.task_request_target_id)

    def release_request(self) -> None:
        """Forget the request the current chain was serving."""
        self.task_request_target_id = None
        self.task_request_resource = None
        self.task_claim = 0.0
