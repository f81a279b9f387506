"""Structure dataclass: anything with a store that a hauler can visit."""

from __future__ import annotations

from dataclasses import dataclass, field

from haulage.model.resources import Position, ResourceKind, TargetKind


@dataclass
class Structure:
    """A storage-capable entity in a colony.

    Structures are looked up by id from the per-tick snapshot; the logistics
    core never keeps a structure object across ticks.
    """

    id: str
    kind: TargetKind
    pos: Position
    capacity: int  # total store capacity across all resource kinds
    store: dict[ResourceKind, int] = field(default_factory=dict)

    # Roles in the logistics network
    is_buffer: bool = False  # may serve as an intermediate hop (storage, terminal)
    is_dropoff: bool = False  # idle haulers may dump cargo here

    def amount(self, resource: ResourceKind) -> int:
        """Current contents of one resource kind."""
        return self.store.get(resource, 0)

    def used_capacity(self) -> int:
        return sum(self.store.values())

    def free_capacity(self) -> int:
        return max(0, self.capacity - self.used_capacity())

    def add(self, resource: ResourceKind, amount: int) -> int:
        """Add up to ``amount`` units, returning how many actually fit."""
        accepted = max(0, min(amount, self.free_capacity()))
        if accepted:
            self.store[resource] = self.amount(resource) + accepted
        return accepted

    def remove(self, resource: ResourceKind, amount: int) -> int:
        """Remove up to ``amount`` units, returning how many were taken."""
        taken = max(0, min(amount, self.amount(resource)))
        if taken:
            self.store[resource] = self.amount(resource) - taken
        return taken
