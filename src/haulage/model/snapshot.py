"""ColonySnapshot and TickContext: the per-tick world index passed into the core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from haulage.errors import MissingTargetError

if TYPE_CHECKING:
    from haulage.config import LogisticsSettings
    from haulage.interfaces import DistanceOracle, TaskExecutor
    from haulage.model.hauler import Hauler
    from haulage.model.resources import Position
    from haulage.model.structure import Structure


@dataclass
class ColonySnapshot:
    """Everything one colony owns, indexed by stable id.

    The snapshot is the only source of object state for a tick. Targets and
    buffers are referenced by id and resolved here every time they are needed.
    """

    colony: str
    tick: int = 0

    # Entity containers keyed by id
    structures: dict[str, Structure] = field(default_factory=dict)
    haulers: dict[str, Hauler] = field(default_factory=dict)

    # Colony anchors
    storage_id: str | None = None  # main storage, preferred dropoff and rest spot
    planned_storage_pos: Position | None = None  # where storage will be built
    rest_position: Position | None = None

    def structure(self, structure_id: str) -> Structure:
        """Look up a structure, raising MissingTargetError when it is gone."""
        try:
            return self.structures[structure_id]
        except KeyError:
            raise MissingTargetError(structure_id) from None

    def has(self, structure_id: str) -> bool:
        return structure_id in self.structures

    @property
    def storage(self) -> Structure | None:
        if self.storage_id is None:
            return None
        return self.structures.get(self.storage_id)

    def buffers(self) -> list[Structure]:
        """Structures usable as an intermediate hop, in id order."""
        return [s for _, s in sorted(self.structures.items()) if s.is_buffer]

    def dropoffs(self) -> list[Structure]:
        """Storage plus any structure flagged as a dropoff point, in id order."""
        points = [s for _, s in sorted(self.structures.items()) if s.is_dropoff]
        storage = self.storage
        if storage is not None and all(p.id != storage.id for p in points):
            points.insert(0, storage)
        return points

    def idle_haulers(self) -> list[Hauler]:
        """Idle haulers in id order, so greedy assignment is reproducible."""
        return [h for _, h in sorted(self.haulers.items()) if h.idle]


@dataclass(frozen=True)
class TickContext:
    """Explicit handles for one colony's logistics pass on one tick."""

    tick: int
    colony: str
    snapshot: ColonySnapshot
    distances: DistanceOracle
    executor: TaskExecutor
    settings: LogisticsSettings
