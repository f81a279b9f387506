"""Grid executor: a minimal task-execution layer for the demo and tests.

Each tick a busy hauler either moves one tile toward its current step's
target or, once adjacent, performs the step. Parking needs the exact tile.
A chain whose target vanished is abandoned and the hauler goes idle.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from haulage.model.resources import Position
from haulage.model.task import TaskAction, TaskStep

if TYPE_CHECKING:
    from haulage.interfaces import GridDistance
    from haulage.model.hauler import Hauler
    from haulage.model.snapshot import ColonySnapshot

logger = logging.getLogger(__name__)

ACTION_RANGE = 1


class GridExecutor:
    """Executes bound task chains against a ColonySnapshot."""

    def __init__(self, snapshot: ColonySnapshot, distances: GridDistance) -> None:
        self.snapshot = snapshot
        self.distances = distances
        self._chains: dict[str, deque[TaskStep]] = {}
        self.completed_steps = 0

    def bind(self, hauler_id: str, steps: tuple[TaskStep, ...]) -> None:
        hauler = self.snapshot.haulers.get(hauler_id)
        if hauler is None:
            logger.debug("Ignoring binding for unknown hauler %s", hauler_id)
            return
        self._chains[hauler_id] = deque(steps)
        # A hauler that is only parking stays available for matching
        hauler.idle = all(step.action == TaskAction.PARK for step in steps)
        self._update_heading(hauler)

    def chain(self, hauler_id: str) -> tuple[TaskStep, ...]:
        return tuple(self._chains.get(hauler_id, ()))

    def advance(self) -> None:
        """Advance every busy hauler by one tick."""
        for hauler_id in sorted(self._chains):
            hauler = self.snapshot.haulers.get(hauler_id)
            chain = self._chains[hauler_id]
            if hauler is None or not chain:
                continue
            self._advance_hauler(hauler, chain)
        # Forget chains of haulers that finished or disappeared
        for hauler_id in [h for h, c in self._chains.items() if not c]:
            del self._chains[hauler_id]

    def _advance_hauler(self, hauler: Hauler, chain: deque[TaskStep]) -> None:
        step = chain[0]
        destination = self._destination(step)
        if destination is None:
            logger.debug("Hauler %s abandons chain: %s is gone", hauler.id, step.target_id)
            chain.clear()
            self._finish(hauler)
            return

        needed_range = 0 if step.action == TaskAction.PARK else ACTION_RANGE
        if hauler.pos.range_to(destination) > needed_range:
            hauler.pos = self._next_tile(hauler.pos, destination)
            return

        self._perform(hauler, step)
        self.completed_steps += 1
        if step.target_id is not None and step.target_id == hauler.task_request_target_id:
            # Request served; any remaining steps only carry cargo home
            hauler.release_request()
        chain.popleft()
        if chain:
            self._update_heading(hauler)
        else:
            self._finish(hauler)

    def _destination(self, step: TaskStep) -> Position | None:
        if step.action == TaskAction.PARK:
            return step.position
        structure = self.snapshot.structures.get(step.target_id or "")
        return structure.pos if structure is not None else None

    def _next_tile(self, origin: Position, destination: Position) -> Position:
        """Neighbouring tile that gets closest to the destination."""
        best = origin
        best_distance = self.distances.distance(origin, destination)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                tile = Position(origin.x + dx, origin.y + dy)
                if tile == origin or tile in self.distances.walls:
                    continue
                distance = self.distances.distance(tile, destination)
                if distance < best_distance:
                    best, best_distance = tile, distance
        return best

    def _perform(self, hauler: Hauler, step: TaskStep) -> None:
        if step.action == TaskAction.PARK or step.resource is None:
            return
        structure = self.snapshot.structures[step.target_id or ""]
        resource = step.resource
        match step.action:
            case TaskAction.TRANSFER | TaskAction.DROP:
                wanted = hauler.amount(resource) if step.amount is None else step.amount
                moved = structure.add(resource, min(wanted, hauler.amount(resource)))
                hauler.carry[resource] = hauler.amount(resource) - moved
            case TaskAction.WITHDRAW | TaskAction.PICKUP:
                wanted = hauler.free_capacity() if step.amount is None else step.amount
                moved = structure.remove(resource, min(wanted, hauler.free_capacity()))
                hauler.carry[resource] = hauler.amount(resource) + moved
        if not hauler.carry.get(resource):
            hauler.carry.pop(resource, None)

    def _update_heading(self, hauler: Hauler) -> None:
        chain = self._chains.get(hauler.id)
        step = chain[0] if chain else None
        hauler.task_target_id = step.target_id if step is not None else None
        hauler.task_resource = step.resource if step is not None else None

    def _finish(self, hauler: Hauler) -> None:
        hauler.idle = True
        hauler.task_target_id = None
        hauler.task_resource = None
        hauler.release_request()
