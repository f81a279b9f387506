"""Collaborator interfaces consumed by the logistics core.

The core never moves haulers or plans paths itself. It asks a DistanceOracle
for travel estimates and hands finished task chains to a TaskExecutor.
GridDistance is a small breadth-first implementation of the oracle used by the
demo colony and the tests.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from haulage.model.resources import Position
from haulage.model.task import TaskStep

logger = logging.getLogger(__name__)


@runtime_checkable
class DistanceOracle(Protocol):
    """Read-only travel estimates. Assumed deterministic and cheap."""

    def distance(self, a: Position, b: Position) -> float: ...

    def is_reachable(
        self, a: Position, b: Position, obstacles: frozenset[Position] = frozenset()
    ) -> bool: ...


@runtime_checkable
class TaskExecutor(Protocol):
    """Accepts a fresh task chain for a hauler."""

    def bind(self, hauler_id: str, steps: tuple[TaskStep, ...]) -> None: ...


# 8-directional offsets: haulers move diagonally at the same cost
_DIRS = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (-1, 1),
    (1, -1),
    (1, 1),
)


class GridDistance:
    """Breadth-first path lengths on a bounded grid with impassable walls.

    Path lengths from each origin are cached on first use; the grid is
    treated as static for the lifetime of the oracle. Structures sit on walls
    as far as routing is concerned only if their tile is listed in ``walls``.
    """

    def __init__(self, width: int, height: int, walls: Iterable[Position] = ()) -> None:
        self.width = width
        self.height = height
        self.walls: frozenset[Position] = frozenset(walls)
        self._cache: dict[Position, dict[Position, int]] = {}

    def _in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def _flood(self, origin: Position, blocked: frozenset[Position]) -> dict[Position, int]:
        """Path length from origin to every reachable tile."""
        lengths = {origin: 0}
        queue = deque([origin])
        while queue:
            current = queue.popleft()
            for dx, dy in _DIRS:
                nxt = Position(current.x + dx, current.y + dy)
                if nxt in lengths or not self._in_bounds(nxt) or nxt in blocked:
                    continue
                lengths[nxt] = lengths[current] + 1
                queue.append(nxt)
        return lengths

    def _lengths_from(self, origin: Position) -> dict[Position, int]:
        if origin not in self._cache:
            self._cache[origin] = self._flood(origin, self.walls)
        return self._cache[origin]

    def distance(self, a: Position, b: Position) -> float:
        """Path length in tiles, or infinity when no route exists."""
        if not (self._in_bounds(a) and self._in_bounds(b)):
            return math.inf
        return float(self._lengths_from(a).get(b, math.inf))

    def is_reachable(
        self, a: Position, b: Position, obstacles: frozenset[Position] = frozenset()
    ) -> bool:
        if not (self._in_bounds(a) and self._in_bounds(b)):
            return False
        if not obstacles:
            return b in self._lengths_from(a)
        # Extra obstacles are transient, so this search is not cached
        return b in self._flood(a, self.walls | (obstacles - {a, b}))

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Cleared grid distance cache (%dx%d)", self.width, self.height)
