"""Shared fixtures for the haulage test suite."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

import pytest

from haulage.config import LogisticsSettings
from haulage.interfaces import GridDistance
from haulage.model import ColonySnapshot, TaskStep, TickContext


class RecordingExecutor:
    """TaskExecutor that remembers every chain it was handed."""

    def __init__(self) -> None:
        self.bound: dict[str, tuple[TaskStep, ...]] = {}
        self.calls: list[str] = []

    def bind(self, hauler_id: str, steps: tuple[TaskStep, ...]) -> None:
        self.bound[hauler_id] = steps
        self.calls.append(hauler_id)


@pytest.fixture
def settings() -> LogisticsSettings:
    """Settings with exact path lengths so travel times are easy to reason about."""
    return LogisticsSettings(range_to_path_heuristic=1.0)


@pytest.fixture
def grid() -> GridDistance:
    """An open 50x50 grid with no walls."""
    return GridDistance(50, 50)


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def make_ctx(
    settings: LogisticsSettings, grid: GridDistance, executor: RecordingExecutor
) -> Callable[..., TickContext]:
    """Factory building a TickContext around a snapshot.

    The tick defaults to the snapshot's own tick.
    """

    def _make(
        snapshot: ColonySnapshot,
        tick: int | None = None,
        distances: GridDistance | None = None,
        settings_override: LogisticsSettings | None = None,
    ) -> TickContext:
        return TickContext(
            tick=snapshot.tick if tick is None else tick,
            colony=snapshot.colony,
            snapshot=snapshot,
            distances=distances if distances is not None else grid,
            executor=executor,
            settings=settings_override if settings_override is not None else settings,
        )

    return _make


@pytest.fixture(autouse=True)
def reset_haulage_logger() -> Iterator[None]:
    """Undo configure_logging so caplog sees haulage records in every test."""
    yield
    logger = logging.getLogger("haulage")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
