"""Simulation harness: grid executor and colony tick driver."""

from haulage.engine.executor import GridExecutor
from haulage.engine.simulation import tick_colony

__all__ = ["GridExecutor", "tick_colony"]
