"""Domain model: resources, structures, haulers, requests, tasks, snapshots."""

from haulage.model.hauler import Hauler
from haulage.model.request import LogisticsRequest
from haulage.model.resources import Position, ResourceKind, TargetKind
from haulage.model.snapshot import ColonySnapshot, TickContext
from haulage.model.structure import Structure
from haulage.model.task import TaskAction, TaskChain, TaskStep

__all__ = [
    "ColonySnapshot",
    "Hauler",
    "LogisticsRequest",
    "Position",
    "ResourceKind",
    "Structure",
    "TargetKind",
    "TaskAction",
    "TaskChain",
    "TaskStep",
    "TickContext",
]
