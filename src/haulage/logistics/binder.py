"""Agent task binder: turn an assignment (or its absence) into a task chain.

The binder only decides what a hauler should do next. Movement and
incremental progress belong to the execution layer it hands chains to.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from haulage.errors import UnreachableTargetError
from haulage.logistics.buffers import plan_steps
from haulage.logistics.predictor import travel_time
from haulage.model.task import TaskAction, TaskStep

if TYPE_CHECKING:
    from haulage.logistics.matching import Assignment
    from haulage.model.hauler import Hauler
    from haulage.model.resources import Position
    from haulage.model.snapshot import TickContext
    from haulage.model.structure import Structure

logger = logging.getLogger(__name__)


def nearest_dropoff(ctx: TickContext, hauler: Hauler) -> Structure | None:
    """Closest reachable dropoff point with room left, ties to lowest id."""
    best: tuple[float, str] | None = None
    choice = None
    for dropoff in ctx.snapshot.dropoffs():
        if dropoff.free_capacity() <= 0:
            continue
        try:
            eta = travel_time(ctx, hauler.pos, dropoff.pos, hauler)
        except UnreachableTargetError:
            continue
        if best is None or (eta, dropoff.id) < best:
            best = (eta, dropoff.id)
            choice = dropoff
    return choice


def rest_position(ctx: TickContext, hauler: Hauler) -> Position:
    """Where an idle, empty hauler should wait."""
    snapshot = ctx.snapshot
    if snapshot.storage is not None:
        return snapshot.storage.pos
    if snapshot.planned_storage_pos is not None:
        return snapshot.planned_storage_pos
    if snapshot.rest_position is not None:
        return snapshot.rest_position
    return hauler.pos


def deposit_steps(ctx: TickContext, hauler: Hauler) -> tuple[TaskStep, ...] | None:
    """Dump all carried cargo at the nearest dropoff, or None if there is none."""
    dropoff = nearest_dropoff(ctx, hauler)
    if dropoff is None:
        return None
    room = dropoff.free_capacity()
    steps = []
    for kind in hauler.cargo_kinds():
        amount = min(hauler.amount(kind), room)
        if amount <= 0:
            break
        steps.append(TaskStep(TaskAction.TRANSFER, dropoff.id, kind, amount))
        room -= amount
    return tuple(steps)


def park_steps(ctx: TickContext, hauler: Hauler) -> tuple[TaskStep, ...]:
    return (TaskStep(TaskAction.PARK, position=rest_position(ctx, hauler)),)


def _serves_request(assignment: Assignment | None) -> bool:
    return (
        assignment is not None
        and assignment.request is not None
        and assignment.choice is not None
        and assignment.predicted != 0
    )


def choose_steps(
    ctx: TickContext, hauler: Hauler, assignment: Assignment | None
) -> tuple[TaskStep, ...]:
    """Pick the chain for a hauler without binding it."""
    if _serves_request(assignment):
        return plan_steps(ctx, hauler, assignment.request, assignment.predicted, assignment.choice)

    if hauler.carried() > 0:
        steps = deposit_steps(ctx, hauler)
        if steps:
            return steps
        logger.warning(
            "Hauler %s carries %d unit(s) but colony %s has no dropoff; parking",
            hauler.id,
            hauler.carried(),
            ctx.colony,
        )
    return park_steps(ctx, hauler)


def _record_request(hauler: Hauler, assignment: Assignment | None) -> None:
    """Remember which request the chain serves so later ticks can claim it."""
    if not _serves_request(assignment):
        hauler.release_request()
        return
    hauler.task_request_target_id = assignment.request.target_id
    hauler.task_request_resource = assignment.request.resource
    hauler.task_claim = abs(assignment.choice.amount)


def bind(
    ctx: TickContext, hauler: Hauler, assignment: Assignment | None
) -> tuple[TaskStep, ...]:
    """Choose a chain for the hauler and hand it to the execution layer."""
    steps = choose_steps(ctx, hauler, assignment)
    ctx.executor.bind(hauler.id, steps)
    _record_request(hauler, assignment)
    return steps


def park(ctx: TickContext, hauler: Hauler) -> tuple[TaskStep, ...]:
    """Send the hauler to its rest position, dropping any request it served."""
    steps = park_steps(ctx, hauler)
    ctx.executor.bind(hauler.id, steps)
    hauler.release_request()
    return steps
