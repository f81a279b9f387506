"""Buffer resolution: decide whether a hauler should stop at a buffer first.

A hauler that cannot serve a request from its current cargo (too little to
deliver, too full to collect) may do better by visiting a buffer on the way:
topping up before a delivery, or off-loading before a collection. Each option
is scored by amount moved per tick of travel.

Ties between equally valued options go to the larger amount, then to the
direct trip, then to the shorter trip, then to the lowest target id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from haulage.errors import UnreachableTargetError
from haulage.logistics.predictor import travel_time
from haulage.model.task import TaskAction, TaskStep, collect_action, deliver_action

if TYPE_CHECKING:
    from haulage.model.hauler import Hauler
    from haulage.model.request import LogisticsRequest
    from haulage.model.snapshot import TickContext
    from haulage.model.structure import Structure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BufferChoice:
    """One way of serving a request: go direct, or via a buffer."""

    target_id: str  # first stop: the buffer, or the request target itself
    amount: float  # dQ, units that end up moved for the request
    travel: float  # dt, ticks until the request target is reached
    via_buffer: bool = False

    def value(self, min_travel: float = 1.0) -> float:
        return self.amount / max(min_travel, self.travel)


def _choice_key(choice: BufferChoice, min_travel: float) -> tuple:
    # min() over this key yields the best choice
    return (
        -choice.value(min_travel),
        -choice.amount,
        choice.via_buffer,
        choice.travel,
        choice.target_id,
    )


def _via(
    ctx: TickContext, hauler: Hauler, buffer: Structure, target: Structure
) -> float | None:
    """Travel time hauler -> buffer -> target, or None if either leg is blocked."""
    try:
        return travel_time(ctx, hauler.pos, buffer.pos, hauler) + travel_time(
            ctx, buffer.pos, target.pos, hauler
        )
    except UnreachableTargetError:
        logger.debug("Buffer %s unreachable for hauler %s", buffer.id, hauler.id)
        return None


def buffer_choices(
    ctx: TickContext, hauler: Hauler, request: LogisticsRequest, predicted: float
) -> list[BufferChoice]:
    """All ways the hauler could serve the request, direct choice first.

    Raises:
        MissingTargetError: If the request target is gone.
        UnreachableTargetError: If the hauler cannot reach the request target.
    """
    target = ctx.snapshot.structure(request.target_id)
    direct_dt = travel_time(ctx, hauler.pos, target.pos, hauler)
    resource = request.resource
    carried = hauler.amount(resource)
    free = hauler.free_capacity()
    choices: list[BufferChoice] = []

    if predicted > 0:
        choices.append(BufferChoice(target.id, min(predicted, carried), direct_dt))
        if carried >= predicted:
            return choices
        for buffer in ctx.snapshot.buffers():
            if buffer.id == target.id or buffer.amount(resource) <= 0:
                continue
            dt = _via(ctx, hauler, buffer, target)
            if dt is None:
                continue
            top_up = min(buffer.amount(resource), free, predicted)
            choices.append(
                BufferChoice(buffer.id, min(predicted, carried + top_up), dt, via_buffer=True)
            )
    elif predicted < 0:
        wanted = -predicted
        choices.append(BufferChoice(target.id, min(wanted, free), direct_dt))
        if free >= wanted:
            return choices
        for buffer in ctx.snapshot.buffers():
            if buffer.id == target.id or buffer.free_capacity() <= 0:
                continue
            dt = _via(ctx, hauler, buffer, target)
            if dt is None:
                continue
            off_load = min(carried, buffer.free_capacity())
            choices.append(
                BufferChoice(buffer.id, min(wanted, free + off_load), dt, via_buffer=True)
            )
    return choices


def best_choice(choices: list[BufferChoice], min_travel: float = 1.0) -> BufferChoice | None:
    """Highest-value choice, or None when nothing can be moved."""
    movable = [c for c in choices if int(c.amount) > 0]
    if not movable:
        return None
    return min(movable, key=lambda c: _choice_key(c, min_travel))


def resolve(
    ctx: TickContext, hauler: Hauler, request: LogisticsRequest, predicted: float
) -> BufferChoice | None:
    """Compute choices and return the best one."""
    return best_choice(
        buffer_choices(ctx, hauler, request, predicted), ctx.settings.min_travel_time
    )


def plan_steps(
    ctx: TickContext,
    hauler: Hauler,
    request: LogisticsRequest,
    predicted: float,
    choice: BufferChoice,
) -> tuple[TaskStep, ...]:
    """Expand a choice into the ordered steps for the execution layer."""
    target = ctx.snapshot.structure(request.target_id)
    resource = request.resource
    steps: list[TaskStep] = []

    if predicted > 0:
        if choice.via_buffer:
            buffer = ctx.snapshot.structure(choice.target_id)
            top_up = min(buffer.amount(resource), hauler.free_capacity(), int(predicted))
            steps.append(TaskStep(TaskAction.WITHDRAW, buffer.id, resource, top_up))
        steps.append(
            TaskStep(deliver_action(request.target_kind), target.id, resource, int(choice.amount))
        )
        return tuple(steps)

    if choice.via_buffer:
        buffer = ctx.snapshot.structure(choice.target_id)
        off_load = min(hauler.amount(resource), buffer.free_capacity())
        if off_load > 0:
            steps.append(TaskStep(TaskAction.TRANSFER, buffer.id, resource, off_load))
    steps.append(
        TaskStep(collect_action(request.target_kind), target.id, resource, int(choice.amount))
    )
    storage = ctx.snapshot.storage
    if storage is not None and storage.id != target.id:
        # Carry home; amount left open so everything collected goes in
        steps.append(TaskStep(TaskAction.TRANSFER, storage.id, resource, None))
    return tuple(steps)
