"""Task steps handed to the external task-execution layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from haulage.model.resources import Position, ResourceKind, TargetKind


class TaskAction(StrEnum):
    """Primitive actions the execution layer understands."""

    TRANSFER = "transfer"  # put carried resource into a structure
    WITHDRAW = "withdraw"  # take resource out of a structure
    DROP = "drop"  # put carried resource on the ground at a drop site
    PICKUP = "pickup"  # pick resource up from a drop site
    PARK = "park"  # wait at a position


@dataclass(frozen=True)
class TaskStep:
    """One step of a task chain.

    ``amount`` of None means "as much as possible" and is left for the
    execution layer to resolve on arrival.
    """

    action: TaskAction
    target_id: str | None = None
    resource: ResourceKind | None = None
    amount: int | None = None
    position: Position | None = None  # only for PARK


TaskChain = tuple[TaskStep, ...]


def deliver_action(kind: TargetKind) -> TaskAction:
    """Action that hands resources to a target of the given kind."""
    match kind:
        case TargetKind.DROP_SITE:
            return TaskAction.DROP
        case TargetKind.STRUCTURE | TargetKind.LINK:
            return TaskAction.TRANSFER
    raise ValueError(f"Unknown target kind: {kind!r}")


def collect_action(kind: TargetKind) -> TaskAction:
    """Action that takes resources from a target of the given kind."""
    match kind:
        case TargetKind.DROP_SITE:
            return TaskAction.PICKUP
        case TargetKind.STRUCTURE | TargetKind.LINK:
            return TaskAction.WITHDRAW
    raise ValueError(f"Unknown target kind: {kind!r}")
