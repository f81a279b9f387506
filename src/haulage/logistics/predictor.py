"""Amount prediction: how much a hauler could actually move when it arrives.

A request's raw projection is ``offset + rate * elapsed`` where ``elapsed``
runs from the observation tick to the hauler's arrival. The projection is
reduced by what other haulers have already claimed this tick and clamped to
what the target can physically accept or give up.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import TYPE_CHECKING

from haulage.errors import UnreachableTargetError

if TYPE_CHECKING:
    from haulage.logistics.registry import RequestRegistry
    from haulage.model.hauler import Hauler
    from haulage.model.request import LogisticsRequest
    from haulage.model.resources import Position, ResourceKind
    from haulage.model.snapshot import ColonySnapshot, TickContext
    from haulage.model.structure import Structure

logger = logging.getLogger(__name__)


class ClaimLedger:
    """Amounts already promised to each request during the current tick.

    Claims are magnitudes: for an input request the amount being brought,
    for an output request the amount being taken away.
    """

    def __init__(self) -> None:
        self._claims: defaultdict[str, float] = defaultdict(float)

    def claim(self, request_id: str, amount: float) -> None:
        self._claims[request_id] += abs(amount)

    def claimed(self, request_id: str) -> float:
        return self._claims.get(request_id, 0.0)

    def seed_from_haulers(self, snapshot: ColonySnapshot, registry: RequestRegistry) -> int:
        """Claim on behalf of busy haulers already serving a request.

        A hauler bound by the binder claims what its chain promised, even
        while it is still on the way to a buffer. Haulers without that record
        claim against the target of their current step instead.

        Returns the number of claims recorded.
        """
        seeded = 0
        for _, hauler in sorted(snapshot.haulers.items()):
            if hauler.idle:
                continue
            if hauler.task_request_target_id is not None:
                request = registry.get(hauler.task_request_target_id, hauler.task_request_resource)
                amount = hauler.task_claim
            elif hauler.task_target_id is not None and hauler.task_resource is not None:
                request = registry.get(hauler.task_target_id, hauler.task_resource)
                if request is None:
                    continue
                if request.is_input:
                    amount = hauler.amount(hauler.task_resource)
                else:
                    amount = hauler.free_capacity()
            else:
                continue
            if request is None:
                continue
            if amount > 0:
                self.claim(request.id, amount)
                seeded += 1
        return seeded

    def __len__(self) -> int:
        return len(self._claims)


def project_amount(request: LogisticsRequest, tick: int, travel_time: float = 0.0) -> float:
    """Signed projection of a request at ``tick`` plus travel time.

    The projection never crosses zero: a pickup that decays away projects to
    0, not to a delivery.
    """
    elapsed = (tick - request.observed_tick) + travel_time
    raw = request.offset + request.rate * elapsed
    if request.is_input:
        return max(0.0, raw)
    return min(0.0, raw)


def clamp_amount(
    raw: float, target: Structure, resource: ResourceKind, claimed: float = 0.0
) -> float:
    """Clamp a signed projection to the target's physical bounds, net of claims.

    Inbound is capped by free capacity, outbound by current contents.
    Over-commitment is never an error; it just clamps to zero.
    """
    if raw > 0:
        return max(0.0, min(raw, target.free_capacity()) - claimed)
    if raw < 0:
        return -max(0.0, min(-raw, target.amount(resource)) - claimed)
    return 0.0


def travel_time(
    ctx: TickContext, origin: Position, destination: Position, hauler: Hauler | None = None
) -> float:
    """Estimated ticks to travel between two positions.

    Raises:
        UnreachableTargetError: If the oracle reports no route.
    """
    if origin == destination:
        return 0.0
    if not ctx.distances.is_reachable(origin, destination):
        raise UnreachableTargetError(origin, destination)
    distance = ctx.distances.distance(origin, destination)
    if math.isinf(distance):
        raise UnreachableTargetError(origin, destination)
    speed = hauler.move_speed if hauler is not None and hauler.move_speed > 0 else 1.0
    return distance * ctx.settings.range_to_path_heuristic / speed


def predicted_amount(
    ctx: TickContext,
    hauler: Hauler,
    request: LogisticsRequest,
    ledger: ClaimLedger | None = None,
) -> float:
    """Signed amount the request is predicted to need when the hauler arrives.

    Returns 0 when nothing meaningful can be moved; callers skip the pairing.

    Raises:
        MissingTargetError: If the request target is not in the snapshot.
        UnreachableTargetError: If the hauler cannot reach the target.
    """
    target = ctx.snapshot.structure(request.target_id)
    eta = travel_time(ctx, hauler.pos, target.pos, hauler)
    raw = project_amount(request, ctx.tick, eta)
    claimed = ledger.claimed(request.id) if ledger is not None else 0.0
    return clamp_amount(raw, target, request.resource, claimed)
