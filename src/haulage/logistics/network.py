"""Logistics network: the colony-scope facade that runs one tick.

Tick sequence (run_tick):
1. Expire requests not re-registered within the TTL
2. Drop requests whose targets left the snapshot
3. Seed the claim ledger from haulers already en route
4. Split idle haulers by matching policy (stable groups run first)
5. Match, then bind a chain for every idle hauler
6. Return a TickReport
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from haulage.config import GreedyPolicy, StableMatchingPolicy, get_settings
from haulage.errors import HaulageError, SkipReason
from haulage.logging_config import TickLogger
from haulage.logistics import binder
from haulage.logistics.matching import MatchOutcome, match_greedy, match_stable
from haulage.logistics.predictor import ClaimLedger
from haulage.logistics.registry import RequestRegistry
from haulage.model.resources import ResourceKind

if TYPE_CHECKING:
    from haulage.config import LogisticsSettings
    from haulage.model.hauler import Hauler
    from haulage.model.request import LogisticsRequest
    from haulage.model.snapshot import TickContext
    from haulage.model.task import TaskStep

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """What one logistics pass decided. Unmatched entities are normal."""

    tick: int
    colony: str
    bound: dict[str, tuple[TaskStep, ...]] = field(default_factory=dict)  # hauler id -> chain
    matched_requests: list[str] = field(default_factory=list)
    unmatched_requests: list[str] = field(default_factory=list)
    unmatched_haulers: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)  # entity id -> SkipReason
    expired: list[str] = field(default_factory=list)


class LogisticsNetwork:
    """Request registry, matching and binding for one colony.

    Producer and consumer collaborators call ``provide`` / ``request_input``
    during their init phase; the colony then calls ``run_tick`` once.

    Example:
        >>> network = LogisticsNetwork("W1N1")
        >>> network.provide(ctx, "container-1", rate=10)
        >>> report = network.run_tick(ctx)
    """

    def __init__(self, colony: str, settings: LogisticsSettings | None = None) -> None:
        self.colony = colony
        self.settings = settings if settings is not None else get_settings()
        self.registry = RequestRegistry(ttl=self.settings.request_ttl)
        self.last_outcome: MatchOutcome | None = None
        self._matched_tick: int | None = None

    # Registration

    def register(
        self,
        ctx: TickContext,
        target_id: str,
        resource: ResourceKind,
        rate: float,
        offset: float = 0.0,
        multiplier: float = 1.0,
    ) -> LogisticsRequest:
        """Register a signed request directly.

        Raises:
            MissingTargetError: If the target is not in the snapshot.
        """
        self._check_scope(ctx)
        target = ctx.snapshot.structure(target_id)
        if self._matched_tick == ctx.tick:
            logger.warning(
                "Request for %s:%s registered after matching on tick %d; "
                "it will only be seen next tick",
                target_id,
                resource.value,
                ctx.tick,
            )
        return self.registry.register(
            target_id,
            resource,
            rate,
            offset,
            tick=ctx.tick,
            target_kind=target.kind,
            multiplier=multiplier,
        )

    def provide(
        self,
        ctx: TickContext,
        target_id: str,
        resource: ResourceKind = ResourceKind.ENERGY,
        *,
        rate: float = 0.0,
        offset: float | None = None,
        multiplier: float = 1.0,
    ) -> LogisticsRequest:
        """Register a target as a source to be drained.

        ``rate`` is how fast its surplus grows; ``offset`` defaults to its
        current contents. Both are stored negative.
        """
        if offset is None:
            offset = ctx.snapshot.structure(target_id).amount(resource)
        return self.register(ctx, target_id, resource, -abs(rate), -abs(offset), multiplier)

    def request_input(
        self,
        ctx: TickContext,
        target_id: str,
        resource: ResourceKind = ResourceKind.ENERGY,
        *,
        rate: float = 0.0,
        offset: float | None = None,
        multiplier: float = 1.0,
    ) -> LogisticsRequest:
        """Register a target as a consumer to be filled.

        ``rate`` is how fast its need grows; ``offset`` defaults to its free
        capacity.
        """
        if offset is None:
            offset = ctx.snapshot.structure(target_id).free_capacity()
        return self.register(ctx, target_id, resource, abs(rate), abs(offset), multiplier)

    def withdraw(self, target_id: str, resource: ResourceKind = ResourceKind.ENERGY) -> bool:
        return self.registry.withdraw(target_id, resource)

    # Tick pass

    def run_tick(self, ctx: TickContext) -> TickReport:
        """Match idle haulers to requests and bind their tasks for this tick."""
        self._check_scope(ctx)
        log = TickLogger(logger, ctx.colony, ctx.tick)
        report = TickReport(tick=ctx.tick, colony=ctx.colony)
        outcome = MatchOutcome()

        report.expired = [r.id for r in self.registry.expire(ctx.tick)]

        for request in self.registry.all_requests():
            if not ctx.snapshot.has(request.target_id):
                outcome.missing_targets.add(request.target_id)
                outcome.skipped[request.id] = SkipReason.MISSING_TARGET
        self._drop_missing(outcome, log)

        requests = self.registry.all_requests()
        ledger = ClaimLedger()
        seeded = ledger.seed_from_haulers(ctx.snapshot, self.registry)

        idle = ctx.snapshot.idle_haulers()
        for policy, haulers in self._group_by_policy(idle):
            match policy:
                case StableMatchingPolicy():
                    match_stable(ctx, haulers, requests, ledger, policy, outcome)
                case GreedyPolicy():
                    match_greedy(ctx, haulers, requests, ledger, policy, outcome)
        self._drop_missing(outcome, log)

        for hauler in idle:
            assignment = outcome.assignments.get(hauler.id)
            try:
                report.bound[hauler.id] = binder.bind(ctx, hauler, assignment)
            except HaulageError:
                log.warning("Could not bind hauler %s; parking it", hauler.id, exc_info=True)
                report.bound[hauler.id] = binder.park(ctx, hauler)

        matched = outcome.matched_request_ids()
        report.matched_requests = sorted(matched)
        report.unmatched_requests = sorted(
            r.id for r in requests if r.id not in matched and r.id not in outcome.skipped
        )
        report.unmatched_haulers = sorted(
            a.hauler_id for a in outcome.assignments.values() if a.request is None
        )
        # Skipped for some haulers but matched by another is not a skip
        report.skipped = {k: v for k, v in outcome.skipped.items() if k not in matched}
        for request_id in report.unmatched_requests:
            report.skipped[request_id] = SkipReason.NO_ELIGIBLE_MATCH

        self.last_outcome = outcome
        self._matched_tick = ctx.tick
        log.debug(
            "Logistics pass: requests=%d idle=%d matched=%d unmatched_requests=%d "
            "seeded_claims=%d",
            len(requests),
            len(idle),
            len(matched),
            len(report.unmatched_requests),
            seeded,
        )
        return report

    def _check_scope(self, ctx: TickContext) -> None:
        if ctx.colony != self.colony:
            raise ValueError(
                f"Context for colony '{ctx.colony}' passed to network of '{self.colony}'"
            )

    def _drop_missing(self, outcome: MatchOutcome, log: TickLogger) -> None:
        for target_id in sorted(outcome.missing_targets):
            removed = self.registry.withdraw_target(target_id)
            if removed:
                log.debug("Dropped %d request(s) for missing target %s", removed, target_id)

    def _group_by_policy(
        self, haulers: list[Hauler]
    ) -> list[tuple[GreedyPolicy | StableMatchingPolicy, list[Hauler]]]:
        """Idle haulers per capacity class, stable-matching groups first."""
        groups: dict[str, tuple[GreedyPolicy | StableMatchingPolicy, list[Hauler]]] = {}
        for hauler in haulers:
            policy = self.settings.select_policy(hauler.capacity)
            groups.setdefault(policy.kind, (policy, []))[1].append(hauler)
        return sorted(groups.values(), key=lambda group: group[0].kind != "stable")
