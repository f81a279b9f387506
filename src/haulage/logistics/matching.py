"""Matching engine: pair idle haulers with requests.

Two policies are available:

1. Greedy - each hauler, in id order, takes its best request given what
   earlier haulers have already claimed. Cheap and good enough for
   short-hop, low-capacity haulers.
2. Stable matching - hauler-proposing deferred acceptance between all
   high-capacity haulers and all requests with something to move. The
   result is hauler-optimal and has no blocking pair, so long-haul haulers
   are not reassigned back and forth from one tick to the next.

Both sides rank by the same value: units moved per tick of travel, weighted by
the request multiplier. Ties fall back to larger predicted amount, then to
target id (haulers' view) or to shorter travel, then hauler id (requests' view).
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from haulage.errors import MissingTargetError, SkipReason, UnreachableTargetError
from haulage.logistics.buffers import BufferChoice, resolve
from haulage.logistics.predictor import ClaimLedger, predicted_amount

if TYPE_CHECKING:
    from haulage.config import GreedyPolicy, StableMatchingPolicy
    from haulage.model.hauler import Hauler
    from haulage.model.request import LogisticsRequest
    from haulage.model.snapshot import TickContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A feasible (hauler, request) pairing and its score."""

    hauler_id: str
    request: LogisticsRequest
    predicted: float  # signed predicted amount at arrival
    choice: BufferChoice
    value: float


@dataclass(frozen=True)
class Assignment:
    """Result of matching for one hauler. ``request`` is None when unmatched."""

    hauler_id: str
    request: LogisticsRequest | None = None
    predicted: float = 0.0
    choice: BufferChoice | None = None
    policy: str = "greedy"

    @classmethod
    def from_candidate(cls, candidate: Candidate, policy: str) -> Assignment:
        return cls(
            hauler_id=candidate.hauler_id,
            request=candidate.request,
            predicted=candidate.predicted,
            choice=candidate.choice,
            policy=policy,
        )


@dataclass
class MatchOutcome:
    """Assignments plus everything that was skipped along the way."""

    assignments: dict[str, Assignment] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)  # entity id -> SkipReason
    missing_targets: set[str] = field(default_factory=set)

    def matched_request_ids(self) -> set[str]:
        return {a.request.id for a in self.assignments.values() if a.request is not None}


def hauler_rank_key(candidate: Candidate) -> tuple:
    return (
        -candidate.value,
        -abs(candidate.predicted),
        candidate.request.target_id,
        candidate.request.resource.value,
    )


def request_rank_key(candidate: Candidate) -> tuple:
    return (-candidate.value, candidate.choice.travel, candidate.hauler_id)


def evaluate(
    ctx: TickContext, hauler: Hauler, request: LogisticsRequest, ledger: ClaimLedger
) -> Candidate | None:
    """Score one pairing, or None when it would move nothing.

    Raises:
        MissingTargetError: If the request target is gone.
        UnreachableTargetError: If the hauler cannot reach the target.
    """
    predicted = predicted_amount(ctx, hauler, request, ledger)
    if predicted == 0:
        return None
    choice = resolve(ctx, hauler, request, predicted)
    if choice is None:
        return None
    value = choice.value(ctx.settings.min_travel_time) * request.multiplier
    return Candidate(hauler.id, request, predicted, choice, value)


def candidates_for(
    ctx: TickContext,
    hauler: Hauler,
    requests: list[LogisticsRequest],
    ledger: ClaimLedger,
    outcome: MatchOutcome,
) -> list[Candidate]:
    """Feasible candidates for one hauler, best first.

    Missing targets, unreachable pairs and pairings that would move nothing
    are recorded on the outcome and skipped; one bad request never stops the pass.
    """
    found: list[Candidate] = []
    for request in requests:
        if request.target_id in outcome.missing_targets:
            continue
        try:
            candidate = evaluate(ctx, hauler, request, ledger)
        except MissingTargetError as e:
            logger.debug("Request %s dropped: %s", request.id, e)
            outcome.missing_targets.add(e.target_id)
            outcome.skipped[request.id] = SkipReason.MISSING_TARGET
            continue
        except UnreachableTargetError as e:
            logger.debug("Hauler %s skips %s: %s", hauler.id, request.id, e)
            outcome.skipped.setdefault(request.id, SkipReason.UNREACHABLE)
            continue
        if candidate is None:
            outcome.skipped.setdefault(request.id, SkipReason.SATURATED)
            continue
        found.append(candidate)
    found.sort(key=hauler_rank_key)
    return found


def match_greedy(
    ctx: TickContext,
    haulers: list[Hauler],
    requests: list[LogisticsRequest],
    ledger: ClaimLedger,
    policy: GreedyPolicy,
    outcome: MatchOutcome | None = None,
) -> MatchOutcome:
    """Give each hauler its single best request, in hauler id order."""
    if outcome is None:
        outcome = MatchOutcome()
    for hauler in sorted(haulers, key=lambda h: h.id):
        preferences = candidates_for(ctx, hauler, requests, ledger, outcome)
        if not preferences:
            outcome.assignments[hauler.id] = Assignment(hauler.id, policy=policy.kind)
            continue
        best = preferences[0]
        ledger.claim(best.request.id, best.choice.amount)
        outcome.assignments[hauler.id] = Assignment.from_candidate(best, policy.kind)
    return outcome


def match_stable(
    ctx: TickContext,
    haulers: list[Hauler],
    requests: list[LogisticsRequest],
    ledger: ClaimLedger,
    policy: StableMatchingPolicy,
    outcome: MatchOutcome | None = None,
) -> MatchOutcome:
    """Hauler-proposing deferred acceptance.

    Preferences are computed once against the ledger as it stands, then the
    matched pairs are claimed so later passes see them.
    """
    if outcome is None:
        outcome = MatchOutcome()
    ordered = sorted(haulers, key=lambda h: h.id)

    preferences: dict[str, list[Candidate]] = {}
    rankings: dict[str, dict[str, tuple]] = {}
    for hauler in ordered:
        preferences[hauler.id] = candidates_for(ctx, hauler, requests, ledger, outcome)
        for candidate in preferences[hauler.id]:
            rankings.setdefault(candidate.request.id, {})[hauler.id] = request_rank_key(
                candidate
            )

    next_choice = dict.fromkeys(preferences, 0)
    engaged: dict[str, Candidate] = {}  # request id -> provisional partner
    free = deque(h.id for h in ordered)
    proposals = 0

    while free and proposals < policy.max_rounds:
        hauler_id = free.popleft()
        options = preferences[hauler_id]
        if next_choice[hauler_id] >= len(options):
            continue  # exhausted its list; stays unmatched
        candidate = options[next_choice[hauler_id]]
        next_choice[hauler_id] += 1
        proposals += 1

        request_id = candidate.request.id
        current = engaged.get(request_id)
        if current is None:
            engaged[request_id] = candidate
        elif rankings[request_id][hauler_id] < rankings[request_id][current.hauler_id]:
            engaged[request_id] = candidate
            free.append(current.hauler_id)
        else:
            free.append(hauler_id)

    if free and proposals >= policy.max_rounds:
        logger.warning(
            "Stable matching stopped after %d proposals with %d hauler(s) still free",
            proposals,
            len(free),
        )

    partners = {c.hauler_id: c for c in engaged.values()}
    for hauler in ordered:
        candidate = partners.get(hauler.id)
        if candidate is None:
            outcome.assignments[hauler.id] = Assignment(hauler.id, policy=policy.kind)
            continue
        ledger.claim(candidate.request.id, candidate.choice.amount)
        outcome.assignments[hauler.id] = Assignment.from_candidate(candidate, policy.kind)

    logger.debug(
        "Stable matching paired %d of %d hauler(s) in %d proposal(s)",
        len(partners),
        len(ordered),
        proposals,
    )
    return outcome


def is_stable(outcome: MatchOutcome, preferences: dict[str, list[Candidate]]) -> bool:
    """Check that no hauler and request would both rather be paired together.

    ``preferences`` maps each hauler id to its candidate list; the same
    candidates give each request's view of the haulers.
    """
    partner_of_request: dict[str, str] = {}
    for assignment in outcome.assignments.values():
        if assignment.request is not None:
            partner_of_request[assignment.request.id] = assignment.hauler_id

    by_pair = {
        (c.hauler_id, c.request.id): c for options in preferences.values() for c in options
    }

    for hauler_id, options in preferences.items():
        assigned = outcome.assignments.get(hauler_id)
        own = None
        if assigned is not None and assigned.request is not None:
            own = by_pair.get((hauler_id, assigned.request.id))
        for candidate in options:
            if own is not None and hauler_rank_key(candidate) >= hauler_rank_key(own):
                break  # the rest are no better than the current partner
            rival_id = partner_of_request.get(candidate.request.id)
            if rival_id is None:
                return False
            rival = by_pair[(rival_id, candidate.request.id)]
            if request_rank_key(candidate) < request_rank_key(rival):
                return False
    return True
