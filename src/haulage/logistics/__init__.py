"""Logistics core: registry, prediction, buffers, matching, binding, networks."""

from haulage.logistics.binder import bind, choose_steps, nearest_dropoff, park
from haulage.logistics.buffers import BufferChoice, best_choice, buffer_choices, plan_steps
from haulage.logistics.links import LinkNetwork, LinkTransfer
from haulage.logistics.matching import (
    Assignment,
    Candidate,
    MatchOutcome,
    is_stable,
    match_greedy,
    match_stable,
)
from haulage.logistics.network import LogisticsNetwork, TickReport
from haulage.logistics.predictor import (
    ClaimLedger,
    clamp_amount,
    predicted_amount,
    project_amount,
    travel_time,
)
from haulage.logistics.registry import RequestRegistry

__all__ = [
    "Assignment",
    "BufferChoice",
    "Candidate",
    "ClaimLedger",
    "LinkNetwork",
    "LinkTransfer",
    "LogisticsNetwork",
    "MatchOutcome",
    "RequestRegistry",
    "TickReport",
    "best_choice",
    "bind",
    "buffer_choices",
    "choose_steps",
    "clamp_amount",
    "is_stable",
    "match_greedy",
    "match_stable",
    "nearest_dropoff",
    "park",
    "plan_steps",
    "predicted_amount",
    "project_amount",
    "travel_time",
]
