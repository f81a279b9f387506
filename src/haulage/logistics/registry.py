"""Request registry: the live set of transfer requests for one colony."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from haulage.model.request import LogisticsRequest
from haulage.model.resources import ResourceKind, TargetKind

logger = logging.getLogger(__name__)


class RequestRegistry:
    """Holds at most one request per (target, resource) pair.

    Requests are rates, not snapshots: each carries the offset observed at
    registration plus a per-tick rate. Collaborators re-register every tick;
    anything not refreshed within ``ttl`` ticks is dropped by ``expire``.
    """

    def __init__(self, ttl: int = 0) -> None:
        self.ttl = ttl
        self._requests: dict[tuple[str, ResourceKind], LogisticsRequest] = {}

    def register(
        self,
        target_id: str,
        resource: ResourceKind,
        rate: float,
        offset: float = 0.0,
        *,
        tick: int,
        target_kind: TargetKind = TargetKind.STRUCTURE,
        multiplier: float = 1.0,
    ) -> LogisticsRequest:
        """Insert or overwrite the request for (target_id, resource).

        Registering identical parameters again keeps the original observation
        tick, so repeated registration within a tick is a no-op.
        """
        key = (target_id, resource)
        existing = self._requests.get(key)
        if (
            existing is not None
            and existing.rate == rate
            and existing.offset == offset
            and existing.target_kind == target_kind
            and existing.multiplier == multiplier
        ):
            existing.last_seen_tick = tick
            return existing

        request = LogisticsRequest(
            target_id=target_id,
            resource=resource,
            rate=rate,
            offset=offset,
            observed_tick=tick,
            last_seen_tick=tick,
            target_kind=target_kind,
            multiplier=multiplier,
        )
        self._requests[key] = request
        if existing is not None:
            logger.debug("Updated request %s: rate=%.2f offset=%.1f", request.id, rate, offset)
        return request

    def withdraw(self, target_id: str, resource: ResourceKind) -> bool:
        """Remove one request. Returns False when there was nothing to remove."""
        return self._requests.pop((target_id, resource), None) is not None

    def withdraw_target(self, target_id: str) -> int:
        """Remove every request pointing at a target, returning how many went."""
        keys = [key for key in self._requests if key[0] == target_id]
        for key in keys:
            del self._requests[key]
        return len(keys)

    def expire(self, tick: int) -> list[LogisticsRequest]:
        """Drop requests not re-registered within the TTL window."""
        cutoff = tick - self.ttl
        stale = [r for r in self._requests.values() if r.last_seen_tick < cutoff]
        for request in stale:
            del self._requests[request.key]
        if stale:
            logger.debug("Expired %d request(s) at tick %d", len(stale), tick)
        return stale

    def get(self, target_id: str, resource: ResourceKind) -> LogisticsRequest | None:
        return self._requests.get((target_id, resource))

    def all_requests(self) -> list[LogisticsRequest]:
        """Live requests sorted by key, so iteration order never varies."""
        return [self._requests[key] for key in sorted(self._requests)]

    def clear(self) -> None:
        self._requests.clear()

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, key: object) -> bool:
        return key in self._requests

    def __iter__(self) -> Iterator[LogisticsRequest]:
        return iter(self.all_requests())
