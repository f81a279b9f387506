"""Link network: instant energy transmission between link structures.

Mining sites whose output is a link ask to transmit when the next deposit
would overflow it; consumers near links ask to receive. Each tick every
transmitting link is paired with the nearest receiving link that still has
room. Requests reset after every run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from haulage.model.resources import ResourceKind

if TYPE_CHECKING:
    from haulage.model.snapshot import TickContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkTransfer:
    """One planned link-to-link transmission."""

    source_id: str
    destination_id: str
    amount: int


class LinkNetwork:
    """Collects transmit/receive requests for one colony and pairs them."""

    def __init__(self, colony: str) -> None:
        self.colony = colony
        self._transmit: set[str] = set()
        self._receive: dict[str, int | None] = {}

    def request_transmit(self, link_id: str) -> None:
        self._transmit.add(link_id)

    def request_receive(self, link_id: str, amount: int | None = None) -> None:
        """Ask for energy at a link; None means fill it up."""
        self._receive[link_id] = amount

    @property
    def transmitting(self) -> list[str]:
        return sorted(self._transmit)

    @property
    def receiving(self) -> list[str]:
        return sorted(self._receive)

    def run(self, ctx: TickContext) -> list[LinkTransfer]:
        """Pair transmitters with receivers and reset for the next tick."""
        snapshot = ctx.snapshot
        room: dict[str, int] = {}
        for link_id, wanted in sorted(self._receive.items()):
            if not snapshot.has(link_id):
                logger.debug("Receiving link %s is gone", link_id)
                continue
            free = snapshot.structure(link_id).free_capacity()
            room[link_id] = free if wanted is None else min(wanted, free)

        transfers: list[LinkTransfer] = []
        for source_id in self.transmitting:
            if not snapshot.has(source_id):
                logger.debug("Transmitting link %s is gone", source_id)
                continue
            source = snapshot.structure(source_id)
            available = source.amount(ResourceKind.ENERGY)
            receivers = [
                (source.pos.range_to(snapshot.structure(rid).pos), rid)
                for rid, space in room.items()
                if space > 0 and rid != source_id
            ]
            if available <= 0 or not receivers:
                continue
            _, destination_id = min(receivers)
            amount = min(available, room[destination_id])
            room[destination_id] -= amount
            transfers.append(LinkTransfer(source_id, destination_id, amount))

        if transfers:
            logger.debug("Planned %d link transfer(s) for %s", len(transfers), self.colony)
        self._transmit.clear()
        self._receive.clear()
        return transfers
