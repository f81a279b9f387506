"""Producer and consumer sites that register requests during a colony's init phase."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

from haulage.model.resources import Position, ResourceKind, TargetKind

if TYPE_CHECKING:
    from haulage.logistics.links import LinkNetwork
    from haulage.logistics.network import LogisticsNetwork
    from haulage.model.snapshot import ColonySnapshot, TickContext
    from haulage.model.structure import Structure

logger = logging.getLogger(__name__)

# Ground piles lose roughly this fraction of their contents every tick
PILE_DECAY_FRACTION = 0.001


class ColonyStage(IntEnum):
    """Colony maturity. Early colonies empty their outputs sooner."""

    LARVA = 0
    INFANT = 1
    ADULT = 2


@dataclass
class MiningSite:
    """A resource node with an output (container, link or ground pile)."""

    id: str
    pos: Position
    energy_per_tick: float
    output_id: str | None = None
    has_miners: bool = True
    drop_mine: bool = False  # no output structure, miners drop on the ground

    def output(self, snapshot: ColonySnapshot) -> Structure | None:
        if self.output_id is None:
            return None
        return snapshot.structures.get(self.output_id)

    def register_output_requests(
        self,
        ctx: TickContext,
        network: LogisticsNetwork,
        links: LinkNetwork,
        stage: ColonyStage,
        level: int,
    ) -> None:
        """Ask for a pickup once the output is full enough to be worth a trip."""
        output = self.output(ctx.snapshot)
        if output is None:
            if not self.drop_mine and ctx.tick % 100 == 0:
                logger.warning("Mining site %s has no output", self.id)
            return
        energy = output.amount(ResourceKind.ENERGY)
        match output.kind:
            case TargetKind.STRUCTURE:
                settings = ctx.settings
                threshold = (
                    settings.larva_output_threshold
                    if stage == ColonyStage.LARVA
                    else settings.output_threshold
                )
                transport_capacity = settings.transport_capacity_per_level * level
                if energy > threshold * transport_capacity:
                    network.provide(ctx, output.id, rate=self.energy_per_tick)
            case TargetKind.LINK:
                # Transmit if the next miner deposit would overflow the link
                if energy + ctx.settings.link_miner_capacity > output.capacity:
                    links.request_transmit(output.id)
            case TargetKind.DROP_SITE:
                pass  # piles are registered by register_drop_piles

    def approximate_predicted_energy(self, ctx: TickContext) -> float:
        """Energy a hauler would find if it set out from storage now.

        Only container outputs are predicted; other outputs return 0.
        """
        output = self.output(ctx.snapshot)
        if output is None or output.kind != TargetKind.STRUCTURE:
            return 0.0
        snapshot = ctx.snapshot
        dropoff = snapshot.storage.pos if snapshot.storage is not None else snapshot.rest_position
        distance = ctx.distances.distance(output.pos, dropoff) if dropoff is not None else 0.0
        if math.isinf(distance):
            distance = 0.0
        predicted_surplus = self.energy_per_tick * distance
        outflux = sum(
            h.free_capacity()
            for _, h in sorted(snapshot.haulers.items())
            if h.heading_to(output.id)
        )
        return max(output.amount(ResourceKind.ENERGY) + predicted_surplus - outflux, 0.0)


@dataclass
class UpgradeSite:
    """The colony controller's upgrade spot, fed through a battery container."""

    id: str
    pos: Position
    upgrade_power_needed: float  # energy spent per tick when fully staffed
    battery_id: str | None = None

    def battery(self, snapshot: ColonySnapshot) -> Structure | None:
        if self.battery_id is None:
            return None
        return snapshot.structures.get(self.battery_id)

    def register_requests(self, ctx: TickContext, network: LogisticsNetwork) -> None:
        battery = self.battery(ctx.snapshot)
        if battery is None or battery.free_capacity() <= 0:
            return
        network.request_input(ctx, battery.id, rate=self.upgrade_power_needed)


@dataclass
class Consumer:
    """A structure that burns a resource every tick (spawn, extension, tower)."""

    structure_id: str
    rate: float
    resource: ResourceKind = ResourceKind.ENERGY
    multiplier: float = 1.0

    def register_requests(self, ctx: TickContext, network: LogisticsNetwork) -> None:
        structure = ctx.snapshot.structures.get(self.structure_id)
        if structure is None:
            logger.debug("Consumer %s is gone", self.structure_id)
            return
        if structure.free_capacity() <= 0:
            return
        network.request_input(
            ctx, structure.id, self.resource, rate=self.rate, multiplier=self.multiplier
        )


def pile_decay(amount: int) -> int:
    """Units a ground pile loses per tick."""
    return math.ceil(amount * PILE_DECAY_FRACTION)


def register_drop_piles(ctx: TickContext, network: LogisticsNetwork) -> int:
    """Request pickup for every ground pile above the dropped-resource threshold.

    Piles decay, so their surplus shrinks over time: the request carries a
    positive rate against a negative offset. Returns the number registered.
    """
    registered = 0
    threshold = ctx.settings.dropped_resource_threshold
    for _, pile in sorted(ctx.snapshot.structures.items()):
        if pile.kind != TargetKind.DROP_SITE:
            continue
        for resource in sorted(pile.store):
            amount = pile.amount(resource)
            if amount < threshold or amount <= 0:
                continue
            network.register(ctx, pile.id, resource, rate=pile_decay(amount), offset=-amount)
            registered += 1
    return registered
