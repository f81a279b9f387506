"""Transport demand: how much hauling capacity a colony needs."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from haulage.colony.sites import ColonyStage
from haulage.model.resources import TargetKind

if TYPE_CHECKING:
    from haulage.colony.sites import MiningSite, UpgradeSite
    from haulage.model.resources import Position
    from haulage.model.snapshot import TickContext

logger = logging.getLogger(__name__)

# Drop-mined sites lose part of their output to decay before pickup
DROP_MINING_EFFICIENCY = 0.75


@dataclass(frozen=True)
class TransportReport:
    """Current versus needed carry parts for the hauler role."""

    current: float
    needed: float

    @property
    def needs_more(self) -> bool:
        return self.current < self.needed


def _dropoff_position(ctx: TickContext) -> Position | None:
    snapshot = ctx.snapshot
    if snapshot.storage is not None:
        return snapshot.storage.pos
    if snapshot.planned_storage_pos is not None:
        return snapshot.planned_storage_pos
    return snapshot.rest_position


def transport_demand(
    ctx: TickContext,
    sites: list[MiningSite],
    upgrade_site: UpgradeSite | None,
    stage: ColonyStage,
    low_power: bool = False,
) -> float:
    """Carry parts needed to keep every output emptied and the upgrader fed.

    Each source contributes its output rate times the round-trip length to the
    dropoff. Only sites with miners present count, so a colony recovering from
    a wipe does not over-request haulers.
    """
    settings = ctx.settings
    dropoff = _dropoff_position(ctx)
    if dropoff is None:
        return 0.0
    scaling = (
        settings.larva_round_trip_scaling
        if stage == ColonyStage.LARVA
        else settings.round_trip_scaling
    )

    power = 0.0
    for site in sites:
        if not site.has_miners:
            continue
        distance = ctx.distances.distance(site.pos, dropoff)
        if math.isinf(distance):
            logger.debug("Mining site %s cannot reach the dropoff", site.id)
            continue
        output = site.output(ctx.snapshot)
        if output is not None and output.kind == TargetKind.STRUCTURE:
            power += site.energy_per_tick * scaling * distance
        elif site.drop_mine:
            power += DROP_MINING_EFFICIENCY * site.energy_per_tick * scaling * distance

    if low_power:
        power *= 0.5

    if upgrade_site is not None:
        battery = upgrade_site.battery(ctx.snapshot)
        upgrade_pos = battery.pos if battery is not None else upgrade_site.pos
        distance = ctx.distances.distance(dropoff, upgrade_pos)
        if not math.isinf(distance):
            power += upgrade_site.upgrade_power_needed * scaling * distance

    return power / settings.carry_capacity_per_part


def transport_report(
    ctx: TickContext,
    sites: list[MiningSite],
    upgrade_site: UpgradeSite | None,
    stage: ColonyStage,
    low_power: bool = False,
) -> TransportReport:
    current = sum(h.capacity for h in ctx.snapshot.haulers.values())
    report = TransportReport(
        current=current / ctx.settings.carry_capacity_per_part,
        needed=transport_demand(ctx, sites, upgrade_site, stage, low_power),
    )
    if report.needs_more:
        logger.debug(
            "Colony %s transport power %.1f/%.1f", ctx.colony, report.current, report.needed
        )
    return report
