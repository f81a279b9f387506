"""Colony tick driver: executes one simulation tick for one colony."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from haulage.colony.sites import pile_decay, register_drop_piles
from haulage.model.resources import ResourceKind, TargetKind

if TYPE_CHECKING:
    from haulage.colony.colony import Colony
    from haulage.engine.executor import GridExecutor
    from haulage.logistics.network import TickReport
    from haulage.model.snapshot import TickContext

logger = logging.getLogger(__name__)


def tick_colony(colony: Colony, executor: GridExecutor) -> TickReport:
    """Execute one tick.

    Tick sequence:
    1. Init phase: sites and consumers register requests
    2. Logistics pass: match idle haulers and bind their chains
    3. Link network: pair transmitting and receiving links, move energy
    4. Advance haulers through their chains
    5. Economy: mines produce, consumers burn, ground piles decay
    6. Increment snapshot.tick

    Args:
        colony: The colony to advance
        executor: Execution layer bound to the colony's snapshot

    Returns:
        The logistics report for this tick
    """
    ctx = colony.context()

    # 1. Registration strictly precedes matching
    _register_requests(colony, ctx)

    # 2. Logistics pass
    report = colony.network.run_tick(ctx)

    # 3. Link transfers
    _run_links(colony, ctx)

    # 4. Haulers act
    executor.advance()

    # 5. Production and consumption
    _update_economy(colony)

    # 6. Clock
    colony.snapshot.tick += 1

    if colony.snapshot.tick % 100 == 0:
        logger.debug(
            "Colony %s tick %d: haulers=%d requests=%d",
            colony.name,
            colony.snapshot.tick,
            len(colony.snapshot.haulers),
            len(colony.network.registry),
        )
    return report


def _register_requests(colony: Colony, ctx: TickContext) -> None:
    for site in colony.mining_sites:
        site.register_output_requests(
            ctx, colony.network, colony.links, colony.stage, colony.level
        )
    if colony.upgrade_site is not None:
        colony.upgrade_site.register_requests(ctx, colony.network)
    for consumer in colony.consumers:
        consumer.register_requests(ctx, colony.network)
    register_drop_piles(ctx, colony.network)


def _run_links(colony: Colony, ctx: TickContext) -> None:
    upgrade_battery = (
        colony.upgrade_site.battery(ctx.snapshot) if colony.upgrade_site is not None else None
    )
    if upgrade_battery is not None and upgrade_battery.kind == TargetKind.LINK:
        colony.links.request_receive(upgrade_battery.id)
    for structure in ctx.snapshot.dropoffs():
        if structure.kind == TargetKind.LINK:
            colony.links.request_receive(structure.id)
    for transfer in colony.links.run(ctx):
        source = ctx.snapshot.structure(transfer.source_id)
        destination = ctx.snapshot.structure(transfer.destination_id)
        taken = source.remove(ResourceKind.ENERGY, transfer.amount)
        destination.add(ResourceKind.ENERGY, taken)


def _update_economy(colony: Colony) -> None:
    snapshot = colony.snapshot
    for site in colony.mining_sites:
        if not site.has_miners:
            continue
        output = site.output(snapshot)
        if output is not None:
            output.add(ResourceKind.ENERGY, round(site.energy_per_tick))
    for consumer in colony.consumers:
        structure = snapshot.structures.get(consumer.structure_id)
        if structure is not None:
            structure.remove(consumer.resource, round(consumer.rate))
    if colony.upgrade_site is not None:
        battery = colony.upgrade_site.battery(snapshot)
        if battery is not None:
            battery.remove(ResourceKind.ENERGY, round(colony.upgrade_site.upgrade_power_needed))
    for pile in snapshot.structures.values():
        if pile.kind != TargetKind.DROP_SITE:
            continue
        for resource in list(pile.store):
            pile.remove(resource, pile_decay(pile.amount(resource)))
