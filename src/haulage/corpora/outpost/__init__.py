"""The Outpost corpus: a small colony with two sources, a spawn and an upgrader.

Layout (30x30 grid):
- Storage in the centre, with a hub link beside it
- Source A in the north-west, emptied through a container
- Source B in the south-east, emptied through a link to the hub
- A wall west of the centre with a single gap
- A ground pile left over from a dismantled structure
- Three haulers: two small (greedy) and one large (stable matching)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from haulage.colony import Colony, ColonyStage, Consumer, MiningSite, UpgradeSite
from haulage.config import LogisticsSettings, get_settings
from haulage.engine.executor import GridExecutor
from haulage.interfaces import GridDistance
from haulage.model import (
    ColonySnapshot,
    Hauler,
    Position,
    ResourceKind,
    Structure,
    TargetKind,
)

if TYPE_CHECKING:
    from haulage.logistics.network import TickReport

GRID_SIZE = 30
ENERGY = ResourceKind.ENERGY


def create_walls() -> list[Position]:
    """A north-south wall at x=10 with a gap at y=12."""
    return [Position(10, y) for y in range(5, 21) if y != 12]


def create_structures() -> dict[str, Structure]:
    """Create the outpost's structures keyed by id."""
    structures = [
        Structure(
            "storage",
            TargetKind.STRUCTURE,
            Position(15, 15),
            capacity=100_000,
            store={ENERGY: 2_000},
            is_buffer=True,
            is_dropoff=True,
        ),
        Structure("link-hub", TargetKind.LINK, Position(16, 16), capacity=800, is_dropoff=True),
        Structure(
            "spawn", TargetKind.STRUCTURE, Position(13, 15), capacity=300, store={ENERGY: 100}
        ),
        Structure("extension-1", TargetKind.STRUCTURE, Position(13, 13), capacity=50),
        Structure("container-a", TargetKind.STRUCTURE, Position(5, 5), capacity=2_000),
        Structure("link-b", TargetKind.LINK, Position(24, 23), capacity=800),
        Structure("battery-u", TargetKind.STRUCTURE, Position(15, 25), capacity=2_000),
        Structure(
            "pile-1", TargetKind.DROP_SITE, Position(8, 20), capacity=10_000, store={ENERGY: 600}
        ),
    ]
    return {s.id: s for s in structures}


def create_haulers() -> dict[str, Hauler]:
    """Two small haulers and one large one, parked around storage."""
    haulers = [
        Hauler("hauler-1", Position(15, 14), capacity=300),
        Hauler("hauler-2", Position(16, 14), capacity=300),
        Hauler("hauler-big", Position(14, 14), capacity=1_000),
    ]
    return {h.id: h for h in haulers}


def create_colony(settings: LogisticsSettings | None = None) -> tuple[Colony, GridExecutor]:
    """Create the outpost colony and the executor bound to its snapshot."""
    snapshot = ColonySnapshot(
        colony="outpost",
        structures=create_structures(),
        haulers=create_haulers(),
        storage_id="storage",
    )
    distances = GridDistance(GRID_SIZE, GRID_SIZE, create_walls())
    executor = GridExecutor(snapshot, distances)
    colony = Colony(
        snapshot=snapshot,
        distances=distances,
        executor=executor,
        settings=settings if settings is not None else get_settings(),
        mining_sites=[
            MiningSite("source-a", Position(4, 4), energy_per_tick=10, output_id="container-a"),
            MiningSite("source-b", Position(25, 24), energy_per_tick=10, output_id="link-b"),
        ],
        upgrade_site=UpgradeSite(
            "controller", Position(15, 27), upgrade_power_needed=5, battery_id="battery-u"
        ),
        consumers=[
            Consumer("spawn", rate=2),
            Consumer("extension-1", rate=1),
        ],
        stage=ColonyStage.INFANT,
        level=3,
    )
    return colony, executor


def print_state_summary(colony: Colony, report: TickReport | None = None) -> None:
    """Print a one-line state summary for the current tick."""
    snapshot = colony.snapshot
    storage = snapshot.storage
    stored = storage.amount(ResourceKind.ENERGY) if storage is not None else 0
    idle = len(snapshot.idle_haulers())

    print(f"Tick {snapshot.tick:5d} | Storage: {stored:6d} | Idle: {idle} | ", end="")
    print("Requests: ", end="")
    print(f"{len(colony.network.registry):2d} ", end="")
    if report is not None:
        print(f"(matched {len(report.matched_requests)}) ", end="")
    print("| Haulers: ", end="")
    for hauler_id, hauler in sorted(snapshot.haulers.items()):
        heading = hauler.task_target_id or "-"
        print(f"{hauler_id}={heading}:{hauler.carried()} ", end="")
    print()
