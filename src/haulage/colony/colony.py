"""Colony dataclass: one colony-scope with its sites and logistics networks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from haulage.colony.sites import ColonyStage, Consumer, MiningSite, UpgradeSite
from haulage.colony.transport import TransportReport, transport_report
from haulage.config import LogisticsSettings, get_settings
from haulage.logistics.links import LinkNetwork
from haulage.logistics.network import LogisticsNetwork
from haulage.model.snapshot import ColonySnapshot, TickContext

if TYPE_CHECKING:
    from haulage.interfaces import DistanceOracle, TaskExecutor


@dataclass
class Colony:
    """Container for one player base.

    Colonies share nothing: each owns its snapshot, request registry, link
    network and hauler pool, and is processed as an independent unit.
    """

    snapshot: ColonySnapshot
    distances: DistanceOracle
    executor: TaskExecutor
    settings: LogisticsSettings = field(default_factory=get_settings)

    # Producers and consumers
    mining_sites: list[MiningSite] = field(default_factory=list)
    upgrade_site: UpgradeSite | None = None
    consumers: list[Consumer] = field(default_factory=list)

    # Development
    stage: ColonyStage = ColonyStage.LARVA
    level: int = 1
    low_power: bool = False

    network: LogisticsNetwork = field(init=False)
    links: LinkNetwork = field(init=False)

    def __post_init__(self) -> None:
        self.network = LogisticsNetwork(self.name, self.settings)
        self.links = LinkNetwork(self.name)

    @property
    def name(self) -> str:
        return self.snapshot.colony

    def context(self) -> TickContext:
        """Fresh context for the snapshot's current tick."""
        return TickContext(
            tick=self.snapshot.tick,
            colony=self.name,
            snapshot=self.snapshot,
            distances=self.distances,
            executor=self.executor,
            settings=self.settings,
        )

    def transport_report(self) -> TransportReport:
        """Hauling capacity on hand versus what the sites need."""
        return transport_report(
            self.context(), self.mining_sites, self.upgrade_site, self.stage, self.low_power
        )
