"""Colony glue: sites that register requests and the transport demand estimate."""

from haulage.colony.colony import Colony
from haulage.colony.sites import (
    ColonyStage,
    Consumer,
    MiningSite,
    UpgradeSite,
    pile_decay,
    register_drop_piles,
)
from haulage.colony.transport import TransportReport, transport_demand, transport_report

__all__ = [
    "Colony",
    "ColonyStage",
    "Consumer",
    "MiningSite",
    "TransportReport",
    "UpgradeSite",
    "pile_decay",
    "register_drop_piles",
    "transport_demand",
    "transport_report",
]
