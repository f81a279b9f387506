"""Tests for the Outpost corpus and the command-line runner."""

from haulage.cli import main as cli_main
from haulage.config import LogisticsSettings
from haulage.corpora.outpost import (
    create_colony,
    create_structures,
    create_walls,
    print_state_summary,
)
from haulage.corpora.outpost.__main__ import main as outpost_main
from haulage.engine import tick_colony
from haulage.model import ResourceKind

ENERGY = ResourceKind.ENERGY


def test_structures_not_on_walls() -> None:
    """Every structure sits on a walkable tile."""
    walls = set(create_walls())
    assert all(s.pos not in walls for s in create_structures().values())


def test_create_colony() -> None:
    colony, executor = create_colony(LogisticsSettings())

    assert colony.name == "outpost"
    assert colony.snapshot.storage.id == "storage"
    assert len(colony.snapshot.idle_haulers()) == 3
    assert executor.snapshot is colony.snapshot


def test_large_hauler_uses_stable_matching() -> None:
    colony, executor = create_colony(LogisticsSettings())

    tick_colony(colony, executor)

    assignment = colony.network.last_outcome.assignments["hauler-big"]
    assert assignment.policy == "stable"
    assert colony.network.last_outcome.assignments["hauler-1"].policy == "greedy"


def test_runs_without_errors() -> None:
    """Several hundred ticks complete and haulers do real work."""
    colony, executor = create_colony(LogisticsSettings())

    for _ in range(300):
        tick_colony(colony, executor)

    assert colony.snapshot.tick == 300
    assert executor.completed_steps > 0
    assert colony.snapshot.structures["spawn"].amount(ENERGY) > 0
    assert colony.snapshot.structures["battery-u"].amount(ENERGY) > 0


def test_link_energy_reaches_hub() -> None:
    colony, executor = create_colony(LogisticsSettings())

    for _ in range(100):
        tick_colony(colony, executor)

    assert colony.snapshot.structures["link-hub"].amount(ENERGY) > 0


def test_transport_report() -> None:
    colony, _ = create_colony(LogisticsSettings())

    report = colony.transport_report()

    assert report.current == (300 + 300 + 1000) / 50
    assert report.needed > 0


def test_outpost_main(capsys) -> None:
    assert outpost_main(["--ticks", "20", "--summary-interval", "10"]) == 0

    output = capsys.readouterr().out
    assert "Starting Outpost simulation for 20 ticks" in output
    assert "Final tick: 20" in output


def test_cli_main(capsys) -> None:
    assert cli_main(["--ticks", "5", "--log-level", "warning"]) == 0

    output = capsys.readouterr().out
    assert "Simulating colony outpost for 5 ticks" in output
    assert "Done at tick 5" in output


def test_print_state_summary(capsys) -> None:
    colony, executor = create_colony(LogisticsSettings())
    report = tick_colony(colony, executor)

    print_state_summary(colony, report)

    output = capsys.readouterr().out
    assert output.startswith("Tick     1 | Storage:")
    assert f"(matched {len(report.matched_requests)})" in output
    assert "hauler-big=" in output
