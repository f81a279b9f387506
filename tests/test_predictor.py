"""Tests for amount prediction, clamping and the claim ledger."""

import pytest

from haulage.config import LogisticsSettings
from haulage.errors import MissingTargetError, UnreachableTargetError
from haulage.interfaces import GridDistance
from haulage.logistics.predictor import (
    ClaimLedger,
    clamp_amount,
    predicted_amount,
    project_amount,
    travel_time,
)
from haulage.logistics.registry import RequestRegistry
from haulage.model import (
    ColonySnapshot,
    Hauler,
    LogisticsRequest,
    Position,
    ResourceKind,
    Structure,
    TargetKind,
)

ENERGY = ResourceKind.ENERGY


def make_structure(
    structure_id: str = "spawn",
    pos: Position = Position(10, 10),
    capacity: int = 1000,
    energy: int = 0,
) -> Structure:
    store = {ENERGY: energy} if energy else {}
    return Structure(structure_id, TargetKind.STRUCTURE, pos, capacity, store)


def make_snapshot(*structures: Structure, haulers=(), tick: int = 0) -> ColonySnapshot:
    return ColonySnapshot(
        colony="W1N1",
        tick=tick,
        structures={s.id: s for s in structures},
        haulers={h.id: h for h in haulers},
    )


class TestProjectAmount:
    """Tests for the raw rate projection."""

    def test_rate_accumulates_since_observation(self) -> None:
        """+10/tick observed at tick 100 is 50 at tick 105."""
        request = LogisticsRequest("spawn", ENERGY, rate=10, offset=0, observed_tick=100)

        assert project_amount(request, 105) == 50

    def test_travel_time_extends_projection(self) -> None:
        request = LogisticsRequest("spawn", ENERGY, rate=10, offset=20, observed_tick=100)

        assert project_amount(request, 100, travel_time=3) == 50

    def test_output_requests_grow_negative(self) -> None:
        request = LogisticsRequest("container", ENERGY, rate=-10, offset=-100, observed_tick=0)

        assert project_amount(request, 5) == -150

    def test_decaying_pickup_never_becomes_delivery(self) -> None:
        """A ground pile decays toward zero and stops there."""
        pile = LogisticsRequest("pile", ENERGY, rate=1, offset=-200, observed_tick=0)

        assert project_amount(pile, 0, travel_time=150) == -50
        assert project_amount(pile, 0, travel_time=260) == 0

    def test_shrinking_need_stops_at_zero(self) -> None:
        request = LogisticsRequest("spawn", ENERGY, rate=-2, offset=50, observed_tick=0)

        assert project_amount(request, 100) == 0


class TestClampAmount:
    """Tests for clamping to physical bounds."""

    def test_inbound_capped_by_free_capacity(self) -> None:
        target = make_structure(capacity=100, energy=70)

        assert clamp_amount(50, target, ENERGY) == 30

    def test_inbound_within_capacity_unchanged(self) -> None:
        target = make_structure(capacity=100)

        assert clamp_amount(50, target, ENERGY) == 50

    def test_outbound_capped_by_contents(self) -> None:
        target = make_structure(energy=20)

        assert clamp_amount(-50, target, ENERGY) == -20

    def test_claims_reduce_amount(self) -> None:
        target = make_structure(capacity=100)

        assert clamp_amount(50, target, ENERGY, claimed=20) == 30
        assert clamp_amount(-50, make_structure(energy=80), ENERGY, claimed=20) == -30

    def test_over_commitment_clamps_to_zero(self) -> None:
        """Claims beyond the available amount never go negative."""
        target = make_structure(capacity=100)

        assert clamp_amount(50, target, ENERGY, claimed=80) == 0
        assert clamp_amount(-50, make_structure(energy=10), ENERGY, claimed=30) == 0

    def test_zero_stays_zero(self) -> None:
        assert clamp_amount(0, make_structure(), ENERGY) == 0


class TestTravelTime:
    """Tests for travel time estimates."""

    def test_same_position_is_zero(self, make_ctx) -> None:
        ctx = make_ctx(make_snapshot())

        assert travel_time(ctx, Position(3, 3), Position(3, 3)) == 0

    def test_uses_path_length(self, make_ctx) -> None:
        """Diagonal moves cost one tick on an 8-connected grid."""
        ctx = make_ctx(make_snapshot())

        assert travel_time(ctx, Position(0, 0), Position(5, 3)) == 5

    def test_divides_by_move_speed(self, make_ctx) -> None:
        ctx = make_ctx(make_snapshot())
        hauler = Hauler("h1", Position(0, 0), capacity=100, move_speed=2.0)

        assert travel_time(ctx, hauler.pos, Position(5, 0), hauler) == 2.5

    def test_applies_range_to_path_heuristic(self, make_ctx) -> None:
        ctx = make_ctx(make_snapshot(), settings_override=LogisticsSettings())

        assert travel_time(ctx, Position(0, 0), Position(5, 0)) == pytest.approx(5.5)

    def test_unreachable_raises(self, make_ctx) -> None:
        """A walled-in destination has no route."""
        walls = [
            Position(5 + dx, 5 + dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if dx or dy
        ]
        ctx = make_ctx(make_snapshot(), distances=GridDistance(10, 10, walls))

        with pytest.raises(UnreachableTargetError):
            travel_time(ctx, Position(0, 0), Position(5, 5))


class TestPredictedAmount:
    """Tests for the full prediction for one hauler and one request."""

    def test_rate_projection_at_arrival(self, make_ctx) -> None:
        """Scenario: +10/tick from tick 100, queried at 105 with no travel."""
        target = make_structure(pos=Position(10, 10), capacity=1000)
        hauler = Hauler("h1", Position(10, 10), capacity=100)
        ctx = make_ctx(make_snapshot(target, haulers=[hauler]), tick=105)
        request = LogisticsRequest("spawn", ENERGY, rate=10, offset=0, observed_tick=100)

        assert predicted_amount(ctx, hauler, request) == 50

    def test_clamped_to_free_capacity(self, make_ctx) -> None:
        target = make_structure(pos=Position(10, 10), capacity=40)
        hauler = Hauler("h1", Position(10, 10), capacity=100)
        ctx = make_ctx(make_snapshot(target, haulers=[hauler]), tick=105)
        request = LogisticsRequest("spawn", ENERGY, rate=10, offset=0, observed_tick=100)

        assert predicted_amount(ctx, hauler, request) == 40

    def test_includes_travel_time(self, make_ctx) -> None:
        target = make_structure(pos=Position(10, 10))
        hauler = Hauler("h1", Position(7, 10), capacity=100)
        ctx = make_ctx(make_snapshot(target, haulers=[hauler]), tick=100)
        request = LogisticsRequest("spawn", ENERGY, rate=10, offset=0, observed_tick=100)

        assert predicted_amount(ctx, hauler, request) == 30

    def test_subtracts_ledger_claims(self, make_ctx) -> None:
        target = make_structure(pos=Position(10, 10))
        hauler = Hauler("h1", Position(10, 10), capacity=100)
        ctx = make_ctx(make_snapshot(target, haulers=[hauler]), tick=0)
        request = LogisticsRequest("spawn", ENERGY, rate=0, offset=200)
        ledger = ClaimLedger()
        ledger.claim(request.id, 150)

        assert predicted_amount(ctx, hauler, request, ledger) == 50

    def test_distant_pile_predicts_nothing(self, make_ctx) -> None:
        """A pile that will have decayed by arrival is not worth the trip."""
        pile = Structure("pile", TargetKind.DROP_SITE, Position(40, 1), 10_000, {ENERGY: 200})
        hauler = Hauler("h1", Position(0, 1), capacity=100)
        ctx = make_ctx(make_snapshot(pile, haulers=[hauler]), tick=0)
        request = LogisticsRequest(
            "pile", ENERGY, rate=10, offset=-200, target_kind=TargetKind.DROP_SITE
        )

        assert predicted_amount(ctx, hauler, request) == 0

    def test_missing_target_raises(self, make_ctx) -> None:
        hauler = Hauler("h1", Position(0, 0), capacity=100)
        ctx = make_ctx(make_snapshot(haulers=[hauler]))
        request = LogisticsRequest("gone", ENERGY, rate=0, offset=10)

        with pytest.raises(MissingTargetError):
            predicted_amount(ctx, hauler, request)


class TestClaimLedger:
    """Tests for the per-tick claim ledger."""

    def test_claims_accumulate_as_magnitudes(self) -> None:
        ledger = ClaimLedger()
        ledger.claim("container:energy", -40)
        ledger.claim("container:energy", 10)

        assert ledger.claimed("container:energy") == 50
        assert ledger.claimed("spawn:energy") == 0

    def test_seeds_inbound_claim_from_busy_hauler(self) -> None:
        """A busy hauler heading to a consumer claims what it carries."""
        spawn = make_structure("spawn")
        hauler = Hauler(
            "h1",
            Position(0, 0),
            capacity=300,
            carry={ENERGY: 120},
            idle=False,
            task_target_id="spawn",
            task_resource=ENERGY,
        )
        registry = RequestRegistry()
        registry.register("spawn", ENERGY, 5, 200, tick=0)
        ledger = ClaimLedger()

        seeded = ledger.seed_from_haulers(make_snapshot(spawn, haulers=[hauler]), registry)

        assert seeded == 1
        assert ledger.claimed("spawn:energy") == 120

    def test_seeds_outbound_claim_from_free_capacity(self) -> None:
        container = make_structure("container", energy=500)
        hauler = Hauler(
            "h1",
            Position(0, 0),
            capacity=300,
            carry={ENERGY: 100},
            idle=False,
            task_target_id="container",
            task_resource=ENERGY,
        )
        registry = RequestRegistry()
        registry.register("container", ENERGY, -10, -500, tick=0)
        ledger = ClaimLedger()

        ledger.seed_from_haulers(make_snapshot(container, haulers=[hauler]), registry)

        assert ledger.claimed("container:energy") == 200

    def test_seeds_claim_for_whole_chain(self) -> None:
        """A hauler topping up at storage still claims the consumer it is bound for."""
        spawn = make_structure("spawn")
        storage = make_structure("storage", pos=Position(0, 0), energy=5000)
        hauler = Hauler(
            "h1",
            Position(1, 0),
            capacity=100,
            idle=False,
            task_target_id="storage",
            task_resource=ENERGY,
            task_request_target_id="spawn",
            task_request_resource=ENERGY,
            task_claim=100,
        )
        registry = RequestRegistry()
        registry.register("spawn", ENERGY, 0, 100, tick=0)
        ledger = ClaimLedger()

        seeded = ledger.seed_from_haulers(
            make_snapshot(spawn, storage, haulers=[hauler]), registry
        )

        assert seeded == 1
        assert ledger.claimed("spawn:energy") == 100
        assert ledger.claimed("storage:energy") == 0

    def test_ignores_idle_and_unregistered(self) -> None:
        spawn = make_structure("spawn")
        idle = Hauler("h1", Position(0, 0), capacity=300, carry={ENERGY: 50})
        elsewhere = Hauler(
            "h2",
            Position(0, 0),
            capacity=300,
            carry={ENERGY: 50},
            idle=False,
            task_target_id="tower",
            task_resource=ENERGY,
        )
        registry = RequestRegistry()
        registry.register("spawn", ENERGY, 5, 200, tick=0)
        ledger = ClaimLedger()

        seeded = ledger.seed_from_haulers(
            make_snapshot(spawn, haulers=[idle, elsewhere]), registry
        )

        assert seeded == 0
        assert len(ledger) == 0
