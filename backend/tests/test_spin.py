"""Wheel targeting math and the spin lifecycle."""
import pytest

from lessongames.config import settings
from lessongames.logic.models import SpinPhase, WedgeType
from lessongames.logic.rng import RNGBase, SeededRNG
from lessongames.logic.spin import (
    SpinEngine,
    alignment_angle,
    compute_target_rotation,
    forward_delta,
    segment_degrees,
    wedge_under_pointer,
)
from lessongames.logic.wedges import WedgeTable

from conftest import fixed_table, make_state


class TestTargetRotation:
    """The selected wedge must end up under the pointer."""

    @pytest.mark.parametrize("wedge_count", [2, 3, 5, 8, 12, 24])
    def test_every_wedge_lands_under_pointer(self, wedge_count: int):
        seg = segment_degrees(wedge_count)
        limit = settings.jitter_fraction * seg / 2 * 0.999
        for index in range(wedge_count):
            for current in (0.0, 17.5, 359.9, 1234.5, 3 * 360.0):
                for jitter in (-limit, 0.0, limit):
                    for extra_spins in (settings.extra_spins_min, settings.extra_spins_max):
                        target = compute_target_rotation(
                            wedge_count, index, current, extra_spins, jitter
                        )
                        assert wedge_under_pointer(target, wedge_count) == index, (
                            f"n={wedge_count} index={index} current={current} jitter={jitter}"
                        )

    def test_target_always_moves_forward_by_whole_turns(self):
        seg = segment_degrees(12)
        for current in (0.0, 90.0, 400.0, 7200.25):
            for index in range(12):
                target = compute_target_rotation(12, index, current, 6, 0.0)
                advance = target - current
                assert 6 * 360 <= advance < 7 * 360
                assert target >= current
        assert seg == 30.0

    def test_forward_delta_is_in_one_turn(self):
        for alignment in (0.0, 15.0, 345.0):
            for current in (-10.0, 0.0, 15.0, 359.0, 720.0, 1000.0):
                delta = forward_delta(alignment, current)
                assert 0 <= delta < 360

    def test_alignment_of_first_wedge(self):
        """Wedge 0 centre sits half a segment clockwise of the pointer."""
        assert alignment_angle(12, 0) == pytest.approx(345.0)
        assert alignment_angle(4, 1) == pytest.approx(225.0)

    def test_seeded_plans_land_and_never_go_backwards(self):
        engine = SpinEngine(rng=SeededRNG(42))
        n = len(engine.table)
        rotation = 0.0
        for _ in range(500):
            plan = engine.plan_spin(rotation)
            assert plan.target_rotation > rotation
            assert abs(plan.jitter) <= settings.jitter_fraction * segment_degrees(n) / 2
            assert settings.extra_spins_min <= plan.extra_spins <= settings.extra_spins_max
            assert wedge_under_pointer(plan.target_rotation, n) == plan.index
            rotation = plan.target_rotation

    def test_jitter_never_reaches_wedge_edge(self):
        class EdgeRNG(RNGBase):
            """Hands out 0.0 first, the lowest value random() may return."""

            def __init__(self):
                self.values = [0.0, 0.5]

            def random(self) -> float:
                return self.values.pop(0) if self.values else 0.5

            def randint(self, a: int, b: int) -> int:
                return a

        engine = SpinEngine(rng=EdgeRNG(), table=fixed_table(WedgeType.POINTS, 100))
        plan = engine.plan_spin(0.0)
        half_width = settings.jitter_fraction * segment_degrees(len(engine.table)) / 2
        assert plan.jitter != -half_width
        assert abs(plan.jitter) < half_width


class TestWedgeTable:
    """The fixed outcome catalog."""

    def test_default_wheel_has_twelve_wedges(self):
        table = WedgeTable()
        assert len(table) == 12
        assert table.segment_degrees == 30.0
        types = [w.type for w in table]
        assert types.count(WedgeType.BANKRUPT) == 1
        assert types.count(WedgeType.LOSE_TURN) == 1
        assert types.count(WedgeType.DOUBLE) == 1
        assert types.count(WedgeType.BONUS) == 1

    def test_needs_two_wedges(self):
        with pytest.raises(ValueError):
            WedgeTable(list(WedgeTable())[:1])

    def test_wedges_are_immutable(self):
        wedge = WedgeTable()[0]
        with pytest.raises(Exception):
            wedge.value = 5000

    def test_selection_covers_every_wedge(self):
        table = WedgeTable()
        rng = SeededRNG(7)
        seen = {table.select_outcome(rng)[0] for _ in range(2000)}
        assert seen == set(range(len(table)))


class TestSpinLifecycle:
    """Idle -> Spinning -> Idle, and what each outcome does to the turn."""

    def test_start_spin_hides_outcome_and_closes_guessing(self):
        engine = SpinEngine(rng=SeededRNG(1), table=fixed_table(WedgeType.POINTS, 500))
        state = make_state()
        state.puzzle.can_guess = True
        state.spin.last_outcome = engine.table[0]

        result = engine.start_spin(state)
        spin = result.next_state.spin
        assert spin.phase == SpinPhase.SPINNING
        assert spin.last_outcome is None
        assert spin.target_rotation > spin.rotation_degrees
        assert result.next_state.puzzle.can_guess is False
        assert result.events[0]["type"] == "spinStart"
        # The input state is left alone.
        assert state.spin.phase == SpinPhase.IDLE

    def test_start_spin_is_ignored_while_spinning(self):
        engine = SpinEngine(rng=SeededRNG(1))
        spinning = engine.start_spin(make_state()).next_state

        result = engine.start_spin(spinning)
        assert result.next_state is spinning
        assert result.events == []

    def test_complete_spin_when_idle_is_a_noop(self):
        engine = SpinEngine(rng=SeededRNG(1))
        state = make_state()
        result = engine.complete_spin(state)
        assert result.next_state is state
        assert not result.changed

    def test_points_outcome_opens_guessing_for_same_player(self):
        engine = SpinEngine(rng=SeededRNG(3), table=fixed_table(WedgeType.POINTS, 650))
        state = engine.start_spin(make_state()).next_state
        target = state.spin.target_rotation

        result = engine.complete_spin(state)
        landed = result.next_state
        assert landed.spin.phase == SpinPhase.IDLE
        assert landed.spin.rotation_degrees == target
        assert landed.spin.last_outcome.value == 650
        assert landed.puzzle.can_guess is True
        assert landed.ledger.active_index == 0
        assert landed.spin.spin_count == 1

    def test_lose_turn_passes_without_touching_scores(self):
        engine = SpinEngine(rng=SeededRNG(3), table=fixed_table(WedgeType.LOSE_TURN))
        state = make_state(players=3)
        state.ledger.players[0].score = 400
        landed = engine.complete_spin(engine.start_spin(state).next_state).next_state

        assert landed.ledger.active_index == 1
        assert landed.ledger.players[0].score == 400
        assert landed.puzzle.can_guess is False

    def test_bankrupt_zeroes_score_and_passes_turn(self):
        engine = SpinEngine(rng=SeededRNG(3), table=fixed_table(WedgeType.BANKRUPT))
        state = make_state(players=2)
        state.ledger.players[0].score = 800
        state.ledger.players[1].score = 300
        spinning = engine.start_spin(state).next_state

        result = engine.complete_spin(spinning)
        landed = result.next_state
        assert landed.ledger.players[0].score == 0
        assert landed.ledger.players[1].score == 300
        assert landed.ledger.active_index == 1
        assert landed.puzzle.can_guess is False
        assert landed.spin.rotation_degrees == spinning.spin.target_rotation
        kinds = [e["type"] for e in result.events]
        assert kinds == ["spinResult", "bankrupt", "turnPassed"]
        assert result.events[1]["lostScore"] == 800

    def test_rotation_never_decreases_across_spins(self):
        engine = SpinEngine(rng=SeededRNG(99))
        state = make_state()
        previous = state.spin.rotation_degrees
        for _ in range(50):
            state = engine.start_spin(state).next_state
            state = engine.complete_spin(state).next_state
            assert state.spin.rotation_degrees > previous
            previous = state.spin.rotation_degrees

    def test_single_player_keeps_turn_after_penalty(self):
        engine = SpinEngine(rng=SeededRNG(3), table=fixed_table(WedgeType.LOSE_TURN))
        landed = engine.complete_spin(engine.start_spin(make_state(players=1)).next_state).next_state
        assert landed.ledger.active_index == 0
