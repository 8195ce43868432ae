"""Wheel targeting math and the spin lifecycle."""
from dataclasses import dataclass
from typing import Any

from lessongames.config import settings
from lessongames.logic.models import (
    GameEventType,
    GameState,
    SpinPhase,
    TransitionResult,
    WedgeType,
)
from lessongames.logic.rng import ProductionRNG, RNGBase
from lessongames.logic.wedges import WedgeTable


# The pointer sits at the top of the wheel (drawn at -90 degrees). Wedge
# angles here are measured clockwise from the pointer, not from 3 o'clock.


def segment_degrees(wedge_count: int) -> float:
    return 360.0 / wedge_count


def alignment_angle(wedge_count: int, index: int) -> float:
    """Absolute rotation (mod 360) that puts wedge `index`'s centre under the pointer."""
    seg = segment_degrees(wedge_count)
    return (360.0 - (index * seg + seg / 2)) % 360.0


def forward_delta(target_alignment: float, current_rotation: float) -> float:
    """Shortest non-negative rotation from current_rotation to the alignment."""
    return (target_alignment - (current_rotation % 360.0) + 360.0) % 360.0


def compute_target_rotation(
    wedge_count: int,
    index: int,
    current_rotation: float,
    extra_spins: int,
    jitter: float,
) -> float:
    """
    Rotation that lands wedge `index` under the pointer.

    Always moves forward by extra_spins full turns plus the forward delta.
    The jitter keeps the stop from looking mechanical; as long as
    |jitter| < SEG / 2 the same wedge stays under the pointer.
    """
    delta = forward_delta(alignment_angle(wedge_count, index), current_rotation)
    return current_rotation + extra_spins * 360.0 + delta + jitter


def wedge_under_pointer(rotation: float, wedge_count: int) -> int:
    """Index of the wedge under the pointer after rotating the wheel by `rotation`."""
    seg = segment_degrees(wedge_count)
    angle = (-rotation) % 360.0
    return int(angle // seg) % wedge_count


@dataclass
class SpinPlan:
    """Random draws for one spin."""

    index: int
    extra_spins: int
    jitter: float
    target_rotation: float


class SpinEngine:
    """
    Spin outcome selection and the Idle -> Spinning -> Idle lifecycle.

    start_spin() draws the outcome and the rotation target up front;
    complete_spin() is called by the controller once the animation's
    fixed duration has elapsed, and only then is the outcome visible.
    """

    def __init__(self, rng: RNGBase | None = None, table: WedgeTable | None = None):
        if not 0 <= settings.jitter_fraction < 1:
            raise ValueError("jitter_fraction must be in [0, 1) to stay inside a wedge")
        self.rng = rng or ProductionRNG()
        self.table = table or WedgeTable()

    def plan_spin(self, current_rotation: float) -> SpinPlan:
        n = len(self.table)
        index, _ = self.table.select_outcome(self.rng)
        extra_spins = self.rng.randint(settings.extra_spins_min, settings.extra_spins_max)
        half_width = settings.jitter_fraction * segment_degrees(n) / 2
        jitter = self.rng.open_uniform(-half_width, half_width)
        target = compute_target_rotation(n, index, current_rotation, extra_spins, jitter)
        return SpinPlan(
            index=index,
            extra_spins=extra_spins,
            jitter=jitter,
            target_rotation=target,
        )

    def start_spin(self, state: GameState) -> TransitionResult:
        """Begin a spin. A no-op while the wheel is already spinning."""
        if state.spin.phase == SpinPhase.SPINNING:
            return TransitionResult(next_state=state)

        next_state = state.model_copy(deep=True)
        plan = self.plan_spin(state.spin.rotation_degrees)

        spin = next_state.spin
        spin.phase = SpinPhase.SPINNING
        spin.pending_index = plan.index
        spin.target_rotation = plan.target_rotation
        spin.last_outcome = None
        next_state.puzzle.can_guess = False

        events: list[dict[str, Any]] = [{
            "type": GameEventType.SPIN_START.value,
            "fromRotation": state.spin.rotation_degrees,
            "targetRotation": plan.target_rotation,
            "extraSpins": plan.extra_spins,
        }]
        return TransitionResult(next_state=next_state, events=events)

    def complete_spin(self, state: GameState) -> TransitionResult:
        """
        Land the wheel and apply the outcome.

        lose-turn and bankrupt rotate the active player and keep guessing
        closed; every other outcome opens guessing for the current player.
        """
        if state.spin.phase != SpinPhase.SPINNING or state.spin.pending_index is None:
            return TransitionResult(next_state=state)

        next_state = state.model_copy(deep=True)
        spin = next_state.spin
        wedge = self.table[spin.pending_index]

        spin.rotation_degrees = spin.target_rotation
        spin.phase = SpinPhase.IDLE
        spin.pending_index = None
        spin.last_outcome = wedge
        spin.spin_count += 1

        ledger = next_state.ledger
        events: list[dict[str, Any]] = [{
            "type": GameEventType.SPIN_RESULT.value,
            "label": wedge.label,
            "wedgeType": wedge.type.value,
            "value": wedge.value,
            "rotation": spin.rotation_degrees,
            "playerIndex": ledger.active_index,
        }]

        if wedge.type == WedgeType.LOSE_TURN:
            events.append({
                "type": GameEventType.TURN_LOST.value,
                "playerIndex": ledger.active_index,
            })
            events.append(pass_turn(next_state))
        elif wedge.type == WedgeType.BANKRUPT:
            player = ledger.active_player
            events.append({
                "type": GameEventType.BANKRUPT.value,
                "playerIndex": ledger.active_index,
                "lostScore": player.score if player else 0,
            })
            ledger.zero_active_player_score()
            events.append(pass_turn(next_state))
        else:
            next_state.puzzle.can_guess = True

        return TransitionResult(next_state=next_state, events=events)


def pass_turn(state: GameState) -> dict[str, Any]:
    """Pass the turn on and describe it as an event."""
    before = state.ledger.active_index
    state.ledger.rotate_active_player()
    return {
        "type": GameEventType.TURN_PASSED.value,
        "fromIndex": before,
        "toIndex": state.ledger.active_index,
    }
