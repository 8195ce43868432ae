"""GameController: owns one session's GameState and drives the engines."""
import logging
import math
from typing import Any, Callable, Sequence

from lessongames.config import settings
from lessongames.logic.feedback import FeedbackSink, LoggingFeedback
from lessongames.logic.hints import HintEngine
from lessongames.logic.models import (
    GameEventType,
    GameSnapshot,
    GameState,
    Player,
    ScoreLedger,
    SpinPhase,
    TransitionResult,
    TriviaBoard,
    TriviaSnapshot,
    VocabEntry,
    WedgeView,
)
from lessongames.logic.puzzle import (
    PuzzleEngine,
    mask_phrase,
    missed_letters,
    new_puzzle,
    remaining_letter_count,
)
from lessongames.logic.rng import ProductionRNG, RNGBase
from lessongames.logic.scheduler import Scheduler, Timer
from lessongames.logic.spin import SpinEngine
from lessongames.logic.trivia import TriviaEngine
from lessongames.logic.wedges import WedgeTable


logger = logging.getLogger(__name__)

EventListener = Callable[[dict[str, Any]], None]

# Confetti particle counts
LETTER_WIN_CELEBRATION = 160
SOLVE_CELEBRATION = 200

SUCCESS_TONES = ((880, 0.10, "sine", 0.08), (1046, 0.12, "sine", 0.08))
FAIL_TONES = ((220, 0.12, "sawtooth", 0.09), (180, 0.14, "sawtooth", 0.09))

_SUCCESS_EVENTS = {
    GameEventType.LETTER_HIT.value,
    GameEventType.SOLVE_SUCCESS.value,
    GameEventType.LETTER_HINT.value,
    GameEventType.CONTEXT_HINT.value,
}
_FAIL_EVENTS = {
    GameEventType.LETTER_MISS.value,
    GameEventType.SOLVE_FAIL.value,
    GameEventType.TURN_LOST.value,
    GameEventType.BANKRUPT.value,
}


class GameController:
    """
    Single point of mutation for a Wonder Wheel (and trivia) session.

    Every external event goes through one method here. The method asks an
    engine for a TransitionResult, commits its next_state, and turns its
    events into feedback and scheduled callbacks. Scheduled callbacks read
    self.state when they fire, never a copy taken when they were scheduled.
    """

    def __init__(
        self,
        pool: Sequence[VocabEntry],
        player_names: Sequence[str],
        rng: RNGBase | None = None,
        scheduler: Scheduler | None = None,
        feedback: FeedbackSink | None = None,
        table: WedgeTable | None = None,
    ):
        self.rng = rng or ProductionRNG()
        self.scheduler = scheduler or Scheduler()
        self.feedback = feedback or LoggingFeedback()

        self.spin_engine = SpinEngine(self.rng, table)
        self.puzzle_engine = PuzzleEngine()
        self.hint_engine = HintEngine(self.rng, self.puzzle_engine)
        self.trivia_engine = TriviaEngine()

        pool = list(pool)
        self.state = GameState(
            pool=pool,
            puzzle=new_puzzle(pool, 0),
            ledger=ScoreLedger(players=[Player(name=name) for name in player_names]),
        )

        self._listeners: list[EventListener] = []
        self._tick_timer: Timer | None = None
        self._advance_timer: Timer | None = None
        self._tick_count = 0

    # -------------------------------------------------------------------------
    # Wonder Wheel
    # -------------------------------------------------------------------------

    def spin(self) -> GameSnapshot:
        result = self.spin_engine.start_spin(self.state)
        if not result.changed:
            return self.snapshot()
        self._commit(result)
        self._tick_count = 0
        self._tick_timer = self.scheduler.schedule_interval(
            settings.spin_tick_interval_ms, self._on_spin_tick
        )
        self.scheduler.schedule(settings.spin_duration_ms, self._on_spin_complete)
        return self.snapshot()

    def guess_letter(self, letter: str) -> GameSnapshot:
        return self._apply(self.puzzle_engine.guess_letter(self.state, letter))

    def solve(self, text: str) -> GameSnapshot:
        return self._apply(self.puzzle_engine.solve(self.state, text))

    def use_letter_hint(self) -> GameSnapshot:
        return self._apply(self.hint_engine.use_letter_hint(self.state))

    def use_context_hint(self) -> GameSnapshot:
        return self._apply(self.hint_engine.use_context_hint(self.state))

    def advance(self) -> GameSnapshot:
        return self._apply(self.puzzle_engine.advance(self.state))

    # -------------------------------------------------------------------------
    # Roster
    # -------------------------------------------------------------------------

    def add_player(self, name: str | None = None) -> GameSnapshot:
        next_state = self.state.model_copy(deep=True)
        player = next_state.ledger.add_player(name)
        return self._apply(TransitionResult(
            next_state=next_state,
            events=[{
                "type": GameEventType.PLAYER_ADDED.value,
                "name": player.name,
                "playerIndex": next_state.ledger.player_count - 1,
            }],
        ))

    def set_active_player(self, index: int) -> GameSnapshot:
        next_state = self.state.model_copy(deep=True)
        next_state.ledger.set_active_player(index)
        return self._apply(TransitionResult(next_state=next_state))

    # -------------------------------------------------------------------------
    # Teacher's Trivia
    # -------------------------------------------------------------------------

    def load_trivia(self, board: TriviaBoard) -> GameSnapshot:
        return self._apply(self.trivia_engine.load_board(self.state, board))

    def open_trivia_clue(self, category: int, row: int) -> GameSnapshot:
        return self._apply(self.trivia_engine.open_clue(self.state, category, row))

    def mark_trivia_correct(self) -> GameSnapshot:
        return self._apply(self.trivia_engine.mark_correct(self.state))

    def mark_trivia_incorrect(self) -> GameSnapshot:
        return self._apply(self.trivia_engine.mark_incorrect(self.state))

    def pass_trivia_clue(self) -> GameSnapshot:
        return self._apply(self.trivia_engine.pass_clue(self.state))

    def close_trivia_clue(self) -> GameSnapshot:
        return self._apply(self.trivia_engine.close_clue(self.state))

    def set_trivia_active_player(self, index: int) -> GameSnapshot:
        return self._apply(self.trivia_engine.set_active_player(self.state, index))

    # -------------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------------

    def add_event_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> GameSnapshot:
        state = self.state
        spin = state.spin
        puzzle = state.puzzle
        outcome = spin.last_outcome if spin.phase == SpinPhase.IDLE else None
        return GameSnapshot(
            rotation_degrees=spin.rotation_degrees,
            target_rotation=spin.target_rotation,
            phase=spin.phase,
            last_outcome=(
                WedgeView(label=outcome.label, type=outcome.type, value=outcome.value)
                if outcome else None
            ),
            masked=mask_phrase(puzzle.phrase, puzzle.guessed_letters),
            remaining_letters=remaining_letter_count(puzzle.phrase, puzzle.guessed_letters),
            missed_letters=missed_letters(puzzle.phrase, puzzle.guessed_letters),
            can_guess=puzzle.can_guess,
            solved=puzzle.solved,
            puzzle_number=state.puzzle_index + 1 if state.pool else 0,
            puzzle_count=len(state.pool),
            letter_hints_left=state.hints.letters_left,
            context_hints_left=state.hints.context_left,
            context_hints=list(state.hints.issued_context_hints),
            active_player_index=state.ledger.active_index,
            players=[p.model_copy() for p in state.ledger.players],
            trivia=self._trivia_snapshot(),
        )

    def _trivia_snapshot(self) -> TriviaSnapshot | None:
        trivia = self.state.trivia
        if trivia is None:
            return None
        board = trivia.board
        open_clue = None
        if trivia.open_clue is not None:
            c, r = trivia.open_clue.category, trivia.open_clue.row
            clue = board.categories[c].clues[r]
            open_clue = {
                "category": c,
                "row": r,
                "title": board.categories[c].title,
                "question": clue.question,
                "answer": clue.answer,
                "value": board.clue_value(c, r),
                "resolved": trivia.open_clue.resolved,
                "result": trivia.open_clue.result,
            }
        return TriviaSnapshot(
            categories=[c.title for c in board.categories],
            values=[
                [board.clue_value(c, r) for r in range(len(cat.clues))]
                for c, cat in enumerate(board.categories)
            ],
            used=sorted(trivia.used),
            open_clue=open_clue,
            attempted=sorted(trivia.attempted),
            active_index=trivia.active_index,
            complete=trivia.complete,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply(self, result: TransitionResult) -> GameSnapshot:
        self._commit(result)
        return self.snapshot()

    def _commit(self, result: TransitionResult) -> None:
        self.state = result.next_state
        for event in result.events:
            self._dispatch(event)

    def _dispatch(self, event: dict[str, Any]) -> None:
        kind = event["type"]
        logger.debug("game event %s", event)

        if kind in _SUCCESS_EVENTS:
            self._play(SUCCESS_TONES)
        elif kind in _FAIL_EVENTS:
            self._play(FAIL_TONES)

        if kind == GameEventType.PUZZLE_COMPLETE.value:
            self.feedback.celebrate(LETTER_WIN_CELEBRATION)
            self._schedule_advance(settings.letter_win_advance_delay_ms)
        elif kind == GameEventType.SOLVE_SUCCESS.value:
            self.feedback.celebrate(SOLVE_CELEBRATION)
            self._schedule_advance(settings.solve_win_advance_delay_ms)
        elif kind == GameEventType.PUZZLE_ADVANCE.value:
            # Any pending win advance belonged to the previous puzzle.
            self.scheduler.cancel(self._advance_timer)
            self._advance_timer = None
        elif kind == GameEventType.TRIVIA_CORRECT.value:
            self.scheduler.schedule(settings.trivia_close_delay_ms, self._on_trivia_close_due)

        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed on %s", kind)

    def _play(self, tones: Sequence[tuple[float, float, str, float]]) -> None:
        """Play the first tone now and each following one an echo-delay later."""
        first, *rest = tones
        self.feedback.play_tone(*first)
        for i, tone in enumerate(rest, start=1):
            self.scheduler.schedule(
                settings.feedback_echo_delay_ms * i,
                lambda tone=tone: self.feedback.play_tone(*tone),
            )

    def _on_spin_tick(self) -> None:
        t = self._tick_count
        self._tick_count += 1
        self.feedback.play_tone(600 + math.sin(t / 2) * 200, 0.05, "square", 0.06)

    def _on_spin_complete(self) -> None:
        self.scheduler.cancel(self._tick_timer)
        self._tick_timer = None
        self._commit(self.spin_engine.complete_spin(self.state))

    def _schedule_advance(self, delay_ms: float) -> None:
        self.scheduler.cancel(self._advance_timer)
        self._advance_timer = self.scheduler.schedule(delay_ms, self._on_advance_due)

    def _on_advance_due(self) -> None:
        self._advance_timer = None
        if self.state.puzzle.solved:
            self._commit(self.puzzle_engine.advance(self.state))

    def _on_trivia_close_due(self) -> None:
        trivia = self.state.trivia
        if trivia is not None and trivia.open_clue is not None and trivia.open_clue.resolved:
            self._commit(self.trivia_engine.close_clue(self.state))
