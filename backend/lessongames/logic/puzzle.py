"""Word-puzzle masking and the letter-guess / solve automaton."""
import re
from typing import Any, Sequence

from lessongames.config import settings
from lessongames.logic.models import (
    GameEventType,
    GameState,
    HintBudget,
    PuzzleState,
    TransitionResult,
    VocabEntry,
    Wedge,
    WedgeType,
)
from lessongames.logic.spin import pass_turn


PLACEHOLDER = "▢"

_LETTER = re.compile(r"[A-Z]")
_NON_LETTERS = re.compile(r"[^A-Z]")


def is_letter(ch: str) -> bool:
    return bool(_LETTER.fullmatch(ch))


def mask_phrase(phrase: str, guessed: set[str], placeholder: str = PLACEHOLDER) -> str:
    """Replace every unrevealed letter with the placeholder; pass the rest through."""
    return "".join(
        placeholder if is_letter(ch) and ch not in guessed else ch
        for ch in phrase
    )


def remaining_letter_count(phrase: str, guessed: set[str]) -> int:
    """Number of letter positions still hidden."""
    return sum(1 for ch in phrase if is_letter(ch) and ch not in guessed)


def missed_letters(phrase: str, guessed: set[str]) -> list[str]:
    return sorted(L for L in guessed if is_letter(L) and L not in phrase)


def normalize_answer(text: str | None) -> str:
    """Uppercase and drop everything outside A-Z."""
    return _NON_LETTERS.sub("", (text or "").upper())


def per_letter_value(outcome: Wedge | None) -> int:
    """
    Points per revealed letter for a spin outcome.

    DOUBLE and BONUS pay flat rates regardless of the wedge's face value.
    """
    if outcome is None:
        return 0
    if outcome.type == WedgeType.POINTS:
        return outcome.value
    if outcome.type == WedgeType.DOUBLE:
        return settings.double_per_letter
    if outcome.type == WedgeType.BONUS:
        return settings.bonus_per_letter
    return 0


def conditional_bonus(outcome: Wedge | None, matches: int) -> int:
    """One-off extra for a BONUS spin that hits at least one letter."""
    if outcome is not None and outcome.type == WedgeType.BONUS and matches > 0:
        return settings.bonus_extra
    return 0


def new_puzzle(pool: Sequence[VocabEntry], index: int) -> PuzzleState:
    """Fresh puzzle for pool[index], or an empty puzzle if the pool is empty."""
    if not pool:
        return PuzzleState()
    entry = pool[index % len(pool)]
    return PuzzleState(
        term=entry.term,
        phrase=entry.term.upper(),
        definition=entry.definition,
    )


class PuzzleEngine:
    """
    Letter guesses, solve attempts, and puzzle advance.

    Guessing is open only after a non-penalty spin and closes after any
    single guess. Solving is always allowed. Once solved, the puzzle
    ignores further input until advance().
    """

    def guess_letter(self, state: GameState, letter: str) -> TransitionResult:
        puzzle = state.puzzle
        letter = (letter or "").upper()
        if (
            not puzzle.can_guess
            or puzzle.solved
            or not is_letter(letter)
            or letter in puzzle.guessed_letters
        ):
            return TransitionResult(next_state=state)

        next_state = state.model_copy(deep=True)
        puzzle = next_state.puzzle
        ledger = next_state.ledger
        puzzle.guessed_letters.add(letter)
        puzzle.can_guess = False
        matches = puzzle.phrase.count(letter)
        events: list[dict[str, Any]] = []

        if matches == 0:
            events.append({
                "type": GameEventType.LETTER_MISS.value,
                "letter": letter,
                "playerIndex": ledger.active_index,
            })
            events.append(pass_turn(next_state))
            return TransitionResult(next_state=next_state, events=events)

        outcome = next_state.spin.last_outcome
        payout = matches * per_letter_value(outcome) + conditional_bonus(outcome, matches)
        ledger.award(payout)
        events.append({
            "type": GameEventType.LETTER_HIT.value,
            "letter": letter,
            "count": matches,
            "award": payout,
            "playerIndex": ledger.active_index,
        })
        self.finish_if_revealed(next_state, events)
        return TransitionResult(next_state=next_state, events=events)

    def solve(self, state: GameState, text: str) -> TransitionResult:
        candidate = normalize_answer(text)
        if not candidate or state.puzzle.solved:
            return TransitionResult(next_state=state)

        next_state = state.model_copy(deep=True)
        puzzle = next_state.puzzle
        ledger = next_state.ledger
        events: list[dict[str, Any]] = []

        if candidate == normalize_answer(puzzle.phrase):
            ledger.award(settings.solve_reward)
            puzzle.guessed_letters.update(ch for ch in puzzle.phrase if is_letter(ch))
            puzzle.can_guess = False
            puzzle.solved = True
            events.append({
                "type": GameEventType.SOLVE_SUCCESS.value,
                "award": settings.solve_reward,
                "playerIndex": ledger.active_index,
                "term": puzzle.term,
            })
        else:
            ledger.award(-settings.solve_penalty)
            puzzle.can_guess = False
            events.append({
                "type": GameEventType.SOLVE_FAIL.value,
                "penalty": settings.solve_penalty,
                "playerIndex": ledger.active_index,
            })
            events.append(pass_turn(next_state))

        return TransitionResult(next_state=next_state, events=events)

    def finish_if_revealed(self, state: GameState, events: list[dict[str, Any]]) -> None:
        """
        Credit the completion bonus if no letters remain hidden.

        Mutates `state` in place; callers pass a copy they own.
        """
        puzzle = state.puzzle
        if not puzzle.phrase or remaining_letter_count(puzzle.phrase, puzzle.guessed_letters):
            return
        state.ledger.award(settings.completion_bonus)
        puzzle.can_guess = False
        puzzle.solved = True
        events.append({
            "type": GameEventType.PUZZLE_COMPLETE.value,
            "bonus": settings.completion_bonus,
            "playerIndex": state.ledger.active_index,
            "term": puzzle.term,
        })

    def advance(self, state: GameState) -> TransitionResult:
        """
        Move to the next term in the pool, wrapping around.

        Resets the puzzle and hint budgets; leaves scores and the active
        player alone.
        """
        next_state = state.model_copy(deep=True)
        pool = next_state.pool
        next_state.puzzle_index = (state.puzzle_index + 1) % len(pool) if pool else 0
        next_state.puzzle = new_puzzle(pool, next_state.puzzle_index)
        next_state.hints = HintBudget()
        events = [{
            "type": GameEventType.PUZZLE_ADVANCE.value,
            "puzzleIndex": next_state.puzzle_index,
        }]
        return TransitionResult(next_state=next_state, events=events)
