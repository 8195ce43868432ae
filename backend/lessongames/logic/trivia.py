"""Teacher's Trivia (5x5) rules on top of the shared score ledger."""
from typing import Any

from lessongames.logic.models import (
    GameEventType,
    GameState,
    OpenClue,
    TransitionResult,
    TriviaBoard,
    TriviaState,
)


def clue_key(category: int, row: int) -> str:
    return f"{category}-{row}"


def next_untried_player(active: int, player_count: int, attempted: set[int]) -> int:
    """
    Next player after `active` who has not tried the open clue yet.

    Stays on `active` when everyone has had a go or there is only one player.
    """
    if player_count <= 1:
        return active
    for k in range(1, player_count + 1):
        candidate = (active + k) % player_count
        if candidate not in attempted:
            return candidate
    return active


class TriviaEngine:
    """
    Whoever runs the board judges each answer as correct or incorrect.

    Correct answers credit the clue value and retire the clue; incorrect
    answers debit it and pass the clue to the next player who has not tried
    it yet. Unlike the wheel, a miss never goes back to a player who
    already missed this clue.
    """

    def load_board(self, state: GameState, board: TriviaBoard) -> TransitionResult:
        next_state = state.model_copy(deep=True)
        active = state.trivia.active_index if state.trivia else 0
        next_state.trivia = TriviaState(board=board, active_index=active)
        events = [{
            "type": GameEventType.TRIVIA_LOADED.value,
            "categories": [c.title for c in board.categories],
        }]
        return TransitionResult(next_state=next_state, events=events)

    def open_clue(self, state: GameState, category: int, row: int) -> TransitionResult:
        trivia = state.trivia
        if trivia is None or not _on_board(trivia, category, row):
            return TransitionResult(next_state=state)
        if clue_key(category, row) in trivia.used:
            return TransitionResult(next_state=state)

        next_state = state.model_copy(deep=True)
        next_state.trivia.open_clue = OpenClue(category=category, row=row)
        next_state.trivia.attempted = set()
        events = [{
            "type": GameEventType.TRIVIA_OPEN.value,
            "category": category,
            "row": row,
            "value": trivia.board.clue_value(category, row),
        }]
        return TransitionResult(next_state=next_state, events=events)

    def mark_correct(self, state: GameState) -> TransitionResult:
        """Credit the active trivia player. The clue closes after a short delay."""
        trivia = state.trivia
        if trivia is None or trivia.open_clue is None or trivia.open_clue.resolved:
            return TransitionResult(next_state=state)

        next_state = state.model_copy(deep=True)
        trivia = next_state.trivia
        clue = trivia.open_clue
        value = trivia.board.clue_value(clue.category, clue.row)
        next_state.ledger.award(value, player_index=trivia.active_index)
        trivia.used.add(clue_key(clue.category, clue.row))
        clue.resolved = True
        clue.result = f"Correct! +{value}"
        events: list[dict[str, Any]] = [{
            "type": GameEventType.TRIVIA_CORRECT.value,
            "playerIndex": trivia.active_index,
            "award": value,
        }]
        return TransitionResult(next_state=next_state, events=events)

    def mark_incorrect(self, state: GameState) -> TransitionResult:
        trivia = state.trivia
        if trivia is None or trivia.open_clue is None or trivia.open_clue.resolved:
            return TransitionResult(next_state=state)

        next_state = state.model_copy(deep=True)
        trivia = next_state.trivia
        clue = trivia.open_clue
        value = trivia.board.clue_value(clue.category, clue.row)
        before = trivia.active_index
        next_state.ledger.award(-value, player_index=before)
        trivia.attempted.add(before)
        trivia.active_index = next_untried_player(
            before, next_state.ledger.player_count, trivia.attempted
        )
        clue.result = f"Incorrect. -{value}"
        events = [{
            "type": GameEventType.TRIVIA_INCORRECT.value,
            "playerIndex": before,
            "penalty": value,
            "nextIndex": trivia.active_index,
        }]
        return TransitionResult(next_state=next_state, events=events)

    def pass_clue(self, state: GameState) -> TransitionResult:
        """Retire the open clue without scoring it."""
        trivia = state.trivia
        if trivia is None or trivia.open_clue is None:
            return TransitionResult(next_state=state)
        next_state = state.model_copy(deep=True)
        clue = next_state.trivia.open_clue
        next_state.trivia.used.add(clue_key(clue.category, clue.row))
        return self._close(next_state)

    def close_clue(self, state: GameState) -> TransitionResult:
        if state.trivia is None or state.trivia.open_clue is None:
            return TransitionResult(next_state=state)
        return self._close(state.model_copy(deep=True))

    def set_active_player(self, state: GameState, index: int) -> TransitionResult:
        if state.trivia is None or not 0 <= index < state.ledger.player_count:
            return TransitionResult(next_state=state)
        next_state = state.model_copy(deep=True)
        next_state.trivia.active_index = index
        return TransitionResult(next_state=next_state)

    def _close(self, next_state: GameState) -> TransitionResult:
        trivia = next_state.trivia
        clue = trivia.open_clue
        trivia.open_clue = None
        trivia.attempted = set()
        events = [{
            "type": GameEventType.TRIVIA_CLOSED.value,
            "category": clue.category,
            "row": clue.row,
            "boardComplete": trivia.complete,
        }]
        return TransitionResult(next_state=next_state, events=events)


def _on_board(trivia: TriviaState, category: int, row: int) -> bool:
    categories = trivia.board.categories
    return 0 <= category < len(categories) and 0 <= row < len(categories[category].clues)
