"""Request validators for the service boundary.

The game core ignores bad input; these checks cover the preconditions the
core leaves to its caller, and give the trivia buttons useful errors.
"""
from lessongames.errors import ErrorCode, GameError
from lessongames.logic.models import GameState, VocabEntry
from lessongames.logic.trivia import clue_key
from lessongames.protocol import CreateSessionRequest


def validate_roster(request: CreateSessionRequest) -> list[str]:
    """
    Return the cleaned player names.

    Raises EMPTY_ROSTER if no player has a usable name.
    """
    names = [name.strip() for name in request.players if name and name.strip()]
    if not names:
        raise GameError(ErrorCode.EMPTY_ROSTER, "At least one player is required.")
    return names


def validate_pool(pool: list[VocabEntry]) -> None:
    """Raises EMPTY_POOL if no vocabulary term is usable as a puzzle."""
    if not pool:
        raise GameError(
            ErrorCode.EMPTY_POOL,
            "No usable vocabulary terms. Terms need at least 3 characters and a definition.",
        )


def validate_player_index(state: GameState, index: int) -> None:
    if not 0 <= index < state.ledger.player_count:
        raise GameError(
            ErrorCode.INVALID_REQUEST,
            f"Player index {index} out of range (0..{state.ledger.player_count - 1}).",
        )


def validate_trivia_loaded(state: GameState) -> None:
    if state.trivia is None:
        raise GameError(ErrorCode.INVALID_REQUEST, "No trivia board loaded.")


def validate_clue_available(state: GameState, category: int, row: int) -> None:
    """Raises if the clue is off the board or already used."""
    validate_trivia_loaded(state)
    categories = state.trivia.board.categories
    if not (0 <= category < len(categories) and 0 <= row < len(categories[category].clues)):
        raise GameError(ErrorCode.INVALID_REQUEST, f"No clue at category {category}, row {row}.")
    if clue_key(category, row) in state.trivia.used:
        raise GameError(ErrorCode.CLUE_ALREADY_USED, "That clue has already been played.")


def validate_clue_open(state: GameState) -> None:
    validate_trivia_loaded(state)
    if state.trivia.open_clue is None:
        raise GameError(ErrorCode.NO_OPEN_CLUE, "Open a clue first.")
