"""HTTP request and response models for the lesson games service."""
from typing import Any

from pydantic import BaseModel, Field

from lessongames.config import settings
from lessongames.logic.models import GameSnapshot


# === Request Models ===


class VocabItem(BaseModel):
    """One term from the vocabulary collaborator."""

    term: str = ""
    definition: str = ""


class CreateSessionRequest(BaseModel):
    """POST /sessions request body."""

    players: list[str] = Field(default_factory=lambda: ["Player 1", "Player 2"])
    vocab: list[VocabItem] = Field(default_factory=list)
    seed: int | None = Field(default=None, description="Fixes wheel and hint randomness")


class GuessRequest(BaseModel):
    letter: str = Field(..., description="A single letter A-Z")


class SolveRequest(BaseModel):
    text: str = ""


class AddPlayerRequest(BaseModel):
    name: str | None = None


class SetActiveRequest(BaseModel):
    index: int


class TriviaBoardRequest(BaseModel):
    """Raw generated board; validated into a 5x5 board server-side."""

    categories: list[dict[str, Any]] = Field(default_factory=list)


# === Response Models ===


class OutcomeView(BaseModel):
    label: str
    type: str
    value: int


class PuzzleView(BaseModel):
    masked: str
    remainingLetters: int
    missedLetters: list[str]
    canGuess: bool
    solved: bool
    number: int
    count: int


class HintsView(BaseModel):
    lettersLeft: int
    contextLeft: int
    contextHints: list[str]


class PlayerView(BaseModel):
    name: str
    score: int


class TriviaView(BaseModel):
    categories: list[str]
    values: list[list[int]]
    used: list[str]
    openClue: dict[str, Any] | None = None
    attempted: list[int] = Field(default_factory=list)
    activePlayerIndex: int = 0
    complete: bool = False


class SnapshotView(BaseModel):
    """Everything a presentation layer needs to draw the games."""

    rotationDegrees: float
    targetRotation: float
    phase: str
    lastOutcome: OutcomeView | None = None
    puzzle: PuzzleView
    hints: HintsView
    activePlayerIndex: int
    players: list[PlayerView]
    trivia: TriviaView | None = None

    @classmethod
    def from_snapshot(cls, snap: GameSnapshot) -> "SnapshotView":
        outcome = snap.last_outcome
        trivia = snap.trivia
        return cls(
            rotationDegrees=snap.rotation_degrees,
            targetRotation=snap.target_rotation,
            phase=snap.phase.value,
            lastOutcome=(
                OutcomeView(label=outcome.label, type=outcome.type.value, value=outcome.value)
                if outcome else None
            ),
            puzzle=PuzzleView(
                masked=snap.masked,
                remainingLetters=snap.remaining_letters,
                missedLetters=snap.missed_letters,
                canGuess=snap.can_guess,
                solved=snap.solved,
                number=snap.puzzle_number,
                count=snap.puzzle_count,
            ),
            hints=HintsView(
                lettersLeft=snap.letter_hints_left,
                contextLeft=snap.context_hints_left,
                contextHints=snap.context_hints,
            ),
            activePlayerIndex=snap.active_player_index,
            players=[PlayerView(name=p.name, score=p.score) for p in snap.players],
            trivia=(
                TriviaView(
                    categories=trivia.categories,
                    values=trivia.values,
                    used=trivia.used,
                    openClue=trivia.open_clue,
                    attempted=trivia.attempted,
                    activePlayerIndex=trivia.active_index,
                    complete=trivia.complete,
                )
                if trivia else None
            ),
        )


class GameResponse(BaseModel):
    """Response to every session request."""

    protocolVersion: str = settings.protocol_version
    sessionId: str
    snapshot: SnapshotView
    feedback: list[dict[str, Any]] = Field(default_factory=list)
