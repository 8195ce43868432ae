"""Game state models for the Wonder Wheel and Teacher's Trivia."""
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lessongames.config import settings


class WedgeType(str, Enum):
    """What landing on a wedge does."""
    POINTS = "points"
    DOUBLE = "double"
    BONUS = "bonus"
    BANKRUPT = "bankrupt"
    LOSE_TURN = "loseTurn"


PENALTY_WEDGES = frozenset({WedgeType.BANKRUPT, WedgeType.LOSE_TURN})


class Wedge(BaseModel):
    """One fixed spin-outcome slot."""

    model_config = ConfigDict(frozen=True)

    label: str
    type: WedgeType
    value: int = Field(default=0, ge=0)

    @property
    def is_penalty(self) -> bool:
        return self.type in PENALTY_WEDGES


class SpinPhase(str, Enum):
    """Wheel lifecycle phase."""
    IDLE = "Idle"
    SPINNING = "Spinning"


class GameEventType(str, Enum):
    """Event types emitted by the engines, consumed by the controller."""

    SPIN_START = "spinStart"
    SPIN_RESULT = "spinResult"
    TURN_LOST = "turnLost"
    BANKRUPT = "bankrupt"
    TURN_PASSED = "turnPassed"
    LETTER_HIT = "letterHit"
    LETTER_MISS = "letterMiss"
    PUZZLE_COMPLETE = "puzzleComplete"
    SOLVE_SUCCESS = "solveSuccess"
    SOLVE_FAIL = "solveFail"
    LETTER_HINT = "letterHint"
    CONTEXT_HINT = "contextHint"
    PUZZLE_ADVANCE = "puzzleAdvance"
    PLAYER_ADDED = "playerAdded"
    TRIVIA_LOADED = "triviaLoaded"
    TRIVIA_OPEN = "triviaOpen"
    TRIVIA_CORRECT = "triviaCorrect"
    TRIVIA_INCORRECT = "triviaIncorrect"
    TRIVIA_CLOSED = "triviaClosed"


class SpinState(BaseModel):
    """
    Wheel state, persists across puzzles.

    rotation_degrees only ever grows; target_rotation is where the wheel
    is animating to while SPINNING and equals rotation_degrees when IDLE.
    """
    rotation_degrees: float = 0.0
    target_rotation: float = 0.0
    phase: SpinPhase = SpinPhase.IDLE
    last_outcome: Wedge | None = None
    pending_index: int | None = None
    spin_count: int = 0


class VocabEntry(BaseModel):
    """A candidate term and its kid-friendly definition."""
    term: str
    definition: str = ""


class PuzzleState(BaseModel):
    """The current term plus its masking and guess state."""
    term: str = ""
    phrase: str = ""
    definition: str = ""
    guessed_letters: set[str] = Field(default_factory=set)
    can_guess: bool = False
    solved: bool = False


class HintBudget(BaseModel):
    """Remaining hint uses for the current puzzle."""
    letters_left: int = Field(default_factory=lambda: settings.letter_hint_budget)
    context_left: int = Field(default_factory=lambda: settings.context_hint_budget)
    issued_context_hints: list[str] = Field(default_factory=list)


class Player(BaseModel):
    name: str
    score: int = 0


class ScoreLedger(BaseModel):
    """Player roster, scores, and whose turn it is."""

    players: list[Player] = Field(default_factory=list)
    active_index: int = 0

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def active_player(self) -> Player | None:
        if not self.players:
            return None
        return self.players[self.active_index]

    def award(self, delta: int, player_index: int | None = None) -> None:
        """Add delta (may be negative) to a player's score, no floor or ceiling."""
        if not self.players:
            return
        index = self.active_index if player_index is None else player_index
        self.players[index].score += delta

    def rotate_active_player(self) -> None:
        if not self.players:
            self.active_index = 0
            return
        self.active_index = (self.active_index + 1) % len(self.players)

    def zero_active_player_score(self) -> None:
        if self.players:
            self.players[self.active_index].score = 0

    def set_active_player(self, index: int) -> None:
        if 0 <= index < len(self.players):
            self.active_index = index

    def add_player(self, name: str | None = None) -> Player:
        player = Player(name=(name or "").strip() or f"Player {len(self.players) + 1}")
        self.players.append(player)
        return player


class TriviaClue(BaseModel):
    question: str
    answer: str
    value: int = 0


class TriviaCategory(BaseModel):
    title: str
    clues: list[TriviaClue]


class TriviaBoard(BaseModel):
    """A 5x5 board: five categories of five clues."""
    categories: list[TriviaCategory]

    def clue_value(self, category: int, row: int) -> int:
        return self.categories[category].clues[row].value or (row + 1) * 100


class OpenClue(BaseModel):
    """The clue currently shown to the class."""
    category: int
    row: int
    resolved: bool = False
    result: str = ""


class TriviaState(BaseModel):
    """
    Teacher's Trivia round state.

    Shares the roster and scores with the wheel but keeps its own active
    player, and rotates wrong answers to the next player who has not yet
    attempted the open clue.
    """
    board: TriviaBoard
    used: set[str] = Field(default_factory=set)
    open_clue: OpenClue | None = None
    attempted: set[int] = Field(default_factory=set)
    active_index: int = 0

    @property
    def complete(self) -> bool:
        return all(
            f"{c}-{r}" in self.used
            for c, category in enumerate(self.board.categories)
            for r in range(len(category.clues))
        )


class GameState(BaseModel):
    """
    Everything a session's game controller owns.

    Engines never mutate this in place: they copy it, mutate the copy, and
    return it as TransitionResult.next_state.
    """
    pool: list[VocabEntry] = Field(default_factory=list)
    puzzle_index: int = 0
    spin: SpinState = Field(default_factory=SpinState)
    puzzle: PuzzleState = Field(default_factory=PuzzleState)
    hints: HintBudget = Field(default_factory=HintBudget)
    ledger: ScoreLedger = Field(default_factory=ScoreLedger)
    trivia: TriviaState | None = None


class TransitionResult(BaseModel):
    """Result of one state transition: the new state plus ordered events."""
    next_state: GameState
    events: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.events)


class WedgeView(BaseModel):
    label: str
    type: WedgeType
    value: int


class TriviaSnapshot(BaseModel):
    categories: list[str]
    values: list[list[int]]
    used: list[str]
    open_clue: dict[str, Any] | None = None
    attempted: list[int] = Field(default_factory=list)
    active_index: int = 0
    complete: bool = False


class GameSnapshot(BaseModel):
    """Read-only view of a session, recomputed on every state change."""

    model_config = ConfigDict(frozen=True)

    rotation_degrees: float
    target_rotation: float
    phase: SpinPhase
    last_outcome: WedgeView | None
    masked: str
    remaining_letters: int
    missed_letters: list[str]
    can_guess: bool
    solved: bool
    puzzle_number: int
    puzzle_count: int
    letter_hints_left: int
    context_hints_left: int
    context_hints: list[str]
    active_player_index: int
    players: list[Player]
    trivia: TriviaSnapshot | None = None
