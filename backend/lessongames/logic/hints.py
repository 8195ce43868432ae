"""Reveal-letter and context hints, each with its own per-puzzle budget."""
import re
from typing import Any

from lessongames.logic.models import GameEventType, GameState, TransitionResult
from lessongames.logic.puzzle import PuzzleEngine, is_letter
from lessongames.logic.rng import ProductionRNG, RNGBase


VOWELS = frozenset("AEIOU")
REDACTION = "_____"
NO_DEFINITION_CLUE = "A key term from the article."
FIRST_CLUE_WORDS = 8


def redact_term(text: str, term: str) -> str:
    """Replace every case-insensitive occurrence of term in text."""
    if not text:
        return ""
    if not term:
        return text
    return re.sub(re.escape(term), REDACTION, text, flags=re.IGNORECASE)


def first_words(text: str, n: int = 10) -> str:
    """First n words of text, with an ellipsis if anything was cut."""
    parts = (text or "").split()
    head = " ".join(parts[:n])
    return head + "…" if len(parts) > n else head


def context_clue(step: int, phrase: str, redacted: str) -> str:
    """
    Clue text for the step-th context hint of a puzzle.

    Each step says more than the last: a letter count and a teaser, then
    the whole redacted definition, then the definition plus first letter.
    """
    if step <= 0:
        letters = sum(1 for ch in phrase if is_letter(ch))
        return f"It’s a {letters}-letter word. Clue: {first_words(redacted, FIRST_CLUE_WORDS)}"
    if step == 1:
        return f"Think about: {redacted}"
    first = next((ch for ch in phrase if is_letter(ch.upper())), phrase[:1])
    return f"More specific: {redacted} (starts with “{first}”)."


class HintEngine:
    """Two independent hint generators operating on the current puzzle."""

    def __init__(self, rng: RNGBase | None = None, puzzle_engine: PuzzleEngine | None = None):
        self.rng = rng or ProductionRNG()
        self.puzzle_engine = puzzle_engine or PuzzleEngine()

    def use_letter_hint(self, state: GameState) -> TransitionResult:
        """
        Reveal one hidden letter, preferring consonants.

        Pays nothing per letter, but finishing the phrase this way still
        earns the completion bonus.
        """
        puzzle = state.puzzle
        if state.hints.letters_left <= 0 or not puzzle.phrase or puzzle.solved:
            return TransitionResult(next_state=state)

        hidden = [ch for ch in puzzle.phrase if is_letter(ch) and ch not in puzzle.guessed_letters]
        if not hidden:
            return TransitionResult(next_state=state)

        consonants = [ch for ch in hidden if ch not in VOWELS]
        pick = self.rng.choice(consonants or hidden)

        next_state = state.model_copy(deep=True)
        next_state.puzzle.guessed_letters.add(pick)
        next_state.hints.letters_left -= 1
        events: list[dict[str, Any]] = [{
            "type": GameEventType.LETTER_HINT.value,
            "letter": pick,
            "count": puzzle.phrase.count(pick),
            "lettersLeft": next_state.hints.letters_left,
        }]
        self.puzzle_engine.finish_if_revealed(next_state, events)
        return TransitionResult(next_state=next_state, events=events)

    def use_context_hint(self, state: GameState) -> TransitionResult:
        """Issue the next definition-style clue without giving the word away."""
        puzzle = state.puzzle
        if state.hints.context_left <= 0 or not puzzle.phrase:
            return TransitionResult(next_state=state)

        redacted = redact_term(puzzle.definition, puzzle.phrase) or NO_DEFINITION_CLUE
        step = len(state.hints.issued_context_hints)
        text = context_clue(step, puzzle.phrase, redacted)

        next_state = state.model_copy(deep=True)
        next_state.hints.issued_context_hints.append(text)
        next_state.hints.context_left -= 1
        events = [{
            "type": GameEventType.CONTEXT_HINT.value,
            "text": text,
            "contextLeft": next_state.hints.context_left,
        }]
        return TransitionResult(next_state=next_state, events=events)
