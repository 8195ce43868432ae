"""Word pools and trivia boards from the generation collaborator's output.

The language-model calls themselves live outside this package. Whatever
implements VocabSource hands back the model's parsed JSON; this module
turns it into the puzzle pool and the trivia board.
"""
import json
import logging
import re
from typing import Any, Iterable, Mapping, Protocol

from lessongames.config import settings
from lessongames.errors import ErrorCode, GameError
from lessongames.logic.models import TriviaBoard, TriviaCategory, TriviaClue, VocabEntry


logger = logging.getLogger(__name__)

BOARD_SIZE = 5
CLUE_VALUES = (100, 200, 300, 400, 500)
MAX_TITLE_CHARS = 40
MAX_QUESTION_CHARS = 160
MAX_ANSWER_CHARS = 120

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class VocabSource(Protocol):
    """Text-summarization / vocabulary / trivia generation collaborator."""

    def summarize_and_extract(self, text: str) -> dict[str, Any]:
        """Return {"summary": str, "vocab": [{"term": str, "definition": str}]}."""
        ...

    def build_trivia(self, text: str) -> dict[str, Any]:
        """Return {"categories": [{"title": str, "clues": [{"question", "answer"}]}]}."""
        ...


def parse_model_json(raw: str | None) -> dict[str, Any]:
    """
    Parse a model reply that should be a JSON object.

    Models sometimes wrap the object in prose or code fences, so fall back
    to the outermost {...} span before giving up.
    """
    text = (raw or "").strip()
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(text)
        if not match:
            raise GameError(ErrorCode.INVALID_PAYLOAD, "Failed to parse model JSON output.")
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise GameError(ErrorCode.INVALID_PAYLOAD, f"Failed to parse model JSON output: {e}")
    if not isinstance(parsed, dict):
        raise GameError(ErrorCode.INVALID_PAYLOAD, "Model output is not a JSON object.")
    return parsed


def clean_vocab(items: Iterable[Mapping[str, Any]] | None) -> list[VocabEntry]:
    """Trim terms and definitions, drop incomplete entries, keep the first few."""
    cleaned: list[VocabEntry] = []
    for item in items or []:
        term = str(item.get("term") or "").strip()
        definition = str(item.get("definition") or "").strip()
        if term and definition:
            cleaned.append(VocabEntry(term=term, definition=definition))
    return cleaned[: settings.max_vocab_terms]


def definition_map(entries: Iterable[VocabEntry]) -> dict[str, str]:
    """Uppercase term -> definition. Later duplicates win."""
    return {entry.term.upper(): entry.definition for entry in entries if entry.term}


def build_puzzle_pool(entries: Iterable[VocabEntry]) -> list[VocabEntry]:
    """
    Candidate puzzle terms in order.

    Terms shorter than min_term_length are too easy to be worth a spin.
    """
    entries = list(entries)
    definitions = definition_map(entries)
    pool: list[VocabEntry] = []
    for entry in entries:
        term = entry.term.strip()
        if len(term) < settings.min_term_length:
            continue
        pool.append(VocabEntry(term=term, definition=definitions.get(term.upper(), "")))
        if len(pool) >= settings.max_puzzle_terms:
            break
    logger.debug("Built puzzle pool of %d terms from %d entries", len(pool), len(entries))
    return pool


def build_trivia_board(payload: Mapping[str, Any]) -> TriviaBoard:
    """
    Validate a generated board into a complete 5x5 TriviaBoard.

    Clue values come from row position, not from the model.
    Raises INVALID_BOARD unless five categories of five clues survive.
    """
    raw_categories = payload.get("categories")
    if not isinstance(raw_categories, list):
        raw_categories = []

    categories: list[TriviaCategory] = []
    for raw in raw_categories:
        if not isinstance(raw, Mapping) or not raw.get("title") or not isinstance(raw.get("clues"), list):
            continue
        clues = []
        for i, clue in enumerate(raw["clues"][:BOARD_SIZE]):
            clue = clue if isinstance(clue, Mapping) else {}
            clues.append(TriviaClue(
                question=str(clue.get("question") or "").strip()[:MAX_QUESTION_CHARS],
                answer=str(clue.get("answer") or "").strip()[:MAX_ANSWER_CHARS],
                value=CLUE_VALUES[i],
            ))
        categories.append(TriviaCategory(title=str(raw["title"]).strip()[:MAX_TITLE_CHARS], clues=clues))
        if len(categories) == BOARD_SIZE:
            break

    if len(categories) != BOARD_SIZE or any(len(c.clues) != BOARD_SIZE for c in categories):
        raise GameError(
            ErrorCode.INVALID_BOARD,
            "Teacher’s Trivia board incomplete. Try again or simplify the source.",
        )
    return TriviaBoard(categories=categories)
