"""Reveal-letter and context hints."""
import pytest

from lessongames.config import settings
from lessongames.logic.hints import (
    NO_DEFINITION_CLUE,
    REDACTION,
    VOWELS,
    HintEngine,
    context_clue,
    first_words,
    redact_term,
)
from lessongames.logic.rng import SeededRNG

from conftest import make_state


class TestLetterHint:
    """Reveal one hidden letter from a per-puzzle budget."""

    def test_reveals_a_hidden_letter_and_spends_budget(self):
        engine = HintEngine(SeededRNG(5))
        state = make_state("PHOTOSYNTHESIS")

        result = engine.use_letter_hint(state)
        after = result.next_state
        assert after.hints.letters_left == settings.letter_hint_budget - 1
        assert len(after.puzzle.guessed_letters) == 1
        revealed = next(iter(after.puzzle.guessed_letters))
        assert revealed in "PHOTOSYNTHESIS"
        assert result.events[0]["type"] == "letterHint"

    @pytest.mark.parametrize("seed", range(20))
    def test_prefers_consonants(self, seed: int):
        engine = HintEngine(SeededRNG(seed))
        after = engine.use_letter_hint(make_state("BANANA")).next_state
        assert after.puzzle.guessed_letters.isdisjoint(VOWELS)

    def test_falls_back_to_vowels(self):
        engine = HintEngine(SeededRNG(1))
        state = make_state("BANANA")
        state.puzzle.guessed_letters.update({"B", "N"})
        after = engine.use_letter_hint(state).next_state
        assert "A" in after.puzzle.guessed_letters

    def test_budget_runs_out(self):
        engine = HintEngine(SeededRNG(2))
        state = make_state("PHOTOSYNTHESIS")
        for _ in range(settings.letter_hint_budget):
            state = engine.use_letter_hint(state).next_state
        assert state.hints.letters_left == 0
        revealed = set(state.puzzle.guessed_letters)

        result = engine.use_letter_hint(state)
        assert result.next_state is state
        assert state.puzzle.guessed_letters == revealed

    def test_nothing_hidden_leaves_budget_alone(self):
        engine = HintEngine(SeededRNG(2))
        state = make_state("SUN")
        state.puzzle.guessed_letters.update({"S", "U", "N"})
        result = engine.use_letter_hint(state)
        assert result.next_state is state
        assert state.hints.letters_left == settings.letter_hint_budget

    def test_pays_nothing_per_letter_and_keeps_turn(self):
        engine = HintEngine(SeededRNG(2))
        state = make_state("PHOTOSYNTHESIS")
        state.ledger.active_index = 1
        after = engine.use_letter_hint(state).next_state
        assert [p.score for p in after.ledger.players] == [0, 0]
        assert after.ledger.active_index == 1

    def test_last_letter_by_hint_completes_puzzle(self):
        engine = HintEngine(SeededRNG(2))
        state = make_state("BOB")
        state.puzzle.guessed_letters.add("O")

        result = engine.use_letter_hint(state)
        after = result.next_state
        assert after.puzzle.solved is True
        assert after.ledger.players[0].score == settings.completion_bonus
        assert [e["type"] for e in result.events] == ["letterHint", "puzzleComplete"]


class TestContextHint:
    """Progressively more specific definition clues."""

    def test_three_distinct_clues_in_order(self):
        engine = HintEngine(SeededRNG(0))
        state = make_state(
            "PHOTOSYNTHESIS",
            definition="Photosynthesis is how plants turn sunlight, water and air into food.",
        )
        for _ in range(3):
            state = engine.use_context_hint(state).next_state

        clues = state.hints.issued_context_hints
        assert len(clues) == 3
        assert len(set(clues)) == 3
        assert clues[0].startswith("It’s a 14-letter word. Clue:")
        assert clues[1].startswith("Think about:")
        assert clues[2].endswith("(starts with “P”).")
        assert state.hints.context_left == 0
        for clue in clues:
            assert "photosynthesis" not in clue.lower()
            assert REDACTION in clue

    def test_first_clue_is_truncated(self):
        engine = HintEngine(SeededRNG(0))
        state = make_state(
            "ATOM", definition="one two three four five six seven eight nine ten"
        )
        clue = engine.use_context_hint(state).next_state.hints.issued_context_hints[0]
        assert clue == "It’s a 4-letter word. Clue: one two three four five six seven eight…"

    def test_budget_runs_out(self):
        engine = HintEngine(SeededRNG(0))
        state = make_state()
        for _ in range(settings.context_hint_budget):
            state = engine.use_context_hint(state).next_state
        result = engine.use_context_hint(state)
        assert result.next_state is state
        assert len(state.hints.issued_context_hints) == settings.context_hint_budget

    def test_missing_definition_uses_placeholder(self):
        engine = HintEngine(SeededRNG(0))
        state = make_state("HABITAT", definition="")
        state = engine.use_context_hint(state).next_state
        state = engine.use_context_hint(state).next_state
        assert state.hints.issued_context_hints[1] == f"Think about: {NO_DEFINITION_CLUE}"

    def test_does_not_change_turn_or_scores(self):
        engine = HintEngine(SeededRNG(0))
        state = make_state()
        after = engine.use_context_hint(state).next_state
        assert after.ledger == state.ledger
        assert after.puzzle.guessed_letters == set()


class TestClueText:
    def test_redaction_is_case_insensitive(self):
        assert redact_term("The Sun rises. the sun sets.", "THE SUN") == (
            f"{REDACTION} rises. {REDACTION} sets."
        )

    def test_redaction_escapes_term(self):
        assert redact_term("Use C++ daily", "C++") == f"Use {REDACTION} daily"

    def test_first_words(self):
        assert first_words("a b c", 5) == "a b c"
        assert first_words("a b c d", 2) == "a b…"
        assert first_words("", 3) == ""

    def test_first_letter_clue_skips_leading_digits(self):
        clue = context_clue(2, "3D PRINTING", "Making objects layer by layer.")
        assert clue.endswith("(starts with “D”).")
