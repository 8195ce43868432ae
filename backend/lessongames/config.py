"""Application configuration for the lesson games service."""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Server settings with game-rule defaults."""

    model_config = ConfigDict(env_prefix="LESSONGAMES_")

    # Server
    debug: bool = False

    # Protocol
    protocol_version: str = "1.0"

    # Wheel timing (milliseconds)
    spin_duration_ms: int = 3200
    spin_tick_interval_ms: int = 120
    letter_win_advance_delay_ms: int = 600
    solve_win_advance_delay_ms: int = 400
    feedback_echo_delay_ms: int = 120

    # Wheel geometry
    extra_spins_min: int = 6
    extra_spins_max: int = 8
    jitter_fraction: float = 0.4  # of half a wedge

    # Scoring
    completion_bonus: int = 200
    solve_reward: int = 500
    solve_penalty: int = 100
    double_per_letter: int = 200
    bonus_per_letter: int = 100
    bonus_extra: int = 200

    # Hints (per puzzle)
    letter_hint_budget: int = 3
    context_hint_budget: int = 3

    # Vocabulary limits
    max_vocab_terms: int = 16
    max_puzzle_terms: int = 20
    min_term_length: int = 3

    # Trivia
    trivia_close_delay_ms: int = 800

    # In-memory session store
    session_ttl_seconds: int = 14400  # one classroom session
    max_sessions: int = 500


settings = Settings()
