"""Pytest fixtures for backend tests."""
from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient

from lessongames.logic.controller import GameController
from lessongames.logic.feedback import RecordingFeedback
from lessongames.logic.models import GameState, Player, ScoreLedger, VocabEntry, Wedge, WedgeType
from lessongames.logic.puzzle import new_puzzle
from lessongames.logic.rng import SeededRNG
from lessongames.logic.scheduler import ManualClock, Scheduler
from lessongames.logic.wedges import WedgeTable
from lessongames.main import app
from lessongames.sessions import SessionStore
from lessongames.telemetry import TelemetryService


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (long spin audits)"
    )


SAMPLE_POOL = [
    VocabEntry(term="photosynthesis", definition="How plants use sunlight to make food."),
    VocabEntry(term="The Sun", definition="The star at the centre of our solar system."),
    VocabEntry(term="habitat", definition="The natural home of an animal or plant."),
]


def fixed_table(wedge_type: WedgeType, value: int = 0) -> WedgeTable:
    """A wheel where every wedge is the same, so the outcome is known up front."""
    wedge = Wedge(label=f"{wedge_type.value}-{value}", type=wedge_type, value=value)
    return WedgeTable([wedge, wedge])


def make_state(
    phrase: str = "PHOTOSYNTHESIS",
    definition: str = "How plants use sunlight to make food.",
    players: int = 2,
    pool: list[VocabEntry] | None = None,
) -> GameState:
    """Game state on a single puzzle, ready for engine-level tests."""
    pool = pool if pool is not None else [VocabEntry(term=phrase, definition=definition)]
    return GameState(
        pool=pool,
        puzzle=new_puzzle(pool, 0),
        ledger=ScoreLedger(players=[Player(name=f"Player {i + 1}") for i in range(players)]),
    )


def open_guessing(state: GameState, wedge: Wedge) -> GameState:
    """Pretend the wheel just stopped on `wedge`."""
    state = state.model_copy(deep=True)
    state.spin.last_outcome = wedge
    state.puzzle.can_guess = True
    return state


class RecordingTelemetrySink:
    """Telemetry sink that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        self.events.append((event_name, data))

    def get_events(self, event_name: str) -> list[dict[str, Any]]:
        return [data for name, data in self.events if name == event_name]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def scheduler(clock: ManualClock) -> Scheduler:
    return Scheduler(clock)


@pytest.fixture
def feedback() -> RecordingFeedback:
    return RecordingFeedback()


@pytest.fixture
def elapse(clock: ManualClock, scheduler: Scheduler) -> Callable[[float], int]:
    """Move virtual time forward and fire whatever came due."""

    def _elapse(ms: float) -> int:
        clock.advance(ms)
        return scheduler.run_due()

    return _elapse


@pytest.fixture
def make_controller(
    scheduler: Scheduler, feedback: RecordingFeedback
) -> Callable[..., GameController]:
    """Factory for a seeded controller on the shared virtual clock."""

    def _make(
        pool: list[VocabEntry] | None = None,
        players: list[str] | None = None,
        table: WedgeTable | None = None,
        seed: int = 1234,
    ) -> GameController:
        return GameController(
            pool=pool if pool is not None else SAMPLE_POOL,
            player_names=players or ["Ada", "Grace"],
            rng=SeededRNG(seed),
            scheduler=scheduler,
            feedback=feedback,
            table=table,
        )

    return _make


@pytest.fixture
def recording_telemetry() -> RecordingTelemetrySink:
    return RecordingTelemetrySink()


@pytest.fixture
def session_store(clock: ManualClock, recording_telemetry: RecordingTelemetrySink) -> SessionStore:
    """Session store on the virtual clock with recorded telemetry."""
    return SessionStore(clock=clock, telemetry=TelemetryService(recording_telemetry))


@pytest.fixture
def client(
    monkeypatch: pytest.MonkeyPatch, session_store: SessionStore
) -> Generator[TestClient, None, None]:
    """TestClient whose endpoints use the test session store."""
    monkeypatch.setattr("lessongames.main.session_store", session_store)
    with TestClient(app) as test_client:
        yield test_client
