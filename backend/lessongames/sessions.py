"""In-memory game sessions.

State lives only as long as the process and the session TTL; there is no
persistence beyond a single classroom session.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Sequence

from lessongames.config import settings
from lessongames.config_hash import get_config_hash
from lessongames.errors import ErrorCode, GameError
from lessongames.logic.controller import GameController
from lessongames.logic.feedback import RecordingFeedback
from lessongames.logic.models import GameEventType, VocabEntry
from lessongames.logic.rng import ProductionRNG, SeededRNG
from lessongames.logic.scheduler import Clock, MonotonicClock, Scheduler
from lessongames.telemetry import (
    PuzzleCompletedEvent,
    SessionCreatedEvent,
    SpinResolvedEvent,
    TelemetryService,
    telemetry_service,
)


logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """One classroom's game: its controller plus bookkeeping."""

    session_id: str
    controller: GameController
    feedback: RecordingFeedback
    created_ms: float
    last_seen_ms: float


class SessionStore:
    """Session registry with idle expiry."""

    def __init__(
        self,
        clock: Clock | None = None,
        telemetry: TelemetryService | None = None,
        ttl_seconds: int | None = None,
        max_sessions: int | None = None,
    ):
        self.clock = clock or MonotonicClock()
        self.telemetry = telemetry or telemetry_service
        if ttl_seconds is None:
            ttl_seconds = settings.session_ttl_seconds
        self.ttl_ms = ttl_seconds * 1000
        self.max_sessions = max_sessions if max_sessions is not None else settings.max_sessions
        self._sessions: dict[str, GameSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        player_names: Sequence[str],
        pool: Sequence[VocabEntry],
        seed: int | None = None,
    ) -> GameSession:
        """Start a session. Roster and pool are validated by the caller."""
        self._evict_expired()
        if self._sessions and len(self._sessions) >= self.max_sessions:
            self._evict_oldest()

        session_id = str(uuid.uuid4())
        feedback = RecordingFeedback()
        controller = GameController(
            pool=pool,
            player_names=player_names,
            rng=SeededRNG(seed) if seed is not None else ProductionRNG(),
            scheduler=Scheduler(self.clock),
            feedback=feedback,
        )
        controller.add_event_listener(lambda event: self._emit_telemetry(session_id, event))

        now = self.clock.now_ms()
        session = GameSession(
            session_id=session_id,
            controller=controller,
            feedback=feedback,
            created_ms=now,
            last_seen_ms=now,
        )
        self._sessions[session_id] = session

        self.telemetry.emit(
            SessionCreatedEvent(
                session_id=session_id,
                player_count=len(player_names),
                pool_size=len(pool),
                seeded=seed is not None,
                config_hash=get_config_hash(),
            )
        )
        return session

    def get(self, session_id: str) -> GameSession:
        """
        Look up a session and catch it up to the present.

        Fires every timer that came due since the last request, so spin
        results and post-win advances are applied before anything else.
        """
        self._evict_expired()
        session = self._sessions.get(session_id)
        if session is None:
            raise GameError(ErrorCode.SESSION_NOT_FOUND, f"Unknown session {session_id}.")
        session.last_seen_ms = self.clock.now_ms()
        session.controller.scheduler.run_due()
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        self._sessions.clear()

    def _evict_expired(self) -> None:
        now = self.clock.now_ms()
        expired = [
            sid for sid, s in self._sessions.items()
            if now - s.last_seen_ms > self.ttl_ms
        ]
        for sid in expired:
            logger.info("Expiring idle session %s", sid)
            del self._sessions[sid]

    def _evict_oldest(self) -> None:
        oldest = min(self._sessions.values(), key=lambda s: s.last_seen_ms)
        logger.warning("Session limit reached, evicting %s", oldest.session_id)
        del self._sessions[oldest.session_id]

    def _emit_telemetry(self, session_id: str, event: dict[str, Any]) -> None:
        kind = event["type"]
        if kind == GameEventType.SPIN_RESULT.value:
            self.telemetry.emit(
                SpinResolvedEvent(
                    session_id=session_id,
                    wedge_label=event["label"],
                    wedge_type=event["wedgeType"],
                    player_index=event["playerIndex"],
                    rotation=event["rotation"],
                    config_hash=get_config_hash(),
                )
            )
        elif kind in (GameEventType.PUZZLE_COMPLETE.value, GameEventType.SOLVE_SUCCESS.value):
            self.telemetry.emit(
                PuzzleCompletedEvent(
                    session_id=session_id,
                    term=event["term"],
                    player_index=event["playerIndex"],
                    how="letters" if kind == GameEventType.PUZZLE_COMPLETE.value else "solve",
                )
            )


# Global instance
session_store = SessionStore()
