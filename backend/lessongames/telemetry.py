"""Server-side telemetry for game sessions.

Events are flat dictionaries keyed in snake_case. Sessions emit them from
controller event listeners, so a sink never sees an event before the state
change it describes has been committed.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Protocol


logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Where telemetry events end up."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        ...


class LoggingTelemetrySink:
    """Default sink: one log line per event."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        logger.info("TELEMETRY %s: %s", event_name, data)


@dataclass
class TelemetryEvent:
    event_name: ClassVar[str] = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SessionCreatedEvent(TelemetryEvent):
    """A classroom started a game."""

    event_name: ClassVar[str] = "session_created"

    session_id: str
    player_count: int
    pool_size: int
    seeded: bool
    config_hash: str


@dataclass
class SpinResolvedEvent(TelemetryEvent):
    """The wheel stopped and its outcome was applied."""

    event_name: ClassVar[str] = "spin_resolved"

    session_id: str
    wedge_label: str
    wedge_type: str
    player_index: int
    rotation: float
    config_hash: str


@dataclass
class PuzzleCompletedEvent(TelemetryEvent):
    """A term was solved outright or revealed letter by letter."""

    event_name: ClassVar[str] = "puzzle_completed"

    session_id: str
    term: str
    player_index: int
    how: str  # "letters" | "solve"


class TelemetryService:
    """Forwards events to the configured sink."""

    def __init__(self, sink: TelemetrySink | None = None):
        self._sink = sink or LoggingTelemetrySink()
        self._sink_errors = 0

    def set_sink(self, sink: TelemetrySink) -> None:
        self._sink = sink

    @property
    def sink_errors(self) -> int:
        return self._sink_errors

    def emit(self, event: TelemetryEvent) -> None:
        """
        Hand one event to the sink.

        A failing sink is counted and logged but never breaks game play.
        """
        try:
            self._sink.emit(event.event_name, event.to_dict())
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Telemetry sink error (count=%d): %s - %s",
                self._sink_errors, event.event_name, e,
            )


# Global instance
telemetry_service = TelemetryService()
