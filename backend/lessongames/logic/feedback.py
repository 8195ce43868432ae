"""Fire-and-forget audio and confetti feedback.

The game core never synthesizes sound or draws particles itself; it asks a
FeedbackSink to. The HTTP layer records the requests and hands them to the
browser with each response.
"""
import logging
from typing import Any, Literal, Protocol


logger = logging.getLogger(__name__)

ToneShape = Literal["sine", "square", "sawtooth", "triangle"]


class FeedbackSink(Protocol):
    """Opaque audible/visual feedback capability."""

    def play_tone(self, frequency: float, duration: float, shape: ToneShape, gain: float) -> None:
        ...

    def celebrate(self, intensity: int) -> None:
        ...


class LoggingFeedback:
    """Default sink that only logs what would have played."""

    def play_tone(self, frequency: float, duration: float, shape: ToneShape, gain: float) -> None:
        logger.debug("tone %.1fHz %.2fs %s gain=%.2f", frequency, duration, shape, gain)

    def celebrate(self, intensity: int) -> None:
        logger.debug("celebrate intensity=%d", intensity)


class RecordingFeedback:
    """Collects feedback requests until drained."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def play_tone(self, frequency: float, duration: float, shape: ToneShape, gain: float) -> None:
        self.events.append({
            "kind": "tone",
            "frequency": frequency,
            "duration": duration,
            "shape": shape,
            "gain": gain,
        })

    def celebrate(self, intensity: int) -> None:
        self.events.append({"kind": "celebrate", "intensity": intensity})

    def drain(self) -> list[dict[str, Any]]:
        events, self.events = self.events, []
        return events

    def of_kind(self, kind: str) -> list[dict[str, Any]]:
        return [e for e in self.events if e["kind"] == kind]
