"""Randomness sources for wedge choice, stop jitter and hint letters."""
import random
import secrets
from abc import ABC, abstractmethod
from typing import Sequence, TypeVar

T = TypeVar("T")


class RNGBase(ABC):
    """
    What the engines may ask of a random source.

    Subclasses supply random() and randint(); everything else is built on
    those two so a seeded source replays identically.
    """

    @abstractmethod
    def random(self) -> float:
        """Float in [0, 1)."""

    @abstractmethod
    def randint(self, a: int, b: int) -> int:
        """Int in [a, b], both ends included."""

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def open_uniform(self, a: float, b: float) -> float:
        """Float strictly between a and b."""
        x = self.random()
        while x == 0.0:
            x = self.random()
        return a + (b - a) * x

    def choice(self, items: Sequence[T]) -> T:
        """Uniform pick from a non-empty sequence."""
        return items[self.randint(0, len(items) - 1)]


class ProductionRNG(RNGBase):
    """OS entropy, for live classroom sessions."""

    _SCALE = 2**32

    def random(self) -> float:
        return secrets.randbelow(self._SCALE) / self._SCALE

    def randint(self, a: int, b: int) -> int:
        return a + secrets.randbelow(b - a + 1)


class SeededRNG(RNGBase):
    """
    Replayable source for tests, audits and seeded sessions.

    Two instances built from the same seed produce the same spins and
    the same hint letters.
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._source = random.Random(seed)

    def random(self) -> float:
        return self._source.random()

    def randint(self, a: int, b: int) -> int:
        return self._source.randint(a, b)
