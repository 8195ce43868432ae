"""The fixed Wonder Wheel wedge table."""
from typing import Iterator, Sequence

from lessongames.logic.models import Wedge, WedgeType
from lessongames.logic.rng import RNGBase


# Ordered clockwise from the pointer.
WEDGES: tuple[Wedge, ...] = (
    Wedge(label="$300", type=WedgeType.POINTS, value=300),
    Wedge(label="$450", type=WedgeType.POINTS, value=450),
    Wedge(label="$500", type=WedgeType.POINTS, value=500),
    Wedge(label="$650", type=WedgeType.POINTS, value=650),
    Wedge(label="$700", type=WedgeType.POINTS, value=700),
    Wedge(label="BANKRUPT", type=WedgeType.BANKRUPT, value=0),
    Wedge(label="$800", type=WedgeType.POINTS, value=800),
    Wedge(label="$900", type=WedgeType.POINTS, value=900),
    Wedge(label="LOSE A TURN", type=WedgeType.LOSE_TURN, value=0),
    Wedge(label="$1000", type=WedgeType.POINTS, value=1000),
    Wedge(label="DOUBLE", type=WedgeType.DOUBLE, value=200),
    Wedge(label="BONUS +$200", type=WedgeType.BONUS, value=200),
)


class WedgeTable:
    """
    Immutable catalog of spin outcomes.

    Selection is uniform and memoryless: no weighting and no anti-repeat.
    """

    def __init__(self, wedges: Sequence[Wedge] = WEDGES):
        if len(wedges) < 2:
            raise ValueError("A wheel needs at least two wedges")
        self._wedges = tuple(wedges)

    def __len__(self) -> int:
        return len(self._wedges)

    def __getitem__(self, index: int) -> Wedge:
        return self._wedges[index]

    def __iter__(self) -> Iterator[Wedge]:
        return iter(self._wedges)

    @property
    def segment_degrees(self) -> float:
        return 360.0 / len(self._wedges)

    def select_outcome(self, rng: RNGBase) -> tuple[int, Wedge]:
        """Pick a wedge uniformly at random, returning (index, wedge)."""
        index = rng.randint(0, len(self._wedges) - 1)
        return index, self._wedges[index]
