"""
Random Source - The single source of every roll the engine makes.

Success, critical and per-reward drop rolls all go through one
injectable object so a resolution can be replayed exactly.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable
import random


@dataclass
class RandomSource:
    """
    Seeded random source.

    Usage:
        rng = RandomSource(seed=123)
        r = rng.roll()          # float in [0.0, 1.0)
        ok = rng.chance(0.25)   # 25% chance
    """
    seed: int | None = None

    def __post_init__(self) -> None:
        self._random = random.Random(self.seed)

    def reseed(self, seed: int) -> None:
        """Reset with a new seed."""
        self.seed = seed
        self._random = random.Random(self.seed)

    def roll(self) -> float:
        """Return a float in [0.0, 1.0)."""
        return self._random.random()

    def chance(self, p: float) -> bool:
        """
        Return True with probability p.

        Values <= 0 always fail, values >= 1 always succeed.
        Both still consume a roll so the sequence stays aligned.
        """
        value = self.roll()
        if p <= 0:
            return False
        if p >= 1:
            return True
        return value < p


class SequenceRandom(RandomSource):
    """
    Scripted rolls, consumed in order.

    Usage:
        rng = SequenceRandom([0.0, 0.99])  # success roll, then non-critical
    """

    def __init__(self, values: Iterable[float] = (), default: float | None = None):
        super().__init__(seed=None)
        self._queue = list(values)
        self.default = default

    def extend(self, values: Iterable[float]) -> None:
        self._queue.extend(values)

    @property
    def remaining(self) -> int:
        return len(self._queue)

    def roll(self) -> float:
        if self._queue:
            return self._queue.pop(0)
        if self.default is not None:
            return self.default
        raise IndexError("SequenceRandom ran out of scripted rolls")
