"""Single random source shared by every chance roll in the game.

Encounter type, weather, damage variance, miss chance, capture and escape all
draw from one ``RandomSource`` so a seed reproduces a whole session.
"""
from __future__ import annotations
import os
import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

SEED_ENV = "ACEMON_RNG_SEED"

class RandomSource:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @classmethod
    def from_env(cls) -> "RandomSource":
        """Create RNG with optional seed from environment."""
        seed = os.environ.get(SEED_ENV)
        value: Optional[int] = None
        if seed:
            try:
                value = int(seed)
            except ValueError:
                value = None
        return cls(random.Random(value))

    @classmethod
    def seeded(cls, seed: int) -> "RandomSource":
        return cls(random.Random(seed))

    def random(self) -> float:
        return self.rng.random()

    def chance(self, probability: float) -> bool:
        """True with the given probability (0 never, 1 always)."""
        return self.random() < probability

    def uniform(self, lo: float, hi: float) -> float:
        # [lo, hi) like Math.random scaling, not random.uniform's closed range
        return lo + (hi - lo) * self.random()

    def randint(self, a: int, b: int) -> int:
        return a + int(self.random() * (b - a + 1))

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[int(self.random() * len(items))]

__all__ = ["RandomSource", "SEED_ENV"]
