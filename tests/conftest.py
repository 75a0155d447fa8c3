from __future__ import annotations
from typing import Iterable, List
import pytest

from acemon.core.rng import RandomSource
from acemon.data.catalog import load_catalog
from acemon.world.grid import TileMap


class ScriptedRandom(RandomSource):
    """Replays queued draws, then keeps returning ``default``."""

    def __init__(self, values: Iterable[float] = (), default: float = 0.5):
        super().__init__()
        self.values: List[float] = list(values)
        self.default = default
        self.draws = 0

    def push(self, *values: float):
        self.values.extend(values)

    def random(self) -> float:
        self.draws += 1
        if self.values:
            return self.values.pop(0)
        return self.default


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def corridor():
    # wall, path(start), grass, heal
    return TileMap.from_rows([
        [2, 2, 2, 2, 2],
        [2, 0, 1, 3, 2],
        [2, 2, 2, 2, 2],
    ], start=(1, 1), name="corridor")


@pytest.fixture
def scripted_rng():
    return ScriptedRandom
