"""Tile map, walkability and click-to-move pathfinding."""
from __future__ import annotations
import json
from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from pathlib import Path
from typing import Deque, Dict, List, Optional, Sequence, Tuple
from acemon.core.errors import DataLoadError, ValidationError
from acemon.core.paths import WORLD_MAP

Coord = Tuple[int, int]

class Tile(IntEnum):
    PATH = 0
    GRASS = 1
    WALL = 2
    HEAL = 3

# up, down, left, right
DIRECTIONS: Tuple[Coord, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))

@dataclass(frozen=True)
class TileMap:
    tiles: Tuple[Tuple[int, ...], ...]
    start: Coord = (0, 0)
    name: str = "map"

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], start: Coord = (0, 0), name: str = "map") -> "TileMap":
        if not rows or not rows[0]:
            raise ValidationError("map has no tiles")
        width = len(rows[0])
        valid = {t.value for t in Tile}
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValidationError(f"map row {y} has width {len(row)}, expected {width}")
            bad = [c for c in row if c not in valid]
            if bad:
                raise ValidationError(f"map row {y} has unknown tile codes {bad}")
        return cls(tuple(tuple(int(c) for c in r) for r in rows), (int(start[0]), int(start[1])), name)

    @property
    def width(self) -> int:
        return len(self.tiles[0])

    @property
    def height(self) -> int:
        return len(self.tiles)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= y < self.height and 0 <= x < self.width

    def tile_at(self, x: int, y: int) -> Optional[Tile]:
        if not self.in_bounds(x, y):
            return None
        return Tile(self.tiles[y][x])

    def is_walkable(self, x: int, y: int) -> bool:
        tile = self.tile_at(x, y)
        return tile is not None and tile != Tile.WALL

    def healing_tiles(self) -> List[Coord]:
        return [(x, y) for y, row in enumerate(self.tiles) for x, c in enumerate(row) if c == Tile.HEAL]

    def find_path(self, start: Coord, goal: Coord) -> Optional[List[Coord]]:
        """Shortest 4-directional walk from ``start`` (exclusive) to ``goal``.

        Returns None when the goal is unreachable or equals the start.
        """
        start = (start[0], start[1])
        goal = (goal[0], goal[1])
        if start == goal or not self.is_walkable(*goal):
            return None
        came_from: Dict[Coord, Optional[Coord]] = {start: None}
        queue: Deque[Coord] = deque([start])
        while queue:
            cur = queue.popleft()
            if cur == goal:
                break
            for dx, dy in DIRECTIONS:
                nxt = (cur[0] + dx, cur[1] + dy)
                if nxt in came_from or not self.is_walkable(*nxt):
                    continue
                came_from[nxt] = cur
                queue.append(nxt)
        if goal not in came_from:
            return None
        path: List[Coord] = []
        node: Optional[Coord] = goal
        while node is not None and node != start:
            path.append(node)
            node = came_from[node]
        path.reverse()
        return path

def load_map_file(path: Path) -> TileMap:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(str(path), str(e)) from e
    start = tuple(raw.get("start", (0, 0)))
    tmap = TileMap.from_rows(raw.get("tiles", []), start=start, name=raw.get("name", path.stem))  # type: ignore[arg-type]
    if not tmap.is_walkable(*tmap.start):
        raise ValidationError(f"{path}: start {tmap.start} is not walkable")
    return tmap

@lru_cache(maxsize=None)
def load_world_map() -> TileMap:
    return load_map_file(WORLD_MAP)

__all__ = ["Tile", "TileMap", "Coord", "DIRECTIONS", "load_map_file", "load_world_map"]
