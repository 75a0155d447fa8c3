"""Runtime loader utilities for the species catalog.

Provides cached access to ``assets/species.json``: the starter picks, the
common (wild) pool and the rare (legendary) pool. Templates are frozen and
shared by every instance built from them.
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from acemon.battle.core import Move
from acemon.core.errors import DataLoadError, ValidationError
from acemon.core.paths import SPECIES_CATALOG
from acemon.core.types import is_element

MAX_MOVES = 4

class SpeciesNotFound(KeyError):
    pass

@dataclass(frozen=True)
class Species:
    id: int
    name: str
    type: str
    max_hp: int
    atk: int
    sprite: str
    moves: Tuple[Move, ...]
    rare: bool = False

@dataclass(frozen=True)
class Catalog:
    starters: Tuple[Species, ...]
    common: Tuple[Species, ...]
    rare: Tuple[Species, ...]
    sprite_base: str = ""

    def get(self, species_id: int) -> Species:
        for sp in self.all():
            if sp.id == species_id:
                return sp
        raise SpeciesNotFound(f"Species id {species_id} not found")

    def find_by_name(self, name: str) -> Optional[Species]:
        name_lower = name.strip().lower()
        for sp in self.all():
            if sp.name.lower() == name_lower:
                return sp
        return None

    def all(self) -> Tuple[Species, ...]:
        return self.common + self.rare

    def sprite_url(self, species: Species) -> str:
        return self.sprite_base + species.sprite

def _move_from_raw(raw: Dict[str, Any], owner: str) -> Move:
    try:
        move = Move(name=str(raw["name"]), power=int(raw.get("power", 0)), type=str(raw["type"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"{owner}: malformed move {raw!r}") from e
    if move.power < 0:
        raise ValidationError(f"{owner}: move {move.name} has negative power")
    if not is_element(move.type):
        raise ValidationError(f"{owner}: move {move.name} has unknown type {move.type}")
    return move

def species_from_raw(raw: Dict[str, Any], *, rare: bool = False) -> Species:
    name = str(raw.get("name", "?"))
    moves_raw = raw.get("moves") or []
    if not moves_raw or len(moves_raw) > MAX_MOVES:
        raise ValidationError(f"{name}: needs 1..{MAX_MOVES} moves, got {len(moves_raw)}")
    try:
        sp = Species(
            id=int(raw["id"]),
            name=name,
            type=str(raw["type"]),
            max_hp=int(raw["max_hp"]),
            atk=int(raw["atk"]),
            sprite=str(raw.get("sprite", "")),
            moves=tuple(_move_from_raw(m, name) for m in moves_raw),
            rare=bool(raw.get("rare", rare)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"{name}: malformed species entry ({e})") from e
    if sp.max_hp <= 0 or sp.atk < 0:
        raise ValidationError(f"{name}: stats must be positive")
    if not is_element(sp.type):
        raise ValidationError(f"{name}: unknown type {sp.type}")
    return sp

def build_catalog(data: Dict[str, Any]) -> Catalog:
    common = tuple(species_from_raw(r) for r in data.get("wild", []))
    rare = tuple(species_from_raw(r, rare=True) for r in data.get("legendary", []))
    if not common:
        raise ValidationError("catalog has an empty common pool")
    if not rare:
        raise ValidationError("catalog has an empty rare pool")
    if any(not s.rare for s in rare) or any(s.rare for s in common):
        raise ValidationError("rare flag disagrees with pool membership")
    by_id = {s.id: s for s in common}
    starters: List[Species] = []
    for sid in data.get("starters", []):
        if sid not in by_id:
            raise ValidationError(f"starter {sid} is not in the common pool")
        starters.append(by_id[sid])
    if not starters:
        raise ValidationError("catalog lists no starters")
    return Catalog(starters=tuple(starters), common=common, rare=rare, sprite_base=str(data.get("sprite_base", "")))

def load_catalog_file(path: Path) -> Catalog:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(str(path), str(e)) from e
    return build_catalog(data)

@lru_cache(maxsize=None)
def load_catalog() -> Catalog:
    return load_catalog_file(SPECIES_CATALOG)

__all__ = ["Species", "Catalog", "SpeciesNotFound", "build_catalog", "species_from_raw", "load_catalog", "load_catalog_file"]
