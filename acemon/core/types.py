"""Global elemental type metadata: colors & abbreviations.

Provides:
  TYPE_COLORS_HEX: mapping type -> hex color string (#RRGGBB)
  TYPE_ABBREVIATIONS: mapping type -> 3-letter abbreviation (upper)
  helpers producing rich markup for terminal rendering.
"""
from __future__ import annotations
from typing import Dict

ELEMENTS = (
    "Normal", "Fire", "Water", "Grass", "Electric", "Ice", "Fighting", "Poison",
    "Ground", "Flying", "Psychic", "Bug", "Rock", "Ghost", "Dragon", "Dark",
)

TYPE_COLORS_HEX: Dict[str, str] = {
    "normal": "#A8A77A",
    "fire": "#EE8130",
    "water": "#6390F0",
    "electric": "#F7D02C",
    "grass": "#7AC74C",
    "ice": "#96D9D6",
    "fighting": "#C22E28",
    "poison": "#A33EA1",
    "ground": "#E2BF65",
    "flying": "#A98FF3",
    "psychic": "#F95587",
    "bug": "#A6B91A",
    "rock": "#B6A136",
    "ghost": "#735797",
    "dragon": "#6F35FC",
    "dark": "#705746",
}

TYPE_ABBREVIATIONS: Dict[str, str] = {
    "normal": "NRM",
    "fire": "FIR",
    "water": "WTR",
    "grass": "GRS",
    "electric": "ELE",
    "ice": "ICE",
    "fighting": "FGT",
    "poison": "PSN",
    "ground": "GRN",
    "flying": "FLY",
    "psychic": "PSY",
    "bug": "BUG",
    "rock": "RCK",
    "ghost": "GHO",
    "dragon": "DRA",
    "dark": "DRK",
}

def is_element(name: str) -> bool:
    return name.lower() in TYPE_COLORS_HEX

def type_abbreviation(type_name: str) -> str:
    return TYPE_ABBREVIATIONS.get(type_name.lower(), type_name[:3].upper())

def type_markup(type_name: str, text: str | None = None) -> str:
    """Wrap text (default: the abbreviation) in rich color markup."""
    label = text if text is not None else type_abbreviation(type_name)
    hex_val = TYPE_COLORS_HEX.get(type_name.lower())
    if not hex_val:
        return label
    return f"[{hex_val}]{label}[/{hex_val}]"

__all__ = [
    'ELEMENTS','TYPE_COLORS_HEX','TYPE_ABBREVIATIONS',
    'is_element','type_abbreviation','type_markup'
]
