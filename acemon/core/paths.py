"""
Centralized path helpers (works with the current flat layout).
"""
from __future__ import annotations
from pathlib import Path

# This file lives at acemon/core/paths.py
ROOT = Path(__file__).resolve().parents[2]   # project root (one up from 'acemon')
ASSETS = ROOT / "assets"
SPECIES_CATALOG = ASSETS / "species.json"
WORLD_MAP = ASSETS / "map.json"
