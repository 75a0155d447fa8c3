"""
Battle system package.
Modules:
- core.py (Move, Creature, Weather, damage & miss mechanics)
- factory.py (level-scaled instances from species templates)
- capture.py (capture & flee probabilities)
- experience.py (experience curve, level-ups, caps)
- party.py (ordered team with leader slot)
"""
from .core import BattleCore, Creature, Move, Weather
__all__ = ["BattleCore", "Creature", "Move", "Weather"]
