#!/usr/bin/env python3
"""
ACE Monsters - terminal edition

Thin wrapper around the command-line front-end. The rules live in the
``acemon`` package:
- battle mechanics, capture and progression (``acemon.battle``)
- map, pathfinding and encounters (``acemon.world``)
- the phase state machine that emits paced steps (``acemon.game``)

To run: python main.py  (or: python main.py simulate --encounters 100)
"""

import sys

from acemon.cli import run

if __name__ == "__main__":
    sys.exit(run())
