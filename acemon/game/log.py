"""Bounded battle/exploration log (most recent entries only)."""
from __future__ import annotations
import itertools
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterator, List

class LogCategory(str, Enum):
    PLAYER = "player"
    ENEMY = "enemy"
    SYSTEM = "system"
    NORMAL = "normal"

@dataclass(frozen=True)
class LogEntry:
    msg: str
    category: LogCategory
    id: int

class BattleLog:
    def __init__(self, limit: int = 40):
        self.limit = limit
        self._entries: Deque[LogEntry] = deque(maxlen=limit)
        self._ids = itertools.count(1)

    def push(self, msg: str, category: LogCategory = LogCategory.NORMAL) -> LogEntry:
        entry = LogEntry(msg, LogCategory(category), next(self._ids))
        self._entries.append(entry)
        return entry

    def clear(self):
        # ids keep counting so entries stay distinguishable across encounters
        self._entries.clear()

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def messages(self) -> List[str]:
        return [e.msg for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

__all__ = ["BattleLog", "LogEntry", "LogCategory"]
