"""Player party: ordered team with a leader slot and a hard size limit."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List, Optional
from .core import Creature
from acemon.system.tuning import DEFAULT_TUNING

@dataclass
class Party:
    members: List[Creature] = field(default_factory=list)
    limit: int = DEFAULT_TUNING.team_limit

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[Creature]:
        return iter(self.members)

    def __getitem__(self, index: int) -> Creature:
        return self.members[index]

    @property
    def leader(self) -> Optional[Creature]:
        return self.members[0] if self.members else None

    def is_full(self) -> bool:
        return len(self.members) >= self.limit

    def add(self, member: Creature) -> bool:
        """Append a member; False when the party is full or already holds it."""
        if self.is_full() or any(m.uid == member.uid for m in self.members):
            return False
        self.members.append(member)
        return True

    def remove(self, index: int) -> Optional[Creature]:
        """Drop a member by slot; the last member can never be removed."""
        if len(self.members) <= 1 or not 0 <= index < len(self.members):
            return None
        return self.members.pop(index)

    def promote(self, index: int) -> Optional[Creature]:
        """Move slot ``index`` to the leader slot, keeping the others' order."""
        if not 0 < index < len(self.members):
            return None
        chosen = self.members.pop(index)
        self.members.insert(0, chosen)
        return chosen

    def first_available(self) -> int:
        for i, m in enumerate(self.members):
            if not m.is_fainted():
                return i
        return -1

    def has_available(self) -> bool:
        return self.first_available() >= 0

    def heal_all(self):
        for m in self.members:
            m.heal_full()

    def highest_level(self) -> int:
        return max((m.level for m in self.members), default=1)

    def average_level(self) -> int:
        if not self.members:
            return 1
        return sum(m.level for m in self.members) // len(self.members)

__all__ = ["Party"]
