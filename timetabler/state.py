"""
Mutable bookkeeping scoped to one weekly generation.

A GenerationContext is built fresh for every generate_week() call and passed
into each builder. Nothing here is shared between invocations.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from .models import Assignment, Day, Role, Slot, TEACHING_ROLES, WeekConfig, name_key


class BusyMatrix:
    """Occupied (day, slot, person) triples. No removal."""

    def __init__(self):
        self._busy: Set[Tuple[Day, Slot, str]] = set()
        self._by_slot: Dict[Tuple[Day, Slot], Set[str]] = {}

    def can_use(self, day: Day, slot: Slot, person: str) -> bool:
        return (day, slot, person) not in self._busy

    def occupy(self, day: Day, slot: Slot, person: str) -> None:
        self._busy.add((day, slot, person))
        self._by_slot.setdefault((day, slot), set()).add(person)

    def busy_people(self, day: Day, slot: Slot) -> FrozenSet[str]:
        return frozenset(self._by_slot.get((day, slot), ()))

    def __len__(self) -> int:
        return len(self._busy)


class FairnessLedger:
    """Per-person totals and per-role counts. Exams are counted separately."""

    def __init__(self):
        self._total: Dict[str, int] = {}
        self._by_role: Dict[Role, Dict[str, int]] = {role: {} for role in TEACHING_ROLES}
        self._exams: Dict[str, int] = {}

    def bump(self, person: str, role: Role) -> None:
        if role is Role.EXAM:
            self._exams[person] = self._exams.get(person, 0) + 1
        elif role in self._by_role:
            counts = self._by_role[role]
            counts[person] = counts.get(person, 0) + 1
            self._total[person] = self._total.get(person, 0) + 1
        else:
            raise ValueError(f"unknown role {role!r}")

    def absorb(self, assignments: Iterable[Assignment]) -> None:
        """Replay real assignments from an earlier result into this ledger."""
        for a in assignments:
            if a.seat.is_real:
                self.bump(a.seat.name, a.role)

    def total(self, person: str) -> int:
        return self._total.get(person, 0)

    def count(self, person: str, role: Role) -> int:
        if role is Role.EXAM:
            return self._exams.get(person, 0)
        return self._by_role[role].get(person, 0)

    def exams(self, person: str) -> int:
        return self._exams.get(person, 0)

    def people(self) -> List[str]:
        names = set(self._total) | set(self._exams)
        return sorted(names, key=name_key)

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        out = {}
        for person in self.people():
            row = {role.value: self.count(person, role) for role in TEACHING_ROLES}
            row["total"] = self.total(person)
            row["exams"] = self.exams(person)
            out[person] = row
        return out


@dataclass
class GenerationContext:
    """Busy matrix and ledger threaded through one weekly generation."""
    config: WeekConfig
    busy: BusyMatrix = field(default_factory=BusyMatrix)
    ledger: FairnessLedger = field(default_factory=FairnessLedger)
    # (day, class id, person) for every K/F slot placed so far
    language_seats: Set[Tuple[Day, str, str]] = field(default_factory=set)

    def teaches_language(self, day: Day, class_id: str, person: str) -> bool:
        return (day, class_id, person) in self.language_seats
