"""
Fixed structure of the two day-groups: rounds, role templates, period
times and exam slots.

Group A (Mon/Wed/Fri) rotates one 6-slot weekly pattern per round: day i
of the group takes pattern slots 2i and 2i+1 on the round's two periods.
Group B (Tue/Thu) repeats a 3-slot daily template on every day.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .models import DayGroup, Role

H, K, F = Role.H, Role.K, Role.F


@dataclass(frozen=True)
class RoundTemplate:
    round: int
    periods: Tuple[int, ...]
    pattern: Tuple[Role, ...]
    weekly: bool   # True: pattern spans the whole week; False: repeats each day

    @property
    def has_foreign(self) -> bool:
        return F in self.pattern

    @property
    def scarce_role(self) -> Role:
        """Role whose pool drives phase rotation for this round."""
        return F if self.has_foreign else K

    def positions_for_day(self, day_index: int) -> List[Tuple[int, int]]:
        """(pattern index, period) pairs taught on the given day of the group."""
        width = len(self.periods)
        if self.weekly:
            start = day_index * width
            return [(start + i, self.periods[i]) for i in range(width)]
        return [(i, self.periods[i]) for i in range(width)]

    def occurrences(self, role: Role) -> int:
        return sum(1 for r in self.pattern if r is role)


@dataclass(frozen=True)
class ExamSlot:
    key: str
    time: str
    anchor_period: int
    rounds: Tuple[int, ...]


@dataclass(frozen=True)
class GroupLayout:
    group: DayGroup
    rounds: Dict[int, RoundTemplate]
    period_times: Dict[int, str]
    exam_slots: Tuple[ExamSlot, ...]

    @property
    def round_numbers(self) -> Tuple[int, ...]:
        return tuple(sorted(self.rounds))

    def exam_slot(self, key: str) -> ExamSlot:
        for slot in self.exam_slots:
            if slot.key == key:
                return slot
        raise KeyError(f"unknown exam slot {key!r} for day-group {self.group.value}")


# ---------------------------------------------------------------------------
# Group A: Mon / Wed / Fri
# ---------------------------------------------------------------------------
GROUP_A = GroupLayout(
    group=DayGroup.A,
    rounds={
        1: RoundTemplate(1, (1, 2), (H, K, F, H, F, K), weekly=True),
        2: RoundTemplate(2, (3, 4), (H, K, F, H, F, K), weekly=True),
        3: RoundTemplate(3, (5, 6), (H, K, F, H, F, K), weekly=True),
        4: RoundTemplate(4, (7, 8), (H, K, H, K, H, H), weekly=True),   # no F
    },
    period_times={
        1: "14:20-15:05",
        2: "15:10-15:55",
        3: "16:15-17:00",
        4: "17:05-17:50",
        5: "18:05-18:55",
        6: "19:00-19:50",
        7: "20:15-21:05",
        8: "21:10-22:00",
    },
    exam_slots=(
        ExamSlot("EXAM-R2", "16:00-16:15", anchor_period=3, rounds=(2,)),
        ExamSlot("EXAM-R3", "17:50-18:05", anchor_period=5, rounds=(3,)),
        ExamSlot("EXAM-R4", "20:00-20:15", anchor_period=7, rounds=(4,)),
    ),
)

# ---------------------------------------------------------------------------
# Group B: Tue / Thu
# ---------------------------------------------------------------------------
GROUP_B = GroupLayout(
    group=DayGroup.B,
    rounds={
        1: RoundTemplate(1, (1, 2, 3), (H, K, F), weekly=False),
        2: RoundTemplate(2, (4, 5, 6), (H, H, K), weekly=False),   # no F
    },
    period_times={
        1: "15:20-16:05",
        2: "16:10-16:55",
        3: "17:00-17:45",
        4: "18:10-19:00",
        5: "19:05-19:55",
        6: "20:00-20:50",
    },
    exam_slots=(
        ExamSlot("EXAM-R1R2", "17:50-18:10", anchor_period=3, rounds=(1, 2)),
    ),
)

LAYOUTS: Dict[DayGroup, GroupLayout] = {DayGroup.A: GROUP_A, DayGroup.B: GROUP_B}


def layout_for(group: DayGroup) -> GroupLayout:
    return LAYOUTS[group]
