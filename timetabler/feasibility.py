"""
Demand vs. capacity pre-check for scarce roles. Diagnostic only: generation
always proceeds, the report just tells callers where unassigned slots are
coming.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .layouts import GROUP_B, LAYOUTS, GroupLayout
from .models import DayGroup, Pools, Role, WeekConfig


@dataclass(frozen=True)
class FeasibilityItem:
    group: DayGroup
    round: int
    role: Role
    demand: int
    capacity: int

    @property
    def ok(self) -> bool:
        return self.demand <= self.capacity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group": self.group.value,
            "round": self.round,
            "role": self.role.value,
            "demand": self.demand,
            "capacity": self.capacity,
            "ok": self.ok,
        }


@dataclass
class FeasibilityReport:
    items: List[FeasibilityItem] = field(default_factory=list)
    class_counts: Dict[DayGroup, Dict[int, int]] = field(default_factory=dict)

    def find(self, group: DayGroup, round_no: int, role: Role) -> Optional[FeasibilityItem]:
        for item in self.items:
            if item.group is group and item.round == round_no and item.role is role:
                return item
        return None

    @property
    def ok(self) -> bool:
        return all(item.ok for item in self.items)

    @property
    def r1_foreign_ok(self) -> bool:
        item = self.find(DayGroup.B, 1, Role.F)
        return item is None or item.ok

    @property
    def r1_foreign_demand(self) -> int:
        item = self.find(DayGroup.B, 1, Role.F)
        return item.demand if item else 0

    @property
    def r1_foreign_capacity(self) -> int:
        item = self.find(DayGroup.B, 1, Role.F)
        return item.capacity if item else 0

    @property
    def r2_h_needed(self) -> int:
        classes = self.class_counts.get(DayGroup.B, {}).get(2, 0)
        return classes * GROUP_B.rounds[2].occurrences(Role.H)

    @property
    def r2_k_needed(self) -> int:
        classes = self.class_counts.get(DayGroup.B, {}).get(2, 0)
        return classes * GROUP_B.rounds[2].occurrences(Role.K)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "items": [item.to_dict() for item in self.items],
            "r1ForeignOk": self.r1_foreign_ok,
            "r1ForeignDemand": self.r1_foreign_demand,
            "r1ForeignCapacity": self.r1_foreign_capacity,
            "r2HNeeded": self.r2_h_needed,
            "r2KNeeded": self.r2_k_needed,
        }


def _pool_size(role: Role, pools: Pools) -> int:
    if role is Role.F:
        return len(pools.foreign)
    if role is Role.K:
        return len(pools.local)
    raise ValueError(f"role {role.value} has no feasibility check")


def analyze_group(layout: GroupLayout, class_counts: Dict[int, int],
                  pools: Pools) -> List[FeasibilityItem]:
    """
    Demand against capacity for each scarce role of each round.

    Capacity is pool size times the pattern length, so it is a weekly
    total. ``ok`` does not promise a failure-free week: in group A the
    rotated patterns can still stack several F cells on one period
    (one R1 class per rotation phase with a single foreign teacher
    passes here, yet two classes want F on the same Wednesday period).
    """
    items = []
    for round_no in layout.round_numbers:
        template = layout.rounds[round_no]
        classes = class_counts.get(round_no, 0)
        cycle = len(template.pattern)
        roles = [Role.F, Role.K] if template.has_foreign else [Role.K]
        for role in roles:
            items.append(FeasibilityItem(
                group=layout.group,
                round=round_no,
                role=role,
                demand=classes * template.occurrences(role),
                capacity=_pool_size(role, pools) * cycle,
            ))
    return items


def analyze_feasibility(config: WeekConfig) -> FeasibilityReport:
    report = FeasibilityReport()
    for group, layout in LAYOUTS.items():
        counts = dict(config.settings_for(group).round_class_counts)
        report.class_counts[group] = counts
        report.items.extend(analyze_group(layout, counts, config.pools))
    return report
