"""Config factories and assertion helpers shared by the engine tests."""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional

from timetabler.models import (
    Assignment, Day, DayGroup, GroupSettings, PolicyOptions, Pools, Role, Seat,
    TeacherConstraint, WeekConfig, parse_unavailable,
)

LOCAL = ["김선생", "이선생", "박선생", "최선생"]
FOREIGN = ["John", "Sarah", "Mike"]

DEFAULT_A = {1: 2, 2: 2, 3: 2, 4: 2}
DEFAULT_B = {1: 3, 2: 3}


def unavailable(*tokens: str) -> frozenset:
    return frozenset(parse_unavailable(t) for t in tokens)


def make_config(
    local: Optional[List[str]] = None,
    foreign: Optional[List[str]] = None,
    group_a: Optional[Dict[int, int]] = None,
    group_b: Optional[Dict[int, int]] = None,
    constraints: Optional[Dict[str, TeacherConstraint]] = None,
    pins_a: Optional[Dict[str, str]] = None,
    pins_b: Optional[Dict[str, str]] = None,
    options: Optional[PolicyOptions] = None,
    max_homerooms: Optional[int] = 2,
) -> WeekConfig:
    """Default pools with maxHomerooms=2 for everyone, overridable per teacher."""
    local = list(LOCAL if local is None else local)
    foreign = list(FOREIGN if foreign is None else foreign)
    merged: Dict[str, TeacherConstraint] = {
        name: TeacherConstraint(max_homerooms=max_homerooms) for name in dict.fromkeys(local + foreign)
    }
    merged.update(constraints or {})
    return WeekConfig(
        pools=Pools(local=local, foreign=foreign),
        constraints=merged,
        groups={
            DayGroup.A: GroupSettings(dict(DEFAULT_A if group_a is None else group_a), dict(pins_a or {})),
            DayGroup.B: GroupSettings(dict(DEFAULT_B if group_b is None else group_b), dict(pins_b or {})),
        },
        options=options or PolicyOptions(),
    )


def row(day: str, cid: str, round_no: int, period: int, role: str, teacher: Optional[str],
        exam_slot: Optional[str] = None) -> Assignment:
    """Hand-built assignment for validator tests. teacher=None means unassigned."""
    seat = Seat.unassigned() if teacher is None else Seat.real(teacher)
    return Assignment(day=Day.parse(day), class_id=cid, round=round_no, period=period,
                      time="", role=Role(role), seat=seat, exam_slot=exam_slot)


def failures(warnings: Iterable[str], role: Optional[str] = None) -> List[str]:
    out = [w for w in warnings if w.endswith("assignment failed")]
    if role is not None:
        out = [w for w in out if w.endswith(f" {role} assignment failed")]
    return out


def assert_invariants(result, config: WeekConfig) -> None:
    """Properties every generated week must satisfy."""
    seen = Counter()
    for a in result.assignments:
        if a.seat.is_real:
            seen[(a.day, a.slot, a.seat.name)] += 1
            assert not config.is_unavailable(a.seat.name, a.day, a.slot), a
        if a.role is Role.F:
            template = {DayGroup.A: {1, 2, 3}, DayGroup.B: {1}}[a.group]
            assert a.round in template, a
    assert all(n == 1 for n in seen.values()), [k for k, n in seen.items() if n > 1]

    for group, rooms in result.homerooms.items():
        owned = Counter(seat.name for seat in rooms.values() if seat.is_real)
        for person, count in owned.items():
            cap = config.constraint_for(person).max_homerooms
            assert cap is None or count <= cap, (group, person, count)
        for a in result.assignments:
            if a.group is group and a.role is Role.H and a.seat.kind.value != "unassigned":
                assert a.seat == rooms[a.class_id], a

    assert result.validation.is_valid, result.validation.errors
