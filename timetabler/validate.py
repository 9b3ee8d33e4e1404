"""
Configuration checks and post-generation rule validation.

The validator never mutates what it is given and does not depend on the
builders, so it can re-check a result after someone has edited it by hand.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .homerooms import pin_problems
from .layouts import LAYOUTS, layout_for
from .models import (
    Assignment, Day, DayGroup, Role, Seat, SeatKind, WeekConfig, class_id_key, format_unavailable,
    name_key,
)


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    infos: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "infos": list(self.infos),
        }


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def check_config(config: WeekConfig) -> List[str]:
    """
    Problems that make a configuration unusable.
    Returns an empty list when generation may proceed.
    """
    problems = []
    pools = config.pools

    for label, pool in (("local", pools.local), ("foreign", pools.foreign)):
        for person in pool:
            if not isinstance(person, str) or not person.strip():
                problems.append(f"{label} pool: empty teacher name")
        dupes = sorted((p for p, n in Counter(pool).items() if n > 1), key=str)
        for person in dupes:
            problems.append(f"{label} pool: duplicate teacher {person}")

    known = set(pools.everyone())
    for person in sorted(config.constraints, key=str):
        constraint = config.constraints[person]
        if person not in known:
            problems.append(f"constraint for unknown teacher {person}")
            continue
        if constraint.max_homerooms is not None and constraint.max_homerooms < 0:
            problems.append(f"{person}: maxHomerooms must be >= 0")
        for day, slot in sorted(constraint.unavailable, key=lambda e: (e[0].order, str(e[1]))):
            if isinstance(slot, str):
                continue
            periods = layout_for(DayGroup.of(day)).period_times
            if slot not in periods:
                problems.append(f"{person}: unavailable {format_unavailable((day, slot))} is not a period of that day")

    for group in sorted(config.groups, key=lambda g: g.value):
        layout = LAYOUTS[group]
        settings = config.groups[group]
        counts_ok = True
        for round_no, count in sorted(settings.round_class_counts.items(), key=lambda kv: str(kv[0])):
            if round_no not in layout.rounds:
                problems.append(f"group {group.value}: unknown round {round_no}")
                counts_ok = False
            elif isinstance(count, bool) or not isinstance(count, int) or count < 0:
                problems.append(f"group {group.value} round {round_no}: class count must be a non-negative integer")
                counts_ok = False
        if counts_ok:
            rounds = settings.class_ids(layout.round_numbers)
            class_ids = [cid for r in layout.round_numbers for cid in rounds[r]]
            problems.extend(pin_problems(group, settings, class_ids, config))

    return problems


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------

def _where(a: Assignment) -> str:
    if a.exam_slot:
        return f"[{a.day.value} {a.exam_slot}] {a.class_id}"
    return f"[{a.day.value} {a.period}] {a.class_id}"


def _check_slots(assignments: Sequence[Assignment], out: ValidationResult) -> None:
    by_person: Dict[Tuple[Day, Any, str], List[Assignment]] = {}
    by_class: Dict[Tuple[Day, str, Any], List[Assignment]] = {}
    for a in assignments:
        by_class.setdefault((a.day, a.class_id, a.slot), []).append(a)
        if a.seat.is_real:
            by_person.setdefault((a.day, a.slot, a.seat.name), []).append(a)

    for (day, slot, person), rows in by_person.items():
        classes = sorted({a.class_id for a in rows}, key=class_id_key)
        if len(classes) > 1:
            out.errors.append(f"[{day.value} {slot}] {person} double-booked: {', '.join(classes)}")
        elif len(rows) > 1:
            out.errors.append(f"[{day.value} {slot}] {person} double-booked within class {classes[0]}")

    for (day, cid, slot), rows in by_class.items():
        if len(rows) > 1:
            out.errors.append(f"[{day.value} {slot}] {cid} has {len(rows)} assignments in one slot")


def _check_language_repeats(assignments: Sequence[Assignment], out: ValidationResult) -> None:
    """One person may fill at most one K/F slot of a class per day."""
    seats: Dict[Tuple[Day, str, str], List[Assignment]] = {}
    for a in assignments:
        if a.role in (Role.K, Role.F) and a.seat.is_real:
            seats.setdefault((a.day, a.class_id, a.seat.name), []).append(a)

    for (day, cid, person), rows in seats.items():
        periods = sorted({a.period for a in rows})
        if len(periods) > 1:
            slots = ", ".join(f"{a.role.value}@{a.period}" for a in sorted(rows, key=lambda a: a.period))
            out.errors.append(f"[{day.value}] {cid} {person} fills {len(periods)} K/F slots: {slots}")


def _check_layout(a: Assignment, config: WeekConfig, out: ValidationResult) -> None:
    layout = layout_for(a.group)
    template = layout.rounds.get(a.round)
    if template is None:
        out.errors.append(f"{_where(a)} round {a.round} does not exist in group {a.group.value}")
        return
    if a.role is Role.EXAM:
        try:
            slot = layout.exam_slot(a.exam_slot or "")
        except KeyError:
            out.errors.append(f"{_where(a)} exam slot {a.exam_slot} does not exist in group {a.group.value}")
            return
        if a.round not in slot.rounds:
            out.errors.append(f"{_where(a)} R{a.round} does not sit exam slot {slot.key}")
        return
    if a.period not in template.periods:
        out.errors.append(f"{_where(a)} period {a.period} is not part of R{a.round}")
    if a.role is Role.F and not template.has_foreign:
        out.errors.append(f"{_where(a)} F is forbidden in group {a.group.value} R{a.round}")


def _check_person(a: Assignment, config: WeekConfig, out: ValidationResult) -> None:
    if not a.seat.is_real:
        return
    person = a.seat.name
    if config.is_unavailable(person, a.day, a.slot):
        out.errors.append(f"{_where(a)} {person} is unavailable ({a.role.value})")
    local = person in config.pools.local
    if a.role is Role.H and not local:
        out.errors.append(f"{_where(a)} homeroom {person} is not in the local pool")
    elif a.role is Role.K and not local:
        out.errors.append(f"{_where(a)} K taught by {person} who is not in the local pool")
    elif a.role is Role.F and person not in config.pools.foreign:
        out.errors.append(f"{_where(a)} F taught by {person} who is not in the foreign pool")
    elif a.role is Role.EXAM and not local:
        out.errors.append(f"{_where(a)} exam proctor {person} is not a homeroom-eligible teacher")


def _stable_homerooms(group: DayGroup, rows: Sequence[Assignment],
                      out: ValidationResult) -> Dict[str, Seat]:
    seats: Dict[str, set] = {}
    for a in rows:
        if a.role is Role.H and a.seat.kind is not SeatKind.UNASSIGNED:
            seats.setdefault(a.class_id, set()).add(a.seat)
    stable = {}
    for cid in sorted(seats, key=class_id_key):
        found = seats[cid]
        if len(found) > 1:
            labels = ", ".join(sorted(s.label for s in found))
            out.errors.append(f"[{group.value}] {cid} homeroom is not stable: {labels}")
        stable[cid] = sorted(found, key=lambda s: s.label)[0]
    return stable


def _check_homerooms(group: DayGroup, homerooms: Dict[str, Seat], config: WeekConfig,
                     out: ValidationResult) -> None:
    per_person: Dict[str, List[str]] = {}
    for cid, seat in homerooms.items():
        if seat.kind is SeatKind.SYNTHETIC:
            out.warnings.append(f"[{group.value}] {cid} uses placeholder homeroom {seat.label}")
        elif seat.is_real:
            per_person.setdefault(seat.name, []).append(cid)
    for person in sorted(per_person, key=name_key):
        classes = sorted(per_person[person], key=class_id_key)
        constraint = config.constraint_for(person)
        if constraint.homeroom_disabled:
            out.errors.append(f"[{group.value}] {person} has homerooms disabled but owns {', '.join(classes)}")
        cap = constraint.max_homerooms
        if cap is not None and len(classes) > cap:
            out.errors.append(
                f"[{group.value}] {person} owns {len(classes)} homerooms (maxHomerooms={cap}): {', '.join(classes)}")


def _check_shapes(group: DayGroup, rows: Sequence[Assignment], out: ValidationResult) -> None:
    layout = layout_for(group)
    cycles: Dict[Tuple, List[Assignment]] = {}
    for a in rows:
        template = layout.rounds.get(a.round)
        if a.role is Role.EXAM or template is None:
            continue
        key = (a.class_id, a.round) if template.weekly else (a.class_id, a.round, a.day)
        cycles.setdefault(key, []).append(a)

    for key in sorted(cycles, key=lambda k: (class_id_key(k[0]), k[1], k[2].order if len(k) > 2 else -1)):
        cycle = cycles[key]
        template = layout.rounds[key[1]]
        if len(cycle) != len(template.pattern) or not all(a.seat.is_real for a in cycle):
            continue
        actual = Counter(a.role for a in cycle)
        expected = Counter(template.pattern)
        if actual == expected:
            continue
        where = f"[{group.value}{' ' + key[2].value if len(key) > 2 else ''}] {key[0]}"
        missing_f = expected[Role.F] - actual[Role.F]
        if (missing_f > 0 and actual[Role.K] - expected[Role.K] == missing_f
                and actual[Role.H] == expected[Role.H]):
            out.warnings.append(f"{where} K substitutes for F {missing_f} time(s)")
            continue
        shape = " ".join(f"{r.value}:{actual[r]}" for r in (Role.H, Role.K, Role.F))
        want = " ".join(f"{r.value}:{expected[r]}" for r in (Role.H, Role.K, Role.F))
        out.errors.append(f"{where} R{key[1]} has {shape}, expected {want}")


def _check_group(group: DayGroup, rows: Sequence[Assignment], config: WeekConfig,
                 homerooms: Optional[Dict[str, Seat]], out: ValidationResult) -> None:
    stable = _stable_homerooms(group, rows, out)
    if homerooms is not None:
        for cid, seat in sorted(stable.items(), key=lambda kv: class_id_key(kv[0])):
            expected = homerooms.get(cid)
            if expected is not None and seat != expected:
                out.errors.append(
                    f"[{group.value}] {cid} H held by {seat.label}, homeroom is {expected.label}")
        owners = dict(homerooms)
    else:
        owners = stable
    _check_homerooms(group, owners, config, out)
    _check_shapes(group, rows, out)

    for a in rows:
        if a.role is Role.EXAM and a.seat.is_real:
            owner = owners.get(a.class_id)
            if owner is not None and owner.is_real and owner.name != a.seat.name:
                out.infos.append(f"{_where(a)} exam proctored by substitute {a.seat.name} (homeroom {owner.name})")


def validate_assignments(assignments: Iterable[Assignment], config: WeekConfig,
                         homerooms: Optional[Dict[DayGroup, Dict[str, Seat]]] = None) -> ValidationResult:
    """
    Check a set of assignments against the structural rules.

    Errors are hard rule violations; warnings are soft anomalies (unassigned
    slots, placeholders, K standing in for F); infos note exam substitutes.
    """
    rows = list(assignments)
    out = ValidationResult()
    _check_slots(rows, out)
    _check_language_repeats(rows, out)
    for a in rows:
        _check_layout(a, config, out)
        _check_person(a, config, out)
        if a.seat.kind is SeatKind.UNASSIGNED:
            out.warnings.append(f"{_where(a)} {a.role.value} unassigned")

    for group in DayGroup:
        group_rows = [a for a in rows if a.group is group]
        if not group_rows:
            continue
        owners = homerooms.get(group) if homerooms else None
        _check_group(group, group_rows, config, owners, out)
    return out


def validate_group(result, config: WeekConfig) -> ValidationResult:
    """Validate one day-group result (builder.GroupResult)."""
    return validate_assignments(result.assignments, config, {result.group: result.homerooms})


def validate_week(result, config: WeekConfig) -> ValidationResult:
    """Validate a whole-week result (composer.WeekResult)."""
    return validate_assignments(result.assignments, config, result.homerooms)
