"""
Read-only views over a set of assignments: by class, by person, by slot.

Assignments are collected in a ViewAccumulator and frozen once with
finalize(); callers only ever see sorted tuples behind MappingProxyType.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

from .models import Assignment, Day, Slot, class_id_key, name_key


def _by_period(a: Assignment):
    return (a.period, 0 if a.exam_slot else 1, class_id_key(a.class_id))


@dataclass(frozen=True)
class ScheduleViews:
    assignments: Tuple[Assignment, ...]
    by_class: Mapping[str, Mapping[Day, Tuple[Assignment, ...]]]
    by_person: Mapping[str, Mapping[Day, Tuple[Assignment, ...]]]
    by_slot: Mapping[Tuple[Day, Slot], Tuple[Assignment, ...]]

    def classes(self) -> List[str]:
        return list(self.by_class)

    def people(self) -> List[str]:
        return list(self.by_person)


class ViewAccumulator:
    def __init__(self):
        self._items: List[Assignment] = []
        self._finalized = False

    def add(self, assignment: Assignment) -> None:
        if self._finalized:
            raise RuntimeError("views already finalized")
        self._items.append(assignment)

    def extend(self, assignments: Iterable[Assignment]) -> None:
        for a in assignments:
            self.add(a)

    def finalize(self) -> ScheduleViews:
        self._finalized = True
        ordered = tuple(sorted(self._items, key=lambda a: a.sort_key()))

        by_class: Dict[str, Dict[Day, List[Assignment]]] = {}
        by_person: Dict[str, Dict[Day, List[Assignment]]] = {}
        by_slot: Dict[Tuple[Day, Slot], List[Assignment]] = {}
        for a in ordered:
            by_class.setdefault(a.class_id, {}).setdefault(a.day, []).append(a)
            if a.seat.is_real:
                by_person.setdefault(a.seat.name, {}).setdefault(a.day, []).append(a)
            by_slot.setdefault((a.day, a.slot), []).append(a)

        return ScheduleViews(
            assignments=ordered,
            by_class=_freeze_nested(by_class, sorted(by_class, key=class_id_key)),
            by_person=_freeze_nested(by_person, sorted(by_person, key=name_key)),
            by_slot=MappingProxyType({
                key: tuple(sorted(rows, key=lambda a: class_id_key(a.class_id)))
                for key, rows in sorted(by_slot.items(), key=lambda kv: _slot_order(kv[0]))
            }),
        )


def build_views(assignments: Iterable[Assignment]) -> ScheduleViews:
    acc = ViewAccumulator()
    acc.extend(assignments)
    return acc.finalize()


def _slot_order(key: Tuple[Day, Slot]):
    day, slot = key
    if isinstance(slot, str):
        return (day.order, 0, slot)
    return (day.order, 1, f"{slot:03d}")


def _freeze_nested(data: Dict[str, Dict[Day, List[Assignment]]],
                   order: List[str]) -> Mapping[str, Mapping[Day, Tuple[Assignment, ...]]]:
    frozen = {}
    for key in order:
        days = data[key]
        frozen[key] = MappingProxyType({
            day: tuple(sorted(days[day], key=_by_period))
            for day in sorted(days, key=lambda d: d.order)
        })
    return MappingProxyType(frozen)
