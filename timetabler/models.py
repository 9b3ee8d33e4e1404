"""
Data models for the Timetabler.
Everything here is plain data: configuration consumed by the engine and the
assignment records it produces.
"""

import enum
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

# A slot inside a day: a period number for teaching slots, or an exam slot key.
Slot = Union[int, str]

EXAM_TOKEN = "EXAM"
UNASSIGNED_LABEL = "(unassigned)"


class Day(enum.Enum):
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"

    @classmethod
    def parse(cls, value: str) -> "Day":
        text = str(value).strip()
        for day in cls:
            if text.lower() in (day.value.lower(), day.name.lower()):
                return day
        raise ValueError(f"unknown day {value!r}")

    @property
    def order(self) -> int:
        return list(Day).index(self)


class DayGroup(enum.Enum):
    A = "A"   # Mon / Wed / Fri, four rounds
    B = "B"   # Tue / Thu, two rounds

    @property
    def days(self) -> Tuple[Day, ...]:
        if self is DayGroup.A:
            return (Day.MON, Day.WED, Day.FRI)
        return (Day.TUE, Day.THU)

    @classmethod
    def of(cls, day: Day) -> "DayGroup":
        return cls.A if day in cls.A.days else cls.B

    @classmethod
    def parse(cls, value: str) -> "DayGroup":
        text = str(value).strip().upper()
        aliases = {"A": cls.A, "MWF": cls.A, "B": cls.B, "TT": cls.B}
        if text not in aliases:
            raise ValueError(f"unknown day-group {value!r}")
        return aliases[text]


class Role(enum.Enum):
    H = "H"         # homeroom
    K = "K"         # local-language
    F = "F"         # foreign-language
    EXAM = "EXAM"   # proctor


TEACHING_ROLES = (Role.H, Role.K, Role.F)


class SeatKind(enum.Enum):
    REAL = "real"
    UNASSIGNED = "unassigned"
    SYNTHETIC = "synthetic"


@dataclass(frozen=True)
class Seat:
    """Who fills an assignment: a real person, nobody, or a placeholder id."""
    kind: SeatKind
    name: Optional[str] = None

    @classmethod
    def real(cls, name: str) -> "Seat":
        return cls(SeatKind.REAL, name)

    @classmethod
    def unassigned(cls) -> "Seat":
        return cls(SeatKind.UNASSIGNED, None)

    @classmethod
    def synthetic(cls, placeholder_id: str) -> "Seat":
        return cls(SeatKind.SYNTHETIC, placeholder_id)

    @property
    def is_real(self) -> bool:
        return self.kind is SeatKind.REAL

    @property
    def person(self) -> Optional[str]:
        return self.name if self.kind is SeatKind.REAL else None

    @property
    def label(self) -> str:
        if self.kind is SeatKind.UNASSIGNED:
            return UNASSIGNED_LABEL
        return self.name or ""


def name_key(name: str) -> Tuple[str, str]:
    """Deterministic name ordering; Hangul sorts in dictionary order."""
    return (unicodedata.normalize("NFKC", name).casefold(), name)


def class_ids_for_round(round_no: int, count: int) -> List[str]:
    return [f"R{round_no}C{i}" for i in range(1, count + 1)]


def parse_unavailable(token: str) -> Tuple[Day, Slot]:
    """Parse "Tue|4" or "Mon|EXAM" into (Day, slot)."""
    parts = str(token).split("|")
    if len(parts) != 2:
        raise ValueError(f"unavailable entry {token!r} is not '<Day>|<period>'")
    day = Day.parse(parts[0])
    raw = parts[1].strip()
    if raw.upper() == EXAM_TOKEN:
        return day, EXAM_TOKEN
    if not raw.isdigit() or int(raw) < 1:
        raise ValueError(f"unavailable entry {token!r} has a bad period")
    return day, int(raw)


def format_unavailable(entry: Tuple[Day, Slot]) -> str:
    day, slot = entry
    return f"{day.value}|{slot}"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class TeacherConstraint:
    """Per-person availability and homeroom limits."""
    unavailable: FrozenSet[Tuple[Day, Slot]] = frozenset()
    homeroom_disabled: bool = False
    max_homerooms: Optional[int] = None   # None = unbounded

    def blocks(self, day: Day, slot: Slot) -> bool:
        if isinstance(slot, str):
            return (day, EXAM_TOKEN) in self.unavailable
        return (day, slot) in self.unavailable


@dataclass
class Pools:
    local: List[str] = field(default_factory=list)     # H and K eligible
    foreign: List[str] = field(default_factory=list)   # F eligible

    def everyone(self) -> List[str]:
        seen = dict.fromkeys(self.local)
        seen.update(dict.fromkeys(self.foreign))
        return list(seen)


@dataclass
class PolicyOptions:
    include_h_in_k: bool = True
    prefer_other_h_for_k: bool = True
    disallow_own_h_as_k: bool = False


@dataclass
class GroupSettings:
    round_class_counts: Dict[int, int] = field(default_factory=dict)
    fixed_homerooms: Dict[str, str] = field(default_factory=dict)   # class id -> person

    def class_ids(self, rounds: Tuple[int, ...]) -> Dict[int, List[str]]:
        return {r: class_ids_for_round(r, self.round_class_counts.get(r, 0)) for r in rounds}


@dataclass
class WeekConfig:
    """Everything one weekly generation needs."""
    pools: Pools
    constraints: Dict[str, TeacherConstraint] = field(default_factory=dict)
    groups: Dict[DayGroup, GroupSettings] = field(default_factory=dict)
    options: PolicyOptions = field(default_factory=PolicyOptions)

    def constraint_for(self, person: str) -> TeacherConstraint:
        return self.constraints.get(person) or TeacherConstraint()

    def settings_for(self, group: DayGroup) -> GroupSettings:
        return self.groups.get(group) or GroupSettings()

    def is_unavailable(self, person: str, day: Day, slot: Slot) -> bool:
        constraint = self.constraints.get(person)
        return constraint is not None and constraint.blocks(day, slot)


# ---------------------------------------------------------------------------
# Output records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Assignment:
    day: Day
    class_id: str
    round: int
    period: int
    time: str
    role: Role
    seat: Seat
    exam_slot: Optional[str] = None   # exam slot key for EXAM rows

    @property
    def person(self) -> Optional[str]:
        return self.seat.person

    @property
    def slot(self) -> Slot:
        return self.exam_slot if self.exam_slot is not None else self.period

    @property
    def group(self) -> DayGroup:
        return DayGroup.of(self.day)

    def sort_key(self) -> Tuple[Any, ...]:
        # exams sort just ahead of the period they are anchored to
        return (self.day.order, self.class_id_key(), self.period,
                0 if self.role is Role.EXAM else 1)

    def class_id_key(self) -> Tuple[int, int, str]:
        return class_id_key(self.class_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day.value,
            "classId": self.class_id,
            "round": self.round,
            "period": self.period,
            "time": self.time,
            "role": self.role.value,
            "teacher": self.seat.label,
            "seat": self.seat.kind.value,
            "examSlot": self.exam_slot,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assignment":
        kind = SeatKind(data.get("seat", SeatKind.REAL.value))
        teacher = data.get("teacher")
        if kind is SeatKind.UNASSIGNED:
            seat = Seat.unassigned()
        elif kind is SeatKind.SYNTHETIC:
            seat = Seat.synthetic(str(teacher))
        else:
            seat = Seat.real(str(teacher))
        return cls(
            day=Day.parse(data["day"]),
            class_id=str(data["classId"]),
            round=int(data["round"]),
            period=int(data["period"]),
            time=str(data.get("time") or ""),
            role=Role(data["role"]),
            seat=seat,
            exam_slot=data.get("examSlot"),
        )


def class_id_key(class_id: str) -> Tuple[int, int, str]:
    """Sort R2C10 after R2C9."""
    body = class_id[1:] if class_id.startswith("R") else class_id
    round_part, _, index_part = body.partition("C")
    if round_part.isdigit() and index_part.isdigit():
        return (int(round_part), int(index_part), class_id)
    return (10 ** 6, 10 ** 6, class_id)
