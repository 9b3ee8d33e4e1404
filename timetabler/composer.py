"""
Weekly composition: Group A, then Group B on the same ledger, merged into
one result with fairness, metrics and a validation report.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .builder import GroupResult, build_group_a, build_group_b
from .exceptions import ConfigError
from .feasibility import FeasibilityReport
from .hooks import Hooks
from .layouts import layout_for
from .models import (
    Assignment, DayGroup, Role, Seat, SeatKind, TEACHING_ROLES, WeekConfig, class_id_key,
)
from .state import FairnessLedger, GenerationContext
from .validate import ValidationResult, check_config, validate_assignments
from .views import ScheduleViews, build_views

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


@dataclass
class FairnessReport:
    per_person: Dict[str, Dict[str, int]] = field(default_factory=dict)
    deviation: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_ledger(cls, ledger: FairnessLedger) -> "FairnessReport":
        per_person = ledger.snapshot()
        deviation = {}
        for key in [r.value for r in TEACHING_ROLES] + ["total"]:
            values = [row[key] for row in per_person.values()]
            deviation[key] = (max(values) - min(values)) if values else 0
        return cls(per_person=per_person, deviation=deviation)

    def to_dict(self) -> Dict[str, Any]:
        return {"perTeacher": self.per_person, "deviation": self.deviation}


@dataclass
class WeekResult:
    views: ScheduleViews
    groups: Dict[DayGroup, GroupResult]
    warnings: List[str]
    infos: List[str]
    feasibility: FeasibilityReport
    fairness: FairnessReport
    metrics: Dict[str, Any]
    validation: ValidationResult
    round_stats: List[Dict[str, Any]] = field(default_factory=list)
    consistency: Dict[str, float] = field(default_factory=dict)

    @property
    def assignments(self) -> Tuple[Assignment, ...]:
        return self.views.assignments

    @property
    def by_class(self):
        return self.views.by_class

    @property
    def by_person(self):
        return self.views.by_person

    @property
    def by_slot(self):
        return self.views.by_slot

    @property
    def homerooms(self) -> Dict[DayGroup, Dict[str, Seat]]:
        return {group: result.homerooms for group, result in self.groups.items()}

    def to_document(self) -> Dict[str, Any]:
        """JSON-safe snapshot for storage."""
        return {
            "version": DOCUMENT_VERSION,
            "assignments": [a.to_dict() for a in self.assignments],
            "homerooms": {
                group.value: {cid: seat.label for cid, seat in rooms.items()}
                for group, rooms in self.homerooms.items()
            },
            "warnings": list(self.warnings),
            "infos": list(self.infos),
            "feasibility": self.feasibility.to_dict(),
            "fairness": self.fairness.to_dict(),
            "metrics": dict(self.metrics),
            "validation": self.validation.to_dict(),
            "roundStats": list(self.round_stats),
            "consistency": dict(self.consistency),
        }


def assignments_from_document(document: Mapping[str, Any]) -> List[Assignment]:
    return [Assignment.from_dict(row) for row in document.get("assignments", [])]


def homerooms_from_document(document: Mapping[str, Any]) -> Dict[DayGroup, Dict[str, Seat]]:
    """Rebuild homeroom seats; labels starting with H- are placeholders."""
    out: Dict[DayGroup, Dict[str, Seat]] = {}
    for group_key, rooms in (document.get("homerooms") or {}).items():
        group = DayGroup.parse(group_key)
        out[group] = {
            cid: Seat.synthetic(label) if label == f"H-{cid}" else Seat.real(label)
            for cid, label in rooms.items()
        }
    return out


# ---------------------------------------------------------------------------
# Supplementary statistics
# ---------------------------------------------------------------------------

def round_statistics(groups: Mapping[DayGroup, GroupResult]) -> List[Dict[str, Any]]:
    """Per group and round: class count and assigned/unassigned slots per role."""
    stats = []
    for group in sorted(groups, key=lambda g: g.value):
        result = groups[group]
        for round_no in layout_for(group).round_numbers:
            rows = [a for a in result.assignments if a.round == round_no]
            roles = {}
            for role in list(TEACHING_ROLES) + [Role.EXAM]:
                picked = [a for a in rows if a.role is role]
                roles[role.value] = {
                    "assigned": sum(1 for a in picked if a.seat.kind is not SeatKind.UNASSIGNED),
                    "unassigned": sum(1 for a in picked if a.seat.kind is SeatKind.UNASSIGNED),
                }
            stats.append({
                "group": group.value,
                "round": round_no,
                "classes": len(result.class_ids.get(round_no, [])),
                "roles": roles,
            })
    return stats


def consistency_by_class(assignments: Tuple[Assignment, ...]) -> Dict[str, float]:
    """
    Share of a class's days that follow its most common daily role pattern.
    Keyed "<group>:<classId>".
    """
    patterns: Dict[str, Dict[Any, List[Assignment]]] = {}
    for a in assignments:
        if a.role is Role.EXAM:
            continue
        key = f"{a.group.value}:{a.class_id}"
        patterns.setdefault(key, {}).setdefault(a.day, []).append(a)

    scores = {}
    for key in sorted(patterns, key=lambda k: (k[0], class_id_key(k.split(":", 1)[1]))):
        days = patterns[key]
        daily = [tuple(a.role for a in sorted(rows, key=lambda a: a.period)) for rows in days.values()]
        most_common = Counter(daily).most_common(1)[0][1]
        scores[key] = round(most_common / len(daily), 4)
    return scores


def _metrics(assignments: Tuple[Assignment, ...], warnings: List[str], started: float,
             views: ScheduleViews, consistency: Dict[str, float]) -> Dict[str, Any]:
    unassigned = sum(1 for a in assignments if a.seat.kind is SeatKind.UNASSIGNED)
    placeholders = sum(1 for a in assignments if a.seat.kind is SeatKind.SYNTHETIC)
    score = round(sum(consistency.values()) / len(consistency), 4) if consistency else 1.0
    return {
        "generationTimeMs": round((time.perf_counter() - started) * 1000, 3),
        "totalAssignments": len(assignments),
        "assignedCount": len(assignments) - unassigned - placeholders,
        "unassignedCount": unassigned,
        "placeholderCount": placeholders,
        "examCount": sum(1 for a in assignments if a.role is Role.EXAM),
        "warningsCount": len(warnings),
        "teachersCount": len(views.by_person),
        "classesCount": len({(a.group, a.class_id) for a in assignments}),
        "consistencyScore": score,
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def generate_week(config: WeekConfig, hooks: Optional[Hooks] = None) -> WeekResult:
    """
    Generate one week. Group A always runs before Group B because both
    share the fairness ledger and its tie-breaks.

    Raises ConfigError on malformed configuration; everything else
    (unassignable slots, infeasible capacity) comes back as warnings.
    """
    hooks = hooks or Hooks()
    started = time.perf_counter()

    problems = check_config(config)
    if problems:
        exc = ConfigError(problems)
        logger.info("configuration rejected: %s", exc)
        hooks.report_error(exc, {"stage": "config"})
        raise exc

    try:
        ctx = GenerationContext(config)
        group_a = build_group_a(ctx)
        group_b = build_group_b(ctx)

        groups = {DayGroup.A: group_a, DayGroup.B: group_b}
        views = build_views(group_a.assignments + group_b.assignments)
        warnings = group_a.warnings + group_b.warnings
        infos = group_a.infos + group_b.infos
        feasibility = FeasibilityReport(
            items=group_a.feasibility + group_b.feasibility,
            class_counts={g: dict(config.settings_for(g).round_class_counts) for g in DayGroup},
        )
        fairness = FairnessReport.from_ledger(ctx.ledger)
        consistency = consistency_by_class(views.assignments)
        validation = validate_assignments(
            views.assignments, config, {g: r.homerooms for g, r in groups.items()})
        metrics = _metrics(views.assignments, warnings, started, views, consistency)
    except Exception as exc:
        hooks.report_error(exc, {"stage": "generate"})
        raise

    if not validation.is_valid:
        logger.warning("generated week failed validation: %d error(s)", len(validation.errors))
    logger.info("week generated: %d assignments, %d unassigned, %d warnings in %.1f ms",
                metrics["totalAssignments"], metrics["unassignedCount"],
                len(warnings), metrics["generationTimeMs"])

    result = WeekResult(
        views=views,
        groups=groups,
        warnings=warnings,
        infos=infos,
        feasibility=feasibility,
        fairness=fairness,
        metrics=metrics,
        validation=validation,
        round_stats=round_statistics(groups),
        consistency=consistency,
    )
    hooks.record_metrics(metrics, {"component": "generate_week"})
    return result
