"""
Day-group builders.

build_group_a() fills Mon/Wed/Fri, build_group_b() fills Tue/Thu. Both use
the same driver: homerooms once per group, then for every day the exam
slots followed by each round's rotated role plans.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .exams import resolve_proctors
from .feasibility import FeasibilityItem, analyze_group
from .homerooms import resolve_homerooms
from .layouts import GROUP_A, GROUP_B, GroupLayout, RoundTemplate
from .models import Assignment, Day, DayGroup, Role, Seat
from .picker import assign_slot
from .rotation import role_plan
from .state import GenerationContext
from .views import ScheduleViews, ViewAccumulator

logger = logging.getLogger(__name__)

# H first so a K pick never takes a teacher whose own class needs them in
# that period; F before K because the foreign pool is the tight one.
PLACEMENT_ORDER = (Role.H, Role.F, Role.K)


@dataclass
class GroupResult:
    group: DayGroup
    homerooms: Dict[str, Seat]
    class_ids: Dict[int, List[str]]
    views: ScheduleViews
    warnings: List[str] = field(default_factory=list)
    infos: List[str] = field(default_factory=list)
    feasibility: List[FeasibilityItem] = field(default_factory=list)

    @property
    def assignments(self) -> Tuple[Assignment, ...]:
        return self.views.assignments


def _place_round(template: RoundTemplate, class_ids: List[str], plans: Dict[str, Tuple[Role, ...]],
                 day: Day, day_index: int, layout: GroupLayout, homerooms: Dict[str, Seat],
                 ctx: GenerationContext, acc: ViewAccumulator, warnings: List[str]) -> None:
    cells = []
    for cid in class_ids:
        plan = plans[cid]
        for pos, period in template.positions_for_day(day_index):
            cells.append((cid, plan[pos], period))

    for role in PLACEMENT_ORDER:
        for cid, cell_role, period in cells:
            if cell_role is not role:
                continue
            assignment, warning = assign_slot(role, cid, template.round, homerooms, day, period,
                                              layout.period_times[period], ctx)
            acc.add(assignment)
            if warning:
                warnings.append(warning)


def build_group(layout: GroupLayout, ctx: GenerationContext) -> GroupResult:
    config = ctx.config
    settings = config.settings_for(layout.group)
    rounds = settings.class_ids(layout.round_numbers)
    all_ids = [cid for r in layout.round_numbers for cid in rounds[r]]

    homerooms, warnings = resolve_homerooms(layout.group, all_ids, settings, config)
    feasibility = analyze_group(layout, settings.round_class_counts, config.pools)

    plans: Dict[str, Tuple[Role, ...]] = {}
    for round_no in layout.round_numbers:
        template = layout.rounds[round_no]
        for idx, cid in enumerate(rounds[round_no]):
            plans[cid] = role_plan(template, idx, config.pools)
            logger.debug("group %s %s plan %s", layout.group.value, cid,
                         "".join(r.value for r in plans[cid]))

    acc = ViewAccumulator()
    infos: List[str] = []
    for day_index, day in enumerate(layout.group.days):
        for slot in layout.exam_slots:
            class_rounds = [(cid, r) for r in slot.rounds for cid in rounds.get(r, [])]
            exams, exam_warnings, exam_infos = resolve_proctors(slot, day, class_rounds, homerooms, ctx)
            acc.extend(exams)
            warnings.extend(exam_warnings)
            infos.extend(exam_infos)
        for round_no in layout.round_numbers:
            _place_round(layout.rounds[round_no], rounds[round_no], plans, day, day_index,
                         layout, homerooms, ctx, acc, warnings)

    views = acc.finalize()
    logger.info("group %s built: %d classes, %d assignments, %d warnings",
                layout.group.value, len(all_ids), len(views.assignments), len(warnings))
    return GroupResult(
        group=layout.group,
        homerooms=homerooms,
        class_ids=rounds,
        views=views,
        warnings=warnings,
        infos=infos,
        feasibility=feasibility,
    )


def build_group_a(ctx: GenerationContext) -> GroupResult:
    """Mon / Wed / Fri: four rounds, weekly 6-slot patterns, three exam slots."""
    return build_group(GROUP_A, ctx)


def build_group_b(ctx: GenerationContext) -> GroupResult:
    """Tue / Thu: two rounds, daily 3-slot templates, one shared exam slot."""
    return build_group(GROUP_B, ctx)
