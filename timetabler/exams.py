"""
Exam proctor resolution.

Every class sitting an exam slot takes its exam at the same time, so a
teacher who is homeroom for several of those classes can proctor only one.
The first class keeps its homeroom teacher; the rest fall back to another
homeroom teacher, then to the local pool.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from .homerooms import homeroom_people
from .layouts import ExamSlot
from .models import Assignment, Day, Role, Seat, name_key
from .state import GenerationContext

logger = logging.getLogger(__name__)


def _fallbacks(keeper: str, homerooms: Dict[str, Seat], ctx: GenerationContext) -> List[str]:
    others = [p for p in homeroom_people(homerooms) if p != keeper]
    local = sorted(ctx.config.pools.local, key=name_key)
    return list(dict.fromkeys(others + [p for p in local if p != keeper]))


def _free(person: str, day: Day, slot: ExamSlot, ctx: GenerationContext) -> bool:
    return (ctx.busy.can_use(day, slot.key, person)
            and not ctx.config.is_unavailable(person, day, slot.key))


def resolve_proctors(slot: ExamSlot, day: Day, class_rounds: Sequence[Tuple[str, int]],
                     homerooms: Dict[str, Seat],
                     ctx: GenerationContext) -> Tuple[List[Assignment], List[str], List[str]]:
    """
    Place one EXAM assignment per class for this slot on this day.
    Returns (assignments, warnings, infos).
    """
    seats: Dict[str, Seat] = {}
    pending: List[str] = []

    # keepers first so that substitutes never take a homeroom teacher
    # away from their own class
    for cid, _ in class_rounds:
        own = homerooms[cid]
        if not own.is_real:
            seats[cid] = own
        elif _free(own.name, day, slot, ctx):
            ctx.busy.occupy(day, slot.key, own.name)
            ctx.ledger.bump(own.name, Role.EXAM)
            seats[cid] = own
        else:
            pending.append(cid)

    warnings: List[str] = []
    infos: List[str] = []
    for cid in pending:
        keeper = homerooms[cid].name
        sub = next((p for p in _fallbacks(keeper, homerooms, ctx) if _free(p, day, slot, ctx)), None)
        if sub is None:
            seats[cid] = Seat.unassigned()
            warnings.append(f"[EXAM {day.value} {slot.key}] {cid} no proctor available (homeroom conflict)")
            continue
        ctx.busy.occupy(day, slot.key, sub)
        ctx.ledger.bump(sub, Role.EXAM)
        seats[cid] = Seat.real(sub)
        infos.append(f"[EXAM {day.value} {slot.key}] {cid} proctored by {sub} instead of {keeper}")
        logger.debug("exam %s %s: %s substitutes for %s", day.value, cid, sub, keeper)

    assignments = [
        Assignment(day=day, class_id=cid, round=round_no, period=slot.anchor_period,
                   time=slot.time, role=Role.EXAM, seat=seats[cid], exam_slot=slot.key)
        for cid, round_no in class_rounds
    ]
    return assignments, warnings, infos
