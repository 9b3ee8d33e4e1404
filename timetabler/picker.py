"""
Role candidate selection for a single (day, period) teaching slot.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .models import Assignment, Day, Role, Seat, name_key
from .state import GenerationContext

logger = logging.getLogger(__name__)


def rank_candidates(role: Role, class_id: str, homerooms: Dict[str, Seat],
                    day: Day, period: int, ctx: GenerationContext) -> List[str]:
    """Eligible people for a K or F slot, best first."""
    config = ctx.config
    options = config.options
    ledger = ctx.ledger

    if role is Role.K:
        own = homerooms.get(class_id)
        own_h = own.name if own is not None and own.is_real else None
        holders = {s.name for s in homerooms.values() if s.is_real}
        pool = list(config.pools.local)
        if options.include_h_in_k:
            pool.extend(sorted(holders, key=name_key))
        if options.disallow_own_h_as_k and own_h is not None:
            pool = [p for p in pool if p != own_h]
        demote_own = options.prefer_other_h_for_k and not options.disallow_own_h_as_k

        def key(p):
            return (demote_own and p == own_h, ledger.count(p, Role.K), ledger.total(p), name_key(p))
    elif role is Role.F:
        pool = list(config.pools.foreign)

        def key(p):
            return (ledger.count(p, Role.F), ledger.total(p), name_key(p))
    elif role is Role.H or role is Role.EXAM:
        raise ValueError(f"role {role.value} has a fixed candidate, nothing to rank")
    else:
        raise ValueError(f"unknown role {role!r}")

    eligible = [
        p for p in dict.fromkeys(pool)
        if not config.is_unavailable(p, day, period) and ctx.busy.can_use(day, period, p)
        and not ctx.teaches_language(day, class_id, p)
    ]
    return sorted(eligible, key=key)


def pick_candidate(role: Role, class_id: str, homerooms: Dict[str, Seat],
                   day: Day, period: int, ctx: GenerationContext) -> Optional[Seat]:
    """The seat to place for this slot, or None when nobody qualifies."""
    if role is Role.H:
        own = homerooms[class_id]
        if not own.is_real:
            return own
        if ctx.config.is_unavailable(own.name, day, period):
            return None
        if not ctx.busy.can_use(day, period, own.name):
            return None
        return own
    ranked = rank_candidates(role, class_id, homerooms, day, period, ctx)
    return Seat.real(ranked[0]) if ranked else None


def assign_slot(role: Role, class_id: str, round_no: int, homerooms: Dict[str, Seat],
                day: Day, period: int, time: str,
                ctx: GenerationContext) -> Tuple[Assignment, Optional[str]]:
    """Pick, commit and record one teaching slot. Returns (assignment, warning)."""
    seat = pick_candidate(role, class_id, homerooms, day, period, ctx)
    warning = None
    if seat is None:
        seat = Seat.unassigned()
        warning = f"[{day.value} {period}] {class_id} R{round_no} {role.value} assignment failed"
        logger.debug("no candidate: %s", warning)
    elif seat.is_real:
        ctx.busy.occupy(day, period, seat.name)
        ctx.ledger.bump(seat.name, role)
        if role is not Role.H:
            ctx.language_seats.add((day, class_id, seat.name))
    assignment = Assignment(day=day, class_id=class_id, round=round_no, period=period,
                            time=time, role=role, seat=seat)
    return assignment, warning
