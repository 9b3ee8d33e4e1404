"""
Homeroom resolution: one owning teacher per class, per day-group.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import ConfigError
from .models import DayGroup, GroupSettings, Seat, WeekConfig, name_key

logger = logging.getLogger(__name__)


def pin_problems(group: DayGroup, settings: GroupSettings,
                 class_ids: Sequence[str], config: WeekConfig) -> List[str]:
    """Problems with the fixed homeroom pins of one day-group."""
    problems = []
    known = set(class_ids)
    local = set(config.pools.local)
    per_person: Dict[str, int] = {}
    for cid, person in settings.fixed_homerooms.items():
        where = f"group {group.value} pin {cid}->{person}"
        if cid not in known:
            problems.append(f"{where}: unknown class")
            continue
        if person not in local:
            problems.append(f"{where}: teacher is not in the local pool")
            continue
        constraint = config.constraint_for(person)
        if constraint.homeroom_disabled:
            problems.append(f"{where}: teacher has homerooms disabled")
            continue
        per_person[person] = per_person.get(person, 0) + 1
        cap = constraint.max_homerooms
        if cap is not None and per_person[person] > cap:
            problems.append(f"{where}: exceeds maxHomerooms={cap}")
    return problems


def resolve_homerooms(group: DayGroup, class_ids: Sequence[str],
                      settings: GroupSettings,
                      config: WeekConfig) -> Tuple[Dict[str, Seat], List[str]]:
    """
    Map every class of the day-group to a homeroom seat.

    Pins are applied first; the remaining classes go, in order, to the
    eligible teacher with the fewest homerooms so far (ties by name).
    When nobody is left under their cap the class gets a synthetic
    placeholder seat and a warning.

    maxHomerooms is counted within this day-group only; each group
    resolves its homerooms on its own.
    """
    problems = pin_problems(group, settings, class_ids, config)
    if problems:
        raise ConfigError(problems)

    homerooms: Dict[str, Seat] = {}
    current: Dict[str, int] = {}
    for cid, person in settings.fixed_homerooms.items():
        homerooms[cid] = Seat.real(person)
        current[person] = current.get(person, 0) + 1

    eligible = [p for p in config.pools.local if not config.constraint_for(p).homeroom_disabled]
    warnings: List[str] = []
    for cid in class_ids:
        if cid in homerooms:
            continue
        picked = _least_loaded(eligible, current, config)
        if picked is None:
            placeholder = f"H-{cid}"
            homerooms[cid] = Seat.synthetic(placeholder)
            warnings.append(
                f"[{group.value}] {cid} homeroom placeholder {placeholder} "
                f"(no eligible homeroom teacher)")
            logger.debug("group %s: no homeroom teacher left for %s", group.value, cid)
            continue
        homerooms[cid] = Seat.real(picked)
        current[picked] = current.get(picked, 0) + 1

    ordered = {cid: homerooms[cid] for cid in class_ids}
    return ordered, warnings


def _least_loaded(eligible: Sequence[str], current: Dict[str, int],
                  config: WeekConfig) -> Optional[str]:
    candidates = []
    for person in eligible:
        cap = config.constraint_for(person).max_homerooms
        if cap is None or current.get(person, 0) < cap:
            candidates.append(person)
    if not candidates:
        return None
    return min(candidates, key=lambda p: (current.get(p, 0), name_key(p)))


def homeroom_people(homerooms: Dict[str, Seat]) -> List[str]:
    """Distinct real homeroom teachers, in name order."""
    return sorted({s.name for s in homerooms.values() if s.is_real}, key=name_key)
