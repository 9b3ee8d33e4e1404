"""
Phase rotation of round templates.

With C people able to fill a round's scarce role, classes 0..C-1 keep the
template as is, classes C..2C-1 shift it by one slot, and so on. Scarce
demand is spread round-robin over the round's periods without any search.
"""

from typing import Sequence, Tuple

from .layouts import RoundTemplate
from .models import Pools, Role


def phase_index(class_index: int, capacity: int) -> int:
    return class_index // max(1, capacity)


def rotate(pattern: Sequence[Role], shift: int) -> Tuple[Role, ...]:
    """Rotate left by shift slots."""
    if not pattern:
        return tuple()
    shift %= len(pattern)
    return tuple(pattern[shift:]) + tuple(pattern[:shift])


def scarce_capacity(template: RoundTemplate, pools: Pools) -> int:
    role = template.scarce_role
    if role is Role.F:
        return len(pools.foreign)
    if role is Role.K:
        return len(pools.local)
    raise ValueError(f"role {role.value} cannot be scarce")


def role_plan(template: RoundTemplate, class_index: int, pools: Pools) -> Tuple[Role, ...]:
    """The class's rotated pattern for the whole round."""
    phase = phase_index(class_index, scarce_capacity(template, pools))
    return rotate(template.pattern, phase)
