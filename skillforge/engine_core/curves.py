"""
Experience Curves - Experience thresholds per level.

experience_for_level(L) is the experience needed to advance from
level L-1 to level L. A skill at level L therefore needs
experience_for_level(L + 1) to reach the next level.

    linear:       base * L
    exponential:  floor(base * multiplier ** (L - 1))
    custom:       supplied by the skill's behavior
"""

from __future__ import annotations
from typing import Callable
import math

from ..skill_schema.definition import SkillDefinition, CurveKind

CustomCurve = Callable[[int], int]


def experience_for_level(
    definition: SkillDefinition,
    level: int,
    custom: CustomCurve | None = None,
) -> int:
    """Experience required to reach `level` from the level below it."""
    if level <= 1:
        return definition.base_experience

    if definition.curve == CurveKind.LINEAR:
        return definition.base_experience * level
    if definition.curve == CurveKind.EXPONENTIAL:
        return math.floor(
            definition.base_experience * definition.experience_multiplier ** (level - 1)
        )
    if definition.curve == CurveKind.CUSTOM and custom is not None:
        return int(custom(level))

    return definition.base_experience * level


def total_experience_for_level(
    definition: SkillDefinition,
    level: int,
    custom: CustomCurve | None = None,
) -> int:
    """Cumulative experience needed to go from level 1 to `level`."""
    level = min(level, definition.max_level)
    return sum(experience_for_level(definition, lvl, custom) for lvl in range(2, level + 1))


def level_for_total_experience(
    definition: SkillDefinition,
    total: int,
    custom: CustomCurve | None = None,
) -> int:
    """Highest level reachable with `total` cumulative experience."""
    level = 1
    remaining = total
    while level < definition.max_level:
        needed = experience_for_level(definition, level + 1, custom)
        if remaining < needed:
            break
        remaining -= needed
        level += 1
    return level
