"""Woodcutting skill definition."""

from __future__ import annotations

from ...skill_schema.definition import CurveKind, SkillDefinition, SkillDetails
from .data import SKILL_ID, WOODCUTTING_ACTIONS

NAME = "Woodcutting"
DESCRIPTION = "Chop down trees to gather logs and gain experience"
ICON = "axe"


def create_woodcutting_definition() -> SkillDefinition:
    return SkillDefinition(
        id=SKILL_ID,
        name=NAME,
        description=DESCRIPTION,
        icon=ICON,
        max_level=99,
        curve=CurveKind.EXPONENTIAL,
        base_experience=100,
        experience_multiplier=1.1,
        actions=WOODCUTTING_ACTIONS,
    )


def create_woodcutting_details() -> SkillDetails:
    return SkillDetails(id=SKILL_ID, name=NAME, description=DESCRIPTION, icon=ICON)
