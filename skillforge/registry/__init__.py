"""Skill registry - registrations, unlock gating, catalog bootstrap."""

from .registration import SkillRegistration
from .registry import SkillRegistry
from .catalog import SkillCatalog, DEFAULT_BEHAVIORS

__all__ = [
    "SkillRegistration",
    "SkillRegistry",
    "SkillCatalog",
    "DEFAULT_BEHAVIORS",
]
