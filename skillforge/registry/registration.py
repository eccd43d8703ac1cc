"""Skill registration - One engine bound into a registry."""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.engine import SkillEngine
from ..skill_schema.definition import ActionRequirement, SkillDetails


@dataclass
class SkillRegistration:
    """
    Binds an engine to display metadata, its unlock gate, and a
    display position derived from the registry's unlock order.
    """
    engine: SkillEngine
    details: SkillDetails
    position: int
    is_unlocked: bool = False
    unlock_requirements: list[ActionRequirement] = field(default_factory=list)

    @property
    def skill_id(self) -> str:
        return self.engine.skill_id

    @property
    def level(self) -> int:
        return self.engine.level

    def reset_unlock(self) -> None:
        """Reapply the original gate: ungated skills start unlocked."""
        self.is_unlocked = not self.unlock_requirements
