"""
Requirement Evaluation - Checks ActionRequirements against collaborators.

Used both by engines (action gating) and by the registry (skill unlock
gates). Skill levels are answered through a lookup callable so the same
evaluator works for a skill's own level and for cross-skill gates.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable
import logging

from ..collaborators import Collaborators
from ..skill_schema.definition import ActionRequirement, RequirementKind

logger = logging.getLogger(__name__)

SkillLevelLookup = Callable[[str], "int | None"]


def _no_skills(skill_id: str) -> int | None:
    return None


@dataclass
class RequirementEvaluator:
    """
    Evaluates requirements.

    Usage:
        evaluator = RequirementEvaluator(collaborators, skill_levels=registry.get_skill_level)
        evaluator.meets_all(action.requirements)
    """
    collaborators: Collaborators = field(default_factory=Collaborators)
    skill_levels: SkillLevelLookup = _no_skills

    def meets_all(self, requirements: Iterable[ActionRequirement]) -> bool:
        """True when every requirement holds (an empty list always holds)."""
        return all(self.meets(req) for req in requirements)

    def unmet(self, requirements: Iterable[ActionRequirement]) -> list[ActionRequirement]:
        """Requirements that currently fail."""
        return [req for req in requirements if not self.meets(req)]

    def meets(self, req: ActionRequirement) -> bool:
        handler = self._handlers().get(req.kind)
        if handler is None:
            logger.debug("Unknown requirement kind %s", req.kind)
            return False
        return handler(req)

    def _handlers(self) -> dict[RequirementKind, Callable[[ActionRequirement], bool]]:
        return {
            RequirementKind.SKILL_LEVEL: self._check_skill_level,
            RequirementKind.PLAYER_LEVEL: self._check_player_level,
            RequirementKind.ITEM: self._check_item,
            RequirementKind.GOLD: self._check_gold,
            RequirementKind.QUEST: self._check_quest,
        }

    def _check_skill_level(self, req: ActionRequirement) -> bool:
        level = self.skill_levels(req.target)
        if level is None:
            return False
        return level >= (req.amount or 1)

    def _check_player_level(self, req: ActionRequirement) -> bool:
        player = self.collaborators.player
        if player is None:
            return False
        return player.get_level() >= (req.amount or 1)

    def _check_item(self, req: ActionRequirement) -> bool:
        inventory = self.collaborators.inventory
        if inventory is None:
            return False
        return inventory.has_item(req.target, req.amount or 1)

    def _check_gold(self, req: ActionRequirement) -> bool:
        economy = self.collaborators.economy
        if economy is None:
            return False
        return economy.has_gold(req.amount or 0)

    def _check_quest(self, req: ActionRequirement) -> bool:
        quests = self.collaborators.quests
        if quests is None:
            return False
        return quests.has_completed_quest(req.target)
