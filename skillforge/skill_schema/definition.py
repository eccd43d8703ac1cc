"""
Skill Definitions - Static configuration for a skill.

A SkillDefinition describes:
- Identity (id, display name, description, icon)
- The leveling curve (kind + parameters)
- The ordered catalog of actions the skill can perform

Definitions are immutable. All mutable progress lives in SkillState,
owned by the SkillEngine built from the definition.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CurveKind(Enum):
    """Leveling curve shapes."""
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    CUSTOM = "custom"  # Delegated to the skill's behavior


class RequirementKind(Enum):
    """What a requirement checks."""
    SKILL_LEVEL = "skill-level"
    PLAYER_LEVEL = "player-level"
    ITEM = "item"
    GOLD = "gold"
    QUEST = "quest"


class RewardKind(Enum):
    """What a reward grants."""
    EXPERIENCE = "experience"
    ITEM = "item"
    GOLD = "gold"


@dataclass(frozen=True)
class ActionRequirement:
    """
    A precondition gating an action or a skill unlock.

    Examples:
    - ActionRequirement.skill_level("woodcutting", 10)
    - ActionRequirement.item("tool_bronze_hatchet")
    - ActionRequirement.quest("tutorial_complete")
    """
    kind: RequirementKind
    target: str = ""
    amount: int = 1

    @classmethod
    def skill_level(cls, skill_id: str, level: int) -> ActionRequirement:
        return cls(kind=RequirementKind.SKILL_LEVEL, target=skill_id, amount=level)

    @classmethod
    def player_level(cls, level: int) -> ActionRequirement:
        return cls(kind=RequirementKind.PLAYER_LEVEL, amount=level)

    @classmethod
    def item(cls, item_id: str, amount: int = 1) -> ActionRequirement:
        return cls(kind=RequirementKind.ITEM, target=item_id, amount=amount)

    @classmethod
    def gold(cls, amount: int) -> ActionRequirement:
        return cls(kind=RequirementKind.GOLD, amount=amount)

    @classmethod
    def quest(cls, quest_id: str) -> ActionRequirement:
        return cls(kind=RequirementKind.QUEST, target=quest_id, amount=1)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "target": self.target, "amount": self.amount}


@dataclass(frozen=True)
class ActionReward:
    """
    A reward granted by a successful action.

    `chance` is an independent drop probability in [0, 1];
    None means the reward is always granted.
    """
    kind: RewardKind
    target: str
    amount: int = 1
    chance: float | None = None

    @classmethod
    def experience(cls, skill_id: str, amount: int) -> ActionReward:
        return cls(kind=RewardKind.EXPERIENCE, target=skill_id, amount=amount)

    @classmethod
    def item(cls, item_id: str, amount: int = 1, chance: float | None = None) -> ActionReward:
        return cls(kind=RewardKind.ITEM, target=item_id, amount=amount, chance=chance)

    @classmethod
    def gold(cls, amount: int, chance: float | None = None) -> ActionReward:
        return cls(kind=RewardKind.GOLD, target="gold", amount=amount, chance=chance)

    def with_amount(self, amount: int) -> ActionReward:
        """Return a copy carrying a resolved amount."""
        return ActionReward(kind=self.kind, target=self.target, amount=amount, chance=self.chance)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "target": self.target,
            "amount": self.amount,
        }
        if self.chance is not None:
            data["chance"] = self.chance
        return data


@dataclass(frozen=True)
class SkillAction:
    """
    A timed, randomized task a skill can attempt.

    base_time is in milliseconds. level_scaling is the fractional
    speed-up per level above 1 (duration never drops below 10%).
    """
    id: str
    name: str
    description: str = ""
    requirements: tuple[ActionRequirement, ...] = ()
    rewards: tuple[ActionReward, ...] = ()
    base_time: int = 1000
    level_scaling: float = 0.0
    icon: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "requirements": [r.to_dict() for r in self.requirements],
            "rewards": [r.to_dict() for r in self.rewards],
            "base_time": self.base_time,
            "level_scaling": self.level_scaling,
            "icon": self.icon,
        }


@dataclass(frozen=True)
class SkillDefinition:
    """
    Immutable configuration for one skill.
    """
    id: str
    name: str
    description: str = ""
    icon: str = ""
    max_level: int = 99
    curve: CurveKind = CurveKind.EXPONENTIAL
    base_experience: int = 100
    experience_multiplier: float = 1.1
    actions: tuple[SkillAction, ...] = ()

    def get_action(self, action_id: str) -> SkillAction | None:
        """Get an action by ID."""
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    @property
    def action_ids(self) -> list[str]:
        return [action.id for action in self.actions]

    def to_dict(self) -> dict[str, Any]:
        """Config snapshot included in engine save payloads."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "max_level": self.max_level,
            "curve": self.curve.value,
            "base_experience": self.base_experience,
            "experience_multiplier": self.experience_multiplier,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass
class SkillDetails:
    """
    Display metadata bound to a registration.

    Kept separate from SkillDefinition so hosts can relabel a skill
    without touching its mechanics.
    """
    id: str
    name: str
    description: str = ""
    icon: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_definition(cls, definition: SkillDefinition) -> SkillDetails:
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            icon=definition.icon,
        )
