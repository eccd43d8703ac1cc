"""
Action Resolver - Pure computation for one action attempt.

Given (action, current level, context modifiers) the resolver computes:

    duration   floor(base_time * max(0.1, 1 - (level-1)*level_scaling) * duration_mod)
    success    clamp((0.5 + min(0.4, (level - required)*0.01)) * success_mod, 0.05, 0.95)
    critical   clamp((0.05 + level*0.001) * critical_mod, 0, 0.25)
    rewards    drop roll (if chance set) -> critical multiplier -> amount hook -> drop <= 0
    experience own-skill experience rewards, overlevel penalty
               min(0.5, (level - required)*0.02), then critical multiplier, floored

All randomness comes from the injected RandomSource, in a fixed order:
success roll, critical roll (only on success), then one drop roll per
reward that carries a chance, in catalog order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import math

from ..skill_schema.definition import (
    ActionReward,
    RequirementKind,
    RewardKind,
    SkillAction,
)
from .rng import RandomSource

# (reward, amount after critical) -> final amount
RewardAdjuster = Callable[[ActionReward, int], int]

MIN_DURATION_FACTOR = 0.1
BASE_SUCCESS_CHANCE = 0.5
MAX_SUCCESS_BONUS = 0.4
SUCCESS_BONUS_PER_LEVEL = 0.01
MIN_SUCCESS_CHANCE = 0.05
MAX_SUCCESS_CHANCE = 0.95
BASE_CRITICAL_CHANCE = 0.05
CRITICAL_CHANCE_PER_LEVEL = 0.001
MAX_CRITICAL_CHANCE = 0.25
OVERLEVEL_PENALTY_PER_LEVEL = 0.02
MAX_OVERLEVEL_PENALTY = 0.5


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class Resolution:
    """Outcome of the rolls for one attempt."""
    success: bool
    critical: bool = False
    success_chance: float = 0.0
    critical_chance: float = 0.0
    rewards: list[ActionReward] = field(default_factory=list)
    experience: dict[str, int] = field(default_factory=dict)


class ActionResolver:
    """
    Computes and rolls action outcomes for one skill.

    Usage:
        resolver = ActionResolver("woodcutting", RandomSource(seed=1))
        duration = resolver.compute_duration(action, level=1)
        resolution = resolver.resolve(action, level=1)
    """

    def __init__(
        self,
        skill_id: str,
        rng: RandomSource | None = None,
        critical_multiplier: float = 2.0,
    ):
        self.skill_id = skill_id
        self.rng = rng or RandomSource()
        self.critical_multiplier = critical_multiplier

    def required_level_for(self, action: SkillAction) -> int:
        """The action's skill-level gate on this skill, or 1 if it has none."""
        for req in action.requirements:
            if req.kind == RequirementKind.SKILL_LEVEL and req.target == self.skill_id:
                return req.amount
        return 1

    # ========================================================================
    # Deterministic computations
    # ========================================================================

    def compute_duration(self, action: SkillAction, level: int, modifier: float = 1.0) -> int:
        factor = max(MIN_DURATION_FACTOR, 1 - (level - 1) * action.level_scaling)
        return max(0, math.floor(action.base_time * factor * modifier))

    def compute_success_chance(
        self,
        action: SkillAction,
        level: int,
        modifier: float = 1.0,
    ) -> float:
        diff = level - self.required_level_for(action)
        chance = BASE_SUCCESS_CHANCE + min(MAX_SUCCESS_BONUS, diff * SUCCESS_BONUS_PER_LEVEL)
        return clamp(chance * modifier, MIN_SUCCESS_CHANCE, MAX_SUCCESS_CHANCE)

    def compute_critical_chance(self, level: int, modifier: float = 1.0) -> float:
        chance = BASE_CRITICAL_CHANCE + level * CRITICAL_CHANCE_PER_LEVEL
        return clamp(chance * modifier, 0.0, MAX_CRITICAL_CHANCE)

    def compute_experience(
        self,
        action: SkillAction,
        level: int,
        critical: bool = False,
    ) -> dict[str, int]:
        """Experience this skill earns from a successful attempt."""
        own = [
            r for r in action.rewards
            if r.kind == RewardKind.EXPERIENCE and r.target == self.skill_id
        ]
        if not own:
            return {}

        diff = level - self.required_level_for(action)
        total = 0
        for reward in own:
            amount: float = reward.amount
            if diff > 0:
                amount *= 1 - min(MAX_OVERLEVEL_PENALTY, diff * OVERLEVEL_PENALTY_PER_LEVEL)
            if critical:
                amount *= self.critical_multiplier
            total += math.floor(amount)
        return {self.skill_id: total}

    # ========================================================================
    # Rolls
    # ========================================================================

    def compute_rewards(
        self,
        action: SkillAction,
        critical: bool = False,
        adjust: RewardAdjuster | None = None,
    ) -> list[ActionReward]:
        """Roll drops and resolve amounts. Consumes one roll per chance-bearing reward."""
        granted: list[ActionReward] = []
        for reward in action.rewards:
            if reward.chance is not None and not self.rng.chance(reward.chance):
                continue

            amount = reward.amount
            if critical:
                amount = math.floor(amount * self.critical_multiplier)
            if adjust is not None:
                amount = adjust(reward, amount)
            if amount <= 0:
                continue

            granted.append(reward.with_amount(amount))
        return granted

    def resolve(
        self,
        action: SkillAction,
        level: int,
        success_modifier: float = 1.0,
        critical_modifier: float = 1.0,
        adjust: Callable[[ActionReward, int, bool], int] | None = None,
    ) -> Resolution:
        """
        Roll one attempt.

        `adjust` receives (reward, amount, critical) and is typically the
        behavior's modify_reward_amount bound to an engine and context.
        """
        success_chance = self.compute_success_chance(action, level, success_modifier)
        if not self.rng.chance(success_chance):
            return Resolution(success=False, success_chance=success_chance)

        critical_chance = self.compute_critical_chance(level, critical_modifier)
        critical = self.rng.chance(critical_chance)

        reward_adjust: RewardAdjuster | None = None
        if adjust is not None:
            def reward_adjust(reward: ActionReward, amount: int) -> int:
                return adjust(reward, amount, critical)

        return Resolution(
            success=True,
            critical=critical,
            success_chance=success_chance,
            critical_chance=critical_chance,
            rewards=self.compute_rewards(action, critical, reward_adjust),
            experience=self.compute_experience(action, level, critical),
        )
