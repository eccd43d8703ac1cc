"""
Skill Behavior - The per-skill strategy injected into a SkillEngine.

SkillEngine is one concrete type; everything that differs between skills
lives in a SkillBehavior:

- Modifiers:   duration_modifier, success_modifier, critical_modifier
- Rewards:     modify_reward_amount
- Effects:     apply_action_effects (counters, durability, economy credits)
- Curve:       custom_experience (only used by CurveKind.CUSTOM)
- Repeats:     next_repeat_context
- State:       create_skill_state / dump_skill_state / load_skill_state
- Lifecycle:   on_initialize / on_destroy / on_reset

Every hook receives the engine so it can read the current level, the
behavior-owned skill_state, collaborators, and the notification queue.
Hooks must not touch any other part of the engine's state.

Usage:
    class FishingBehavior(SkillBehavior):
        name = "fishing"

        def success_modifier(self, engine, action, context):
            return 1.1 if context.get("bait") else 1.0

    engine = SkillEngine(definition, behavior=FishingBehavior())
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, TYPE_CHECKING
import logging

from ..skill_schema.definition import (
    ActionReward,
    RewardKind,
    SkillAction,
    SkillDefinition,
)

if TYPE_CHECKING:
    from .engine import SkillEngine

logger = logging.getLogger(__name__)


class SkillBehavior:
    """
    Default hooks: no modifiers, no skill-specific state.

    Subclasses override only what their skill needs.
    """

    name: str = "default"

    # ========================================================================
    # Skill-specific state
    # ========================================================================

    def create_skill_state(self, definition: SkillDefinition) -> Any:
        """Fresh skill-specific state for a new or reset engine."""
        return None

    def dump_skill_state(self, skill_state: Any) -> Any:
        """Convert skill-specific state to plain JSON-compatible data."""
        return deepcopy(skill_state)

    def load_skill_state(self, data: Any, definition: SkillDefinition) -> Any:
        """Rebuild skill-specific state from dump_skill_state output."""
        return deepcopy(data)

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def on_initialize(self, engine: SkillEngine) -> None:
        pass

    def on_destroy(self, engine: SkillEngine) -> None:
        pass

    def on_reset(self, engine: SkillEngine) -> None:
        pass

    # ========================================================================
    # Resolution modifiers
    # ========================================================================

    def duration_modifier(
        self,
        engine: SkillEngine,
        action: SkillAction,
        context: dict[str, Any],
    ) -> float:
        return 1.0

    def success_modifier(
        self,
        engine: SkillEngine,
        action: SkillAction,
        context: dict[str, Any],
    ) -> float:
        return 1.0

    def critical_modifier(
        self,
        engine: SkillEngine,
        action: SkillAction,
        context: dict[str, Any],
    ) -> float:
        return 1.0

    def modify_reward_amount(
        self,
        engine: SkillEngine,
        reward: ActionReward,
        amount: int,
        context: dict[str, Any],
        critical: bool,
    ) -> int:
        """
        Adjust a reward amount after the critical multiplier was applied.

        Results <= 0 are dropped by the resolver.
        """
        return amount

    def custom_experience(self, level: int) -> int | None:
        """Threshold for CurveKind.CUSTOM. None falls back to linear."""
        return None

    def next_repeat_context(
        self,
        engine: SkillEngine,
        action: SkillAction,
        context: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Context for the next repeat of `action`, built after the previous
        one resolved. Returning None stops the remaining repeats.
        """
        return context

    # ========================================================================
    # Effects
    # ========================================================================

    def apply_action_effects(
        self,
        engine: SkillEngine,
        action: SkillAction,
        rewards: list[ActionReward],
        context: dict[str, Any],
        critical: bool,
    ) -> dict[str, Any]:
        """
        Apply side effects of a successful action.

        Gold rewards are credited to the economy collaborator. Item
        rewards are reported in the result only; the host owns storage.

        Returns extra details merged into ActionResult.details.
        """
        details: dict[str, Any] = {}
        economy = engine.collaborators.economy
        gold = sum(r.amount for r in rewards if r.kind == RewardKind.GOLD)
        if gold:
            if economy is not None:
                economy.add_gold(gold)
                details["gold_credited"] = gold
            else:
                logger.debug("No economy bound, %s gold from %s not credited", gold, action.id)

        for reward in rewards:
            if reward.kind == RewardKind.ITEM:
                logger.debug("%s granted %sx %s", action.id, reward.amount, reward.target)

        return details


class DefaultBehavior(SkillBehavior):
    """Behavior for data-only skills (e.g. loaded from YAML)."""
    name = "default"
