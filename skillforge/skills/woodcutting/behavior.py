"""
Woodcutting Behavior - Hooks for the woodcutting skill.

Modifiers:
- Duration:  / tool.speed, / (1 + (level-1) * 0.02)
- Success:   * tool.effectiveness, * max(1, 1 + (level - required) * 0.01)
- Critical:  * (1 + tool.level * 0.01)
- Log yield: floor(health / 10) + 1, * effectiveness, + floor(level / 10),
             critical multiplier, at least 1

Effects of a successful chop:
- Per-tree and total log counters
- One point of durability off the tool used; a broken tool is replaced
  by the best remaining one
- woodcutting:tree_chopped notification

Repeats pick up the currently equipped tool and stop once none is left.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
import logging
import math

from ...engine_core.behavior import SkillBehavior
from ...engine_core.notifications import NotificationType
from ...skill_schema.definition import ActionReward, RewardKind, SkillAction, SkillDefinition
from .data import (
    STARTING_TOOL_ID,
    TOOLS,
    TREES_BY_ACTION,
    ToolType,
    TreeType,
    get_tool,
    get_tree,
)

if TYPE_CHECKING:
    from ...engine_core.engine import SkillEngine

logger = logging.getLogger(__name__)

SPEED_BONUS_PER_LEVEL = 0.02
SUCCESS_BONUS_PER_LEVEL = 0.01
CRITICAL_BONUS_PER_TOOL_LEVEL = 0.01


@dataclass
class WoodcuttingContext:
    """Per-action context: which tree, with which tool."""
    tree_id: str | None = None
    tool_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> WoodcuttingContext:
        data = data or {}
        return cls(tree_id=data.get("tree_id"), tool_id=data.get("tool_id"))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.tree_id is not None:
            data["tree_id"] = self.tree_id
        if self.tool_id is not None:
            data["tool_id"] = self.tool_id
        return data

    @property
    def tree(self) -> TreeType | None:
        return get_tree(self.tree_id) if self.tree_id else None

    @property
    def tool(self) -> ToolType | None:
        return get_tool(self.tool_id)


@dataclass
class WoodcuttingState:
    """Tools and counters owned by the woodcutting behavior."""
    current_tool: str | None = None
    total_logs_chopped: int = 0
    trees_chopped: dict[str, int] = field(default_factory=dict)
    tools_unlocked: list[str] = field(default_factory=list)
    tool_durability: dict[str, int] = field(default_factory=dict)

    def durability_of(self, tool_id: str) -> int:
        return self.tool_durability.get(tool_id, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentTool": self.current_tool,
            "totalLogsChopped": self.total_logs_chopped,
            "treesChopped": dict(self.trees_chopped),
            "toolsUnlocked": list(self.tools_unlocked),
            "toolDurability": dict(self.tool_durability),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WoodcuttingState:
        return cls(
            current_tool=data.get("currentTool"),
            total_logs_chopped=int(data.get("totalLogsChopped", 0)),
            trees_chopped={k: int(v) for k, v in data.get("treesChopped", {}).items()},
            tools_unlocked=list(data.get("toolsUnlocked", [])),
            tool_durability={k: int(v) for k, v in data.get("toolDurability", {}).items()},
        )


def create_woodcutting_state() -> WoodcuttingState:
    """Fresh state: the bronze hatchet, unlocked and equipped."""
    starter = get_tool(STARTING_TOOL_ID)
    return WoodcuttingState(
        current_tool=starter.id,
        tools_unlocked=[starter.id],
        tool_durability={starter.id: starter.max_durability},
    )


def best_available_tool(state: WoodcuttingState, level: int) -> ToolType | None:
    """Highest-level unlocked, unbroken tool usable at `level`."""
    candidates = [
        tool for tool in TOOLS
        if tool.id in state.tools_unlocked
        and state.durability_of(tool.id) > 0
        and tool.level <= level
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda tool: tool.level)


class WoodcuttingBehavior(SkillBehavior):
    """Strategy plugged into the woodcutting SkillEngine."""

    name = "woodcutting"

    # ========================================================================
    # Skill-specific state
    # ========================================================================

    def create_skill_state(self, definition: SkillDefinition) -> WoodcuttingState:
        return create_woodcutting_state()

    def dump_skill_state(self, skill_state: WoodcuttingState) -> dict[str, Any]:
        return skill_state.to_dict()

    def load_skill_state(self, data: Any, definition: SkillDefinition) -> WoodcuttingState:
        if not isinstance(data, dict):
            raise TypeError(f"woodcutting state must be a mapping, got {type(data).__name__}")
        state = WoodcuttingState.from_dict(data)
        fresh = create_woodcutting_state()
        for tool_id in fresh.tools_unlocked:
            if tool_id not in state.tools_unlocked:
                state.tools_unlocked.insert(0, tool_id)
                state.tool_durability.setdefault(tool_id, fresh.tool_durability[tool_id])
        return state

    def on_initialize(self, engine: SkillEngine) -> None:
        state: WoodcuttingState = engine.skill_state
        for tool_id in state.tools_unlocked:
            if tool_id not in state.tool_durability:
                tool = get_tool(tool_id)
                if tool is not None:
                    state.tool_durability[tool_id] = tool.max_durability

    # ========================================================================
    # Modifiers
    # ========================================================================

    def duration_modifier(self, engine: SkillEngine, action: SkillAction, context: dict[str, Any]) -> float:
        modifier = 1.0
        tool = WoodcuttingContext.from_dict(context).tool
        if tool is not None:
            modifier /= tool.speed
        modifier /= 1 + (engine.level - 1) * SPEED_BONUS_PER_LEVEL
        return modifier

    def success_modifier(self, engine: SkillEngine, action: SkillAction, context: dict[str, Any]) -> float:
        modifier = 1.0
        tool = WoodcuttingContext.from_dict(context).tool
        if tool is not None:
            modifier *= tool.effectiveness
        level_bonus = 1 + (engine.level - engine.required_level_for(action)) * SUCCESS_BONUS_PER_LEVEL
        return modifier * max(1.0, level_bonus)

    def critical_modifier(self, engine: SkillEngine, action: SkillAction, context: dict[str, Any]) -> float:
        tool = WoodcuttingContext.from_dict(context).tool
        if tool is None:
            return 1.0
        return 1 + tool.level * CRITICAL_BONUS_PER_TOOL_LEVEL

    def modify_reward_amount(
        self,
        engine: SkillEngine,
        reward: ActionReward,
        amount: int,
        context: dict[str, Any],
        critical: bool,
    ) -> int:
        ctx = WoodcuttingContext.from_dict(context)
        tree = ctx.tree
        if reward.kind != RewardKind.ITEM or tree is None or reward.target != tree.log.id:
            return amount

        log_yield = math.floor(tree.health / 10) + 1
        tool = ctx.tool
        if tool is not None:
            log_yield = math.floor(log_yield * tool.effectiveness)
        log_yield += math.floor(engine.level / 10)
        if critical:
            log_yield = math.floor(log_yield * engine.config.critical_multiplier)
        return max(1, log_yield)

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
        details = super().apply_action_effects(engine, action, rewards, context, critical)

        ctx = WoodcuttingContext.from_dict(context)
        tree = ctx.tree or TREES_BY_ACTION.get(action.id)
        if tree is None:
            return details

        state: WoodcuttingState = engine.skill_state
        logs = sum(r.amount for r in rewards if r.kind == RewardKind.ITEM and r.target == tree.log.id)
        state.trees_chopped[tree.id] = state.trees_chopped.get(tree.id, 0) + 1
        state.total_logs_chopped += logs

        if ctx.tool_id is not None:
            broken = self.reduce_tool_durability(engine, ctx.tool_id, 1)
            details["tool_durability"] = state.durability_of(ctx.tool_id)
            if broken:
                details["tool_broken"] = ctx.tool_id

        experience = engine.resolver.compute_experience(action, engine.level, critical)
        engine.emit(NotificationType.TREE_CHOPPED, {
            "treeId": tree.id,
            "logs": logs,
            "experience": experience.get(engine.skill_id, 0),
        })
        details["tree_id"] = tree.id
        details["logs"] = logs
        return details

    def next_repeat_context(
        self,
        engine: SkillEngine,
        action: SkillAction,
        context: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Chop the next repeat with whatever tool is equipped now; stop if none is."""
        ctx = WoodcuttingContext.from_dict(context)
        if ctx.tool_id is None:
            return context

        state: WoodcuttingState = engine.skill_state
        tool = get_tool(state.current_tool)
        if tool is None or state.durability_of(tool.id) <= 0:
            logger.info("No usable tool left, stopping %s", action.id)
            return None
        ctx.tool_id = tool.id
        return {**context, **ctx.to_dict()}

    # ========================================================================
    # Tools
    # ========================================================================

    def equip_tool(self, engine: SkillEngine, tool_id: str) -> bool:
        tool = get_tool(tool_id)
        if tool is None or tool.level > engine.level:
            return False
        state: WoodcuttingState = engine.skill_state
        if tool_id not in state.tools_unlocked or state.durability_of(tool_id) <= 0:
            return False
        state.current_tool = tool_id
        engine.emit(NotificationType.TOOL_EQUIPPED, {"toolId": tool_id})
        return True

    def reduce_tool_durability(self, engine: SkillEngine, tool_id: str, amount: int) -> bool:
        """Wear a tool down. Returns True if it broke."""
        state: WoodcuttingState = engine.skill_state
        if state.durability_of(tool_id) <= 0:
            return False

        state.tool_durability[tool_id] -= amount
        if state.tool_durability[tool_id] > 0:
            return False

        state.tool_durability[tool_id] = 0
        logger.info("%s broke", tool_id)
        engine.emit(NotificationType.TOOL_BROKEN, {"toolId": tool_id})
        if state.current_tool == tool_id:
            self.equip_best_tool(engine)
        return True

    def equip_best_tool(self, engine: SkillEngine) -> ToolType | None:
        state: WoodcuttingState = engine.skill_state
        best = best_available_tool(state, engine.level)
        if best is None:
            state.current_tool = None
            return None
        self.equip_tool(engine, best.id)
        return best
