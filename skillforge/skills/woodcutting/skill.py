"""
Woodcutting Skill - Player-facing operations on a woodcutting engine.

Usage:
    skill = WoodcuttingSkill.create(collaborators=collaborators, clock=clock)
    skill.engine.initialize()
    ok, reason = skill.can_chop_tree("tree_oak")
    result = skill.chop_tree("tree_oak")
"""

from __future__ import annotations
from typing import Any

from ...engine_core.action import ActionResult, FailureReason
from ...engine_core.engine import SkillEngine
from .behavior import WoodcuttingBehavior, WoodcuttingContext, WoodcuttingState
from .data import TREES, TOOLS, ToolType, TreeType, get_tool, get_tree
from .definition import create_woodcutting_definition

REPAIR_COST_FRACTION = 0.1


def create_woodcutting_engine(**engine_kwargs: Any) -> SkillEngine:
    """Build a SkillEngine wired with the woodcutting definition and behavior."""
    return SkillEngine(create_woodcutting_definition(), WoodcuttingBehavior(), **engine_kwargs)


class WoodcuttingSkill:
    """
    Facade over a woodcutting SkillEngine.

    Tool changes go through the engine's update_skill_state so the
    engine stays the only owner of its state.
    """

    def __init__(self, engine: SkillEngine):
        if not isinstance(engine.behavior, WoodcuttingBehavior):
            raise TypeError(f"{engine.skill_id} is not a woodcutting engine")
        self.engine = engine
        self.behavior: WoodcuttingBehavior = engine.behavior

    @classmethod
    def create(cls, **engine_kwargs: Any) -> WoodcuttingSkill:
        return cls(create_woodcutting_engine(**engine_kwargs))

    @property
    def _state(self) -> WoodcuttingState:
        return self.engine.skill_state

    # ========================================================================
    # Trees
    # ========================================================================

    def get_tree(self, tree_id: str) -> TreeType | None:
        return get_tree(tree_id)

    def get_trees_for_level(self, level: int) -> list[TreeType]:
        return [tree for tree in TREES if tree.level <= level]

    def get_available_trees(self) -> list[TreeType]:
        return self.get_trees_for_level(self.engine.level)

    def can_chop_tree(self, tree_id: str) -> tuple[bool, str | None]:
        """Returns (can_chop, reason)."""
        tree = get_tree(tree_id)
        if tree is None:
            return False, "Tree not found"
        if tree.level > self.engine.level:
            return False, f"Requires Woodcutting level {tree.level}"

        tool = self.get_current_tool()
        if tool is None:
            return False, "No tool equipped"
        if self._state.durability_of(tool.id) <= 0:
            return False, "Tool is broken"
        return True, None

    def chop_tree(self, tree_id: str, repeats: int = 1) -> ActionResult:
        """Start chopping `tree_id` with the equipped tool."""
        ok, reason = self.can_chop_tree(tree_id)
        if not ok:
            failure = FailureReason.ACTION_NOT_FOUND if reason == "Tree not found" else FailureReason.REQUIREMENTS_NOT_MET
            result = ActionResult.failure(failure)
            result.details["reason"] = reason
            return result

        tree = get_tree(tree_id)
        context = WoodcuttingContext(tree_id=tree.id, tool_id=self._state.current_tool)
        return self.engine.perform_action(tree.action_id, context.to_dict(), repeats=repeats)

    # ========================================================================
    # Tools
    # ========================================================================

    def get_tool(self, tool_id: str) -> ToolType | None:
        return get_tool(tool_id)

    def get_tools_for_level(self, level: int) -> list[ToolType]:
        return [tool for tool in TOOLS if tool.level <= level]

    def get_current_tool(self) -> ToolType | None:
        return get_tool(self._state.current_tool)

    def get_unlocked_tools(self) -> list[ToolType]:
        return [tool for tool in TOOLS if tool.id in self._state.tools_unlocked]

    def get_tool_durability(self, tool_id: str) -> int:
        return self._state.durability_of(tool_id)

    def equip_tool(self, tool_id: str) -> bool:
        return self.engine.update_skill_state(
            lambda state: self.behavior.equip_tool(self.engine, tool_id)
        )

    def unlock_tool(self, tool_id: str) -> bool:
        """Buy a tool. Already-owned tools succeed without charging."""
        tool = get_tool(tool_id)
        if tool is None:
            return False
        if tool_id in self._state.tools_unlocked:
            return True
        if tool.level > self.engine.level:
            return False

        economy = self.engine.collaborators.economy
        if economy is None or not economy.remove_gold(tool.buy_price):
            return False

        def unlock(state: WoodcuttingState) -> bool:
            state.tools_unlocked.append(tool_id)
            state.tool_durability[tool_id] = tool.max_durability
            if state.current_tool is None:
                self.behavior.equip_tool(self.engine, tool_id)
            return True

        return self.engine.update_skill_state(unlock)

    def repair_tool(self, tool_id: str) -> bool:
        """Restore full durability for 10% of the buy price."""
        tool = get_tool(tool_id)
        if tool is None or tool_id not in self._state.tools_unlocked:
            return False
        if self._state.durability_of(tool_id) == tool.max_durability:
            return True

        economy = self.engine.collaborators.economy
        cost = int(tool.buy_price * REPAIR_COST_FRACTION)
        if economy is None or not economy.remove_gold(cost):
            return False

        def repair(state: WoodcuttingState) -> bool:
            state.tool_durability[tool_id] = tool.max_durability
            if state.current_tool is None:
                self.behavior.equip_best_tool(self.engine)
            return True

        return self.engine.update_skill_state(repair)

    # ========================================================================
    # Statistics
    # ========================================================================

    def get_woodcutting_statistics(self) -> dict[str, Any]:
        state = self._state
        tool = self.get_current_tool()
        stats = self.engine.get_statistics().to_dict()
        stats.update({
            "total_logs_chopped": state.total_logs_chopped,
            "trees_chopped": dict(state.trees_chopped),
            "tools_unlocked": len(state.tools_unlocked),
            "current_tool": tool.name if tool else "None",
            "tool_durability": dict(state.tool_durability),
        })
        return stats
