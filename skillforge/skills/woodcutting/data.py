"""
Woodcutting data - Trees, logs, hatchets, and the action catalog.

Each tree yields one action, chop_<name>, gated on the tree's level.
"""

from __future__ import annotations
from dataclasses import dataclass

from ...skill_schema.definition import ActionRequirement, ActionReward, SkillAction

SKILL_ID = "woodcutting"
BIRD_NEST_ID = "item_bird_nest"
BIRD_NEST_CHANCE = 0.02
LEVEL_SCALING = 0.01
STARTING_TOOL_ID = "tool_bronze_hatchet"


@dataclass(frozen=True)
class LogType:
    id: str
    name: str
    description: str
    value: int


@dataclass(frozen=True)
class TreeType:
    id: str
    name: str
    level: int
    experience: int
    chop_time: int  # ms
    respawn_time: int  # ms
    health: int
    log: LogType

    @property
    def action_id(self) -> str:
        return "chop_" + self.id.removeprefix("tree_")


@dataclass(frozen=True)
class ToolType:
    id: str
    name: str
    level: int
    speed: float
    effectiveness: float
    max_durability: int
    buy_price: int


TREES: tuple[TreeType, ...] = (
    TreeType(
        id="tree_oak", name="Oak Tree", level=1, experience=25,
        chop_time=2000, respawn_time=5000, health=10,
        log=LogType("log_oak", "Oak Logs", "Basic oak logs", 10),
    ),
    TreeType(
        id="tree_willow", name="Willow Tree", level=5, experience=45,
        chop_time=3000, respawn_time=8000, health=15,
        log=LogType("log_willow", "Willow Logs", "Flexible willow logs", 20),
    ),
    TreeType(
        id="tree_maple", name="Maple Tree", level=10, experience=75,
        chop_time=4000, respawn_time=12000, health=25,
        log=LogType("log_maple", "Maple Logs", "Hard maple logs", 35),
    ),
    TreeType(
        id="tree_yew", name="Yew Tree", level=20, experience=125,
        chop_time=6000, respawn_time=20000, health=40,
        log=LogType("log_yew", "Yew Logs", "Precious yew logs", 60),
    ),
    TreeType(
        id="tree_magic", name="Magic Tree", level=40, experience=250,
        chop_time=10000, respawn_time=45000, health=75,
        log=LogType("log_magic", "Magic Logs", "Enchanted magic logs", 150),
    ),
)

TOOLS: tuple[ToolType, ...] = (
    ToolType("tool_bronze_hatchet", "Bronze Hatchet", 1, 1.0, 0.9, 100, 10),
    ToolType("tool_iron_hatchet", "Iron Hatchet", 5, 1.1, 0.95, 150, 50),
    ToolType("tool_steel_hatchet", "Steel Hatchet", 10, 1.2, 1.0, 200, 200),
    ToolType("tool_mithril_hatchet", "Mithril Hatchet", 20, 1.3, 1.05, 300, 1000),
    ToolType("tool_adamant_hatchet", "Adamant Hatchet", 30, 1.4, 1.1, 400, 5000),
    ToolType("tool_rune_hatchet", "Rune Hatchet", 40, 1.5, 1.15, 500, 20000),
    ToolType("tool_dragon_hatchet", "Dragon Hatchet", 60, 1.7, 1.25, 750, 100000),
)

TREES_BY_ID = {tree.id: tree for tree in TREES}
TREES_BY_ACTION = {tree.action_id: tree for tree in TREES}
TOOLS_BY_ID = {tool.id: tool for tool in TOOLS}


def get_tree(tree_id: str) -> TreeType | None:
    return TREES_BY_ID.get(tree_id)


def get_tool(tool_id: str | None) -> ToolType | None:
    if tool_id is None:
        return None
    return TOOLS_BY_ID.get(tool_id)


def build_tree_action(tree: TreeType) -> SkillAction:
    rewards = [
        ActionReward.experience(SKILL_ID, tree.experience),
        ActionReward.item(tree.log.id, 1),
    ]
    if tree.level >= 5:
        rewards.append(ActionReward.item(BIRD_NEST_ID, 1, chance=BIRD_NEST_CHANCE))

    return SkillAction(
        id=tree.action_id,
        name=f"Chop {tree.name}",
        description=f"Chop a {tree.name.lower()} for {tree.log.name.lower()}",
        requirements=(ActionRequirement.skill_level(SKILL_ID, tree.level),),
        rewards=tuple(rewards),
        base_time=tree.chop_time,
        level_scaling=LEVEL_SCALING,
    )


WOODCUTTING_ACTIONS: tuple[SkillAction, ...] = tuple(build_tree_action(tree) for tree in TREES)
