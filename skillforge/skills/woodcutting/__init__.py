"""
Woodcutting - Chop trees for logs and experience.
"""

from .data import TREES, TOOLS, TreeType, ToolType, LogType, WOODCUTTING_ACTIONS, get_tree, get_tool
from .definition import create_woodcutting_definition, create_woodcutting_details
from .behavior import WoodcuttingBehavior, WoodcuttingContext, WoodcuttingState
from .skill import WoodcuttingSkill, create_woodcutting_engine

__all__ = [
    "TREES",
    "TOOLS",
    "TreeType",
    "ToolType",
    "LogType",
    "WOODCUTTING_ACTIONS",
    "get_tree",
    "get_tool",
    "create_woodcutting_definition",
    "create_woodcutting_details",
    "WoodcuttingBehavior",
    "WoodcuttingContext",
    "WoodcuttingState",
    "WoodcuttingSkill",
    "create_woodcutting_engine",
]
