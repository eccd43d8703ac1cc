"""Skill definition schema - static skill configuration, validation, loading."""

from .definition import (
    SkillDefinition,
    SkillAction,
    SkillDetails,
    ActionRequirement,
    ActionReward,
    CurveKind,
    RequirementKind,
    RewardKind,
)
from .validation import (
    validate_definition,
    require_valid_definition,
    ValidationResult,
    DefinitionValidationError,
)
from .loader import (
    LoadedDefinition,
    parse_definition,
    parse_loaded_definition,
    load_definitions,
)

__all__ = [
    "SkillDefinition",
    "SkillAction",
    "SkillDetails",
    "ActionRequirement",
    "ActionReward",
    "CurveKind",
    "RequirementKind",
    "RewardKind",
    "validate_definition",
    "require_valid_definition",
    "ValidationResult",
    "DefinitionValidationError",
    "LoadedDefinition",
    "parse_definition",
    "parse_loaded_definition",
    "load_definitions",
]
