"""
Definition Validation - Schema validation for skill definitions.

Validates that:
1. Required fields are present (id, name, curve, catalog)
2. Curve parameters are usable
3. Action ids are unique and actions are well-formed
4. Rewards and requirements carry sane amounts
"""

from __future__ import annotations
from dataclasses import dataclass

from .definition import (
    SkillDefinition,
    SkillAction,
    CurveKind,
    RequirementKind,
    RewardKind,
)


class DefinitionValidationError(Exception):
    """Raised when a skill definition is malformed."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Skill definition invalid with {len(errors)} error(s): {'; '.join(errors)}")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_definition(definition: SkillDefinition) -> ValidationResult:
    """
    Validate a complete skill definition.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not definition.id:
        errors.append("id is required")
    if not definition.name:
        errors.append(f"Skill '{definition.id}' has empty name")
    if not isinstance(definition.curve, CurveKind):
        errors.append(f"Skill '{definition.id}' has invalid experience curve: {definition.curve!r}")
    if definition.max_level < 1:
        errors.append("max_level must be >= 1")
    if definition.base_experience <= 0:
        errors.append("base_experience must be > 0")
    if definition.curve == CurveKind.EXPONENTIAL and definition.experience_multiplier < 1:
        errors.append("experience_multiplier must be >= 1 for an exponential curve")

    if not definition.actions:
        errors.append(f"Skill '{definition.id}' has an empty action catalog")

    seen_ids: set[str] = set()
    for action in definition.actions:
        if action.id in seen_ids:
            errors.append(f"Duplicate action id '{action.id}'")
        seen_ids.add(action.id)
        errors.extend(_validate_action(action, definition))

    if definition.actions and not any(
        _own_level_gate(action, definition.id) <= 1 for action in definition.actions
    ):
        warnings.append("No action is available at level 1")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def require_valid_definition(definition: SkillDefinition) -> SkillDefinition:
    """Validate and raise DefinitionValidationError on any error."""
    result = validate_definition(definition)
    if not result.valid:
        raise DefinitionValidationError(result.errors)
    return definition


def _validate_action(action: SkillAction, definition: SkillDefinition) -> list[str]:
    """Validate a single action."""
    errors = []
    if not action.id:
        errors.append("Action has empty id")
    if not action.name:
        errors.append(f"Action '{action.id}' has empty name")
    if action.base_time <= 0:
        errors.append(f"Action '{action.id}' must have a positive base_time")
    if action.level_scaling < 0:
        errors.append(f"Action '{action.id}' has negative level_scaling")

    for req in action.requirements:
        if not isinstance(req.kind, RequirementKind):
            errors.append(f"Action '{action.id}': unknown requirement kind {req.kind!r}")
            continue
        if req.amount < 0:
            errors.append(f"Action '{action.id}': requirement amount must be >= 0")
        if req.kind in {RequirementKind.SKILL_LEVEL, RequirementKind.ITEM, RequirementKind.QUEST}:
            if not req.target:
                errors.append(f"Action '{action.id}': {req.kind.value} requirement needs a target")
        if (
            req.kind == RequirementKind.SKILL_LEVEL
            and req.target == definition.id
            and req.amount > definition.max_level
        ):
            errors.append(
                f"Action '{action.id}' requires level {req.amount} above max level {definition.max_level}"
            )

    for reward in action.rewards:
        if not isinstance(reward.kind, RewardKind):
            errors.append(f"Action '{action.id}': unknown reward kind {reward.kind!r}")
            continue
        if reward.chance is not None and not 0 <= reward.chance <= 1:
            errors.append(f"Action '{action.id}': reward chance must be within [0, 1]")

    return errors


def _own_level_gate(action: SkillAction, skill_id: str) -> int:
    """Level this skill must reach for the action, or 0 if ungated."""
    for req in action.requirements:
        if req.kind == RequirementKind.SKILL_LEVEL and req.target == skill_id:
            return req.amount
    return 0
