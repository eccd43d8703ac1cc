"""
Definition Loader - Builds SkillDefinitions from plain data and YAML files.

A YAML definition looks like:

    id: fishing
    name: Fishing
    description: Catch fish from rivers and seas
    behavior: default
    max_level: 99
    curve: exponential
    base_experience: 100
    experience_multiplier: 1.1
    unlock_requirements:
      - {kind: skill-level, target: woodcutting, amount: 5}
    actions:
      - id: catch_shrimp
        name: Catch Shrimp
        base_time: 2500
        level_scaling: 0.01
        requirements:
          - {kind: skill-level, target: fishing, amount: 1}
        rewards:
          - {kind: experience, target: fishing, amount: 10}
          - {kind: item, target: raw_shrimp, amount: 1}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import logging

import yaml

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
from .validation import DefinitionValidationError, validate_definition

logger = logging.getLogger(__name__)


@dataclass
class LoadedDefinition:
    """A definition plus the registration data that travels with it."""
    definition: SkillDefinition
    details: SkillDetails
    behavior: str = "default"
    unlock_requirements: list[ActionRequirement] = field(default_factory=list)
    source: Path | None = None


def parse_requirement(data: dict[str, Any]) -> ActionRequirement:
    """Parse one requirement mapping."""
    try:
        kind = RequirementKind(data["kind"])
    except (KeyError, ValueError) as e:
        raise DefinitionValidationError([f"Invalid requirement {data!r}: {e}"]) from e
    return ActionRequirement(
        kind=kind,
        target=str(data.get("target", "")),
        amount=int(data.get("amount", 1)),
    )


def parse_reward(data: dict[str, Any]) -> ActionReward:
    """Parse one reward mapping."""
    try:
        kind = RewardKind(data["kind"])
    except (KeyError, ValueError) as e:
        raise DefinitionValidationError([f"Invalid reward {data!r}: {e}"]) from e
    chance = data.get("chance")
    return ActionReward(
        kind=kind,
        target=str(data.get("target", "gold" if kind == RewardKind.GOLD else "")),
        amount=int(data.get("amount", 1)),
        chance=float(chance) if chance is not None else None,
    )


def parse_action(data: dict[str, Any]) -> SkillAction:
    """Parse one action mapping."""
    if "id" not in data:
        raise DefinitionValidationError([f"Action is missing an id: {data!r}"])
    return SkillAction(
        id=str(data["id"]),
        name=str(data.get("name", data["id"])),
        description=str(data.get("description", "")),
        requirements=tuple(parse_requirement(r) for r in data.get("requirements", [])),
        rewards=tuple(parse_reward(r) for r in data.get("rewards", [])),
        base_time=int(data.get("base_time", 1000)),
        level_scaling=float(data.get("level_scaling", 0.0)),
        icon=str(data.get("icon", "")),
    )


def parse_definition(data: dict[str, Any]) -> SkillDefinition:
    """
    Build and validate a SkillDefinition from a mapping.

    Raises DefinitionValidationError when required fields are missing
    or the result fails validation.
    """
    missing = [key for key in ("id", "curve", "actions") if key not in data]
    if missing:
        raise DefinitionValidationError([f"Missing required field '{key}'" for key in missing])

    try:
        curve = CurveKind(data["curve"])
    except ValueError as e:
        raise DefinitionValidationError([f"Invalid experience curve: {data['curve']!r}"]) from e

    definition = SkillDefinition(
        id=str(data["id"]),
        name=str(data.get("name", data["id"])),
        description=str(data.get("description", "")),
        icon=str(data.get("icon", "")),
        max_level=int(data.get("max_level", 99)),
        curve=curve,
        base_experience=int(data.get("base_experience", 100)),
        experience_multiplier=float(data.get("experience_multiplier", 1.1)),
        actions=tuple(parse_action(a) for a in data["actions"] or []),
    )

    result = validate_definition(definition)
    if not result.valid:
        raise DefinitionValidationError(result.errors)
    for warning in result.warnings:
        logger.warning("Skill %s: %s", definition.id, warning)
    return definition


def parse_loaded_definition(data: dict[str, Any], source: Path | None = None) -> LoadedDefinition:
    """Parse a definition plus its registration extras (behavior, unlock gate)."""
    definition = parse_definition(data)
    return LoadedDefinition(
        definition=definition,
        details=SkillDetails.from_definition(definition),
        behavior=str(data.get("behavior", "default")),
        unlock_requirements=[parse_requirement(r) for r in data.get("unlock_requirements", [])],
        source=source,
    )


def load_definitions(definitions_dir: str | Path) -> list[LoadedDefinition]:
    """
    Load every *.yaml / *.yml skill definition in a directory.

    Malformed files are logged and skipped; the rest still load.
    """
    definitions_dir = Path(definitions_dir)
    if not definitions_dir.exists():
        logger.warning("Skill definitions directory not found: %s", definitions_dir)
        return []

    loaded: list[LoadedDefinition] = []
    paths = sorted(definitions_dir.glob("*.yaml")) + sorted(definitions_dir.glob("*.yml"))
    for path in paths:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                raise DefinitionValidationError([f"{path.name} does not contain a mapping"])
            loaded.append(parse_loaded_definition(data, source=path))
        except (yaml.YAMLError, DefinitionValidationError, TypeError, ValueError) as e:
            logger.error("Skipping skill definition %s: %s", path, e)
            continue

    logger.info("Loaded %d skill definition(s) from %s", len(loaded), definitions_dir)
    return loaded
