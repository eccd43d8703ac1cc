"""
Skill Catalog - Turns skill definitions into registered engines.

A catalog holds:
- Behavior factories by name ("default", "woodcutting", ...)
- Entries: a definition, its display details, the behavior to use,
  and its unlock gate

Entries come from code (the built-in woodcutting skill) or from YAML
files (see skill_schema.loader). populate() builds an engine for each
entry and registers it; a failing entry is logged and skipped.

Usage:
    catalog = SkillCatalog.default()
    catalog.load_directory("skills/")
    catalog.populate(registry, collaborators=collaborators, clock=clock)
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable
import logging

from ..engine_core.behavior import DefaultBehavior, SkillBehavior
from ..engine_core.engine import SkillEngine
from ..skill_schema.definition import ActionRequirement, CurveKind, SkillDefinition, SkillDetails
from ..skill_schema.loader import LoadedDefinition, load_definitions, parse_loaded_definition
from ..skill_schema.validation import validate_definition
from ..skills.woodcutting import (
    WoodcuttingBehavior,
    create_woodcutting_definition,
    create_woodcutting_details,
)
from .registry import SkillRegistry

logger = logging.getLogger(__name__)

BehaviorFactory = Callable[[], SkillBehavior]

DEFAULT_BEHAVIORS: dict[str, BehaviorFactory] = {
    "default": DefaultBehavior,
    "woodcutting": WoodcuttingBehavior,
}


def _uses_base_hook(factory: BehaviorFactory, hook: str) -> bool:
    """True if the behavior class built by `factory` inherits `hook` unchanged."""
    owner = factory if isinstance(factory, type) else type(factory())
    return getattr(owner, hook, None) is getattr(SkillBehavior, hook)


def woodcutting_entry() -> LoadedDefinition:
    return LoadedDefinition(
        definition=create_woodcutting_definition(),
        details=create_woodcutting_details(),
        behavior="woodcutting",
    )


class SkillCatalog:
    """Registry bootstrap data: behaviors plus skill entries."""

    def __init__(
        self,
        entries: list[LoadedDefinition] | None = None,
        behaviors: dict[str, BehaviorFactory] | None = None,
    ):
        self.behaviors: dict[str, BehaviorFactory] = dict(DEFAULT_BEHAVIORS)
        if behaviors:
            self.behaviors.update(behaviors)
        self._entries: dict[str, LoadedDefinition] = {}
        for entry in entries or []:
            self.add_skill(entry)

    @classmethod
    def default(cls) -> SkillCatalog:
        """Catalog with the built-in skills."""
        return cls(entries=[woodcutting_entry()])

    # ========================================================================
    # Entries
    # ========================================================================

    @property
    def entries(self) -> list[LoadedDefinition]:
        return list(self._entries.values())

    def get_entry(self, skill_id: str) -> LoadedDefinition | None:
        return self._entries.get(skill_id)

    def register_behavior(self, name: str, factory: BehaviorFactory) -> None:
        self.behaviors[name] = factory

    def add_skill(
        self,
        entry: LoadedDefinition | SkillDefinition,
        behavior: str = "default",
        unlock_requirements: list[ActionRequirement] | None = None,
    ) -> LoadedDefinition:
        """Add or replace an entry. A bare definition gets default details."""
        if isinstance(entry, SkillDefinition):
            entry = LoadedDefinition(
                definition=entry,
                details=SkillDetails.from_definition(entry),
                behavior=behavior,
                unlock_requirements=list(unlock_requirements or []),
            )
        if entry.definition.id in self._entries:
            logger.info("Replacing catalog entry %s", entry.definition.id)
        self._entries[entry.definition.id] = entry
        return entry

    def add_from_dict(self, data: dict[str, Any]) -> LoadedDefinition:
        """Parse and add one definition mapping. Raises DefinitionValidationError."""
        return self.add_skill(parse_loaded_definition(data))

    def remove_skill(self, skill_id: str) -> bool:
        return self._entries.pop(skill_id, None) is not None

    def load_directory(self, definitions_dir: str | Path) -> int:
        """Add every valid YAML definition in a directory. Returns how many were added."""
        loaded = load_definitions(definitions_dir)
        for entry in loaded:
            self.add_skill(entry)
        return len(loaded)

    # ========================================================================
    # Validation
    # ========================================================================

    def validate_entry(self, entry: LoadedDefinition) -> list[str]:
        errors = [
            f"{entry.definition.id or '<no id>'}: {error}"
            for error in validate_definition(entry.definition).errors
        ]
        if entry.behavior not in self.behaviors:
            errors.append(f"{entry.definition.id}: unknown behavior '{entry.behavior}'")
        return errors

    def entry_warnings(self, entry: LoadedDefinition) -> list[str]:
        """Problems that do not stop an entry from being built."""
        skill_id = entry.definition.id or "<no id>"
        warnings = [f"{skill_id}: {w}" for w in validate_definition(entry.definition).warnings]
        factory = self.behaviors.get(entry.behavior)
        if (
            entry.definition.curve == CurveKind.CUSTOM
            and factory is not None
            and _uses_base_hook(factory, "custom_experience")
        ):
            warnings.append(
                f"{skill_id}: custom curve but behavior '{entry.behavior}' does not "
                "supply custom_experience; thresholds fall back to linear"
            )
        return warnings

    def validate(self) -> list[str]:
        """Collect every problem across all entries. Empty means valid."""
        errors: list[str] = []
        for entry in self._entries.values():
            errors.extend(self.validate_entry(entry))
        return errors

    # ========================================================================
    # Building
    # ========================================================================

    def build_engine(self, entry: LoadedDefinition, **engine_kwargs: Any) -> SkillEngine:
        factory = self.behaviors[entry.behavior]
        return SkillEngine(entry.definition, factory(), **engine_kwargs)

    def populate(self, registry: SkillRegistry, **engine_kwargs: Any) -> list[str]:
        """
        Build and register an engine for every entry.

        Entries that fail validation or registration are logged and
        skipped. Returns the ids registered.
        """
        registered: list[str] = []
        for entry in self._entries.values():
            errors = self.validate_entry(entry)
            if errors:
                logger.error("Skipping skill %s: %s", entry.definition.id, "; ".join(errors))
                continue
            for warning in self.entry_warnings(entry):
                logger.warning("Skill %s", warning)
            engine = self.build_engine(entry, **engine_kwargs)
            if registry.register_skill(engine, entry.details, entry.unlock_requirements):
                registered.append(entry.definition.id)
        logger.info("Registered %d skill(s)", len(registered))
        return registered
