"""
Skill Registry - Directory of every skill engine in a session.

Responsibilities:
- Register engines with display metadata, an unlock gate, and a position
  taken from the configured unlock order
- Gate skills behind unlock requirements; unlock reactively when host
  events arrive (player level-up, quest completion, skill level-up)
- Route actions and ticks to the owning engine
- Aggregate queries across unlocked skills
- Fan save/load/reset out to every engine

The registry owns the lifetime of its engines: registering initializes
an engine, unregistering or destroying the registry destroys it.
"""

from __future__ import annotations
from typing import Any
import logging

from pydantic import ValidationError

from ..collaborators import Collaborators
from ..config import EngineConfig
from ..engine_core.action import ActionResult, FailureReason
from ..engine_core.engine import SkillEngine, SkillStatistics
from ..engine_core.notifications import Notification, NotificationQueue, NotificationType
from ..engine_core.requirements import RequirementEvaluator
from ..persistence.schemas import RegistrationSnapshot, RegistrySnapshot
from ..skill_schema.definition import ActionRequirement, SkillAction, SkillDetails
from ..skill_schema.validation import validate_definition
from .registration import SkillRegistration

logger = logging.getLogger(__name__)

UNLOCK_TRIGGERS = {
    NotificationType.PLAYER_LEVEL_UP,
    NotificationType.QUEST_COMPLETED,
    NotificationType.SKILL_LEVEL_UP,
}


class SkillRegistry:
    """
    Central directory of skill engines.

    Usage:
        registry = SkillRegistry(config, collaborators, notifications)
        registry.register_skill(engine, details, unlock_requirements=[...])
        registry.perform_action("woodcutting", "chop_oak")
        registry.tick(now)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        collaborators: Collaborators | None = None,
        notifications: NotificationQueue | None = None,
        clock: Any = None,
    ):
        self.config = config if config is not None else EngineConfig()
        self.collaborators = collaborators if collaborators is not None else Collaborators()
        self.notifications = (
            notifications if notifications is not None
            else NotificationQueue(self.config.notification_limit)
        )
        self.clock = clock
        self.unlock_order: list[str] = list(self.config.unlock_order)
        self.requirements = RequirementEvaluator(self.collaborators, self.get_skill_level)
        self._skills: dict[str, SkillRegistration] = {}

    # ========================================================================
    # Registration
    # ========================================================================

    def register_skill(
        self,
        engine: SkillEngine,
        details: SkillDetails | None = None,
        unlock_requirements: list[ActionRequirement] | None = None,
    ) -> bool:
        """
        Register and initialize an engine.

        Invalid definitions and duplicate ids are logged and skipped
        (returns False); the host keeps running without that skill.
        """
        definition = engine.definition
        result = validate_definition(definition)
        if not result.valid:
            logger.error("Not registering skill %r: %s", definition.id, "; ".join(result.errors))
            return False
        if definition.id in self._skills:
            logger.warning("Skill %s is already registered", definition.id)
            return False

        if definition.id in self.unlock_order:
            position = self.unlock_order.index(definition.id)
        else:
            logger.warning("Skill %s not found in unlock order, adding to end", definition.id)
            self.unlock_order.append(definition.id)
            position = len(self.unlock_order) - 1

        requirements = list(unlock_requirements or [])
        registration = SkillRegistration(
            engine=engine,
            details=details if details is not None else SkillDetails.from_definition(definition),
            position=position,
            is_unlocked=not requirements,
            unlock_requirements=requirements,
        )
        self._skills[definition.id] = registration

        engine.bind_skill_levels(self.get_skill_level)
        engine.initialize()
        logger.info("Skill registered: %s (position %s)", definition.id, position)
        return True

    def unregister_skill(self, skill_id: str) -> bool:
        registration = self._skills.pop(skill_id, None)
        if registration is None:
            return False
        registration.engine.destroy()
        registration.engine.bind_skill_levels(None)
        logger.info("Skill unregistered: %s", skill_id)
        return True

    # ========================================================================
    # Lookups
    # ========================================================================

    def get_skill(self, skill_id: str) -> SkillEngine | None:
        registration = self._skills.get(skill_id)
        return registration.engine if registration else None

    def get_registration(self, skill_id: str) -> SkillRegistration | None:
        return self._skills.get(skill_id)

    def get_skill_level(self, skill_id: str) -> int | None:
        registration = self._skills.get(skill_id)
        return registration.engine.level if registration else None

    def get_all_skills(self) -> list[SkillRegistration]:
        """Every registration, in display order."""
        return sorted(self._skills.values(), key=lambda reg: reg.position)

    def get_unlocked_skills(self) -> list[SkillRegistration]:
        return [reg for reg in self.get_all_skills() if reg.is_unlocked]

    def get_locked_skills(self) -> list[SkillRegistration]:
        return [reg for reg in self.get_all_skills() if not reg.is_unlocked]

    def is_skill_unlocked(self, skill_id: str) -> bool:
        registration = self._skills.get(skill_id)
        return registration is not None and registration.is_unlocked

    def find_skill_by_action(self, action_id: str) -> SkillEngine | None:
        for registration in self.get_all_skills():
            if registration.engine.get_action(action_id) is not None:
                return registration.engine
        return None

    def __contains__(self, skill_id: str) -> bool:
        return skill_id in self._skills

    def __len__(self) -> int:
        return len(self._skills)

    # ========================================================================
    # Unlocking
    # ========================================================================

    def can_unlock(self, skill_id: str) -> bool:
        registration = self._skills.get(skill_id)
        if registration is None:
            return False
        return self.requirements.meets_all(registration.unlock_requirements)

    def unlock_skill(self, skill_id: str) -> bool:
        """
        Unlock a skill if its requirements hold.

        Already-unlocked skills succeed without a new notification.
        """
        registration = self._skills.get(skill_id)
        if registration is None:
            logger.warning("Cannot unlock unknown skill: %s", skill_id)
            return False
        if registration.is_unlocked:
            return True
        if not self.requirements.meets_all(registration.unlock_requirements):
            logger.warning("Requirements not met for skill: %s", skill_id)
            return False

        registration.is_unlocked = True
        self.notifications.emit(
            NotificationType.SKILL_UNLOCKED,
            {"skillId": skill_id},
            timestamp=self._now(),
        )
        logger.info("Skill unlocked: %s", skill_id)
        return True

    def get_unlockable_skills(self) -> list[SkillRegistration]:
        """Locked skills whose requirements now hold."""
        return [
            reg for reg in self.get_locked_skills()
            if self.requirements.meets_all(reg.unlock_requirements)
        ]

    def check_for_skill_unlocks(self) -> list[str]:
        """Unlock every skill that became eligible. Returns the ids unlocked."""
        unlocked = []
        for registration in self.get_unlockable_skills():
            if self.unlock_skill(registration.skill_id):
                unlocked.append(registration.skill_id)
        return unlocked

    def handle_notification(self, notification: Notification) -> list[str]:
        """
        React to a host or engine notification.

        Events that can satisfy gates re-check locked skills and each
        engine's action catalog.
        """
        if notification.type not in UNLOCK_TRIGGERS:
            return []
        unlocked = self.check_for_skill_unlocks()
        for registration in self.get_all_skills():
            if registration.engine.is_initialized:
                registration.engine.refresh_unlocks()
        return unlocked

    # ========================================================================
    # Routing
    # ========================================================================

    def perform_action(
        self,
        skill_id: str,
        action_id: str,
        context: dict[str, Any] | None = None,
        repeats: int = 1,
    ) -> ActionResult:
        registration = self._skills.get(skill_id)
        if registration is None:
            return ActionResult.failure(FailureReason.SKILL_NOT_FOUND, action_id)
        if not registration.is_unlocked:
            return ActionResult.failure(FailureReason.SKILL_NOT_UNLOCKED, action_id)
        return registration.engine.perform_action(action_id, context, repeats=repeats)

    def tick(self, now: int | None = None) -> list[ActionResult]:
        """Tick every engine. Returns the resolutions that happened."""
        results = []
        for registration in self.get_all_skills():
            engine = registration.engine
            if not engine.is_initialized:
                continue
            result = engine.tick(now)
            if result is not None:
                results.append(result)
        return results

    # ========================================================================
    # Aggregates
    # ========================================================================

    def get_total_skill_level(self) -> int:
        return sum(reg.level for reg in self.get_unlocked_skills())

    def get_highest_skill_level(self) -> int:
        levels = [reg.level for reg in self.get_unlocked_skills()]
        return max(levels) if levels else 0

    def get_skills_by_level(self) -> list[SkillRegistration]:
        """Unlocked skills, highest level first."""
        return sorted(self.get_unlocked_skills(), key=lambda reg: reg.level, reverse=True)

    def get_all_available_actions(self) -> list[tuple[str, SkillAction]]:
        """(skill_id, action) for every unlocked action of every unlocked skill."""
        return [
            (reg.skill_id, action)
            for reg in self.get_unlocked_skills()
            for action in reg.engine.get_available_actions()
        ]

    def get_all_performable_actions(self) -> list[tuple[str, SkillAction]]:
        """(skill_id, action) for every action that could start right now."""
        return [
            (reg.skill_id, action)
            for reg in self.get_unlocked_skills()
            for action in reg.engine.get_performable_actions()
        ]

    def get_all_skill_statistics(self) -> dict[str, SkillStatistics]:
        return {reg.skill_id: reg.engine.get_statistics() for reg in self.get_all_skills()}

    def get_registry_statistics(self) -> dict[str, int]:
        unlocked = self.get_unlocked_skills()
        return {
            "total_skills": len(self._skills),
            "unlocked_skills": len(unlocked),
            "locked_skills": len(self._skills) - len(unlocked),
            "total_level": self.get_total_skill_level(),
            "highest_level": self.get_highest_skill_level(),
            "total_actions": len(self.get_all_available_actions()),
            "performable_actions": len(self.get_all_performable_actions()),
        }

    # ========================================================================
    # Persistence
    # ========================================================================

    def save_all_skills(self) -> dict[str, Any]:
        """Serialize {skills: {id: {state, isUnlocked}}, unlockOrder}."""
        snapshot = RegistrySnapshot(
            skills={
                reg.skill_id: RegistrationSnapshot(
                    state=reg.engine.save_state(),
                    is_unlocked=reg.is_unlocked,
                )
                for reg in self.get_all_skills()
            },
            unlock_order=list(self.unlock_order),
        )
        return snapshot.model_dump(by_alias=True)

    def load_all_skills(self, data: Any) -> bool:
        """
        Restore from save_all_skills() output.

        Skills missing from the payload keep their current state; skills
        in the payload that are not registered are skipped. Positions of
        registered skills never change. Returns False if the payload as
        a whole is unusable.
        """
        try:
            snapshot = RegistrySnapshot.model_validate(data)
        except ValidationError as e:
            logger.warning("Invalid skill data provided: %s", e)
            return False

        for skill_id in snapshot.unlock_order:
            if skill_id not in self.unlock_order:
                self.unlock_order.append(skill_id)

        for skill_id, saved in snapshot.skills.items():
            registration = self._skills.get(skill_id)
            if registration is None:
                logger.info("Skipping saved data for unregistered skill %s", skill_id)
                continue
            if saved.state is not None:
                registration.engine.load_state(saved.state, refresh_unlocks=False)
            registration.is_unlocked = saved.is_unlocked

        # Cross-skill gates read other skills' levels, so every state is
        # restored before any unlock is recomputed.
        self._recompute_action_unlocks()
        logger.info("All skill states loaded")
        return True

    def reset_all_skills(self) -> None:
        for registration in self._skills.values():
            registration.engine.reset(refresh_unlocks=False)
            registration.reset_unlock()
        self._recompute_action_unlocks()
        logger.info("All skills reset")

    def _recompute_action_unlocks(self) -> None:
        for registration in self._skills.values():
            registration.engine.recompute_unlocks()

    def destroy(self) -> None:
        for registration in self._skills.values():
            registration.engine.destroy()
            registration.engine.bind_skill_levels(None)
        self._skills.clear()
        logger.info("Skill registry destroyed")

    def _now(self) -> int:
        return self.clock.now() if self.clock is not None else 0
