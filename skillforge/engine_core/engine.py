"""
Skill Engine - The single owner and mutator of a skill's state.

One concrete engine type serves every skill. Per-skill differences come
from the injected SkillBehavior; randomness from a RandomSource; time
from a clock; output goes to a NotificationQueue.

Action lifecycle:
1. perform_action() validates (found, unlocked, requirements, not busy),
   computes the duration, and parks an ActiveAction
2. tick(now) resolves the active action once its end time is reached
   (resolve_now() resolves it immediately)
3. Resolution rolls success/critical/drops, applies behavior effects,
   updates counters, emits notifications, and feeds own-skill experience
   into handle_experience_gained()

Usage:
    engine = SkillEngine(definition, behavior, collaborators=collaborators,
                         rng=RandomSource(seed=1), clock=ManualClock())
    engine.initialize()
    result = engine.perform_action("chop_oak")
    clock.advance(result.duration)
    resolved = engine.tick()
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Callable
import logging

from pydantic import ValidationError

from ..config import EngineConfig
from ..collaborators import Collaborators
from ..persistence.schemas import EngineSnapshot, SkillStateSnapshot, ActiveActionSnapshot
from ..skill_schema.definition import ActionRequirement, SkillAction, SkillDefinition
from . import curves
from .action import ActionResult, FailureReason
from .behavior import SkillBehavior, DefaultBehavior
from .clock import SystemClock
from .notifications import NotificationQueue, NotificationType
from .requirements import RequirementEvaluator, SkillLevelLookup
from .resolver import ActionResolver
from .rng import RandomSource
from .state import ActiveAction, SkillState

logger = logging.getLogger(__name__)


class EngineNotInitializedError(RuntimeError):
    """A mutating engine method was called before initialize()."""

    def __init__(self, skill_id: str, operation: str):
        super().__init__(f"Skill engine '{skill_id}' is not initialized (called {operation})")
        self.skill_id = skill_id
        self.operation = operation


@dataclass
class SkillStatistics:
    """Snapshot of a skill's progress. Always a fresh copy."""
    skill_id: str
    current_level: int
    total_experience: int
    experience_to_next: int
    progress_to_next: float
    actions_completed: int
    time_spent: int
    actions_unlocked: int
    total_actions: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Milestone:
    """An upcoming level worth showing to the player."""
    level: int
    reward: str


class SkillEngine:
    """
    Generic skill engine.

    Owns exactly one SkillState. Every read accessor returns a copy;
    only engine methods (and behavior hooks the engine invokes) mutate it.
    """

    def __init__(
        self,
        definition: SkillDefinition,
        behavior: SkillBehavior | None = None,
        *,
        collaborators: Collaborators | None = None,
        rng: RandomSource | None = None,
        clock: Any = None,
        notifications: NotificationQueue | None = None,
        config: EngineConfig | None = None,
        skill_levels: SkillLevelLookup | None = None,
    ):
        self.definition = definition
        self.behavior = behavior if behavior is not None else DefaultBehavior()
        self.config = config if config is not None else EngineConfig()
        self.collaborators = collaborators if collaborators is not None else Collaborators()
        self.rng = rng if rng is not None else RandomSource(self.config.random_seed)
        self.clock = clock if clock is not None else SystemClock()
        self.notifications = (
            notifications if notifications is not None
            else NotificationQueue(self.config.notification_limit)
        )

        self.resolver = ActionResolver(definition.id, self.rng, self.config.critical_multiplier)
        self.requirements = RequirementEvaluator(self.collaborators, self._lookup_skill_level)
        self._external_levels = skill_levels
        self._initialized = False
        self._state = self._create_initial_state()
        self._refresh_unlocked(emit=False)

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def skill_id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def level(self) -> int:
        return self._state.level

    @property
    def max_level(self) -> int:
        return self.definition.max_level

    @property
    def skill_state(self) -> Any:
        """Behavior-owned state. Behaviors read it; callers should not mutate it."""
        return self._state.skill_state

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_busy(self) -> bool:
        return self._state.active_action is not None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def initialize(self) -> None:
        """Bring the engine online. Idempotent."""
        if self._initialized:
            return
        self._initialized = True
        self._refresh_unlocked(emit=False)
        self.behavior.on_initialize(self)
        logger.info("Skill engine initialized: %s", self.definition.name)

    def destroy(self) -> None:
        if not self._initialized:
            return
        self.behavior.on_destroy(self)
        self._initialized = False
        logger.info("Skill engine destroyed: %s", self.definition.name)

    def reset(self, refresh_unlocks: bool = True) -> None:
        """
        Discard all progress and return to the initial state.

        With refresh_unlocks=False the unlocked set stays empty until
        recompute_unlocks() is called; the registry uses this so that
        cross-skill gates are checked only after every skill was reset.
        """
        self._state = self._create_initial_state()
        if refresh_unlocks:
            self._refresh_unlocked(emit=False)
        self.behavior.on_reset(self)
        logger.info("Skill reset: %s", self.definition.name)

    def bind_skill_levels(self, lookup: SkillLevelLookup | None) -> None:
        """Bind the lookup used for skill-level requirements on other skills."""
        self._external_levels = lookup

    def _create_initial_state(self) -> SkillState:
        self._state = SkillState(
            level=1,
            experience=0,
            experience_to_next=self.experience_for_level(2),
            skill_state=self.behavior.create_skill_state(self.definition),
        )
        return self._state

    def _require_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise EngineNotInitializedError(self.skill_id, operation)

    # ========================================================================
    # Curves
    # ========================================================================

    def experience_for_level(self, level: int) -> int:
        """Experience needed to go from level-1 to level."""
        return curves.experience_for_level(self.definition, level, self._custom_curve)

    def total_experience_for_level(self, level: int) -> int:
        """Cumulative experience needed to reach level from level 1."""
        return curves.total_experience_for_level(self.definition, level, self._custom_curve)

    def _custom_curve(self, level: int) -> int:
        value = self.behavior.custom_experience(level)
        if value is None:
            return self.definition.base_experience * level
        return value

    # ========================================================================
    # Requirements and unlocks
    # ========================================================================

    def _lookup_skill_level(self, skill_id: str) -> int | None:
        if skill_id == self.definition.id:
            return self._state.level
        if self._external_levels is None:
            return None
        return self._external_levels(skill_id)

    def meets_requirements(self, requirements: list[ActionRequirement] | tuple[ActionRequirement, ...]) -> bool:
        return self.requirements.meets_all(requirements)

    def required_level_for(self, action: SkillAction) -> int:
        return self.resolver.required_level_for(action)

    def refresh_unlocks(self) -> list[str]:
        """Re-check the catalog (e.g. after a quest completes). Returns new ids."""
        return self._refresh_unlocked(emit=True)

    def recompute_unlocks(self) -> list[str]:
        """Unlock every satisfied action without notifying. Returns new ids."""
        return self._refresh_unlocked(emit=False)

    def _refresh_unlocked(self, emit: bool) -> list[str]:
        newly: list[str] = []
        for action in self.definition.actions:
            if self._state.is_action_unlocked(action.id):
                continue
            if not self.requirements.meets_all(action.requirements):
                continue
            self._state.unlock_action(action.id)
            newly.append(action.id)
            if emit:
                self._emit(NotificationType.SKILL_ACTION_UNLOCKED, {
                    "skillId": self.skill_id,
                    "actionId": action.id,
                })
                logger.info("%s unlocked action %s", self.definition.name, action.id)
        return newly

    # ========================================================================
    # Action lifecycle
    # ========================================================================

    def perform_action(
        self,
        action_id: str,
        context: dict[str, Any] | None = None,
        repeats: int = 1,
    ) -> ActionResult:
        """
        Validate and start an action.

        Returns a started result (success=True, is_pending) or a rejected
        one carrying the first failing precondition. Never raises for
        action errors.
        """
        self._require_initialized("perform_action")

        action = self.definition.get_action(action_id)
        if action is None:
            return ActionResult.failure(FailureReason.ACTION_NOT_FOUND, action_id)
        if not self._state.is_action_unlocked(action_id):
            return ActionResult.failure(FailureReason.ACTION_NOT_UNLOCKED, action_id)
        if not self.requirements.meets_all(action.requirements):
            return ActionResult.failure(FailureReason.REQUIREMENTS_NOT_MET, action_id)
        if self._state.active_action is not None:
            return ActionResult.failure(FailureReason.ALREADY_BUSY, action_id)

        duration = self._start(action, dict(context or {}), max(1, int(repeats)), 0)
        return ActionResult.started(action_id, duration)

    def _start(
        self,
        action: SkillAction,
        context: dict[str, Any],
        repeats: int,
        current_repeat: int,
    ) -> int:
        now = self.clock.now()
        modifier = self.behavior.duration_modifier(self, action, context)
        duration = self.resolver.compute_duration(action, self._state.level, modifier)
        self._state.active_action = ActiveAction(
            action_id=action.id,
            start_time=now,
            end_time=now + duration,
            repeats=repeats,
            current_repeat=current_repeat,
            context=context,
        )
        self._emit(NotificationType.ACTION_STARTED, {
            "skillId": self.skill_id,
            "actionId": action.id,
            "duration": duration,
        })
        logger.debug("%s started %s (%sms)", self.skill_id, action.id, duration)
        return duration

    def tick(self, now: int | None = None) -> ActionResult | None:
        """Resolve the active action if its end time has been reached."""
        self._require_initialized("tick")
        active = self._state.active_action
        if active is None:
            return None
        if now is None:
            now = self.clock.now()
        if not active.is_due(now):
            return None
        return self._resolve_active()

    def resolve_now(self) -> ActionResult | None:
        """Resolve the active action regardless of time."""
        self._require_initialized("resolve_now")
        if self._state.active_action is None:
            return None
        return self._resolve_active()

    def time_remaining(self, now: int | None = None) -> int:
        active = self._state.active_action
        if active is None:
            return 0
        return active.time_remaining(self.clock.now() if now is None else now)

    def _resolve_active(self) -> ActionResult:
        active = self._state.active_action
        action = self.definition.get_action(active.action_id)
        if action is None:
            self._state.active_action = None
            logger.warning("%s dropped unknown active action %s", self.skill_id, active.action_id)
            return ActionResult.failure(FailureReason.ACTION_NOT_FOUND, active.action_id)

        context = active.context
        duration = active.duration

        def adjust(reward, amount, critical):
            return self.behavior.modify_reward_amount(self, reward, amount, context, critical)

        resolution = self.resolver.resolve(
            action,
            self._state.level,
            success_modifier=self.behavior.success_modifier(self, action, context),
            critical_modifier=self.behavior.critical_modifier(self, action, context),
            adjust=adjust,
        )

        if not resolution.success:
            self._finish(duration)
            self._emit(NotificationType.ACTION_FAILED, {
                "skillId": self.skill_id,
                "actionId": action.id,
                "reason": FailureReason.ACTION_FAILED.value,
            })
            logger.debug("%s failed %s", self.skill_id, action.id)
            result = ActionResult.failed_roll(action.id, duration)
        else:
            details = self.behavior.apply_action_effects(
                self, action, resolution.rewards, context, resolution.critical
            )
            self._finish(duration)
            self._emit(NotificationType.ACTION_COMPLETED, {
                "skillId": self.skill_id,
                "actionId": action.id,
                "rewards": [r.to_dict() for r in resolution.rewards],
                "critical": resolution.critical,
            })
            result = ActionResult.completed(
                action.id,
                duration,
                rewards=resolution.rewards,
                experience=resolution.experience,
                crit_bonus=self.config.critical_multiplier if resolution.critical else None,
            )
            result.details = details or {}
            gained = resolution.experience.get(self.skill_id, 0)
            if gained > 0:
                result.levels_gained = self.handle_experience_gained(gained)
            logger.debug("%s completed %s (+%s xp)", self.skill_id, action.id, gained)

        self._continue_repeats(action, active)
        return result

    def _finish(self, duration: int) -> None:
        self._state.active_action = None
        self._state.actions_completed += 1
        self._state.time_spent += duration

    def _continue_repeats(self, action: SkillAction, finished: ActiveAction) -> None:
        if not finished.has_more_repeats or not self._initialized:
            return
        if not self._state.is_action_unlocked(action.id):
            return
        if not self.requirements.meets_all(action.requirements):
            logger.debug("%s stops repeating %s: requirements not met", self.skill_id, action.id)
            return
        context = self.behavior.next_repeat_context(self, action, finished.context)
        if context is None:
            logger.debug("%s stops repeating %s", self.skill_id, action.id)
            return
        self._start(action, context, finished.repeats, finished.current_repeat + 1)

    # ========================================================================
    # Experience
    # ========================================================================

    def handle_experience_gained(self, amount: int) -> int:
        """
        Add experience and apply every level-up it causes.

        Emits per level gained: skill:action_unlocked for each newly
        unlocked action, then one skill:level_up. Returns levels gained.
        """
        self._require_initialized("handle_experience_gained")
        if amount <= 0:
            return 0

        state = self._state
        state.total_experience_gained += amount
        state.experience += amount

        gained = 0
        while state.experience >= state.experience_to_next and state.level < self.max_level:
            state.experience -= state.experience_to_next
            state.level += 1
            state.experience_to_next = self.experience_for_level(state.level + 1)
            gained += 1

            self._refresh_unlocked(emit=True)
            self._emit(NotificationType.SKILL_LEVEL_UP, {
                "skillId": self.skill_id,
                "newLevel": state.level,
            })
            logger.info("%s reached level %s", self.definition.name, state.level)

        if state.level >= self.max_level:
            state.experience = min(state.experience, state.experience_to_next - 1)

        return gained

    # ========================================================================
    # Queries
    # ========================================================================

    def get_definition(self) -> SkillDefinition:
        return self.definition

    def get_state(self) -> SkillState:
        """Defensive copy of the current state."""
        return self._state.clone()

    def get_actions(self) -> list[SkillAction]:
        return list(self.definition.actions)

    def get_action(self, action_id: str) -> SkillAction | None:
        return self.definition.get_action(action_id)

    def get_available_actions(self) -> list[SkillAction]:
        """Unlocked actions, in catalog order."""
        return [a for a in self.definition.actions if self._state.is_action_unlocked(a.id)]

    def get_performable_actions(self) -> list[SkillAction]:
        """Unlocked actions whose requirements currently hold."""
        return [
            a for a in self.get_available_actions()
            if self.requirements.meets_all(a.requirements)
        ]

    def get_progress_to_next(self) -> float:
        """Fraction of the way to the next level; 1.0 at max level."""
        if self._state.level >= self.max_level:
            return 1.0
        if self._state.experience_to_next <= 0:
            return 0.0
        return max(0.0, min(1.0, self._state.experience / self._state.experience_to_next))

    def get_statistics(self) -> SkillStatistics:
        return SkillStatistics(
            skill_id=self.skill_id,
            current_level=self._state.level,
            total_experience=self._state.total_experience_gained,
            experience_to_next=self._state.experience_to_next,
            progress_to_next=self.get_progress_to_next(),
            actions_completed=self._state.actions_completed,
            time_spent=self._state.time_spent,
            actions_unlocked=len(self._state.unlocked_actions),
            total_actions=len(self.definition.actions),
        )

    def get_next_milestones(self, limit: int = 3) -> list[Milestone]:
        """Upcoming action unlocks and milestone levels, nearest first."""
        current = self._state.level
        by_level: dict[int, Milestone] = {}

        for action in self.definition.actions:
            required = self.required_level_for(action)
            if required > current and required not in by_level:
                by_level[required] = Milestone(required, f"Unlock {action.name}")

        for level in self.config.milestone_levels:
            if current < level <= self.max_level and level not in by_level:
                by_level[level] = Milestone(level, f"Level {level} Milestone")

        return [by_level[level] for level in sorted(by_level)][:limit]

    # ========================================================================
    # Skill-specific state
    # ========================================================================

    def update_skill_state(self, mutator: Callable[[Any], Any]) -> Any:
        """Apply `mutator` in place to the behavior-owned state. Returns its result."""
        return mutator(self._state.skill_state)

    # ========================================================================
    # Persistence
    # ========================================================================

    def save_state(self) -> dict[str, Any]:
        """Serialize {config, state, isInitialized}."""
        state = self._state
        active = state.active_action
        snapshot = EngineSnapshot(
            config=self.definition.to_dict(),
            state=SkillStateSnapshot(
                level=state.level,
                experience=state.experience,
                experience_to_next=state.experience_to_next,
                total_experience_gained=state.total_experience_gained,
                actions_completed=state.actions_completed,
                time_spent=state.time_spent,
                unlocked_actions=list(state.unlocked_actions),
                active_action=None if active is None else ActiveActionSnapshot(
                    action_id=active.action_id,
                    start_time=active.start_time,
                    end_time=active.end_time,
                    repeats=active.repeats,
                    current_repeat=active.current_repeat,
                    context=dict(active.context),
                ),
                skill_state=self.behavior.dump_skill_state(state.skill_state),
            ),
            is_initialized=self._initialized,
        )
        return snapshot.model_dump(by_alias=True)

    def load_state(self, data: Any, refresh_unlocks: bool = True) -> bool:
        """
        Restore from a save_state() payload.

        A corrupt or absent payload logs a warning, restores the initial
        state, and returns False. Never raises for bad data.

        refresh_unlocks=False defers the recomputation of unlocked actions
        to a later recompute_unlocks() call, as for reset().
        """
        try:
            snapshot = EngineSnapshot.model_validate(data)
            state = self._state_from_snapshot(snapshot.state)
        except (ValidationError, ValueError, TypeError, KeyError) as e:
            logger.warning("Could not load %s state, using initial state: %s", self.skill_id, e)
            self._state = self._create_initial_state()
            if refresh_unlocks:
                self._refresh_unlocked(emit=False)
            return False

        self._state = state
        if refresh_unlocks:
            self._refresh_unlocked(emit=False)
        if snapshot.is_initialized and not self._initialized:
            self.initialize()
        logger.info("Loaded %s at level %s", self.definition.name, state.level)
        return True

    def _state_from_snapshot(self, saved: SkillStateSnapshot) -> SkillState:
        if saved.level > self.max_level:
            raise ValueError(f"level {saved.level} exceeds max level {self.max_level}")

        experience_to_next = self.experience_for_level(saved.level + 1)
        known = set(self.definition.action_ids)

        active = None
        if saved.active_action is not None:
            if saved.active_action.action_id in known:
                active = ActiveAction(
                    action_id=saved.active_action.action_id,
                    start_time=saved.active_action.start_time,
                    end_time=saved.active_action.end_time,
                    repeats=saved.active_action.repeats,
                    current_repeat=saved.active_action.current_repeat,
                    context=dict(saved.active_action.context),
                )
            else:
                logger.warning("Dropping saved active action %s for %s",
                               saved.active_action.action_id, self.skill_id)

        if saved.skill_state is None:
            skill_state = self.behavior.create_skill_state(self.definition)
        else:
            skill_state = self.behavior.load_skill_state(saved.skill_state, self.definition)

        unlocked: list[str] = []
        for action_id in saved.unlocked_actions:
            if action_id in known and action_id not in unlocked:
                unlocked.append(action_id)

        return SkillState(
            level=saved.level,
            experience=min(saved.experience, experience_to_next - 1),
            experience_to_next=experience_to_next,
            total_experience_gained=saved.total_experience_gained,
            actions_completed=saved.actions_completed,
            time_spent=saved.time_spent,
            unlocked_actions=unlocked,
            active_action=active,
            skill_state=skill_state,
        )

    # ========================================================================
    # Notifications
    # ========================================================================

    def _emit(self, type: NotificationType, payload: dict[str, Any]) -> None:
        self.notifications.emit(type, payload, timestamp=self.clock.now())

    def emit(self, type: NotificationType, payload: dict[str, Any]) -> None:
        """Emit on behalf of the behavior (skill-specific notifications)."""
        self._emit(type, payload)
