"""
Skill Session - Composition root for one player's skills.

A session owns, and passes by reference:
- EngineConfig
- The clock and the shared RandomSource
- The NotificationQueue every engine writes to
- The host collaborators (economy, inventory, quests, player)
- The SkillRegistry, populated from a SkillCatalog

The host loop:
1. session.perform_action(...) when the player starts something
2. session.tick() every tick_interval_ms
3. Render TickResult.notifications
4. session.publish(...) for host events (player level-up, quest done)
5. session.save() when it wants a snapshot

Sessions are independent: two sessions never share state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import uuid

from ..collaborators import Collaborators
from ..config import EngineConfig
from ..engine_core.action import ActionResult
from ..engine_core.clock import SystemClock
from ..engine_core.engine import SkillEngine
from ..engine_core.notifications import Notification, NotificationQueue, NotificationType
from ..engine_core.rng import RandomSource
from ..registry.catalog import SkillCatalog
from ..registry.registry import SkillRegistry
from ..skills.woodcutting import WoodcuttingSkill
from ..skills.woodcutting.data import SKILL_ID as WOODCUTTING_ID

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a skill session."""
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class TickResult:
    """
    What happened during one tick.

    Contains the actions that resolved and every notification drained,
    including the ones caused by reactive unlocks.
    """
    now: int
    results: list[ActionResult] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)

    def of_type(self, type: NotificationType) -> list[Notification]:
        return [note for note in self.notifications if note.type == type]

    @property
    def level_ups(self) -> list[Notification]:
        return self.of_type(NotificationType.SKILL_LEVEL_UP)


class SkillSession:
    """
    One player's skills plus everything they depend on.

    Usage:
        session = SkillSession(collaborators=Collaborators(economy=InMemoryEconomy(100)))
        session.perform_action("woodcutting", "chop_oak")
        result = session.tick()
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        collaborators: Collaborators | None = None,
        catalog: SkillCatalog | None = None,
        clock: Any = None,
        rng: RandomSource | None = None,
        session_id: str | None = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.config = config if config is not None else EngineConfig()
        self.clock = clock if clock is not None else SystemClock()
        self.rng = rng if rng is not None else RandomSource(self.config.random_seed)
        self.collaborators = collaborators if collaborators is not None else Collaborators()
        self.notifications = NotificationQueue(self.config.notification_limit)
        self.registry = SkillRegistry(
            config=self.config,
            collaborators=self.collaborators,
            notifications=self.notifications,
            clock=self.clock,
        )

        self.catalog = catalog if catalog is not None else SkillCatalog.default()
        if self.config.definitions_dir is not None:
            self.catalog.load_directory(self.config.definitions_dir)
        self.catalog.populate(
            self.registry,
            collaborators=self.collaborators,
            rng=self.rng,
            clock=self.clock,
            notifications=self.notifications,
            config=self.config,
        )

        self.created_at = self.clock.now()
        self.state = SessionState.ACTIVE
        logger.info("Session %s started with %d skill(s)", self.session_id, len(self.registry))

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    # ========================================================================
    # Skills
    # ========================================================================

    def get_skill(self, skill_id: str) -> SkillEngine | None:
        return self.registry.get_skill(skill_id)

    def woodcutting(self) -> WoodcuttingSkill | None:
        """Woodcutting facade, if woodcutting is registered."""
        engine = self.registry.get_skill(WOODCUTTING_ID)
        return WoodcuttingSkill(engine) if engine is not None else None

    def perform_action(
        self,
        skill_id: str,
        action_id: str,
        context: dict[str, Any] | None = None,
        repeats: int = 1,
    ) -> ActionResult:
        return self.registry.perform_action(skill_id, action_id, context, repeats=repeats)

    # ========================================================================
    # Loop
    # ========================================================================

    def tick(self, now: int | None = None) -> TickResult:
        """Advance every engine to `now` and drain notifications."""
        if now is None:
            now = self.clock.now()
        results = self.registry.tick(now)
        return TickResult(now=now, results=results, notifications=self.drain_notifications())

    def publish(self, type: NotificationType, payload: dict[str, Any] | None = None) -> Notification:
        """Feed a host event (e.g. player:level_up) in; it is handled on the next drain."""
        return self.notifications.emit(type, payload, timestamp=self.clock.now())

    def drain_notifications(self) -> list[Notification]:
        """
        Hand every queued notification to the registry, then return them.

        Reactive unlocks may queue more notifications; those are drained
        in the same call.
        """
        drained: list[Notification] = []
        while len(self.notifications):
            batch = self.notifications.drain()
            for note in batch:
                self.registry.handle_notification(note)
            drained.extend(batch)
        return drained

    # ========================================================================
    # Persistence
    # ========================================================================

    def save(self) -> dict[str, Any]:
        return self.registry.save_all_skills()

    def load(self, data: Any) -> bool:
        return self.registry.load_all_skills(data)

    def reset(self) -> None:
        self.registry.reset_all_skills()
        self.notifications.clear()

    def end(self) -> None:
        """Destroy every engine. The session cannot be used afterwards."""
        if self.state == SessionState.ENDED:
            return
        self.registry.destroy()
        self.notifications.clear()
        self.state = SessionState.ENDED
        logger.info("Session %s ended", self.session_id)
