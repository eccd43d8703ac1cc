"""
Engine Core - Skill state management and action resolution.

The engine is the runtime that:
1. Loads a SkillDefinition
2. Owns SkillState
3. Gates actions on requirements
4. Resolves actions through the ActionResolver
5. Applies experience and level-ups, emitting notifications
"""

from .state import SkillState, ActiveAction
from .action import ActionResult, FailureReason, ResultPhase
from .rng import RandomSource, SequenceRandom
from .clock import SystemClock, ManualClock
from .curves import experience_for_level, total_experience_for_level, level_for_total_experience
from .requirements import RequirementEvaluator
from .notifications import Notification, NotificationQueue, NotificationType
from .behavior import SkillBehavior, DefaultBehavior
from .resolver import ActionResolver, Resolution
from .engine import SkillEngine, SkillStatistics, Milestone, EngineNotInitializedError

__all__ = [
    "SkillState",
    "ActiveAction",
    "ActionResult",
    "FailureReason",
    "ResultPhase",
    "RandomSource",
    "SequenceRandom",
    "SystemClock",
    "ManualClock",
    "experience_for_level",
    "total_experience_for_level",
    "level_for_total_experience",
    "RequirementEvaluator",
    "Notification",
    "NotificationQueue",
    "NotificationType",
    "SkillBehavior",
    "DefaultBehavior",
    "ActionResolver",
    "Resolution",
    "SkillEngine",
    "SkillStatistics",
    "Milestone",
    "EngineNotInitializedError",
]
