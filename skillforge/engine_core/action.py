"""
Action Results - Structured outcomes of performing and resolving actions.

Every action error is returned, never raised:
- Precondition failures (not found / not unlocked / requirements / busy)
- A failed success roll ("Action failed")

A successful perform_action() returns a *started* result; the later
resolution (on tick) returns a *resolved* result carrying rewards and
experience.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..skill_schema.definition import ActionReward


class FailureReason(str, Enum):
    """Why an action did not go ahead or did not succeed."""
    ACTION_NOT_FOUND = "Action not found"
    ACTION_NOT_UNLOCKED = "Action not unlocked"
    REQUIREMENTS_NOT_MET = "Requirements not met"
    ALREADY_BUSY = "Already performing an action"
    ACTION_FAILED = "Action failed"

    # Registry routing
    SKILL_NOT_FOUND = "Skill not found"
    SKILL_NOT_UNLOCKED = "Skill not unlocked"


class ResultPhase(Enum):
    """Where in the action lifecycle a result was produced."""
    REJECTED = "rejected"  # Precondition failed, nothing changed
    STARTED = "started"  # Active action parked
    RESOLVED = "resolved"  # Rolls made, state updated


@dataclass
class ActionResult:
    """
    Result of performing or resolving an action.

    Contains:
    - Whether it succeeded
    - The failure reason (if any)
    - Rewards and per-skill experience (resolved results only)
    - The critical multiplier when the action crit
    """
    success: bool
    action_id: str | None = None
    phase: ResultPhase = ResultPhase.RESOLVED
    failure_reason: FailureReason | None = None
    rewards: list[ActionReward] = field(default_factory=list)
    experience: dict[str, int] = field(default_factory=dict)
    crit_bonus: float | None = None
    duration: int = 0

    # Levels gained while applying this result's experience
    levels_gained: int = 0

    # Skill-specific extras (e.g. tree chopped, tool broken)
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_critical(self) -> bool:
        return self.crit_bonus is not None

    @property
    def is_pending(self) -> bool:
        return self.phase == ResultPhase.STARTED

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        action_id: str | None = None,
    ) -> ActionResult:
        """Create a rejected result. No state was changed."""
        return cls(
            success=False,
            action_id=action_id,
            phase=ResultPhase.REJECTED,
            failure_reason=reason,
        )

    @classmethod
    def started(cls, action_id: str, duration: int) -> ActionResult:
        """Create a result for an action that is now in flight."""
        return cls(
            success=True,
            action_id=action_id,
            phase=ResultPhase.STARTED,
            duration=duration,
        )

    @classmethod
    def failed_roll(cls, action_id: str, duration: int) -> ActionResult:
        """Create a resolved result for a failed success roll."""
        return cls(
            success=False,
            action_id=action_id,
            phase=ResultPhase.RESOLVED,
            failure_reason=FailureReason.ACTION_FAILED,
            duration=duration,
        )

    @classmethod
    def completed(
        cls,
        action_id: str,
        duration: int,
        rewards: list[ActionReward],
        experience: dict[str, int],
        crit_bonus: float | None = None,
    ) -> ActionResult:
        """Create a resolved result for a successful action."""
        return cls(
            success=True,
            action_id=action_id,
            phase=ResultPhase.RESOLVED,
            rewards=rewards,
            experience=experience,
            crit_bonus=crit_bonus,
            duration=duration,
        )
