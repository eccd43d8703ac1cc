"""
Skill State - Mutable per-skill progress.

Design principles:
- Owned exclusively by one SkillEngine; callers only ever see clones
- Serializable: round-trips through the persistence snapshots
- Skill-agnostic: skill-specific data lives in `skill_state`, owned
  by the skill's behavior
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy


@dataclass
class ActiveAction:
    """
    The single in-flight action of an engine.

    Times are host milliseconds. `repeats` is the number of times the
    action was requested; `current_repeat` is the zero-based iteration
    in flight.
    """
    action_id: str
    start_time: int
    end_time: int
    repeats: int = 1
    current_repeat: int = 0
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def has_more_repeats(self) -> bool:
        return self.current_repeat + 1 < self.repeats

    def time_remaining(self, now: int) -> int:
        return max(0, self.end_time - now)

    def is_due(self, now: int) -> bool:
        return now >= self.end_time


@dataclass
class SkillState:
    """
    Progress of one skill.

    Invariants:
    - 1 <= level <= max_level
    - 0 <= experience < experience_to_next
    - unlocked_actions holds each action id at most once, in unlock order
    - at most one active_action
    """
    level: int = 1
    experience: int = 0
    experience_to_next: int = 100
    total_experience_gained: int = 0
    actions_completed: int = 0
    time_spent: int = 0
    unlocked_actions: list[str] = field(default_factory=list)
    active_action: ActiveAction | None = None

    # Behavior-owned data (tools, counters, ...)
    skill_state: Any = None

    @property
    def is_busy(self) -> bool:
        return self.active_action is not None

    def is_action_unlocked(self, action_id: str) -> bool:
        return action_id in self.unlocked_actions

    def unlock_action(self, action_id: str) -> bool:
        """Append an action id. Returns False if it was already unlocked."""
        if action_id in self.unlocked_actions:
            return False
        self.unlocked_actions.append(action_id)
        return True

    def clone(self) -> SkillState:
        """Create a deep copy of the state."""
        return deepcopy(self)
