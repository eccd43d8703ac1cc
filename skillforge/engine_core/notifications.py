"""
Notifications - Explicit message passing from engines to the host.

Engines write to a NotificationQueue they were handed at construction;
the host drains it (usually once per tick) and renders or forwards what
it finds. There is no global listener registry.

Payload shapes are part of the public contract:

    action:started          {skillId, actionId, duration}
    action:completed        {skillId, actionId, rewards, critical}
    action:failed           {skillId, actionId, reason}
    skill:level_up          {skillId, newLevel}
    skill:action_unlocked   {skillId, actionId}
    skill:unlocked          {skillId}

Host-originated events (fed back in through SkillSession.publish):

    player:level_up         {level}
    quest:completed         {questId}
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator
import logging

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Known notification names."""
    ACTION_STARTED = "action:started"
    ACTION_COMPLETED = "action:completed"
    ACTION_FAILED = "action:failed"
    SKILL_LEVEL_UP = "skill:level_up"
    SKILL_ACTION_UNLOCKED = "skill:action_unlocked"
    SKILL_UNLOCKED = "skill:unlocked"

    # Host events
    PLAYER_LEVEL_UP = "player:level_up"
    QUEST_COMPLETED = "quest:completed"

    # Woodcutting
    TREE_CHOPPED = "woodcutting:tree_chopped"
    TOOL_EQUIPPED = "woodcutting:tool_equipped"
    TOOL_BROKEN = "woodcutting:tool_broken"


@dataclass
class Notification:
    """A single emitted event."""
    type: NotificationType
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "payload": self.payload,
            "timestamp": self.timestamp,
        }


class NotificationQueue:
    """
    Bounded FIFO of notifications.

    Usage:
        queue = NotificationQueue(limit=1000)
        queue.emit(NotificationType.SKILL_UNLOCKED, {"skillId": "woodcutting"})
        for note in queue.drain():
            render(note)

    When the limit is reached the oldest notification is dropped.
    A limit of 0 means unbounded.
    """

    def __init__(self, limit: int = 1000):
        self.limit = limit
        self._items: deque[Notification] = deque(maxlen=limit or None)

    def emit(
        self,
        type: NotificationType,
        payload: dict[str, Any] | None = None,
        timestamp: int = 0,
    ) -> Notification:
        if self.limit and len(self._items) == self.limit:
            logger.warning("Notification queue full, dropping %s", self._items[0].type.value)
        note = Notification(type=type, payload=dict(payload or {}), timestamp=timestamp)
        self._items.append(note)
        return note

    def drain(self) -> list[Notification]:
        """Remove and return everything queued, oldest first."""
        items = list(self._items)
        self._items.clear()
        return items

    def peek(self) -> list[Notification]:
        return list(self._items)

    def of_type(self, type: NotificationType) -> list[Notification]:
        """Queued notifications of one type, without removing them."""
        return [note for note in self._items if note.type == type]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Notification]:
        return iter(list(self._items))
