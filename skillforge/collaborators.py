"""
Collaborators - Narrow interfaces to host-owned systems.

The engine never holds the host's economy, inventory, or quest storage.
It only calls:
- Economy:        has_gold, remove_gold, add_gold
- Inventory:      has_item
- QuestLog:       has_completed_quest
- PlayerProgress: get_level

In-memory implementations are provided for tests and simple hosts.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class Economy(ABC):
    """Gold balance owned by the host."""

    @abstractmethod
    def has_gold(self, amount: int) -> bool:
        pass

    @abstractmethod
    def remove_gold(self, amount: int) -> bool:
        """Debit gold. Returns False (and changes nothing) if the balance is short."""
        pass

    @abstractmethod
    def add_gold(self, amount: int) -> None:
        pass


class Inventory(ABC):
    """Item storage owned by the host."""

    @abstractmethod
    def has_item(self, item_id: str, amount: int = 1) -> bool:
        pass


class QuestLog(ABC):
    """Quest progress owned by the host."""

    @abstractmethod
    def has_completed_quest(self, quest_id: str) -> bool:
        pass


class PlayerProgress(ABC):
    """Overall player level, used by player-level requirements."""

    @abstractmethod
    def get_level(self) -> int:
        pass


@dataclass
class Collaborators:
    """
    Bundle of host collaborators handed to every engine.

    Any member may be None; requirements that need a missing
    collaborator are treated as unmet.
    """
    economy: Economy | None = None
    inventory: Inventory | None = None
    quests: QuestLog | None = None
    player: PlayerProgress | None = None


# ============================================================================
# In-memory implementations
# ============================================================================

@dataclass
class InMemoryEconomy(Economy):
    gold: int = 0

    def has_gold(self, amount: int) -> bool:
        return self.gold >= amount

    def remove_gold(self, amount: int) -> bool:
        if self.gold < amount:
            return False
        self.gold -= amount
        return True

    def add_gold(self, amount: int) -> None:
        self.gold += amount


@dataclass
class InMemoryInventory(Inventory):
    items: dict[str, int] = field(default_factory=dict)

    def has_item(self, item_id: str, amount: int = 1) -> bool:
        return self.items.get(item_id, 0) >= amount

    def add_item(self, item_id: str, amount: int = 1) -> None:
        self.items[item_id] = self.items.get(item_id, 0) + amount


@dataclass
class InMemoryQuestLog(QuestLog):
    completed: set[str] = field(default_factory=set)

    def has_completed_quest(self, quest_id: str) -> bool:
        return quest_id in self.completed

    def complete(self, quest_id: str) -> None:
        self.completed.add(quest_id)


@dataclass
class InMemoryPlayer(PlayerProgress):
    level: int = 1

    def get_level(self) -> int:
        return self.level
