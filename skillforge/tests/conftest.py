"""
Pytest fixtures for Skillforge tests.
"""

import pytest

from ..collaborators import (
    Collaborators,
    InMemoryEconomy,
    InMemoryInventory,
    InMemoryQuestLog,
    InMemoryPlayer,
)
from ..config import EngineConfig
from ..engine_core.clock import ManualClock
from ..engine_core.engine import SkillEngine
from ..engine_core.notifications import NotificationQueue
from ..engine_core.rng import SequenceRandom
from ..skill_schema.definition import (
    ActionRequirement,
    ActionReward,
    CurveKind,
    SkillAction,
    SkillDefinition,
)
from ..skills.woodcutting import WoodcuttingSkill, create_woodcutting_engine


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(current=1_000)


@pytest.fixture
def rng() -> SequenceRandom:
    """Scripted rolls; tests extend it with what they need."""
    return SequenceRandom()


@pytest.fixture
def notifications() -> NotificationQueue:
    return NotificationQueue(limit=0)


@pytest.fixture
def economy() -> InMemoryEconomy:
    return InMemoryEconomy(gold=1_000)


@pytest.fixture
def collaborators(economy) -> Collaborators:
    return Collaborators(
        economy=economy,
        inventory=InMemoryInventory(),
        quests=InMemoryQuestLog(),
        player=InMemoryPlayer(level=1),
    )


@pytest.fixture
def mining_definition() -> SkillDefinition:
    """A small linear skill with one gold-gated and one quest-gated action."""
    return SkillDefinition(
        id="mining",
        name="Mining",
        description="Dig ore",
        max_level=10,
        curve=CurveKind.LINEAR,
        base_experience=50,
        actions=(
            SkillAction(
                id="mine_copper",
                name="Mine Copper",
                requirements=(ActionRequirement.skill_level("mining", 1),),
                rewards=(
                    ActionReward.experience("mining", 20),
                    ActionReward.item("ore_copper", 1),
                ),
                base_time=1000,
            ),
            SkillAction(
                id="mine_iron",
                name="Mine Iron",
                requirements=(ActionRequirement.skill_level("mining", 3),),
                rewards=(
                    ActionReward.experience("mining", 40),
                    ActionReward.gold(5),
                ),
                base_time=2000,
                level_scaling=0.05,
            ),
            SkillAction(
                id="mine_gold",
                name="Mine Gold",
                requirements=(
                    ActionRequirement.skill_level("mining", 1),
                    ActionRequirement.quest("prospector"),
                ),
                rewards=(ActionReward.experience("mining", 60),),
                base_time=3000,
            ),
        ),
    )


@pytest.fixture
def mining_engine(mining_definition, collaborators, rng, clock, notifications) -> SkillEngine:
    engine = SkillEngine(
        mining_definition,
        collaborators=collaborators,
        rng=rng,
        clock=clock,
        notifications=notifications,
    )
    engine.initialize()
    return engine


@pytest.fixture
def woodcutting_engine(collaborators, rng, clock, notifications) -> SkillEngine:
    engine = create_woodcutting_engine(
        collaborators=collaborators,
        rng=rng,
        clock=clock,
        notifications=notifications,
        config=EngineConfig(),
    )
    engine.initialize()
    return engine


@pytest.fixture
def woodcutting(woodcutting_engine) -> WoodcuttingSkill:
    return WoodcuttingSkill(woodcutting_engine)
