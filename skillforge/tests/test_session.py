"""
Tests for skill sessions and the session manager.

Tests:
- Session composition and the woodcutting facade
- Tick draining and reactive unlocks
- Host events fed through publish()
- Save/load/reset/end
- SessionManager bookkeeping
"""

import pytest

from ..config import EngineConfig
from ..engine_core.clock import ManualClock
from ..engine_core.notifications import NotificationType
from ..registry.catalog import SkillCatalog
from ..session.manager import SessionManager
from ..session.session import SessionState, SkillSession
from ..skill_schema.definition import ActionRequirement

SUCCESS, NO_CRIT = 0.0, 0.99


@pytest.fixture
def catalog(mining_definition) -> SkillCatalog:
    """Woodcutting plus mining gated on woodcutting level 2."""
    catalog = SkillCatalog.default()
    catalog.add_skill(
        mining_definition,
        unlock_requirements=[ActionRequirement.skill_level("woodcutting", 2)],
    )
    return catalog


@pytest.fixture
def session(collaborators, catalog, clock, rng) -> SkillSession:
    return SkillSession(
        config=EngineConfig(unlock_order=["woodcutting", "mining"]),
        collaborators=collaborators,
        catalog=catalog,
        clock=clock,
        rng=rng,
        session_id="s1",
    )


class TestComposition:
    """Tests for what a session wires together."""

    def test_skills_registered(self, session):
        assert session.is_active()
        assert len(session.registry) == 2
        assert session.registry.is_skill_unlocked("woodcutting")
        assert not session.registry.is_skill_unlocked("mining")

    def test_engines_share_session_objects(self, session, clock, rng):
        engine = session.get_skill("mining")
        assert engine.clock is clock
        assert engine.rng is rng
        assert engine.notifications is session.notifications

    def test_woodcutting_facade(self, session):
        skill = session.woodcutting()
        assert skill.engine is session.get_skill("woodcutting")
        assert skill.get_current_tool().id == "tool_bronze_hatchet"

    def test_woodcutting_facade_absent(self, mining_definition):
        catalog = SkillCatalog()
        catalog.add_skill(mining_definition)
        session = SkillSession(catalog=catalog, clock=ManualClock())
        assert session.woodcutting() is None

    def test_generated_session_id(self):
        session = SkillSession(clock=ManualClock())
        assert session.session_id

    def test_definitions_dir(self, tmp_path):
        (tmp_path / "fishing.yaml").write_text(
            "id: fishing\ncurve: linear\nactions:\n  - id: catch_shrimp\n"
        )
        session = SkillSession(config=EngineConfig(definitions_dir=tmp_path), clock=ManualClock())
        assert session.get_skill("fishing") is not None
        assert session.registry.is_skill_unlocked("fishing")


class TestTick:
    """Tests for the host loop."""

    def test_tick_resolves_and_drains(self, session, clock, rng):
        rng.extend([SUCCESS, NO_CRIT])
        session.perform_action("woodcutting", "chop_oak")

        pending = session.tick()
        assert pending.results == []
        assert [n.type for n in pending.notifications] == [NotificationType.ACTION_STARTED]

        clock.advance(2000)
        done = session.tick()
        assert len(done.results) == 1
        assert done.results[0].experience == {"woodcutting": 25}
        assert len(done.of_type(NotificationType.ACTION_COMPLETED)) == 1
        assert len(done.of_type(NotificationType.TREE_CHOPPED)) == 1
        assert len(session.notifications) == 0

    def test_explicit_now(self, session, rng):
        rng.extend([SUCCESS, NO_CRIT])
        session.perform_action("woodcutting", "chop_oak")
        assert len(session.tick(now=3000).results) == 1

    def test_level_up_unlocks_skill(self, session):
        """A skill level-up drained during tick unlocks gated skills."""
        session.get_skill("woodcutting").handle_experience_gained(110)

        result = session.tick()
        assert [n.payload["newLevel"] for n in result.level_ups] == [2]
        unlocked = result.of_type(NotificationType.SKILL_UNLOCKED)
        assert [n.payload["skillId"] for n in unlocked] == ["mining"]
        assert session.registry.is_skill_unlocked("mining")

    def test_locked_skill_rejected(self, session):
        result = session.perform_action("mining", "mine_copper")
        assert not result.success
        assert result.failure_reason == "Skill not unlocked"


class TestHostEvents:
    """Tests for publish()."""

    def test_quest_completion_unlocks_action(self, session, collaborators):
        collaborators.quests.complete("prospector")
        session.publish(NotificationType.QUEST_COMPLETED, {"questId": "prospector"})

        drained = session.drain_notifications()
        assert [n.type for n in drained] == [
            NotificationType.QUEST_COMPLETED,
            NotificationType.SKILL_ACTION_UNLOCKED,
        ]
        assert drained[1].payload == {"skillId": "mining", "actionId": "mine_gold"}

    def test_player_level_gate(self, mining_definition, collaborators, clock):
        catalog = SkillCatalog()
        catalog.add_skill(mining_definition, unlock_requirements=[ActionRequirement.player_level(3)])
        session = SkillSession(collaborators=collaborators, catalog=catalog, clock=clock)

        session.publish(NotificationType.PLAYER_LEVEL_UP, {"level": 2})
        session.drain_notifications()
        assert not session.registry.is_skill_unlocked("mining")

        collaborators.player.level = 3
        session.publish(NotificationType.PLAYER_LEVEL_UP, {"level": 3})
        session.drain_notifications()
        assert session.registry.is_skill_unlocked("mining")

    def test_publish_timestamps(self, session, clock):
        clock.set(5000)
        note = session.publish(NotificationType.PLAYER_LEVEL_UP)
        assert note.timestamp == 5000
        assert note.payload == {}


class TestPersistence:
    """Tests for session-level save/load/reset."""

    def test_save_load_between_sessions(self, session, collaborators, catalog, clock):
        session.get_skill("woodcutting").handle_experience_gained(500)
        session.tick()
        data = session.save()

        other = SkillSession(
            config=EngineConfig(unlock_order=["woodcutting", "mining"]),
            collaborators=collaborators,
            catalog=catalog,
            clock=clock,
        )
        assert other.load(data)
        assert other.get_skill("woodcutting").level == session.get_skill("woodcutting").level
        assert other.registry.is_skill_unlocked("mining")

    def test_sessions_are_independent(self, session, collaborators, catalog, clock):
        other = SkillSession(collaborators=collaborators, catalog=catalog, clock=clock)
        session.get_skill("woodcutting").handle_experience_gained(500)
        assert other.get_skill("woodcutting").level == 1

    def test_reset(self, session):
        session.get_skill("woodcutting").handle_experience_gained(500)
        session.reset()
        assert session.get_skill("woodcutting").level == 1
        assert len(session.notifications) == 0

    def test_end(self, session):
        engine = session.get_skill("woodcutting")
        session.end()
        assert session.state == SessionState.ENDED
        assert not engine.is_initialized
        session.end()


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_and_get(self, collaborators):
        manager = SessionManager()
        session = manager.create_session(collaborators, clock=ManualClock(), session_id="p1")
        assert manager.get_session("p1") is session
        assert manager.list_active_sessions() == ["p1"]

    def test_duplicate_id(self):
        manager = SessionManager()
        manager.create_session(clock=ManualClock(), session_id="p1")
        with pytest.raises(ValueError):
            manager.create_session(clock=ManualClock(), session_id="p1")

    def test_manager_config_applies(self):
        manager = SessionManager(EngineConfig(critical_multiplier=3.0))
        session = manager.create_session(clock=ManualClock())
        assert session.get_skill("woodcutting").config.critical_multiplier == 3.0

    def test_end_session(self):
        manager = SessionManager()
        session = manager.create_session(clock=ManualClock(), session_id="p1")
        assert manager.end_session("p1")
        assert not session.is_active()
        assert manager.get_session("p1") is None
        assert not manager.end_session("p1")

    def test_cleanup_stale(self):
        manager = SessionManager()
        manager.create_session(clock=ManualClock(current=0), session_id="old")
        manager.create_session(clock=ManualClock(current=3_000_000), session_id="new")

        assert manager.cleanup_stale_sessions(now=3_600_001) == ["old"]
        assert manager.list_active_sessions() == ["new"]

    def test_end_all(self):
        manager = SessionManager()
        manager.create_session(clock=ManualClock(), session_id="a")
        manager.create_session(clock=ManualClock(), session_id="b")
        manager.end_all()
        assert manager.list_active_sessions() == []
