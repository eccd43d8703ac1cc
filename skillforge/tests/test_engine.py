"""
Tests for the skill engine.

Tests:
- Action preconditions and the failure taxonomy
- Scheduling and resolution on tick
- Experience, level-ups and unlock propagation
- Repeats
- Queries and lifecycle
"""

import pytest

from ..collaborators import Collaborators, InMemoryEconomy
from ..engine_core.action import FailureReason
from ..engine_core.behavior import SkillBehavior
from ..engine_core.engine import EngineNotInitializedError, Milestone, SkillEngine
from ..engine_core.notifications import NotificationType
from ..engine_core.rng import SequenceRandom
from ..skill_schema.definition import (
    ActionRequirement,
    ActionReward,
    CurveKind,
    SkillAction,
    SkillDefinition,
)

SUCCESS, NO_CRIT, FAIL = 0.0, 0.99, 0.99


def types(queue):
    return [note.type for note in queue.drain()]


class TestPreconditions:
    """Tests for perform_action validation."""

    def test_action_not_found(self, mining_engine):
        result = mining_engine.perform_action("mine_mithril")
        assert not result.success
        assert result.failure_reason == FailureReason.ACTION_NOT_FOUND
        assert result.failure_reason == "Action not found"

    def test_action_not_unlocked(self, mining_engine):
        """mine_iron needs level 3."""
        result = mining_engine.perform_action("mine_iron")
        assert result.failure_reason == "Action not unlocked"

    def test_requirements_not_met(self, mining_engine, collaborators):
        """An unlocked action whose gate later fails is rejected."""
        collaborators.quests.complete("prospector")
        mining_engine.refresh_unlocks()
        collaborators.quests.completed.discard("prospector")

        result = mining_engine.perform_action("mine_gold")
        assert result.failure_reason == "Requirements not met"

    def test_already_busy(self, mining_engine):
        """A second call in immediate succession always fails."""
        first = mining_engine.perform_action("mine_copper")
        second = mining_engine.perform_action("mine_copper")

        assert first.success
        assert not second.success
        assert second.failure_reason == "Already performing an action"

    def test_failure_leaves_state_untouched(self, mining_engine, notifications):
        before = mining_engine.get_state()
        mining_engine.perform_action("mine_iron")
        assert mining_engine.get_state() == before
        assert len(notifications) == 0

    def test_uninitialized_engine_raises(self, mining_definition):
        engine = SkillEngine(mining_definition)
        with pytest.raises(EngineNotInitializedError):
            engine.perform_action("mine_copper")
        with pytest.raises(EngineNotInitializedError):
            engine.tick(0)
        with pytest.raises(EngineNotInitializedError):
            engine.handle_experience_gained(10)


class TestScheduling:
    """Tests for starting and resolving actions."""

    def test_start_parks_active_action(self, mining_engine, clock, notifications):
        result = mining_engine.perform_action("mine_copper")

        assert result.success
        assert result.is_pending
        assert result.duration == 1000
        state = mining_engine.get_state()
        assert state.active_action.action_id == "mine_copper"
        assert state.active_action.start_time == clock.now()
        assert state.active_action.end_time == clock.now() + 1000

        note = notifications.drain()[0]
        assert note.type == NotificationType.ACTION_STARTED
        assert note.payload["actionId"] == "mine_copper"
        assert note.payload["duration"] == 1000

    def test_tick_before_end_does_nothing(self, mining_engine, clock):
        mining_engine.perform_action("mine_copper")
        clock.advance(999)
        assert mining_engine.tick() is None
        assert mining_engine.is_busy

    def test_tick_at_end_resolves(self, mining_engine, clock, rng):
        rng.extend([SUCCESS, NO_CRIT])
        mining_engine.perform_action("mine_copper")
        clock.advance(1000)

        result = mining_engine.tick()
        assert result.success
        assert not result.is_pending
        assert result.experience == {"mining": 20}
        assert not mining_engine.is_busy

    def test_tick_with_explicit_time(self, mining_engine, clock, rng):
        rng.extend([SUCCESS, NO_CRIT])
        mining_engine.perform_action("mine_copper")
        assert mining_engine.tick(clock.now() + 1000) is not None

    def test_resolve_now_when_idle(self, mining_engine):
        assert mining_engine.resolve_now() is None

    def test_time_remaining(self, mining_engine, clock):
        mining_engine.perform_action("mine_copper")
        clock.advance(400)
        assert mining_engine.time_remaining() == 600


class TestResolution:
    """Tests for resolved outcomes."""

    def test_success_updates_counters(self, mining_engine, rng, notifications):
        rng.extend([SUCCESS, NO_CRIT])
        mining_engine.perform_action("mine_copper")
        result = mining_engine.resolve_now()

        state = mining_engine.get_state()
        assert state.actions_completed == 1
        assert state.time_spent == 1000
        assert state.experience == 20
        assert [(r.target, r.amount) for r in result.rewards] == [("mining", 20), ("ore_copper", 1)]
        assert result.crit_bonus is None
        assert types(notifications) == [
            NotificationType.ACTION_STARTED,
            NotificationType.ACTION_COMPLETED,
        ]

    def test_failed_roll(self, mining_engine, rng, notifications):
        rng.extend([FAIL])
        mining_engine.perform_action("mine_copper")
        notifications.clear()

        result = mining_engine.resolve_now()
        assert not result.success
        assert result.failure_reason == "Action failed"
        assert result.rewards == []
        assert result.experience == {}

        state = mining_engine.get_state()
        assert state.active_action is None
        assert state.actions_completed == 1
        assert state.time_spent == 1000
        assert state.experience == 0

        note = notifications.drain()[0]
        assert note.type == NotificationType.ACTION_FAILED
        assert note.payload["reason"] == "Action failed"

    def test_critical(self, mining_engine, rng):
        rng.extend([SUCCESS, 0.0])
        mining_engine.perform_action("mine_copper")
        result = mining_engine.resolve_now()

        assert result.is_critical
        assert result.crit_bonus == 2.0
        assert result.experience == {"mining": 40}
        assert [r.amount for r in result.rewards] == [40, 2]

    def test_gold_credited(self, mining_engine, rng, economy):
        """Gold rewards go to the economy collaborator."""
        mining_engine.handle_experience_gained(250)
        rng.extend([SUCCESS, NO_CRIT])
        mining_engine.perform_action("mine_iron")
        result = mining_engine.resolve_now()

        assert result.success
        assert economy.gold == 1005
        assert result.details["gold_credited"] == 5

    def test_experience_applied_after_completed(self, rng, clock, notifications):
        """Level-ups from an action follow its action:completed."""
        definition = SkillDefinition(
            id="fishing",
            name="Fishing",
            curve=CurveKind.LINEAR,
            base_experience=10,
            actions=(
                SkillAction(
                    id="fish",
                    name="Fish",
                    rewards=(ActionReward.experience("fishing", 20),),
                ),
            ),
        )
        engine = SkillEngine(definition, rng=rng, clock=clock, notifications=notifications)
        engine.initialize()
        rng.extend([SUCCESS, NO_CRIT])

        engine.perform_action("fish")
        result = engine.resolve_now()

        assert result.levels_gained == 1
        assert types(notifications) == [
            NotificationType.ACTION_STARTED,
            NotificationType.ACTION_COMPLETED,
            NotificationType.SKILL_LEVEL_UP,
        ]


class TestRepeats:
    """Tests for repeated actions."""

    def test_repeats_reschedule(self, mining_engine, rng, notifications):
        rng.extend([SUCCESS, NO_CRIT] * 3)
        mining_engine.perform_action("mine_copper", repeats=3)

        for iteration in range(3):
            active = mining_engine.get_state().active_action
            assert active.current_repeat == iteration
            assert mining_engine.resolve_now().success

        assert not mining_engine.is_busy
        assert mining_engine.get_state().actions_completed == 3
        started = [n for n in notifications.drain() if n.type == NotificationType.ACTION_STARTED]
        assert len(started) == 3

    def test_repeats_continue_after_failed_roll(self, mining_engine, rng):
        rng.extend([FAIL, SUCCESS, NO_CRIT])
        mining_engine.perform_action("mine_copper", repeats=2)

        assert not mining_engine.resolve_now().success
        assert mining_engine.is_busy
        assert mining_engine.resolve_now().success
        assert not mining_engine.is_busy

    def test_repeats_stop_when_requirements_fail(self, rng, clock):
        economy = InMemoryEconomy(gold=100)
        definition = SkillDefinition(
            id="trading",
            name="Trading",
            actions=(
                SkillAction(
                    id="haggle",
                    name="Haggle",
                    requirements=(ActionRequirement.gold(50),),
                    rewards=(ActionReward.experience("trading", 5),),
                ),
            ),
        )
        engine = SkillEngine(
            definition,
            collaborators=Collaborators(economy=economy),
            rng=rng,
            clock=clock,
        )
        engine.initialize()
        rng.extend([SUCCESS, NO_CRIT])

        engine.perform_action("haggle", repeats=5)
        economy.gold = 0
        engine.resolve_now()

        assert not engine.is_busy

    def test_behavior_rebuilds_repeat_context(self, mining_definition, rng, clock):
        """The behavior sees each finished context and may stop the run."""
        class CountingBehavior(SkillBehavior):
            def next_repeat_context(self, engine, action, context):
                swings = context.get("swings", 1) + 1
                return None if swings > 2 else {**context, "swings": swings}

        engine = SkillEngine(mining_definition, CountingBehavior(), rng=rng, clock=clock)
        engine.initialize()
        rng.extend([SUCCESS, NO_CRIT] * 2)

        engine.perform_action("mine_copper", {"swings": 1}, repeats=5)
        engine.resolve_now()
        assert engine.get_state().active_action.context == {"swings": 2}
        engine.resolve_now()

        assert not engine.is_busy
        assert engine.get_state().actions_completed == 2


class TestExperience:
    """Tests for handle_experience_gained."""

    def test_single_level(self, mining_engine, notifications):
        assert mining_engine.handle_experience_gained(100) == 1

        state = mining_engine.get_state()
        assert state.level == 2
        assert state.experience == 0
        assert state.experience_to_next == 150
        note = notifications.drain()[0]
        assert note.type == NotificationType.SKILL_LEVEL_UP
        assert note.payload == {"skillId": "mining", "newLevel": 2}

    def test_multi_level_events_in_order(self, mining_engine, notifications):
        """One level_up per level, ascending, with unlocks before their level_up."""
        assert mining_engine.handle_experience_gained(260) == 2

        notes = notifications.drain()
        assert [n.type for n in notes] == [
            NotificationType.SKILL_LEVEL_UP,
            NotificationType.SKILL_ACTION_UNLOCKED,
            NotificationType.SKILL_LEVEL_UP,
        ]
        assert [n.payload["newLevel"] for n in notes if n.type == NotificationType.SKILL_LEVEL_UP] == [2, 3]
        assert notes[1].payload == {"skillId": "mining", "actionId": "mine_iron"}
        assert mining_engine.get_state().experience == 10

    def test_non_positive_ignored(self, mining_engine):
        assert mining_engine.handle_experience_gained(0) == 0
        assert mining_engine.handle_experience_gained(-5) == 0
        assert mining_engine.get_state().total_experience_gained == 0

    def test_max_level_cap(self, mining_engine):
        mining_engine.handle_experience_gained(1_000_000)

        state = mining_engine.get_state()
        assert state.level == 10
        assert 0 <= state.experience < state.experience_to_next
        assert state.total_experience_gained == 1_000_000
        assert mining_engine.get_progress_to_next() == 1.0

    def test_progress_in_range(self, mining_engine):
        for _ in range(30):
            progress = mining_engine.get_progress_to_next()
            assert 0.0 <= progress <= 1.0
            mining_engine.handle_experience_gained(37)

    def test_total_experience_reaches_level(self, mining_engine):
        mining_engine.handle_experience_gained(mining_engine.total_experience_for_level(7))
        assert mining_engine.level == 7
        assert mining_engine.get_state().experience == 0


class TestUnlocks:
    """Tests for the unlocked-action set."""

    def test_initial_unlocks(self, mining_engine):
        assert mining_engine.get_state().unlocked_actions == ["mine_copper"]

    def test_quest_gate_unlocks_on_refresh(self, mining_engine, collaborators, notifications):
        collaborators.quests.complete("prospector")
        assert mining_engine.refresh_unlocks() == ["mine_gold"]
        assert notifications.drain()[0].type == NotificationType.SKILL_ACTION_UNLOCKED

    def test_unlocks_never_shrink(self, mining_engine, collaborators):
        collaborators.quests.complete("prospector")
        mining_engine.refresh_unlocks()
        collaborators.quests.completed.clear()
        mining_engine.handle_experience_gained(100)
        assert "mine_gold" in mining_engine.get_state().unlocked_actions

    def test_missing_collaborator_is_unmet(self, mining_definition):
        engine = SkillEngine(mining_definition)
        engine.initialize()
        assert "mine_gold" not in engine.get_state().unlocked_actions

    def test_cross_skill_requirement(self, rng):
        definition = SkillDefinition(
            id="fletching",
            name="Fletching",
            actions=(
                SkillAction(id="whittle", name="Whittle"),
                SkillAction(
                    id="fletch_bow",
                    name="Fletch Bow",
                    requirements=(ActionRequirement.skill_level("woodcutting", 10),),
                ),
            ),
        )
        levels = {"woodcutting": 5}
        engine = SkillEngine(definition, rng=rng, skill_levels=levels.get)
        engine.initialize()
        assert "fletch_bow" not in engine.get_state().unlocked_actions

        levels["woodcutting"] = 10
        assert engine.refresh_unlocks() == ["fletch_bow"]


class TestQueries:
    """Tests for read-only accessors."""

    def test_get_state_is_a_copy(self, mining_engine):
        copy = mining_engine.get_state()
        copy.level = 9
        copy.unlocked_actions.append("mine_iron")
        assert mining_engine.level == 1
        assert mining_engine.get_state().unlocked_actions == ["mine_copper"]

    def test_statistics(self, mining_engine, rng):
        rng.extend([SUCCESS, NO_CRIT])
        mining_engine.perform_action("mine_copper")
        mining_engine.resolve_now()

        stats = mining_engine.get_statistics()
        assert stats.current_level == 1
        assert stats.total_experience == 20
        assert stats.experience_to_next == 100
        assert stats.progress_to_next == pytest.approx(0.2)
        assert stats.actions_completed == 1
        assert stats.time_spent == 1000
        assert stats.actions_unlocked == 1
        assert stats.total_actions == 3

    def test_available_and_performable(self, mining_engine, collaborators):
        collaborators.quests.complete("prospector")
        mining_engine.refresh_unlocks()
        collaborators.quests.completed.clear()

        available = [a.id for a in mining_engine.get_available_actions()]
        performable = [a.id for a in mining_engine.get_performable_actions()]
        assert available == ["mine_copper", "mine_gold"]
        assert performable == ["mine_copper"]

    def test_milestones(self, mining_engine):
        assert mining_engine.get_next_milestones() == [
            Milestone(3, "Unlock Mine Iron"),
            Milestone(10, "Level 10 Milestone"),
        ]

    def test_milestones_limit(self, woodcutting_engine):
        milestones = woodcutting_engine.get_next_milestones(limit=3)
        assert [m.level for m in milestones] == [5, 10, 20]
        assert milestones[1].reward == "Unlock Chop Maple Tree"


class TestLifecycle:
    """Tests for initialize/reset/destroy."""

    def test_initialize_idempotent(self, mining_engine):
        mining_engine.initialize()
        assert mining_engine.is_initialized

    def test_destroy(self, mining_engine):
        mining_engine.destroy()
        assert not mining_engine.is_initialized
        with pytest.raises(EngineNotInitializedError):
            mining_engine.perform_action("mine_copper")

    def test_reset(self, mining_engine):
        mining_engine.handle_experience_gained(500)
        mining_engine.perform_action("mine_copper")
        mining_engine.reset()

        state = mining_engine.get_state()
        assert state.level == 1
        assert state.experience == 0
        assert state.total_experience_gained == 0
        assert state.active_action is None
        assert state.unlocked_actions == ["mine_copper"]
