"""Tests for QuestManager - quest credits and batch progression.

Tests verify:
- Step, increment and static-force credits on the active batch
- Rewards announced exactly once per quest
- Batch advancement with immediate re-crediting from stored totals
- Catalog exhaustion
- Maintenance operations
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from custom_components.questlog import catalog, const
from custom_components.questlog.managers.quest_manager import QuestManager
from tests.helpers.constants import (
    QUEST_CALENDAR_SETUP as SETUP_QUEST,
    QUEST_FIRST_EGG as EGG_QUEST,
    QUEST_LOG_THREE_EVENTS,
    QUEST_TWO_GRAPHS as GRAPHS_QUEST,
)
from tests.helpers.events import emitted, emitted_suffixes


@pytest.fixture
def quest_manager(mock_hass: MagicMock, mock_coordinator: MagicMock) -> QuestManager:
    """Create QuestManager with mocks."""
    manager = QuestManager(mock_hass, mock_coordinator)
    manager.emit = MagicMock()
    manager.listen = MagicMock()
    return manager


async def _finish_batch_one(manager: QuestManager) -> None:
    """Complete every quest of batch 1."""
    await manager.complete_quest(SETUP_QUEST)
    await manager.complete_quest_with_increment(GRAPHS_QUEST, 2)
    await manager.complete_quest(EGG_QUEST)


class TestSetup:
    """Tests for async_setup."""

    async def test_setup_subscribes_to_all_signals(
        self, quest_manager: QuestManager
    ) -> None:
        """Count, graph and streak handlers plus one per signal rule suffix."""
        await quest_manager.async_setup()
        suffixes = [call.args[0] for call in quest_manager.listen.call_args_list]
        assert const.SIGNAL_SUFFIX_CALENDAR_EVENT_COUNT_CHANGED in suffixes
        assert const.SIGNAL_SUFFIX_GRAPH_UPDATED in suffixes
        assert const.SIGNAL_SUFFIX_PET_PURCHASED in suffixes
        assert const.SIGNAL_SUFFIX_DAILY_SUMMARY_VIEWED in suffixes
        assert len(suffixes) == len(set(suffixes)) == 8


class TestBatchOne:
    """Tests for the first batch flow."""

    async def test_complete_quest_announces_reward(
        self, quest_manager: QuestManager, mock_coordinator: MagicMock
    ) -> None:
        """A one-step quest completes and its reward is queued once."""
        assert await quest_manager.complete_quest(SETUP_QUEST)
        assert quest_manager.is_quest_completed(SETUP_QUEST)
        assert emitted(quest_manager, const.SIGNAL_SUFFIX_QUEST_COMPLETED) == [
            {"quest_name": SETUP_QUEST, "batch": 1, "xp": 50.0, "coins": 25}
        ]
        assert quest_manager.pending_reward_quests == [SETUP_QUEST]
        assert quest_manager.show_glow_icon
        assert quest_manager.batch_completion_percentage() == 33.33
        mock_coordinator.async_persist.assert_awaited_once()

    async def test_completed_quest_ignores_more_credit(
        self, quest_manager: QuestManager
    ) -> None:
        """Stepping a completed quest is a no-op."""
        await quest_manager.complete_quest(SETUP_QUEST)
        assert not await quest_manager.complete_quest(SETUP_QUEST)
        assert len(emitted(quest_manager, const.SIGNAL_SUFFIX_QUEST_COMPLETED)) == 1

    async def test_graph_updates_count_distinct_graphs(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """Repeating a graph (any case) adds nothing; a second graph completes."""
        assert await quest_manager.report_graph_updated("running")
        assert not await quest_manager.report_graph_updated("Running")
        assert not quest_manager.is_quest_completed(GRAPHS_QUEST)
        assert await quest_manager.report_graph_updated("gym")
        assert quest_manager.is_quest_completed(GRAPHS_QUEST)
        assert document[const.DATA_QUEST_BATCH_GRAPHS] == ["running", "gym"]

    async def test_blank_graph_is_ignored(
        self, quest_manager: QuestManager, mock_coordinator: MagicMock
    ) -> None:
        """An empty graph name does nothing."""
        assert not await quest_manager.report_graph_updated("  ")
        mock_coordinator.async_persist.assert_not_awaited()

    async def test_finishing_batch_unlocks_next(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """The last quest of a batch advances the cursor and clears graphs."""
        await quest_manager.report_graph_updated("running")
        await quest_manager.report_graph_updated("gym")
        await quest_manager.complete_quest(SETUP_QUEST)
        await quest_manager.complete_quest(EGG_QUEST)

        assert quest_manager.current_batch == 2
        assert document[const.DATA_QUEST_BATCH_GRAPHS] == []
        assert emitted(quest_manager, const.SIGNAL_SUFFIX_BATCH_UNLOCKED) == [
            {"batch": 2, "catalog_exhausted": False}
        ]
        assert [q["name"] for q in quest_manager.current_batch_quests()] == [
            QUEST_LOG_THREE_EVENTS,
            "Turn on notifications",
            "Complete 1 scheduled event",
        ]
        assert quest_manager.pending_reward_quests == [
            GRAPHS_QUEST,
            SETUP_QUEST,
            EGG_QUEST,
        ]


class TestRewardsOnce:
    """Tests for exactly-once reward announcement."""

    async def test_reset_batch_keeps_rewarded_flags(
        self, quest_manager: QuestManager
    ) -> None:
        """Completing a quest again after a reset pays nothing."""
        await quest_manager.complete_quest(SETUP_QUEST)
        await quest_manager.reset_current_batch()
        assert not quest_manager.is_quest_completed(SETUP_QUEST)

        assert await quest_manager.complete_quest(SETUP_QUEST)
        assert len(emitted(quest_manager, const.SIGNAL_SUFFIX_QUEST_COMPLETED)) == 1

    async def test_acknowledge_rewards(
        self, quest_manager: QuestManager, mock_coordinator: MagicMock
    ) -> None:
        """Acknowledging clears the pending list and the glow."""
        await quest_manager.complete_quest(SETUP_QUEST)
        await quest_manager.acknowledge_rewards()
        assert quest_manager.pending_reward_quests == []
        assert not quest_manager.show_glow_icon

        mock_coordinator.async_persist.reset_mock()
        await quest_manager.acknowledge_rewards()
        mock_coordinator.async_persist.assert_not_awaited()


class TestRunningTotals:
    """Tests for threshold-rule credits and re-crediting."""

    async def test_total_reported_early_credits_next_batch(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """Events logged during batch 1 complete the batch 2 event quest on unlock."""
        assert not await quest_manager.report_event_count(5)
        assert document[const.DATA_QUEST_LAST_EVENT_COUNT] == 5

        await _finish_batch_one(quest_manager)

        assert quest_manager.current_batch == 2
        assert quest_manager.is_quest_completed(QUEST_LOG_THREE_EVENTS)
        assert emitted_suffixes(quest_manager)[-2:] == [
            const.SIGNAL_SUFFIX_BATCH_UNLOCKED,
            const.SIGNAL_SUFFIX_QUEST_COMPLETED,
        ]
        assert emitted(quest_manager, const.SIGNAL_SUFFIX_QUEST_COMPLETED)[-1] == {
            "quest_name": QUEST_LOG_THREE_EVENTS,
            "batch": 2,
            "xp": 75.0,
            "coins": 50,
        }

    async def test_total_applies_to_active_batch(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """Inside batch 3 only the events above its offset count."""
        document[const.DATA_CURRENT_BATCH] = 3
        assert await quest_manager.report_event_count(6)
        quest = next(
            q for q in quest_manager.current_batch_quests() if q["name"] == "Add 5 new event"
        )
        assert quest["completed_count"] == 3

    async def test_same_total_twice_is_noop(
        self, quest_manager: QuestManager, mock_coordinator: MagicMock
    ) -> None:
        """Replaying a total does not save again."""
        await quest_manager.report_scheduled_count(2)
        mock_coordinator.async_persist.reset_mock()
        assert not await quest_manager.report_scheduled_count(2)
        mock_coordinator.async_persist.assert_not_awaited()

    async def test_negative_inputs_rejected(
        self, quest_manager: QuestManager, mock_coordinator: MagicMock
    ) -> None:
        """Negative counts and increments do nothing."""
        assert not await quest_manager.report_event_count(-1)
        assert not await quest_manager.complete_quest_with_increment(GRAPHS_QUEST, -1)
        assert not await quest_manager.complete_quest_with_increment_static_force(
            GRAPHS_QUEST, -3
        )
        mock_coordinator.async_persist.assert_not_awaited()


class TestBatchIsolation:
    """Tests for credits aimed at inactive batches."""

    async def test_credit_to_future_batch_is_ignored(
        self, quest_manager: QuestManager
    ) -> None:
        """A quest of batch 3 cannot progress while batch 1 is active."""
        assert not await quest_manager.complete_quest_with_increment(
            "Add 5 new event", 2, batch=3
        )
        assert not quest_manager.is_quest_completed("Add 5 new event", batch=3)
        quest_manager.emit.assert_not_called()

    async def test_unknown_quest_is_ignored(self, quest_manager: QuestManager) -> None:
        """Names outside the current batch do nothing."""
        assert not await quest_manager.complete_quest("Turn on notifications")


class TestSignalsAndStreak:
    """Tests for signal rules and the streak quest."""

    async def test_pet_purchase_signal_credits_egg_quest(
        self, quest_manager: QuestManager
    ) -> None:
        """The pet_purchased rule completes the egg quest."""
        rules = tuple(
            rule
            for rule in catalog.SIGNAL_QUEST_RULES
            if rule.signal_suffix == const.SIGNAL_SUFFIX_PET_PURCHASED
        )
        await quest_manager._on_signal_rule(rules, {"pet_id": "fluffy"})  # pylint: disable=protected-access
        assert quest_manager.is_quest_completed(EGG_QUEST)

    async def test_streak_quest_credited_when_batch_unlocks(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """A streak already at 7 days completes the batch 7 quest on arrival."""
        document[const.DATA_STREAK_CURRENT] = 8
        document[const.DATA_CURRENT_BATCH] = 6
        await quest_manager.complete_quest_with_increment("Complete 4 scheduled event", 4)
        await quest_manager.complete_quest("Fill out Gym or Swimming graph or income")
        await quest_manager.complete_quest("Use Task Prioritisation on 1 task")

        assert quest_manager.current_batch == 7
        assert quest_manager.is_quest_completed(catalog.STREAK_QUEST_NAME)
        assert emitted(quest_manager, const.SIGNAL_SUFFIX_QUEST_COMPLETED)[-1] == {
            "quest_name": catalog.STREAK_QUEST_NAME,
            "batch": 7,
            "xp": 0.0,
            "coins": 100,
        }

    async def test_short_streak_does_not_credit(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """Streak updates below 7 days leave the quest open."""
        document[const.DATA_CURRENT_BATCH] = 7
        await quest_manager._on_streak_updated({"current_streak": 6})  # pylint: disable=protected-access
        assert not quest_manager.is_quest_completed(catalog.STREAK_QUEST_NAME)
        await quest_manager._on_streak_updated({"current_streak": 7})  # pylint: disable=protected-access
        assert quest_manager.is_quest_completed(catalog.STREAK_QUEST_NAME)


class TestExhaustionAndClear:
    """Tests for the end of the catalog and full resets."""

    async def test_last_batch_exhausts_catalog(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """Completing batch 12 parks the cursor past the catalog."""
        document[const.DATA_CURRENT_BATCH] = catalog.MAX_BATCH
        for name in (
            "Complete 2 scheduled event",
            "Update 2 different graphs",
            "Add 2 new events",
        ):
            await quest_manager.complete_quest_with_increment_static_force(name, 2)

        assert quest_manager.current_batch == catalog.MAX_BATCH + 1
        assert quest_manager.is_catalog_exhausted
        assert emitted(quest_manager, const.SIGNAL_SUFFIX_BATCH_UNLOCKED) == [
            {"batch": catalog.MAX_BATCH + 1, "catalog_exhausted": True}
        ]
        assert quest_manager.current_batch_quests() == []
        assert not await quest_manager.report_graph_updated("gym")
        assert not await quest_manager.complete_quest("Add 2 new events")

    async def test_clear_all_resets_cursor_and_rewards(
        self, quest_manager: QuestManager, document: dict[str, Any]
    ) -> None:
        """Clearing returns to batch 1 with nothing completed or paid."""
        await _finish_batch_one(quest_manager)
        await quest_manager.report_event_count(4)
        await quest_manager.clear_all()

        assert quest_manager.current_batch == 1
        assert document[const.DATA_QUEST_LAST_EVENT_COUNT] == 0
        assert quest_manager.pending_reward_quests == []
        assert not any(q["rewarded"] for q in document[const.DATA_QUEST_PROGRESS])
