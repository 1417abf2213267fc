"""Tests for StreakManager - persisted streak keys and popup flags."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock

import pytest

from custom_components.questlog import const
from custom_components.questlog.managers.streak_manager import StreakManager
from tests.helpers.events import emitted

# Noon UTC stays on the same calendar day in every test time zone
DAY_ONE = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def _day(offset: int) -> datetime:
    return DAY_ONE + timedelta(days=offset)


@pytest.fixture
def streak_manager(mock_hass: MagicMock, mock_coordinator: MagicMock) -> StreakManager:
    """Create StreakManager with mocks."""
    manager = StreakManager(mock_hass, mock_coordinator)
    manager.emit = MagicMock()
    manager.listen = MagicMock()
    return manager


class TestRecordActivity:
    """Tests for daily activity."""

    async def test_first_day_writes_document(
        self, streak_manager: StreakManager, document: dict[str, Any]
    ) -> None:
        """The first activity starts the streak and raises the streak popup."""
        outcome = await streak_manager.record_activity_today(_day(0))
        assert outcome.changed
        assert document[const.DATA_STREAK_CURRENT] == 1
        assert document[const.DATA_STREAK_LAST_LOGIN_DATE] == "2025-03-01"
        assert streak_manager.should_show_popup
        assert streak_manager.popups[const.STREAK_POPUP_STREAK]

        (update,) = emitted(streak_manager, const.SIGNAL_SUFFIX_STREAK_UPDATED)
        assert update["current_streak"] == 1
        assert update["total_days_logged"] == 1
        assert not update["freeze_used"]
        (popup,) = emitted(streak_manager, const.SIGNAL_SUFFIX_STREAK_POPUP_READY)
        assert popup["popups"][const.STREAK_POPUP_STREAK]

    async def test_same_day_twice(
        self,
        streak_manager: StreakManager,
        mock_coordinator: MagicMock,
    ) -> None:
        """A second call on the same day neither saves nor emits."""
        await streak_manager.record_activity_today(_day(0))
        streak_manager.emit.reset_mock()
        mock_coordinator.async_persist.reset_mock()

        outcome = await streak_manager.record_activity_today(_day(0) + timedelta(hours=3))
        assert not outcome.changed
        mock_coordinator.async_persist.assert_not_awaited()
        streak_manager.emit.assert_not_called()

    async def test_freeze_reported_in_update(
        self, streak_manager: StreakManager, document: dict[str, Any]
    ) -> None:
        """A 2-day gap spends the freeze and says so."""
        for offset in (0, 1, 3):
            await streak_manager.record_activity_today(_day(offset))
        assert streak_manager.current_streak == 3
        assert document[const.DATA_STREAK_HAS_USED_FREEZE]
        assert emitted(streak_manager, const.SIGNAL_SUFFIX_STREAK_UPDATED)[-1][
            "freeze_used"
        ]
        assert streak_manager.popups[const.STREAK_POPUP_FREEZE]

    async def test_record_is_detached(self, streak_manager: StreakManager) -> None:
        """Editing the returned record does not touch the document."""
        await streak_manager.record_activity_today(_day(0))
        record = streak_manager.record
        record["currentStreak"] = 99
        assert streak_manager.current_streak == 1


class TestPopups:
    """Tests for transient popup flags."""

    async def test_mark_popup_shown_clears_flags(
        self, streak_manager: StreakManager
    ) -> None:
        """Shown popups are cleared."""
        await streak_manager.record_activity_today(_day(0))
        streak_manager.mark_popup_shown()
        assert not streak_manager.should_show_popup

    async def test_data_reset_clears_flags(self, streak_manager: StreakManager) -> None:
        """A data reset drops pending popups."""
        await streak_manager.record_activity_today(_day(0))
        streak_manager._on_data_reset({})  # pylint: disable=protected-access
        assert not streak_manager.should_show_popup

    async def test_welcome_back_claim(
        self, streak_manager: StreakManager, document: dict[str, Any]
    ) -> None:
        """Claiming the gift dismisses its popup and re-arms it."""
        await streak_manager.record_activity_today(_day(0))
        await streak_manager.record_activity_today(_day(6))
        assert streak_manager.popups[const.STREAK_POPUP_WELCOME_BACK]
        assert document[const.DATA_STREAK_RECEIVED_WELCOME_GIFT]

        await streak_manager.claim_welcome_back_gift()
        assert not streak_manager.popups[const.STREAK_POPUP_WELCOME_BACK]
        assert not document[const.DATA_STREAK_RECEIVED_WELCOME_GIFT]


class TestSaverAndSummary:
    """Tests for the streak saver and the daily-summary streak."""

    async def test_buy_streak_saver_once(
        self,
        streak_manager: StreakManager,
        mock_coordinator: MagicMock,
        document: dict[str, Any],
    ) -> None:
        """Buying while a saver is held does nothing."""
        await streak_manager.buy_streak_saver()
        await streak_manager.buy_streak_saver()
        assert document[const.DATA_STREAK_HAS_SAVER]
        mock_coordinator.async_persist.assert_awaited_once()
        (update,) = emitted(streak_manager, const.SIGNAL_SUFFIX_STREAK_UPDATED)
        assert update["has_saver_available"]

    async def test_saver_bridges_gap_after_freeze(
        self, streak_manager: StreakManager, document: dict[str, Any]
    ) -> None:
        """With the freeze spent, a bought saver keeps the streak."""
        for offset in (0, 2):
            await streak_manager.record_activity_today(_day(offset))
        await streak_manager.buy_streak_saver()
        await streak_manager.record_activity_today(_day(4))
        assert streak_manager.current_streak == 3
        assert not document[const.DATA_STREAK_HAS_SAVER]
        assert emitted(streak_manager, const.SIGNAL_SUFFIX_STREAK_UPDATED)[-1][
            "saver_used"
        ]

    async def test_daily_summary_streak(
        self, streak_manager: StreakManager, document: dict[str, Any]
    ) -> None:
        """Summary views build their own streak without touching the login streak."""
        for offset in (0, 1):
            await streak_manager.update_daily_summary_streak(_day(offset))
        assert document[const.DATA_STREAK_SUMMARY_CURRENT] == 2
        assert streak_manager.current_streak == 0
        assert not streak_manager.should_show_popup
