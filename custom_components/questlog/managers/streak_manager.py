"""Streak Manager - Daily login streak and daily-summary streak.

Owns the streak keys of the document and the transient popup flags. The app
reports activity through the app_foregrounded and daily_summary_viewed
signals; the day rules live in StreakEngine.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.streak_engine import StreakEngine
from ..utils.dt_utils import dt_now_utc, local_date
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestlogDataCoordinator
    from ..type_defs import StreakOutcome, StreakPopups, StreakRecord


class StreakManager(BaseManager):
    """Manager for streak tracking.

    Popup flags are kept in memory only: a restart never replays a popup.
    """

    LOCK_STREAK = "streak"

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: QuestlogDataCoordinator,
    ) -> None:
        """Initialize the StreakManager."""
        super().__init__(hass, coordinator)
        self._coordinator = coordinator
        self._popups: StreakPopups = StreakEngine.no_popups()

    async def async_setup(self) -> None:
        """Subscribe to activity signals."""
        self.listen(const.SIGNAL_SUFFIX_APP_FOREGROUNDED, self._on_app_foregrounded)
        self.listen(
            const.SIGNAL_SUFFIX_DAILY_SUMMARY_VIEWED, self._on_daily_summary_viewed
        )
        self.listen(const.SIGNAL_SUFFIX_DATA_RESET, self._on_data_reset)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def record(self) -> StreakRecord:
        """Detached copy of the persisted streak record."""
        return StreakEngine.record_from_data(self._coordinator.document)

    @property
    def current_streak(self) -> int:
        """Current consecutive-day streak."""
        return self.record["currentStreak"]

    @property
    def popups(self) -> StreakPopups:
        """Copy of the pending popup flags."""
        return dict(self._popups)  # type: ignore[return-value]

    @property
    def should_show_popup(self) -> bool:
        """True if any streak popup is pending."""
        return any(self._popups.values())

    # =========================================================================
    # Operations
    # =========================================================================

    async def record_activity_today(self, now: datetime | None = None) -> StreakOutcome:
        """Register activity for today's local date.

        Same-day calls are no-ops. The returned outcome carries the consumed
        protections and raised popups.
        """
        today = self._local_today(now)
        async with self._get_lock(self.LOCK_STREAK):
            outcome = StreakEngine.evaluate_day(self.record, today)
            if not outcome.changed:
                const.LOGGER.debug("DEBUG: Streak already recorded for %s", today)
                return outcome

            self._write(outcome.record)
            for key, raised in outcome.popups.items():
                if raised:
                    self._popups[key] = True  # type: ignore[literal-required]
            await self._coordinator.async_persist()

            record = outcome.record
            const.LOGGER.debug(
                "DEBUG: Streak now %s (longest %s, freeze_used=%s, saver_used=%s)",
                record["currentStreak"],
                record["longestStreak"],
                outcome.freeze_used,
                outcome.saver_used,
            )
            self._emit_streak_updated(outcome)
            if any(outcome.popups.values()):
                self.emit(const.SIGNAL_SUFFIX_STREAK_POPUP_READY, popups=self.popups)
            return outcome

    async def update_daily_summary_streak(
        self, now: datetime | None = None
    ) -> StreakOutcome:
        """Register a daily-summary view (separate streak, no freeze)."""
        today = self._local_today(now)
        async with self._get_lock(self.LOCK_STREAK):
            outcome = StreakEngine.evaluate_summary_day(self.record, today)
            if not outcome.changed:
                return outcome
            self._write(outcome.record)
            await self._coordinator.async_persist()
            self._emit_streak_updated(outcome)
            return outcome

    @callback
    def mark_popup_shown(self) -> None:
        """Clear every pending popup flag."""
        self._popups = StreakEngine.no_popups()

    async def buy_streak_saver(self) -> None:
        """Make one streak saver available for a future 2-day gap."""
        async with self._get_lock(self.LOCK_STREAK):
            if self._coordinator.document.get(const.DATA_STREAK_HAS_SAVER):
                const.LOGGER.debug("DEBUG: Streak saver already available")
                return
            self._coordinator.document[const.DATA_STREAK_HAS_SAVER] = True
            await self._coordinator.async_persist()
            self._emit_streak_updated(None)

    async def claim_welcome_back_gift(self) -> None:
        """Dismiss the welcome-back popup and re-arm the gift for later returns."""
        async with self._get_lock(self.LOCK_STREAK):
            self._popups[const.STREAK_POPUP_WELCOME_BACK] = False  # type: ignore[literal-required]
            self._coordinator.document[const.DATA_STREAK_RECEIVED_WELCOME_GIFT] = False
            await self._coordinator.async_persist()

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _on_app_foregrounded(self, payload: dict[str, Any]) -> None:
        """Count the app being opened as today's activity."""
        await self.record_activity_today()

    async def _on_daily_summary_viewed(self, payload: dict[str, Any]) -> None:
        """Extend the daily-summary streak."""
        await self.update_daily_summary_streak()

    @callback
    def _on_data_reset(self, payload: dict[str, Any]) -> None:
        """Drop popups that refer to wiped progress."""
        self.mark_popup_shown()

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _local_today(now: datetime | None) -> date:
        """Local calendar date for ``now`` (default: current time)."""
        return local_date(now or dt_now_utc())

    def _write(self, record: StreakRecord) -> None:
        """Copy a streak record onto the document's top-level keys."""
        document = self._coordinator.document
        for key in const.STREAK_KEYS:
            document[key] = record[key]  # type: ignore[literal-required]

    def _emit_streak_updated(self, outcome: StreakOutcome | None) -> None:
        """Publish the current streak state."""
        record = self.record
        self.emit(
            const.SIGNAL_SUFFIX_STREAK_UPDATED,
            current_streak=record["currentStreak"],
            longest_streak=record["longestStreak"],
            total_days_logged=record["totalDaysLogged"],
            daily_summary_streak=record["dailySummaryStreak"],
            has_saver_available=record["hasSaverAvailable"],
            freeze_used=bool(outcome and outcome.freeze_used),
            saver_used=bool(outcome and outcome.saver_used),
        )
