"""Achievement Manager - Coarse tiered achievements.

The calendar achievement is recomputed from the reported event total every
time (see AchievementEngine), and each level is rewarded at most once through
the stored highest_level_rewarded watermark.
"""

from __future__ import annotations

import copy
from datetime import datetime
from typing import TYPE_CHECKING, Any

from homeassistant.util import dt as dt_util

from .. import const, data_builders as db
from ..engines.achievement_engine import AchievementEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestlogDataCoordinator
    from ..type_defs import AchievementData


class AchievementManager(BaseManager):
    """Manager for achievements."""

    LOCK_ACHIEVEMENTS = "achievements"

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: QuestlogDataCoordinator,
    ) -> None:
        """Initialize the AchievementManager."""
        super().__init__(hass, coordinator)
        self._coordinator = coordinator

    async def async_setup(self) -> None:
        """Subscribe to calendar signals."""
        self.listen(
            const.SIGNAL_SUFFIX_CALENDAR_EVENT_COUNT_CHANGED,
            self._on_calendar_event_count_changed,
        )
        self.listen(
            const.SIGNAL_SUFFIX_CALENDAR_SETUP_COMPLETED,
            self._on_calendar_setup_completed,
        )

    @property
    def achievements(self) -> list[AchievementData]:
        """Detached copies of every achievement."""
        return copy.deepcopy(self._coordinator.achievements_data)

    def _get(self, achievement_id: str) -> AchievementData | None:
        for achievement in self._coordinator.achievements_data:
            if achievement["id"] == achievement_id:
                return achievement
        return None

    async def update_calendar_progress(self, event_count: int) -> int:
        """Recompute the calendar achievement from the total event count.

        Returns:
            The resulting achievement level.
        """
        if event_count < 0:
            const.LOGGER.warning(
                "WARNING: Ignoring negative calendar event count %s", event_count
            )
            return self._calendar_level()

        async with self._get_lock(self.LOCK_ACHIEVEMENTS):
            achievement = self._get(const.ACHIEVEMENT_ID_CALENDAR)
            if achievement is None:
                return 0

            tier = AchievementEngine.tier_for_count(event_count)
            new_levels = AchievementEngine.levels_to_reward(
                tier.level, achievement["highest_level_rewarded"]
            )
            unchanged = (
                achievement["level"],
                achievement["current_progress"],
                achievement["max_progress"],
            ) == tuple(tier)
            if unchanged and not new_levels:
                return tier.level

            achievement["level"] = tier.level
            achievement["current_progress"] = tier.current_progress
            achievement["max_progress"] = tier.max_progress
            achievement["title"] = AchievementEngine.title_for_level(
                const.ACHIEVEMENT_CALENDAR_TITLE, tier.level
            )
            if new_levels:
                achievement["highest_level_rewarded"] = new_levels[-1]
            await self._coordinator.async_persist()

            for level in new_levels:
                const.LOGGER.info(
                    "INFO: Achievement '%s' reached level %s",
                    achievement["id"],
                    level,
                )
                self.emit(
                    const.SIGNAL_SUFFIX_ACHIEVEMENT_LEVEL_UP,
                    achievement_id=achievement["id"],
                    title=AchievementEngine.title_for_level(
                        const.ACHIEVEMENT_CALENDAR_TITLE, level
                    ),
                    level=level,
                    celebrate=level == const.ACHIEVEMENT_CELEBRATION_LEVEL,
                    xp=self._coordinator.achievement_level_xp,
                )
            return tier.level

    async def complete_calendar_setup(self, now: datetime | None = None) -> bool:
        """Unlock the calendar setup milestone.

        Returns:
            True the first time; False when it was already unlocked.
        """
        async with self._get_lock(self.LOCK_ACHIEVEMENTS):
            achievement = self._get(const.ACHIEVEMENT_ID_CALENDAR)
            if achievement is None or achievement["setup_completed"]:
                return False
            achievement["setup_completed"] = True
            achievement["is_unlocked"] = True
            achievement["unlocked_at"] = (now or dt_util.utcnow()).isoformat()
            await self._coordinator.async_persist()
            self.emit(
                const.SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED,
                achievement_id=achievement["id"],
                title=achievement["title"],
            )
            return True

    async def reset_all(self) -> None:
        """Reset every achievement to level 1."""
        async with self._get_lock(self.LOCK_ACHIEVEMENTS):
            self._coordinator.document[const.DATA_ACHIEVEMENTS] = (
                db.build_default_achievements()
            )
            await self._coordinator.async_persist()
            const.LOGGER.info("INFO: Achievements reset")

    def _calendar_level(self) -> int:
        achievement = self._get(const.ACHIEVEMENT_ID_CALENDAR)
        return achievement["level"] if achievement else 0

    async def _on_calendar_event_count_changed(self, payload: dict[str, Any]) -> None:
        """Recompute progress from the new total."""
        await self.update_calendar_progress(int(payload.get("count", 0)))

    async def _on_calendar_setup_completed(self, payload: dict[str, Any]) -> None:
        """Unlock the setup milestone."""
        await self.complete_calendar_setup()
