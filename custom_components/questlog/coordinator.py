# File: coordinator.py
"""Coordinator for the Questlog integration.

Owns the in-memory progression document, its persistence and change
notification. All state changes go through the managers; the coordinator
only offers shared plumbing:

- option accessors (leveling curve, hatch duration, rewards)
- async_persist(): save + notify listeners
- async_subscribe()/async_fire(): instance-scoped dispatcher signals
- async_reset_all(): wipe every section back to defaults
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback as ha_callback
from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const, data_builders as db
from .helpers.event_helpers import get_event_signal
from .utils.dt_utils import dt_now_iso, hours_to_timedelta

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry

    from .managers import (
        AchievementManager,
        PetManager,
        ProfileManager,
        QuestManager,
        StreakManager,
    )
    from .store import QuestlogStore
    from .type_defs import AchievementData, PetData, ProfileData, QuestData


class QuestlogDataCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for the Questlog integration.

    The periodic refresh carries no side effects: it lets listeners re-read
    derived values (pet hatch countdowns) that change with time alone.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: QuestlogStore,
    ) -> None:
        """Initialize the QuestlogDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )
        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self._data: dict[str, Any] = store.data

        # Set by async_setup_entry once the managers exist
        self.profile_manager: ProfileManager
        self.quest_manager: QuestManager
        self.streak_manager: StreakManager
        self.pet_manager: PetManager
        self.achievement_manager: AchievementManager

    async def _async_update_data(self) -> dict[str, Any]:
        """Return the in-memory document (no I/O)."""
        return self._data

    # -------------------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------------------

    def _option(self, key: str, default: Any) -> Any:
        """Return an option value, falling back to the default."""
        value = self.config_entry.options.get(key)
        return default if value is None else value

    @property
    def xp_base(self) -> float:
        """Base of the XP curve."""
        return float(self._option(const.CONF_XP_BASE, const.DEFAULT_XP_BASE))

    @property
    def xp_exponent(self) -> float:
        """Exponent of the XP curve."""
        return float(self._option(const.CONF_XP_EXPONENT, const.DEFAULT_XP_EXPONENT))

    @property
    def hatch_duration(self) -> timedelta:
        """Time between buying a pet and being able to reveal it."""
        return hours_to_timedelta(
            self._option(
                const.CONF_HATCH_DURATION_HOURS, const.DEFAULT_HATCH_DURATION_HOURS
            )
        )

    @property
    def pet_unlock_xp(self) -> float:
        """XP granted when a pet is revealed."""
        return float(self._option(const.CONF_PET_UNLOCK_XP, const.DEFAULT_PET_UNLOCK_XP))

    @property
    def pet_unlock_coins(self) -> int:
        """Coins granted when a pet is revealed."""
        return int(
            self._option(const.CONF_PET_UNLOCK_COINS, const.DEFAULT_PET_UNLOCK_COINS)
        )

    @property
    def achievement_level_xp(self) -> float:
        """XP granted for each new achievement level."""
        return float(
            self._option(
                const.CONF_ACHIEVEMENT_LEVEL_XP, const.DEFAULT_ACHIEVEMENT_LEVEL_XP
            )
        )

    # -------------------------------------------------------------------------------------
    # Document accessors
    # -------------------------------------------------------------------------------------

    @property
    def document(self) -> dict[str, Any]:
        """The whole in-memory document."""
        return self._data

    @property
    def profile_data(self) -> ProfileData:
        """The profile record."""
        return self._data[const.DATA_PROFILE]

    @property
    def quests_data(self) -> list[QuestData]:
        """Quest progress for every catalogued quest."""
        return self._data[const.DATA_QUEST_PROGRESS]

    @property
    def pets_data(self) -> list[PetData]:
        """Pets in catalog order."""
        return self._data[const.DATA_PETS]

    @property
    def achievements_data(self) -> list[AchievementData]:
        """Achievement records."""
        return self._data[const.DATA_ACHIEVEMENTS]

    # -------------------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------------------

    async def async_persist(self) -> bool:
        """Save the document and notify coordinator listeners.

        A failed save is logged by the store; the in-memory document stays
        authoritative and listeners are notified either way.

        Returns:
            True when the document reached disk.
        """
        self.store.set_data(self._data)
        saved = await self.store.async_save()
        if not saved:
            const.LOGGER.warning(
                "WARNING: Progress kept in memory only until the next successful save"
            )
        self.async_set_updated_data(self._data)
        return saved

    async def async_reset_all(self) -> None:
        """Reset every section of the document to its defaults."""
        profile_name = self.profile_data.get(
            const.DATA_PROFILE_NAME, const.DEFAULT_PROFILE_NAME
        )
        self._data.clear()
        self._data.update(db.build_default_data(profile_name))
        self._data[const.DATA_META][const.DATA_META_LAST_RESET] = dt_now_iso()
        await self.async_persist()
        const.LOGGER.warning("WARNING: All Questlog progress has been reset")
        self.async_fire(const.SIGNAL_SUFFIX_DATA_RESET)

    # -------------------------------------------------------------------------------------
    # Signals
    # -------------------------------------------------------------------------------------

    def async_fire(self, suffix: str, **payload: Any) -> None:
        """Send an instance-scoped signal (used for externally reported events)."""
        const.LOGGER.debug(
            "DEBUG: Firing '%s' for instance %s", suffix, self.config_entry.entry_id
        )
        async_dispatcher_send(
            self.hass, get_event_signal(self.config_entry.entry_id, suffix), payload
        )

    def async_subscribe(
        self, suffix: str, callback: Callable[[dict[str, Any]], Any]
    ) -> CALLBACK_TYPE:
        """Subscribe to an instance-scoped signal.

        The callback receives the payload dict. The subscription is removed
        when the returned handle is called or the entry unloads.
        """
        unsub = async_dispatcher_connect(
            self.hass, get_event_signal(self.config_entry.entry_id, suffix), callback
        )
        removed = False

        @ha_callback
        def _unsubscribe() -> None:
            nonlocal removed
            if not removed:
                removed = True
                unsub()

        self.config_entry.async_on_unload(_unsubscribe)
        return _unsubscribe
