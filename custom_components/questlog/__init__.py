# File: __init__.py
"""Initialization file for the Questlog integration.

Handles setting up the integration: loading the persisted progression
document, creating the coordinator and its managers, and registering the
services the app layer calls.

Key Features:
- Config entry setup, unload and removal support.
- One store, one coordinator and five managers per config entry.
- Options changes reload the entry so the new curve/timings apply.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import QuestlogDataCoordinator
from .managers import (
    AchievementManager,
    PetManager,
    ProfileManager,
    QuestManager,
    StreakManager,
)
from .services import async_setup_services, async_unload_services
from .store import QuestlogStore, get_storage_key


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Questlog entry: %s", entry.entry_id)

    # Streak day boundaries follow the Home Assistant time zone
    const.set_default_timezone(hass)

    store = QuestlogStore(
        hass,
        get_storage_key(entry.entry_id),
        entry.data.get(const.CONF_PROFILE_NAME, const.DEFAULT_PROFILE_NAME),
    )
    await store.async_initialize()

    coordinator = QuestlogDataCoordinator(hass, entry, store)
    coordinator.profile_manager = ProfileManager(hass, coordinator)
    coordinator.quest_manager = QuestManager(hass, coordinator)
    coordinator.streak_manager = StreakManager(hass, coordinator)
    coordinator.pet_manager = PetManager(hass, coordinator)
    coordinator.achievement_manager = AchievementManager(hass, coordinator)

    for manager in (
        coordinator.profile_manager,
        coordinator.quest_manager,
        coordinator.streak_manager,
        coordinator.pet_manager,
        coordinator.achievement_manager,
    ):
        await manager.async_setup()

    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
    }

    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    const.LOGGER.info("INFO: Questlog setup complete for entry: %s", entry.entry_id)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry when its options change."""
    const.LOGGER.debug("DEBUG: Options changed, reloading entry %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Questlog entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        hass.data[const.DOMAIN].pop(entry.entry_id)
        if not hass.data[const.DOMAIN]:
            async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Delete the stored progress when the entry is removed."""
    const.LOGGER.info("INFO: Removing Questlog entry: %s", entry.entry_id)
    store = QuestlogStore(hass, get_storage_key(entry.entry_id))
    await store.async_delete_storage()
    const.LOGGER.info("INFO: Questlog entry data cleared: %s", entry.entry_id)
