"""Diagnostics support for the Questlog integration.

The "data" key holds the raw storage document, identical to the persisted
questlog file. Derived values (pet states, level progress) are added beside
it so a support dump shows what the managers computed at export time.
"""

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from . import const
from .coordinator import QuestlogDataCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: QuestlogDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    return {
        "options": dict(entry.options),
        "data": coordinator.store.data,
        "derived": {
            "profile": coordinator.profile_manager.snapshot(),
            "pets": coordinator.pet_manager.pet_states(),
            "current_batch_completion": (
                coordinator.quest_manager.batch_completion_percentage()
            ),
            "catalog_exhausted": coordinator.quest_manager.is_catalog_exhausted,
            "streak_popups": coordinator.streak_manager.popups,
        },
    }
