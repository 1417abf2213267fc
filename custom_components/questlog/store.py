# File: store.py
"""Handles persistent data storage for the Questlog integration.

Uses Home Assistant's Storage helper to save and load the progression
document (profile, quests, streak, pets, achievements) so that progress is
preserved across restarts. One document per config entry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const, data_builders as db

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


def get_storage_key(entry_id: str) -> str:
    """Return the storage key for one config entry ("questlog.<entry_id>")."""
    return f"{const.STORAGE_KEY}.{entry_id}"


class QuestlogStore:
    """Handles persistent storage operations for Questlog data.

    Thin wrapper around Home Assistant's Store API. Loaded documents are
    repaired against the current catalog before anyone reads them.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        storage_key: str,
        profile_name: str = const.DEFAULT_PROFILE_NAME,
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location.
            profile_name: Name used when a fresh profile has to be created.
        """
        self.hass = hass
        self._storage_key = storage_key
        self._profile_name = profile_name
        self._store: Store[dict[str, Any]] = Store(
            hass, const.STORAGE_VERSION, storage_key
        )
        self._data: dict[str, Any] = {}

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        A missing file yields the default document; a corrupt one is repaired
        section by section (see data_builders.repair_data).
        """
        const.LOGGER.debug("DEBUG: QuestlogStore: Loading data from storage")
        try:
            existing_data = await self._store.async_load()
        except (OSError, ValueError) as err:
            const.LOGGER.warning(
                "WARNING: Could not read storage %s (%s); starting fresh",
                self._storage_key,
                err,
            )
            existing_data = None

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")

        self._data = db.repair_data(existing_data, self._profile_name)
        const.LOGGER.debug(
            "DEBUG: Loaded data: batch=%s, quests=%s, pets=%s",
            self._data.get(const.DATA_CURRENT_BATCH),
            len(self._data.get(const.DATA_QUEST_PROGRESS, [])),
            len(self._data.get(const.DATA_PETS, [])),
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    async def async_save(self) -> bool:
        """Save the current data structure to storage asynchronously.

        Errors are logged and reported through the return value; they never
        propagate. The in-memory document stays authoritative and is written
        again on the next successful save.

        Returns:
            True when the document was written.
        """
        try:
            await self._store.async_save(self._data)
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
            return False
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
            return False
        const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        return True

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        self._data = db.build_default_data(self._profile_name)
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
