"""Base manager class for Questlog managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.event_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestlogDataCoordinator


class BaseManager(ABC):
    """Base class for all Questlog managers with scoped event support.

    Provides:
    - Instance-scoped event emitting (emit)
    - Instance-scoped event listening (listen)
    - Automatic cleanup via coordinator's config_entry.async_on_unload
    - Per-operation asyncio.Lock registry (_get_lock)

    Each manager is the only writer of the document keys it owns. Mutations
    run under a lock: compute via the engine, write, await
    coordinator.async_persist(), then emit.

    Subclasses must implement:
    - async_setup(): Subscribe to events, initialize state
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: QuestlogDataCoordinator
    ) -> None:
        """Initialize manager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator managing this integration instance
        """
        self.hass = hass
        self.coordinator = coordinator
        self.entry_id = coordinator.config_entry.entry_id
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, operation: str, *ids: str) -> asyncio.Lock:
        """Get or create the lock serialising ``operation`` for ``ids``."""
        lock_key = ":".join((operation, *ids))
        if lock_key not in self._locks:
            self._locks[lock_key] = asyncio.Lock()
        return self._locks[lock_key]

    def emit(self, suffix: str, **payload: Any) -> None:
        """Emit instance-scoped event to other managers and subscribers.

        Args:
            suffix: Signal suffix constant (e.g., const.SIGNAL_SUFFIX_LEVEL_UP)
            **payload: Event data dict passed to listeners (JSON-serializable)

        Example:
            self.emit(
                const.SIGNAL_SUFFIX_LEVEL_UP,
                old_level=1,
                new_level=2,
                celebrate=True,
                unlocks="pets",
            )
        """
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "Emitting event '%s' for instance %s with payload keys: %s",
            suffix,
            self.entry_id,
            list(payload.keys()),
        )
        # Pass payload as single dict argument (dispatcher only supports *args)
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> None:
        """Subscribe to instance-scoped event with automatic cleanup.

        Supports both sync (@callback) and async callbacks; the dispatcher
        schedules coroutine functions as tasks.
        """
        signal = get_event_signal(self.entry_id, suffix)
        unsub = async_dispatcher_connect(self.hass, signal, callback)
        self.coordinator.config_entry.async_on_unload(unsub)
        const.LOGGER.debug(
            "Manager %s listening to event '%s' for instance %s",
            self.__class__.__name__,
            suffix,
            self.entry_id,
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager (subscribe to events, initialize state).

        Called once during config entry setup, after every manager exists.
        """
