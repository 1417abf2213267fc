"""Pet Manager - Pet purchases, hatching and reveals.

Lifecycle: Locked → Hatching → ReadyToReveal → Unlocked. Only the purchase
timestamp and the unlocked flag are stored; the hatching states are derived
on read by PetEngine, so no timer has to survive a restart.

Lock order: the pet lock is taken first, then ProfileManager's profile lock
(through spend_coins). ProfileManager never calls back into this manager.
"""

from __future__ import annotations

from datetime import datetime, timedelta
import random
from typing import TYPE_CHECKING, Any

from homeassistant.util import dt as dt_util

from .. import const
from ..engines.pet_engine import PetEngine
from ..type_defs import PurchaseResult
from ..utils.dt_utils import dt_format_duration
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestlogDataCoordinator
    from ..type_defs import PetData


class PetManager(BaseManager):
    """Manager for the pet hatching economy."""

    LOCK_PETS = "pets"

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: QuestlogDataCoordinator,
    ) -> None:
        """Initialize the PetManager."""
        super().__init__(hass, coordinator)
        self._coordinator = coordinator

    async def async_setup(self) -> None:
        """Subscribe to the app foreground signal."""
        self.listen(const.SIGNAL_SUFFIX_APP_FOREGROUNDED, self._on_app_foregrounded)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def pets(self) -> list[PetData]:
        """Live pet list in catalog order."""
        return self._coordinator.pets_data

    @property
    def hatch_duration(self) -> timedelta:
        """Configured hatch duration."""
        return self._coordinator.hatch_duration

    def get_pet(self, pet_id: str) -> PetData | None:
        """Return the pet record, or None for an unknown id."""
        return PetEngine.find_pet(self.pets, pet_id)

    def get_state(self, pet_id: str, now: datetime | None = None) -> str | None:
        """Return the derived lifecycle state of a pet (None if unknown)."""
        pet = self.get_pet(pet_id)
        if pet is None:
            return None
        return PetEngine.get_state(pet, now or dt_util.utcnow(), self.hatch_duration)

    def time_remaining(self, pet_id: str, now: datetime | None = None) -> timedelta:
        """Remaining hatch time for a pet (zero unless hatching)."""
        pet = self.get_pet(pet_id)
        if pet is None:
            return timedelta(0)
        return PetEngine.time_remaining(
            pet, now or dt_util.utcnow(), self.hatch_duration
        )

    def pets_ready_to_reveal(self, now: datetime | None = None) -> list[str]:
        """Ids of pets whose hatch time has elapsed, evaluated at ``now``."""
        return [
            pet["id"]
            for pet in PetEngine.pets_in_state(
                self.pets,
                const.PET_STATE_READY_TO_REVEAL,
                now or dt_util.utcnow(),
                self.hatch_duration,
            )
        ]

    def pet_states(self, now: datetime | None = None) -> dict[str, dict[str, Any]]:
        """Per-pet derived view used by diagnostics and subscribers."""
        now = now or dt_util.utcnow()
        states: dict[str, dict[str, Any]] = {}
        for pet in self.pets:
            remaining = PetEngine.time_remaining(pet, now, self.hatch_duration)
            states[pet["id"]] = {
                "name": pet["name"],
                "cost": pet["cost"],
                "state": PetEngine.get_state(pet, now, self.hatch_duration),
                "seconds_remaining": int(remaining.total_seconds()),
                "time_remaining": dt_format_duration(remaining),
            }
        return states

    # =========================================================================
    # Operations
    # =========================================================================

    async def purchase(
        self, pet_id: str, now: datetime | None = None
    ) -> PurchaseResult:
        """Buy a locked pet and start hatching it.

        Failures return a typed reason and leave every record untouched.
        """
        now = now or dt_util.utcnow()
        async with self._get_lock(self.LOCK_PETS):
            pet = self.get_pet(pet_id)
            if pet is None:
                const.LOGGER.warning("WARNING: Purchase of unknown pet '%s'", pet_id)
                return PurchaseResult(
                    False, pet_id, const.PURCHASE_FAILURE_UNKNOWN_PET
                )

            state = PetEngine.get_state(pet, now, self.hatch_duration)
            if state != const.PET_STATE_LOCKED:
                const.LOGGER.debug(
                    "DEBUG: Pet '%s' cannot be bought in state %s", pet_id, state
                )
                return PurchaseResult(False, pet_id, const.PURCHASE_FAILURE_NOT_LOCKED)

            profile_manager = self._coordinator.profile_manager
            if not PetEngine.can_afford(profile_manager.coins, pet["cost"]):
                return PurchaseResult(
                    False, pet_id, const.PURCHASE_FAILURE_INSUFFICIENT_COINS
                )

            # Written before the debit so the debit's save carries both changes
            pet["unlock_timestamp"] = now.isoformat()
            if not await profile_manager.spend_coins(
                pet["cost"], source=const.SOURCE_PURCHASE, reference=pet_id
            ):
                pet["unlock_timestamp"] = None
                return PurchaseResult(
                    False, pet_id, const.PURCHASE_FAILURE_INSUFFICIENT_COINS
                )

            const.LOGGER.info(
                "INFO: Pet '%s' purchased for %s coins", pet["name"], pet["cost"]
            )
            self.emit(
                const.SIGNAL_SUFFIX_PET_PURCHASED,
                pet_id=pet_id,
                name=pet["name"],
                cost=pet["cost"],
                unlock_timestamp=pet["unlock_timestamp"],
                ready_at=(now + self.hatch_duration).isoformat(),
            )
            return PurchaseResult(True, pet_id)

    async def purchase_random(self, now: datetime | None = None) -> PurchaseResult:
        """Buy a randomly chosen locked pet."""
        now = now or dt_util.utcnow()
        locked = PetEngine.pets_in_state(
            self.pets, const.PET_STATE_LOCKED, now, self.hatch_duration
        )
        if not locked:
            return PurchaseResult(False, None, const.PURCHASE_FAILURE_NONE_AVAILABLE)
        return await self.purchase(random.choice(locked)["id"], now=now)

    async def reveal(self, pet_id: str, now: datetime | None = None) -> bool:
        """Reveal a pet whose hatch time has elapsed.

        Returns:
            True when the pet moved to Unlocked; False from any other state.
        """
        now = now or dt_util.utcnow()
        async with self._get_lock(self.LOCK_PETS):
            pet = self.get_pet(pet_id)
            if pet is None:
                const.LOGGER.warning("WARNING: Reveal of unknown pet '%s'", pet_id)
                return False
            if not PetEngine.is_ready_to_reveal(pet, now, self.hatch_duration):
                const.LOGGER.debug(
                    "DEBUG: Pet '%s' is not ready to reveal (state %s)",
                    pet_id,
                    PetEngine.get_state(pet, now, self.hatch_duration),
                )
                return False

            pet["is_unlocked"] = True
            await self._coordinator.async_persist()

            const.LOGGER.info("INFO: Pet '%s' revealed", pet["name"])
            self.emit(
                const.SIGNAL_SUFFIX_PET_UNLOCKED,
                pet_id=pet_id,
                name=pet["name"],
                xp=self._coordinator.pet_unlock_xp,
                coins=self._coordinator.pet_unlock_coins,
            )
            return True

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _on_app_foregrounded(self, payload: dict[str, Any]) -> None:
        """Tell subscribers which pets can be revealed now."""
        ready = self.pets_ready_to_reveal()
        if ready:
            self.emit(const.SIGNAL_SUFFIX_PETS_READY, pet_ids=ready)
