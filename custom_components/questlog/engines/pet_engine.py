"""Pet Engine - Pure logic for the pet hatching lifecycle.

Lifecycle: Locked --purchase--> Hatching --elapsed >= hatch--> ReadyToReveal
--reveal--> Unlocked.

The state is derived from (is_unlocked, unlock_timestamp, now, hatch_duration)
and is never stored, so timed transitions need no background timer.

ARCHITECTURE: Stateless, pure functions with NO Home Assistant dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_parse

if TYPE_CHECKING:
    from ..type_defs import PetData


class PetEngine:
    """Stateless pet state derivation."""

    @staticmethod
    def get_state(pet: PetData, now: datetime, hatch_duration: timedelta) -> str:
        """Return the lifecycle state of a pet at ``now``.

        A timestamp in the future (clock moved backwards) counts as hatching.
        """
        if pet.get("is_unlocked"):
            return const.PET_STATE_UNLOCKED
        started = dt_parse(pet.get("unlock_timestamp"))
        if started is None:
            return const.PET_STATE_LOCKED
        if now - started >= hatch_duration:
            return const.PET_STATE_READY_TO_REVEAL
        return const.PET_STATE_HATCHING

    @staticmethod
    def is_hatching(pet: PetData, now: datetime, hatch_duration: timedelta) -> bool:
        """Return True while the egg is still incubating."""
        return PetEngine.get_state(pet, now, hatch_duration) == const.PET_STATE_HATCHING

    @staticmethod
    def is_ready_to_reveal(
        pet: PetData, now: datetime, hatch_duration: timedelta
    ) -> bool:
        """Return True once the hatch duration has elapsed and before reveal."""
        return (
            PetEngine.get_state(pet, now, hatch_duration)
            == const.PET_STATE_READY_TO_REVEAL
        )

    @staticmethod
    def time_remaining(
        pet: PetData, now: datetime, hatch_duration: timedelta
    ) -> timedelta:
        """Return the remaining hatch time, zero unless the pet is hatching."""
        if not PetEngine.is_hatching(pet, now, hatch_duration):
            return timedelta(0)
        started = dt_parse(pet.get("unlock_timestamp"))
        if started is None:
            return timedelta(0)
        return max(timedelta(0), started + hatch_duration - now)

    @staticmethod
    def find_pet(pets: Iterable[PetData], pet_id: str) -> PetData | None:
        """Return the pet with ``pet_id``, or None."""
        for pet in pets:
            if pet["id"] == pet_id:
                return pet
        return None

    @staticmethod
    def pets_in_state(
        pets: Iterable[PetData],
        state: str,
        now: datetime,
        hatch_duration: timedelta,
    ) -> list[PetData]:
        """Return the pets currently in ``state``, in catalog order."""
        return [
            pet
            for pet in pets
            if PetEngine.get_state(pet, now, hatch_duration) == state
        ]

    @staticmethod
    def can_afford(coins: int, cost: int) -> bool:
        """Return True if the balance covers the cost."""
        return coins >= cost
