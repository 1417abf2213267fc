"""Tests for PetEngine - pure logic, no HA fixtures needed."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from custom_components.questlog import catalog, const
from custom_components.questlog import data_builders as db
from custom_components.questlog.engines.pet_engine import PetEngine

HATCH = timedelta(hours=24)
BOUGHT = datetime(2025, 5, 1, 9, 0, tzinfo=UTC)


def _pet(timestamp: datetime | None = None, unlocked: bool = False) -> dict:
    """Build the first catalog pet in the given state."""
    pet = db.build_pet(catalog.PET_CATALOG[0])
    pet["unlock_timestamp"] = timestamp.isoformat() if timestamp else None
    pet["is_unlocked"] = unlocked
    return pet


class TestPetStates:
    """Test state derivation."""

    def test_locked_without_timestamp(self) -> None:
        """A pet never bought is locked."""
        assert PetEngine.get_state(_pet(), BOUGHT, HATCH) == const.PET_STATE_LOCKED

    def test_hatching_before_duration(self) -> None:
        """Inside the hatch window the pet is hatching."""
        now = BOUGHT + timedelta(hours=23, minutes=59)
        assert PetEngine.get_state(_pet(BOUGHT), now, HATCH) == const.PET_STATE_HATCHING
        assert PetEngine.is_hatching(_pet(BOUGHT), now, HATCH)

    def test_ready_at_exact_duration(self) -> None:
        """Elapsed == hatch duration is ready."""
        now = BOUGHT + HATCH
        assert PetEngine.is_ready_to_reveal(_pet(BOUGHT), now, HATCH)

    def test_unlocked_wins(self) -> None:
        """The unlocked flag overrides the timestamp."""
        pet = _pet(BOUGHT, unlocked=True)
        assert PetEngine.get_state(pet, BOUGHT, HATCH) == const.PET_STATE_UNLOCKED

    def test_future_timestamp_counts_as_hatching(self) -> None:
        """A clock that moved backwards keeps the pet hatching."""
        now = BOUGHT - timedelta(hours=1)
        assert PetEngine.get_state(_pet(BOUGHT), now, HATCH) == const.PET_STATE_HATCHING

    def test_zero_hatch_duration_is_ready_immediately(self) -> None:
        """With no incubation the egg is ready right after purchase."""
        assert PetEngine.is_ready_to_reveal(_pet(BOUGHT), BOUGHT, timedelta(0))


class TestPetHelpers:
    """Test remaining time, lookup and affordability."""

    def test_time_remaining(self) -> None:
        """Remaining time counts down while hatching, zero otherwise."""
        now = BOUGHT + timedelta(hours=20)
        assert PetEngine.time_remaining(_pet(BOUGHT), now, HATCH) == timedelta(hours=4)
        assert PetEngine.time_remaining(_pet(), now, HATCH) == timedelta(0)
        assert PetEngine.time_remaining(
            _pet(BOUGHT), BOUGHT + HATCH, HATCH
        ) == timedelta(0)

    def test_find_and_filter(self) -> None:
        """Lookup by id and filter by derived state."""
        pets = db.reconcile_pets(None)
        assert PetEngine.find_pet(pets, "aqua")["cost"] == 150
        assert PetEngine.find_pet(pets, "unicorn") is None
        pets[1]["unlock_timestamp"] = BOUGHT.isoformat()
        locked = PetEngine.pets_in_state(pets, const.PET_STATE_LOCKED, BOUGHT, HATCH)
        assert [pet["id"] for pet in locked] == [
            "fluffy",
            "aqua",
            "rocky",
            "mystic",
            "blaze",
        ]

    def test_can_afford(self) -> None:
        """Exact balance is enough."""
        assert PetEngine.can_afford(50, 50)
        assert not PetEngine.can_afford(49, 50)
