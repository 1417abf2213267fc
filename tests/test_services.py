"""Tests for the Questlog services.

Services are exercised end to end: each call goes through schema
validation, the dispatcher signals and the managers, and the assertions
read the resulting document.
"""

# pylint: disable=redefined-outer-name  # Pytest fixtures shadow names
# pylint: disable=unused-argument  # Some fixtures needed for setup only

from datetime import timedelta

import pytest
import voluptuous as vol
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.util import dt as dt_util

from custom_components.questlog import const
from tests.helpers.constants import (
    QUEST_CALENDAR_SETUP,
    QUEST_FIRST_EGG,
    QUEST_TWO_GRAPHS,
)


async def _call(hass: HomeAssistant, service: str, data: dict | None = None):
    """Call a Questlog service and let the signal handlers finish."""
    await hass.services.async_call(const.DOMAIN, service, data or {}, blocking=True)
    await hass.async_block_till_done()


# ----------------------------------------------------------------------------------
# Quests
# ----------------------------------------------------------------------------------


async def test_complete_quest_modes(hass: HomeAssistant, coordinator) -> None:
    """Test step and increment modes credit the current batch."""
    await _call(hass, const.SERVICE_COMPLETE_QUEST, {"quest_name": QUEST_CALENDAR_SETUP})
    await _call(
        hass,
        const.SERVICE_COMPLETE_QUEST,
        {"quest_name": QUEST_TWO_GRAPHS, "mode": "increment", "amount": 5},
    )
    quests = coordinator.quest_manager
    assert quests.is_quest_completed(QUEST_CALENDAR_SETUP)
    assert quests.is_quest_completed(QUEST_TWO_GRAPHS)
    assert coordinator.profile_manager.coins == 50


async def test_complete_quest_static_force(hass: HomeAssistant, coordinator) -> None:
    """Test static force never lowers a counter."""
    data = {"quest_name": QUEST_TWO_GRAPHS, "mode": "static_force", "amount": 1}
    await _call(hass, const.SERVICE_COMPLETE_QUEST, data)
    await _call(hass, const.SERVICE_COMPLETE_QUEST, {**data, "amount": 0})

    (quest,) = [
        q
        for q in coordinator.quest_manager.current_batch_quests()
        if q["name"] == QUEST_TWO_GRAPHS
    ]
    assert quest["completed_count"] == 1


async def test_complete_quest_rejects_bad_input(
    hass: HomeAssistant, coordinator
) -> None:
    """Test the schema rejects unknown modes and negative amounts."""
    with pytest.raises(vol.Invalid):
        await _call(
            hass,
            const.SERVICE_COMPLETE_QUEST,
            {"quest_name": QUEST_TWO_GRAPHS, "mode": "sometimes"},
        )
    with pytest.raises(vol.Invalid):
        await _call(
            hass,
            const.SERVICE_COMPLETE_QUEST,
            {"quest_name": QUEST_TWO_GRAPHS, "mode": "increment", "amount": -1},
        )


async def test_complete_calendar_setup(hass: HomeAssistant, coordinator) -> None:
    """Test the setup signal credits the quest and unlocks the achievement."""
    await _call(hass, const.SERVICE_COMPLETE_CALENDAR_SETUP)

    assert coordinator.quest_manager.is_quest_completed(QUEST_CALENDAR_SETUP)
    (calendar,) = coordinator.achievement_manager.achievements
    assert calendar["setup_completed"]
    assert coordinator.profile_manager.level == 2
    assert coordinator.profile_manager.coins == 25
    assert coordinator.quest_manager.show_glow_icon

    await _call(hass, const.SERVICE_ACKNOWLEDGE_REWARDS)
    assert not coordinator.quest_manager.show_glow_icon


# ----------------------------------------------------------------------------------
# Reported app events
# ----------------------------------------------------------------------------------


async def test_report_calendar_events(hass: HomeAssistant, coordinator) -> None:
    """Test the calendar total drives the achievement and is kept for quests."""
    await _call(hass, const.SERVICE_REPORT_CALENDAR_EVENTS, {"count": 3})

    assert coordinator.document[const.DATA_QUEST_LAST_EVENT_COUNT] == 3
    (calendar,) = coordinator.achievement_manager.achievements
    assert calendar["level"] == 2
    assert coordinator.profile_manager.xp == const.DEFAULT_ACHIEVEMENT_LEVEL_XP


async def test_report_scheduled_events(hass: HomeAssistant, coordinator) -> None:
    """Test the scheduled total is stored."""
    await _call(hass, const.SERVICE_REPORT_SCHEDULED_EVENTS, {"count": 4})
    assert coordinator.document[const.DATA_QUEST_LAST_SCHEDULED_COUNT] == 4

    with pytest.raises(vol.Invalid):
        await _call(hass, const.SERVICE_REPORT_SCHEDULED_EVENTS, {"count": -1})


async def test_report_graph_updated(hass: HomeAssistant, coordinator) -> None:
    """Test two distinct graphs complete the graph quest."""
    await _call(hass, const.SERVICE_REPORT_GRAPH_UPDATED, {"graph": "Running"})
    await _call(hass, const.SERVICE_REPORT_GRAPH_UPDATED, {"graph": "running"})
    assert not coordinator.quest_manager.is_quest_completed(QUEST_TWO_GRAPHS)

    await _call(hass, const.SERVICE_REPORT_GRAPH_UPDATED, {"graph": "income"})
    assert coordinator.quest_manager.is_quest_completed(QUEST_TWO_GRAPHS)


async def test_app_foregrounded_and_popups(hass: HomeAssistant, coordinator) -> None:
    """Test opening the app records today and raises the streak popup."""
    await _call(hass, const.SERVICE_REPORT_APP_FOREGROUNDED)
    await _call(hass, const.SERVICE_REPORT_APP_FOREGROUNDED)

    streak = coordinator.streak_manager
    assert streak.current_streak == 1
    assert streak.record["totalDaysLogged"] == 1
    assert streak.should_show_popup

    await _call(hass, const.SERVICE_MARK_STREAK_POPUP_SHOWN)
    assert not streak.should_show_popup


async def test_daily_summary_viewed(hass: HomeAssistant, coordinator) -> None:
    """Test the summary streak starts at 1."""
    await _call(hass, const.SERVICE_REPORT_DAILY_SUMMARY_VIEWED)
    assert coordinator.document[const.DATA_STREAK_SUMMARY_CURRENT] == 1


# ----------------------------------------------------------------------------------
# Profile and pets
# ----------------------------------------------------------------------------------


async def test_grant_xp(hass: HomeAssistant, coordinator) -> None:
    """Test a manual grant levels up and is recorded in the ledger."""
    await _call(hass, const.SERVICE_GRANT_XP, {"amount": 120, "source": "bonus"})

    assert coordinator.profile_manager.level == 2
    assert coordinator.profile_manager.xp == 70.0
    assert coordinator.profile_data[const.DATA_PROFILE_LEDGER][-1]["source"] == "bonus"

    with pytest.raises(vol.Invalid):
        await _call(hass, const.SERVICE_GRANT_XP, {"amount": 0})


async def test_purchase_pet_without_coins(hass: HomeAssistant, coordinator) -> None:
    """Test a purchase the balance cannot cover returns a failure result."""
    response = await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_PURCHASE_PET,
        {"pet_id": "fluffy"},
        blocking=True,
        return_response=True,
    )
    assert response == {
        "success": False,
        "pet_id": "fluffy",
        "reason": const.PURCHASE_FAILURE_INSUFFICIENT_COINS,
    }
    assert coordinator.profile_manager.coins == 0
    assert coordinator.pet_manager.get_state("fluffy") == const.PET_STATE_LOCKED


async def test_purchase_pet_twice_returns_not_locked(
    hass: HomeAssistant, coordinator
) -> None:
    """Test buying a hatching pet again is a failure result, not an error."""
    coordinator.profile_data[const.DATA_PROFILE_COINS] = 200
    data = {"pet_id": "fluffy"}
    await hass.services.async_call(
        const.DOMAIN, const.SERVICE_PURCHASE_PET, data, blocking=True, return_response=True
    )
    await hass.async_block_till_done()
    coins = coordinator.profile_manager.coins

    response = await hass.services.async_call(
        const.DOMAIN, const.SERVICE_PURCHASE_PET, data, blocking=True, return_response=True
    )
    assert response["success"] is False
    assert response["reason"] == const.PURCHASE_FAILURE_NOT_LOCKED
    assert coordinator.profile_manager.coins == coins


async def test_purchase_unknown_pet(hass: HomeAssistant, coordinator) -> None:
    """Test unknown pet ids raise."""
    with pytest.raises(HomeAssistantError):
        await hass.services.async_call(
            const.DOMAIN,
            const.SERVICE_PURCHASE_PET,
            {"pet_id": "unicorn"},
            blocking=True,
            return_response=True,
        )


async def test_purchase_pet_credits_egg_quest(
    hass: HomeAssistant, coordinator
) -> None:
    """Test a purchase returns its result and completes the egg quest."""
    coordinator.profile_data[const.DATA_PROFILE_COINS] = 100

    response = await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_PURCHASE_PET,
        {"pet_id": "fluffy"},
        blocking=True,
        return_response=True,
    )
    await hass.async_block_till_done()

    assert response == {"success": True, "pet_id": "fluffy", "reason": None}
    assert coordinator.pet_manager.get_state("fluffy") == const.PET_STATE_HATCHING
    assert coordinator.quest_manager.is_quest_completed(QUEST_FIRST_EGG)
    # 100 - 50 for the egg + 50 quest reward
    assert coordinator.profile_manager.coins == 100


async def test_reveal_pet(hass: HomeAssistant, coordinator) -> None:
    """Test revealing before and after the hatch time."""
    coordinator.profile_data[const.DATA_PROFILE_COINS] = 50
    await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_PURCHASE_PET,
        {"pet_id": "fluffy"},
        blocking=True,
        return_response=True,
    )
    await hass.async_block_till_done()

    response = await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_REVEAL_PET,
        {"pet_id": "fluffy"},
        blocking=True,
        return_response=True,
    )
    assert response == {
        "revealed": False,
        "pet_id": "fluffy",
        "state": const.PET_STATE_HATCHING,
    }

    pet = coordinator.pet_manager.get_pet("fluffy")
    pet["unlock_timestamp"] = (dt_util.utcnow() - timedelta(hours=25)).isoformat()
    xp_before = coordinator.profile_data[const.DATA_PROFILE_TOTAL_XP_EARNED]

    response = await hass.services.async_call(
        const.DOMAIN,
        const.SERVICE_REVEAL_PET,
        {"pet_id": "fluffy"},
        blocking=True,
        return_response=True,
    )
    await hass.async_block_till_done()

    assert response == {
        "revealed": True,
        "pet_id": "fluffy",
        "state": const.PET_STATE_UNLOCKED,
    }
    assert coordinator.pet_manager.get_state("fluffy") == const.PET_STATE_UNLOCKED
    assert (
        coordinator.profile_data[const.DATA_PROFILE_TOTAL_XP_EARNED]
        == xp_before + const.DEFAULT_PET_UNLOCK_XP
    )


# ----------------------------------------------------------------------------------
# Maintenance
# ----------------------------------------------------------------------------------


async def test_reset_all_data(hass: HomeAssistant, coordinator) -> None:
    """Test the reset service wipes progress and popups."""
    await _call(hass, const.SERVICE_GRANT_XP, {"amount": 500})
    await _call(hass, const.SERVICE_REPORT_APP_FOREGROUNDED)
    await _call(hass, const.SERVICE_RESET_ALL_DATA)

    assert coordinator.profile_manager.level == 1
    assert coordinator.streak_manager.current_streak == 0
    assert not coordinator.streak_manager.should_show_popup
    assert coordinator.quest_manager.current_batch == 1
