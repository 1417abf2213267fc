# File: services.py
"""Defines custom services for the Questlog integration.

These services are the call surface of the app layer: they report external
events (calendar totals, graph updates, app foregrounding) and trigger the
user-facing progression actions (pets, popups, rewards).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import voluptuous as vol

from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const

if TYPE_CHECKING:
    from .coordinator import QuestlogDataCoordinator

# --- Service Schemas ---
COMPLETE_QUEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_QUEST_NAME): cv.string,
        vol.Optional(const.FIELD_MODE, default=const.QUEST_MODE_STEP): vol.In(
            [
                const.QUEST_MODE_STEP,
                const.QUEST_MODE_INCREMENT,
                const.QUEST_MODE_STATIC_FORCE,
            ]
        ),
        vol.Optional(const.FIELD_AMOUNT, default=1): vol.All(
            vol.Coerce(int), vol.Range(min=0)
        ),
        vol.Optional(const.FIELD_BATCH): vol.All(vol.Coerce(int), vol.Range(min=1)),
    }
)

REPORT_COUNT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_COUNT): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)

REPORT_GRAPH_UPDATED_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_GRAPH): cv.string,
    }
)

EMPTY_SCHEMA = vol.Schema({})

GRANT_XP_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_AMOUNT): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(const.FIELD_SOURCE, default=const.SOURCE_MANUAL): cv.string,
    }
)

PURCHASE_PET_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_PET_ID): cv.string,
    }
)

REVEAL_PET_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PET_ID): cv.string,
    }
)


def _get_coordinator(hass: HomeAssistant) -> QuestlogDataCoordinator:
    """Return the coordinator of the (single) loaded entry."""
    entries = hass.data.get(const.DOMAIN, {})
    for entry_data in entries.values():
        return entry_data[const.COORDINATOR]
    raise HomeAssistantError(
        translation_domain=const.DOMAIN,
        translation_key=const.TRANS_KEY_ERROR_NOT_LOADED,
    )


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Questlog services."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_COMPLETE_QUEST):
        return

    async def handle_complete_quest(call: ServiceCall) -> None:
        """Credit a quest by step, increment or static force."""
        coordinator = _get_coordinator(hass)
        name = call.data[const.FIELD_QUEST_NAME]
        mode = call.data[const.FIELD_MODE]
        amount = call.data[const.FIELD_AMOUNT]
        batch = call.data.get(const.FIELD_BATCH)
        manager = coordinator.quest_manager

        if mode == const.QUEST_MODE_STATIC_FORCE:
            changed = await manager.complete_quest_with_increment_static_force(
                name, amount, batch
            )
        elif mode == const.QUEST_MODE_INCREMENT:
            changed = await manager.complete_quest_with_increment(name, amount, batch)
        else:
            changed = await manager.complete_quest(name)

        const.LOGGER.info(
            "INFO: complete_quest '%s' (mode=%s, amount=%s, batch=%s) changed=%s",
            name,
            mode,
            amount,
            batch,
            changed,
        )

    async def handle_report_calendar_events(call: ServiceCall) -> None:
        """Report the running total of calendar events added."""
        _get_coordinator(hass).async_fire(
            const.SIGNAL_SUFFIX_CALENDAR_EVENT_COUNT_CHANGED,
            count=call.data[const.FIELD_COUNT],
        )

    async def handle_report_scheduled_events(call: ServiceCall) -> None:
        """Report the running total of scheduled events completed."""
        _get_coordinator(hass).async_fire(
            const.SIGNAL_SUFFIX_SCHEDULED_EVENT_COUNT_CHANGED,
            count=call.data[const.FIELD_COUNT],
        )

    async def handle_report_graph_updated(call: ServiceCall) -> None:
        """Report that a profile graph was updated."""
        _get_coordinator(hass).async_fire(
            const.SIGNAL_SUFFIX_GRAPH_UPDATED, graph=call.data[const.FIELD_GRAPH]
        )

    async def handle_report_daily_summary_viewed(call: ServiceCall) -> None:
        """Report that the daily summary was opened."""
        _get_coordinator(hass).async_fire(const.SIGNAL_SUFFIX_DAILY_SUMMARY_VIEWED)

    async def handle_report_app_foregrounded(call: ServiceCall) -> None:
        """Report that the app came to the foreground."""
        _get_coordinator(hass).async_fire(const.SIGNAL_SUFFIX_APP_FOREGROUNDED)

    async def handle_complete_calendar_setup(call: ServiceCall) -> None:
        """Report that the calendar basics were set up."""
        _get_coordinator(hass).async_fire(const.SIGNAL_SUFFIX_CALENDAR_SETUP_COMPLETED)

    async def handle_grant_xp(call: ServiceCall) -> None:
        """Grant XP directly to the profile."""
        coordinator = _get_coordinator(hass)
        await coordinator.profile_manager.grant_xp(
            call.data[const.FIELD_AMOUNT], source=call.data[const.FIELD_SOURCE]
        )

    async def handle_purchase_pet(call: ServiceCall) -> ServiceResponse:
        """Buy a pet (random locked pet when no id is given)."""
        coordinator = _get_coordinator(hass)
        pet_id = call.data.get(const.FIELD_PET_ID)
        if pet_id is None:
            result = await coordinator.pet_manager.purchase_random()
        else:
            result = await coordinator.pet_manager.purchase(pet_id)

        if result.reason == const.PURCHASE_FAILURE_UNKNOWN_PET:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_UNKNOWN_PET,
                translation_placeholders={"pet_id": str(pet_id)},
            )
        return {
            "success": result.success,
            "pet_id": result.pet_id,
            "reason": result.reason,
        }

    async def handle_reveal_pet(call: ServiceCall) -> ServiceResponse:
        """Reveal a pet whose hatch time has elapsed."""
        coordinator = _get_coordinator(hass)
        pet_id = call.data[const.FIELD_PET_ID]
        if coordinator.pet_manager.get_pet(pet_id) is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_UNKNOWN_PET,
                translation_placeholders={"pet_id": pet_id},
            )
        revealed = await coordinator.pet_manager.reveal(pet_id)
        return {
            "revealed": revealed,
            "pet_id": pet_id,
            "state": coordinator.pet_manager.get_state(pet_id),
        }

    async def handle_mark_streak_popup_shown(call: ServiceCall) -> None:
        """Clear the pending streak popups."""
        _get_coordinator(hass).streak_manager.mark_popup_shown()

    async def handle_acknowledge_rewards(call: ServiceCall) -> None:
        """Clear the pending reward indicator."""
        await _get_coordinator(hass).quest_manager.acknowledge_rewards()

    async def handle_reset_all_data(call: ServiceCall) -> None:
        """Wipe all progression data."""
        await _get_coordinator(hass).async_reset_all()

    # --- Register Services ---
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_COMPLETE_QUEST,
        handle_complete_quest,
        schema=COMPLETE_QUEST_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REPORT_CALENDAR_EVENTS,
        handle_report_calendar_events,
        schema=REPORT_COUNT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REPORT_SCHEDULED_EVENTS,
        handle_report_scheduled_events,
        schema=REPORT_COUNT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REPORT_GRAPH_UPDATED,
        handle_report_graph_updated,
        schema=REPORT_GRAPH_UPDATED_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REPORT_DAILY_SUMMARY_VIEWED,
        handle_report_daily_summary_viewed,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REPORT_APP_FOREGROUNDED,
        handle_report_app_foregrounded,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_COMPLETE_CALENDAR_SETUP,
        handle_complete_calendar_setup,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GRANT_XP,
        handle_grant_xp,
        schema=GRANT_XP_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_PURCHASE_PET,
        handle_purchase_pet,
        schema=PURCHASE_PET_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_REVEAL_PET,
        handle_reveal_pet,
        schema=REVEAL_PET_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_MARK_STREAK_POPUP_SHOWN,
        handle_mark_streak_popup_shown,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ACKNOWLEDGE_REWARDS,
        handle_acknowledge_rewards,
        schema=EMPTY_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RESET_ALL_DATA,
        handle_reset_all_data,
        schema=EMPTY_SCHEMA,
    )

    const.LOGGER.info("INFO: Questlog services have been registered successfully")


def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Questlog services when the last entry unloads."""
    services = [
        const.SERVICE_COMPLETE_QUEST,
        const.SERVICE_REPORT_CALENDAR_EVENTS,
        const.SERVICE_REPORT_SCHEDULED_EVENTS,
        const.SERVICE_REPORT_GRAPH_UPDATED,
        const.SERVICE_REPORT_DAILY_SUMMARY_VIEWED,
        const.SERVICE_REPORT_APP_FOREGROUNDED,
        const.SERVICE_COMPLETE_CALENDAR_SETUP,
        const.SERVICE_GRANT_XP,
        const.SERVICE_PURCHASE_PET,
        const.SERVICE_REVEAL_PET,
        const.SERVICE_MARK_STREAK_POPUP_SHOWN,
        const.SERVICE_ACKNOWLEDGE_REWARDS,
        const.SERVICE_RESET_ALL_DATA,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Questlog services have been unregistered")
