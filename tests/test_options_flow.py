"""Tests for the Questlog options flow."""

# pylint: disable=redefined-outer-name  # Pytest fixtures shadow names
# pylint: disable=unused-argument  # Some fixtures needed for setup only

from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.questlog import const
from custom_components.questlog import flow_helpers as fh


async def test_options_form_shows_current_values(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Test the init step renders the settings form."""
    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "init"
    assert result.get("errors") == {}


async def test_options_saved_and_entry_reloaded(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> None:
    """Test new options are stored and the reloaded coordinator uses them."""
    result = await hass.config_entries.options.async_init(init_integration.entry_id)
    user_input = dict(fh.OPTION_DEFAULTS)
    user_input[const.CONF_XP_BASE] = 100
    user_input[const.CONF_HATCH_DURATION_HOURS] = 2

    result = await hass.config_entries.options.async_configure(
        result.get("flow_id"), user_input=user_input
    )
    await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert init_integration.options[const.CONF_XP_BASE] == 100.0
    assert init_integration.options[const.CONF_PET_UNLOCK_COINS] == 0

    coordinator = hass.data[const.DOMAIN][init_integration.entry_id][
        const.COORDINATOR
    ]
    assert coordinator.xp_base == 100.0
    assert coordinator.hatch_duration.total_seconds() == 7200
