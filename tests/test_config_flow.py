"""Tests for the Questlog config flow."""

from unittest.mock import patch

from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.questlog.const import (
    CONF_PROFILE_NAME,
    CONF_XP_BASE,
    DEFAULT_XP_BASE,
    DOMAIN,
    QUESTLOG_TITLE,
)


async def test_form_user_flow_success(hass: HomeAssistant) -> None:
    """Test the single-step flow creates the entry with default options."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("step_id") == "user"

    with patch(
        "custom_components.questlog.async_setup_entry",
        return_value=True,
    ) as mock_setup_entry:
        result = await hass.config_entries.flow.async_configure(
            result.get("flow_id"),
            user_input={CONF_PROFILE_NAME: "  Robin  "},
        )
        await hass.async_block_till_done()

    assert result.get("type") == FlowResultType.CREATE_ENTRY
    assert result.get("title") == QUESTLOG_TITLE
    assert result.get("data") == {CONF_PROFILE_NAME: "Robin"}
    assert result.get("options", {}).get(CONF_XP_BASE) == DEFAULT_XP_BASE
    assert len(mock_setup_entry.mock_calls) == 1


async def test_form_blank_profile_name(hass: HomeAssistant) -> None:
    """Test a whitespace-only name is rejected with a field error."""
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    result = await hass.config_entries.flow.async_configure(
        result.get("flow_id"),
        user_input={CONF_PROFILE_NAME: "   "},
    )
    assert result.get("type") == FlowResultType.FORM
    assert result.get("errors") == {CONF_PROFILE_NAME: "invalid_profile_name"}


async def test_single_instance_only(hass: HomeAssistant) -> None:
    """Test a second entry is not allowed."""
    MockConfigEntry(domain=DOMAIN, data={CONF_PROFILE_NAME: "Alex"}).add_to_hass(hass)

    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result.get("type") == FlowResultType.ABORT
    assert result.get("reason") == "single_instance_allowed"
