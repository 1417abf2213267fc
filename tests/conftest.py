"""Shared fixtures for Questlog tests."""

from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock, PropertyMock

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.questlog import const
from custom_components.questlog import data_builders as db
from custom_components.questlog import flow_helpers as fh

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name

from tests.helpers.constants import TEST_ENTRY_ID, TEST_PROFILE_NAME


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a Questlog config entry with default options."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.QUESTLOG_TITLE,
        data={const.CONF_PROFILE_NAME: TEST_PROFILE_NAME},
        options=fh.build_options_data(fh.OPTION_DEFAULTS),
        entry_id=TEST_ENTRY_ID,
    )


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up Questlog with empty storage."""
    mock_config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()
    return mock_config_entry


@pytest.fixture
def coordinator(hass: HomeAssistant, init_integration: MockConfigEntry):  # pylint: disable=redefined-outer-name
    """Return the coordinator of the set-up entry."""
    return hass.data[const.DOMAIN][init_integration.entry_id][const.COORDINATOR]


# ============================================================================
# Manager unit-test fixtures (no Home Assistant instance)
# ============================================================================


@pytest.fixture
def document() -> dict[str, Any]:
    """Return a fresh progression document."""
    return db.build_default_data(TEST_PROFILE_NAME)


@pytest.fixture
def mock_hass() -> MagicMock:
    """Create mock Home Assistant instance."""
    return MagicMock()


@pytest.fixture
def mock_coordinator(document: dict[str, Any]) -> MagicMock:  # pylint: disable=redefined-outer-name
    """Return a coordinator stand-in backed by a real document.

    Section accessors read through the document so managers that replace a
    section (reset, clear) stay consistent.
    """
    mock = MagicMock()
    mock.config_entry.entry_id = TEST_ENTRY_ID
    mock.document = document
    mock.async_persist = AsyncMock(return_value=True)

    mock_type = type(mock)
    mock_type.profile_data = PropertyMock(
        side_effect=lambda: document[const.DATA_PROFILE]
    )
    mock_type.quests_data = PropertyMock(
        side_effect=lambda: document[const.DATA_QUEST_PROGRESS]
    )
    mock_type.pets_data = PropertyMock(side_effect=lambda: document[const.DATA_PETS])
    mock_type.achievements_data = PropertyMock(
        side_effect=lambda: document[const.DATA_ACHIEVEMENTS]
    )

    mock.xp_base = const.DEFAULT_XP_BASE
    mock.xp_exponent = const.DEFAULT_XP_EXPONENT
    mock.hatch_duration = timedelta(hours=const.DEFAULT_HATCH_DURATION_HOURS)
    mock.pet_unlock_xp = const.DEFAULT_PET_UNLOCK_XP
    mock.pet_unlock_coins = const.DEFAULT_PET_UNLOCK_COINS
    mock.achievement_level_xp = const.DEFAULT_ACHIEVEMENT_LEVEL_XP
    return mock
