# File: config_flow.py
"""Config flow for the Questlog integration.

A single step names the profile; everything else lives in the options flow.
Only one Questlog instance can be configured.
"""

from typing import Any, Optional

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import QuestlogOptionsFlowHandler


class QuestlogConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Questlog."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Ask for the profile name and create the entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            errors = fh.validate_profile_inputs(user_input)
            if not errors:
                name = user_input[const.CONF_PROFILE_NAME].strip()
                const.LOGGER.info("INFO: Creating Questlog entry for '%s'", name)
                return self.async_create_entry(
                    title=const.QUESTLOG_TITLE,
                    data={const.CONF_PROFILE_NAME: name},
                    options=fh.build_options_data(fh.OPTION_DEFAULTS),
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_profile_schema(),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return QuestlogOptionsFlowHandler()
