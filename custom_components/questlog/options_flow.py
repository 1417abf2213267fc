# File: options_flow.py
"""Options Flow for the Questlog integration.

Edits the leveling curve, pet timings/rewards and the refresh interval.
Saving the options reloads the entry (see the update listener in __init__).
"""

from typing import Any, Optional

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class QuestlogOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for the progression settings."""

    async def async_step_init(self, user_input: Optional[dict[str, Any]] = None):
        """Show and validate the settings form."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = fh.validate_options_inputs(user_input)
            if not errors:
                options = fh.build_options_data(user_input)
                const.LOGGER.debug("DEBUG: Saving Questlog options: %s", options)
                return self.async_create_entry(data=options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_options_schema(
                user_input or dict(self.config_entry.options)
            ),
            errors=errors,
        )
