# File: flow_helpers.py
"""Helpers for the Questlog config and options flows.

Schema builders and input validation shared by config_flow.py and
options_flow.py, so both flows present the same fields and defaults.
"""

from typing import Any, Dict, Optional

import voluptuous as vol
from homeassistant.helpers import selector

from . import const

# Option key -> default, in form order
OPTION_DEFAULTS: Dict[str, Any] = {
    const.CONF_XP_BASE: const.DEFAULT_XP_BASE,
    const.CONF_XP_EXPONENT: const.DEFAULT_XP_EXPONENT,
    const.CONF_HATCH_DURATION_HOURS: const.DEFAULT_HATCH_DURATION_HOURS,
    const.CONF_PET_UNLOCK_XP: const.DEFAULT_PET_UNLOCK_XP,
    const.CONF_PET_UNLOCK_COINS: const.DEFAULT_PET_UNLOCK_COINS,
    const.CONF_ACHIEVEMENT_LEVEL_XP: const.DEFAULT_ACHIEVEMENT_LEVEL_XP,
    const.CONF_UPDATE_INTERVAL: const.DEFAULT_UPDATE_INTERVAL,
}


def _number(min_value: float, step: float, max_value: Optional[float] = None):
    """Box-mode number selector."""
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            mode=selector.NumberSelectorMode.BOX,
            min=min_value,
            max=max_value,
            step=step,
        )
    )


def build_profile_schema(default_name: str = const.DEFAULT_PROFILE_NAME) -> vol.Schema:
    """Build the schema for the initial profile step."""
    return vol.Schema(
        {
            vol.Required(const.CONF_PROFILE_NAME, default=default_name): str,
        }
    )


def validate_profile_inputs(user_input: Dict[str, Any]) -> Dict[str, str]:
    """Validate the profile step. Returns an errors dict (empty when valid)."""
    errors: Dict[str, str] = {}
    name = str(user_input.get(const.CONF_PROFILE_NAME, "")).strip()
    if not name:
        errors[const.CONF_PROFILE_NAME] = const.TRANS_KEY_CFOF_INVALID_PROFILE_NAME
    return errors


def build_options_schema(default: Optional[dict] = None) -> vol.Schema:
    """Build the schema for the leveling, pet and refresh options."""
    default = default or {}

    def current(key: str) -> Any:
        value = default.get(key)
        return OPTION_DEFAULTS[key] if value is None else value

    return vol.Schema(
        {
            vol.Required(
                const.CONF_XP_BASE, default=current(const.CONF_XP_BASE)
            ): _number(1, 1),
            vol.Required(
                const.CONF_XP_EXPONENT, default=current(const.CONF_XP_EXPONENT)
            ): _number(0, 0.1, 5),
            vol.Required(
                const.CONF_HATCH_DURATION_HOURS,
                default=current(const.CONF_HATCH_DURATION_HOURS),
            ): _number(0, 0.5),
            vol.Required(
                const.CONF_PET_UNLOCK_XP, default=current(const.CONF_PET_UNLOCK_XP)
            ): _number(0, 1),
            vol.Required(
                const.CONF_PET_UNLOCK_COINS,
                default=current(const.CONF_PET_UNLOCK_COINS),
            ): _number(0, 1),
            vol.Required(
                const.CONF_ACHIEVEMENT_LEVEL_XP,
                default=current(const.CONF_ACHIEVEMENT_LEVEL_XP),
            ): _number(0, 1),
            vol.Required(
                const.CONF_UPDATE_INTERVAL, default=current(const.CONF_UPDATE_INTERVAL)
            ): _number(1, 1),
        }
    )


def validate_options_inputs(user_input: Dict[str, Any]) -> Dict[str, str]:
    """Validate option values the selectors cannot express."""
    errors: Dict[str, str] = {}
    if float(user_input.get(const.CONF_XP_BASE, const.DEFAULT_XP_BASE)) <= 0:
        errors[const.CONF_XP_BASE] = const.TRANS_KEY_CFOF_INVALID_XP_CURVE
    return errors


def build_options_data(user_input: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize submitted options to the stored types."""
    return {
        const.CONF_XP_BASE: float(user_input[const.CONF_XP_BASE]),
        const.CONF_XP_EXPONENT: float(user_input[const.CONF_XP_EXPONENT]),
        const.CONF_HATCH_DURATION_HOURS: float(
            user_input[const.CONF_HATCH_DURATION_HOURS]
        ),
        const.CONF_PET_UNLOCK_XP: float(user_input[const.CONF_PET_UNLOCK_XP]),
        const.CONF_PET_UNLOCK_COINS: int(user_input[const.CONF_PET_UNLOCK_COINS]),
        const.CONF_ACHIEVEMENT_LEVEL_XP: float(
            user_input[const.CONF_ACHIEVEMENT_LEVEL_XP]
        ),
        const.CONF_UPDATE_INTERVAL: int(user_input[const.CONF_UPDATE_INTERVAL]),
    }
