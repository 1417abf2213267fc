"""Event signal helpers for Questlog.

Builds the instance-scoped dispatcher signal names used by managers, the
coordinator and external subscribers.
"""

from __future__ import annotations

from .. import const


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Each config entry gets its own signal namespace so two instances never
    see each other's events.

    Format: 'questlog_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_LEVEL_UP)
        'questlog_abc123_level_up'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"
