"""Event capture helpers for Questlog tests."""

from typing import Any
from unittest.mock import MagicMock


def emitted(manager: Any, suffix: str) -> list[dict[str, Any]]:
    """Return the payloads a manager with a mocked emit sent for ``suffix``.

    The manager's ``emit`` must have been replaced with a MagicMock.
    """
    emit: MagicMock = manager.emit
    return [call.kwargs for call in emit.call_args_list if call.args[0] == suffix]


def emitted_suffixes(manager: Any) -> list[str]:
    """Return every suffix emitted by the manager, in order."""
    return [call.args[0] for call in manager.emit.call_args_list]
