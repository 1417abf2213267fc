"""Test helpers for Questlog integration tests.

    from tests.helpers import TEST_ENTRY_ID, emitted

- constants.py: Entry ids and catalog names used in assertions
- events.py: Capture of events emitted by managers with a mocked emit
"""

from tests.helpers.constants import (
    QUEST_CALENDAR_SETUP,
    QUEST_FIRST_EGG,
    QUEST_LOG_THREE_EVENTS,
    QUEST_TWO_GRAPHS,
    TEST_ENTRY_ID,
    TEST_PROFILE_NAME,
)
from tests.helpers.events import emitted, emitted_suffixes

__all__ = [
    "QUEST_CALENDAR_SETUP",
    "QUEST_FIRST_EGG",
    "QUEST_LOG_THREE_EVENTS",
    "QUEST_TWO_GRAPHS",
    "TEST_ENTRY_ID",
    "TEST_PROFILE_NAME",
    "emitted",
    "emitted_suffixes",
]
