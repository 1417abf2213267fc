# File: catalog.py
"""Static progression catalog for Questlog.

Holds the quest batches, the purchasable pets and the rule tables that map
externally reported totals and signals onto quest credits. Everything here is
immutable data; runtime progress lives in the persisted document.

Rule tables are validated when this module is imported so that a
misaligned table stops the integration from loading instead of silently
crediting the wrong quest.
"""

from __future__ import annotations

from . import const
from .engines.quest_engine import QuestEngine
from .type_defs import (
    GraphRule,
    PetDefinition,
    QuestDefinition,
    SignalQuestRule,
    ThresholdRule,
)

# ==============================================================================
# Quest batches
# ==============================================================================

QUEST_CATALOG: tuple[QuestDefinition, ...] = (
    # Batch 1
    QuestDefinition("Set up the basics of your calendar", 1, 1, 50, 25),
    QuestDefinition("Complete two graphs in your profile", 1, 2, 50, 25),
    QuestDefinition("Get your first egg from the pet store", 1, 1, 50, 50),
    # Batch 2
    QuestDefinition("Log 3 calendar event", 2, 3, 75, 50),
    QuestDefinition("Turn on notifications", 2, 1, 75, 50),
    QuestDefinition("Complete 1 scheduled event", 2, 1, 100, 75),
    # Batch 3
    QuestDefinition("Complete 2 scheduled event", 3, 2, 75, 75),
    QuestDefinition("Add 5 new event", 3, 5, 100, 50),
    QuestDefinition("Use Task Prioritisation", 3, 1, 75, 75),
    # Batch 4
    QuestDefinition("Complete 3 scheduled event", 4, 3, 100, 75),
    QuestDefinition("Check pet happiness (just open pet page)", 4, 1, 50, 25),
    QuestDefinition("Use Sick or Holiday prompt", 4, 1, 100, 50),
    # Batch 5
    QuestDefinition("Use Sick or Holiday prompt", 5, 1, 100, 75),
    QuestDefinition("Complete 3 scheduled event", 5, 3, 100, 75),
    QuestDefinition("Update Running graph or gym graph", 5, 1, 50, 25),
    # Batch 6
    QuestDefinition("Complete 4 scheduled event", 6, 4, 125, 100),
    QuestDefinition("Fill out Gym or Swimming graph or income", 6, 1, 75, 50),
    QuestDefinition("Use Task Prioritisation on 1 task", 6, 1, 50, 25),
    # Batch 7
    QuestDefinition("Maintain 7-day streak", 7, 1, 0, 100),
    QuestDefinition("Complete 4 scheduled event", 7, 4, 200, 75),
    QuestDefinition("Update 2 different graphs", 7, 2, 50, 25),
    # Batch 8
    QuestDefinition("Complete 4 scheduled event", 8, 4, 125, 75),
    QuestDefinition("Add 3 new event", 8, 3, 75, 75),
    QuestDefinition("Update running graph", 8, 1, 150, 25),
    # Batch 9
    QuestDefinition("Complete 5 scheduled event", 9, 5, 125, 100),
    QuestDefinition("Add 2 new event", 9, 2, 75, 50),
    QuestDefinition("Check Daily Summary from yesterday", 9, 1, 50, 25),
    # Batch 10
    QuestDefinition("Complete 5 scheduled event", 10, 5, 125, 100),
    QuestDefinition("Add 2 new event", 10, 2, 75, 50),
    QuestDefinition("Buy a pet cosmetic worth 400 coins", 10, 1, 50, 0),
    # Batch 11
    QuestDefinition("Complete 3 scheduled event", 11, 3, 125, 100),
    QuestDefinition("Add 2 new event", 11, 2, 75, 50),
    QuestDefinition(
        "Update Running graph or gym graph or Fill out Academic Graph if applicable",
        11,
        1,
        50,
        25,
    ),
    # Batch 12
    QuestDefinition("Complete 2 scheduled event", 12, 2, 125, 100),
    QuestDefinition("Update 2 different graphs", 12, 2, 75, 50),
    QuestDefinition("Add 2 new events", 12, 2, 50, 25),
)

MAX_BATCH: int = max(quest.batch for quest in QUEST_CATALOG)

# ==============================================================================
# Threshold rules (running totals → quest counters)
# ==============================================================================

# Calendar events added. Each batch consumes the events above its threshold.
ADD_EVENT_RULES: tuple[ThresholdRule, ...] = (
    ThresholdRule(0, 0, "Log 3 calendar event", 2),
    ThresholdRule(3, 3, "Add 5 new event", 3),
    ThresholdRule(8, 8, "Add 3 new event", 8),
    ThresholdRule(11, 11, "Add 2 new event", 9),
    ThresholdRule(13, 13, "Add 2 new event", 10),
    ThresholdRule(15, 15, "Add 2 new event", 11),
    ThresholdRule(17, 17, "Add 2 new events", 12),
)

# Scheduled events completed.
SCHEDULED_EVENT_RULES: tuple[ThresholdRule, ...] = (
    ThresholdRule(0, 0, "Complete 1 scheduled event", 2),
    ThresholdRule(1, 1, "Complete 2 scheduled event", 3),
    ThresholdRule(3, 3, "Complete 3 scheduled event", 4),
    ThresholdRule(6, 6, "Complete 3 scheduled event", 5),
    ThresholdRule(9, 9, "Complete 4 scheduled event", 6),
    ThresholdRule(13, 13, "Complete 4 scheduled event", 7),
    ThresholdRule(17, 17, "Complete 4 scheduled event", 8),
    ThresholdRule(21, 21, "Complete 5 scheduled event", 9),
    ThresholdRule(26, 26, "Complete 5 scheduled event", 10),
    ThresholdRule(31, 31, "Complete 3 scheduled event", 11),
    ThresholdRule(34, 34, "Complete 2 scheduled event", 12),
)

# ==============================================================================
# Graph rules
# ==============================================================================

GRAPH_RUNNING = "running"
GRAPH_GYM = "gym"
GRAPH_SWIMMING = "swimming"
GRAPH_INCOME = "income"
GRAPH_ACADEMIC = "academic"

ALL_GRAPHS: frozenset[str] = frozenset()

GRAPH_RULES: tuple[GraphRule, ...] = (
    GraphRule(
        "Complete two graphs in your profile",
        1,
        QuestEngine.GRAPH_MODE_DISTINCT,
        ALL_GRAPHS,
    ),
    GraphRule(
        "Update Running graph or gym graph",
        5,
        QuestEngine.GRAPH_MODE_ANY,
        frozenset({GRAPH_RUNNING, GRAPH_GYM}),
    ),
    GraphRule(
        "Fill out Gym or Swimming graph or income",
        6,
        QuestEngine.GRAPH_MODE_ANY,
        frozenset({GRAPH_GYM, GRAPH_SWIMMING, GRAPH_INCOME}),
    ),
    GraphRule(
        "Update 2 different graphs",
        7,
        QuestEngine.GRAPH_MODE_DISTINCT,
        ALL_GRAPHS,
    ),
    GraphRule(
        "Update running graph",
        8,
        QuestEngine.GRAPH_MODE_ANY,
        frozenset({GRAPH_RUNNING}),
    ),
    GraphRule(
        "Update Running graph or gym graph or Fill out Academic Graph if applicable",
        11,
        QuestEngine.GRAPH_MODE_ANY,
        frozenset({GRAPH_RUNNING, GRAPH_GYM, GRAPH_ACADEMIC}),
    ),
    GraphRule(
        "Update 2 different graphs",
        12,
        QuestEngine.GRAPH_MODE_DISTINCT,
        ALL_GRAPHS,
    ),
)

# ==============================================================================
# Signal rules (one-shot credits)
# ==============================================================================

SIGNAL_QUEST_RULES: tuple[SignalQuestRule, ...] = (
    SignalQuestRule(
        const.SIGNAL_SUFFIX_CALENDAR_SETUP_COMPLETED,
        "Set up the basics of your calendar",
        1,
    ),
    SignalQuestRule(
        const.SIGNAL_SUFFIX_PET_PURCHASED,
        "Get your first egg from the pet store",
        1,
    ),
    SignalQuestRule(
        const.SIGNAL_SUFFIX_PET_UNLOCKED,
        "Get your first egg from the pet store",
        1,
    ),
    SignalQuestRule(
        const.SIGNAL_SUFFIX_DAILY_SUMMARY_VIEWED,
        "Check Daily Summary from yesterday",
        9,
    ),
)

# Streak length that completes the streak quest
STREAK_QUEST_NAME = "Maintain 7-day streak"
STREAK_QUEST_BATCH = 7
STREAK_QUEST_DAYS = 7

# ==============================================================================
# Pets
# ==============================================================================

PET_CATALOG: tuple[PetDefinition, ...] = (
    PetDefinition("fluffy", "Fluffy", 50),
    PetDefinition("sparky", "Sparky", 100),
    PetDefinition("aqua", "Aqua", 150),
    PetDefinition("rocky", "Rocky", 200),
    PetDefinition("mystic", "Mystic", 250),
    PetDefinition("blaze", "Blaze", 300),
)

# ==============================================================================
# Import-time validation
# ==============================================================================

QuestEngine.validate_rule_table(ADD_EVENT_RULES)
QuestEngine.validate_rule_table(SCHEDULED_EVENT_RULES)
QuestEngine.validate_graph_rules(GRAPH_RULES)
