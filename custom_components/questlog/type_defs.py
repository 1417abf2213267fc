"""Type definitions for Questlog data structures.

TypedDict is used for every persisted record because all keys are fixed at
design time. Dynamic maps (completed measurement flags) stay dict[str, bool].

IMPORTANT: This file must NOT import from coordinator.py or any manager to
avoid circular dependencies. Only typing machinery is imported here.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime validation of loaded data
lives in data_builders.py (voluptuous schemas) and the managers.
"""

from typing import Any, NamedTuple, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

PetId = str
QuestName = str
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"


# =============================================================================
# Profile
# =============================================================================


class LedgerEntry(TypedDict):
    """One XP/coin transaction on the profile."""

    timestamp: ISODatetime
    xp_delta: float
    coins_delta: int
    level_after: int
    source: str
    reference: str | None


class ProfileData(TypedDict):
    """The single player profile.

    Invariant: xp < xp_required_for_level(level) after every mutation.
    """

    name: str
    level: int
    xp: float
    coins: int
    total_xp_earned: float
    completed_measurements: dict[str, bool]
    ledger: list[LedgerEntry]
    created_at: ISODatetime
    updated_at: ISODatetime


# =============================================================================
# Quests
# =============================================================================


class QuestData(TypedDict):
    """Runtime progress of one catalogued quest.

    A quest is identified by (name, batch): names repeat across batches.
    """

    name: QuestName
    batch: int
    required_count: int
    completed_count: int
    xp: float
    coins: int
    rewarded: bool


class QuestDefinition(NamedTuple):
    """Static catalog entry for a quest."""

    name: QuestName
    batch: int
    required_count: int
    xp: float
    coins: int


class ThresholdRule(NamedTuple):
    """Maps a running event total onto a quest of one batch.

    The rule fires when count > threshold and force-sets the quest counter
    to count - offset.
    """

    threshold: int
    offset: int
    quest_name: QuestName
    batch: int


class GraphRule(NamedTuple):
    """Maps a graph update onto a quest of one batch.

    mode "any" increments by one for a matching graph. mode "distinct" sets
    progress to the number of distinct matching graphs updated in the batch.
    An empty graphs set matches every graph.
    """

    quest_name: QuestName
    batch: int
    mode: str
    graphs: frozenset[str]


class SignalQuestRule(NamedTuple):
    """Maps a consumed signal suffix onto a one-shot quest credit."""

    signal_suffix: str
    quest_name: QuestName
    batch: int


# =============================================================================
# Streaks
# =============================================================================


class StreakRecord(TypedDict):
    """Daily login streak state, stored as top-level document keys."""

    currentStreak: int
    longestStreak: int
    totalDaysLogged: int
    lastLoginDate: ISODate | None
    hasUsedFreeze: bool
    hasSaverAvailable: bool
    hasSeenDay7Offer: bool
    hasSeenDay30Offer: bool
    hasReceivedWelcomeBackGift: bool
    lastWelcomeBackGiftDate: ISODate | None
    dailySummaryStreak: int
    dailySummaryLongestStreak: int
    dailySummaryLastDate: ISODate | None


class StreakPopups(TypedDict):
    """Transient popup flags (never persisted)."""

    streak: bool
    freeze: bool
    saver_offer: bool
    welcome_back: bool


class StreakOutcome(NamedTuple):
    """Result of evaluating one activity day against a streak record."""

    record: StreakRecord
    changed: bool
    popups: StreakPopups
    freeze_used: bool
    saver_used: bool


# =============================================================================
# Pets
# =============================================================================


class PetData(TypedDict):
    """A purchasable pet. Lifecycle state is derived, never stored."""

    id: PetId
    name: str
    cost: int
    is_unlocked: bool
    unlock_timestamp: ISODatetime | None


class PetDefinition(NamedTuple):
    """Static catalog entry for a pet."""

    id: PetId
    name: str
    cost: int


class PurchaseResult(NamedTuple):
    """Outcome of a pet purchase attempt."""

    success: bool
    pet_id: PetId | None
    reason: str | None = None


# =============================================================================
# Achievements
# =============================================================================


class AchievementData(TypedDict):
    """Coarse tiered achievement."""

    id: str
    title: str
    category: str
    level: int
    current_progress: int
    max_progress: int
    is_unlocked: bool
    unlocked_at: ISODatetime | None
    setup_completed: bool
    highest_level_rewarded: int


class AchievementTier(NamedTuple):
    """Level and progress derived from an event count."""

    level: int
    current_progress: int
    max_progress: int


# =============================================================================
# Leveling
# =============================================================================


class LevelResult(NamedTuple):
    """Outcome of applying XP to a (level, xp) pair."""

    level: int
    xp: float
    levels_crossed: list[int]


# =============================================================================
# Persisted document
# =============================================================================


class QuestlogData(TypedDict):
    """The whole persisted document."""

    meta: dict[str, Any]
    userProfile: ProfileData
    currentBatch: int
    questProgress: list[QuestData]
    lastEventCount: int
    lastScheduledCount: int
    batchGraphs: list[str]
    pendingRewardQuests: list[str]
    showGlowIcon: bool
    userPets: list[PetData]
    userAchievements: list[AchievementData]
    # Streak keys live at the top level of the document
    currentStreak: NotRequired[int]
    longestStreak: NotRequired[int]
    totalDaysLogged: NotRequired[int]
    lastLoginDate: NotRequired[ISODate | None]
    hasUsedFreeze: NotRequired[bool]
    hasSaverAvailable: NotRequired[bool]
    hasSeenDay7Offer: NotRequired[bool]
    hasSeenDay30Offer: NotRequired[bool]
    hasReceivedWelcomeBackGift: NotRequired[bool]
    lastWelcomeBackGiftDate: NotRequired[ISODate | None]
    dailySummaryStreak: NotRequired[int]
    dailySummaryLongestStreak: NotRequired[int]
    dailySummaryLastDate: NotRequired[ISODate | None]
