"""Record builders and load-time validation for Questlog.

This module is the SINGLE SOURCE OF TRUTH for:
- Record field defaults (profile, quests, pets, achievements, document)
- Load-time validation of persisted records (voluptuous schemas)
- Reconciling persisted lists with the static catalog

Consumers:
- coordinator.py (document defaults and load repair)
- managers (resetting owned keys)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import voluptuous as vol

from . import catalog, const
from .engines.streak_engine import StreakEngine
from .type_defs import (
    AchievementData,
    PetData,
    PetDefinition,
    ProfileData,
    QuestData,
    QuestDefinition,
    StreakRecord,
)
from .utils.dt_utils import dt_now_iso, dt_parse_date

# ==============================================================================
# SCHEMAS
# ==============================================================================

PROFILE_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_PROFILE_NAME): str,
        vol.Required(const.DATA_PROFILE_LEVEL): vol.All(int, vol.Range(min=1)),
        vol.Required(const.DATA_PROFILE_XP): vol.All(
            vol.Coerce(float), vol.Range(min=0)
        ),
        vol.Required(const.DATA_PROFILE_COINS): vol.All(int, vol.Range(min=0)),
        vol.Optional(const.DATA_PROFILE_TOTAL_XP_EARNED, default=0.0): vol.Coerce(
            float
        ),
        vol.Optional(const.DATA_PROFILE_COMPLETED_MEASUREMENTS, default=dict): {
            str: bool
        },
        vol.Optional(const.DATA_PROFILE_LEDGER, default=list): [dict],
        vol.Optional(const.DATA_PROFILE_CREATED_AT): vol.Any(str, None),
        vol.Optional(const.DATA_PROFILE_UPDATED_AT): vol.Any(str, None),
    },
    extra=vol.REMOVE_EXTRA,
)

QUEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_QUEST_NAME): str,
        vol.Required(const.DATA_QUEST_BATCH): vol.All(int, vol.Range(min=1)),
        vol.Required(const.DATA_QUEST_COMPLETED_COUNT): vol.All(
            int, vol.Range(min=0)
        ),
        vol.Optional(const.DATA_QUEST_REWARDED, default=False): bool,
    },
    extra=vol.ALLOW_EXTRA,
)

PET_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_PET_ID): str,
        vol.Optional(const.DATA_PET_IS_UNLOCKED, default=False): bool,
        vol.Optional(const.DATA_PET_UNLOCK_TIMESTAMP, default=None): vol.Any(
            str, None
        ),
    },
    extra=vol.ALLOW_EXTRA,
)

ACHIEVEMENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_ACHIEVEMENT_ID): str,
        vol.Optional(const.DATA_ACHIEVEMENT_TITLE): str,
        vol.Optional(const.DATA_ACHIEVEMENT_IS_UNLOCKED, default=False): bool,
        vol.Optional(const.DATA_ACHIEVEMENT_UNLOCKED_AT, default=None): vol.Any(
            str, None
        ),
        vol.Optional(const.DATA_ACHIEVEMENT_SETUP_COMPLETED, default=False): bool,
        vol.Optional(
            const.DATA_ACHIEVEMENT_HIGHEST_LEVEL_REWARDED, default=1
        ): vol.All(int, vol.Range(min=1)),
        vol.Optional(const.DATA_ACHIEVEMENT_LEVEL, default=1): vol.All(
            int, vol.Range(min=1)
        ),
        vol.Optional(const.DATA_ACHIEVEMENT_CURRENT_PROGRESS, default=0): vol.All(
            int, vol.Range(min=0)
        ),
        vol.Optional(const.DATA_ACHIEVEMENT_MAX_PROGRESS): vol.All(
            int, vol.Range(min=1)
        ),
    },
    extra=vol.ALLOW_EXTRA,
)


def _calendar_date(value: Any) -> str:
    """Accept a stored calendar date string."""
    if not isinstance(value, str) or dt_parse_date(value) is None:
        raise vol.Invalid(f"not a calendar date: {value!r}")
    return value


_COUNTER = vol.All(int, vol.Range(min=0))
_OPTIONAL_DATE = vol.Any(None, _calendar_date)

# Streak keys live at the top level of the document, so each is checked alone
STREAK_FIELD_SCHEMAS: dict[str, Any] = {
    const.DATA_STREAK_CURRENT: _COUNTER,
    const.DATA_STREAK_LONGEST: _COUNTER,
    const.DATA_STREAK_TOTAL_DAYS: _COUNTER,
    const.DATA_STREAK_LAST_LOGIN_DATE: _OPTIONAL_DATE,
    const.DATA_STREAK_HAS_USED_FREEZE: bool,
    const.DATA_STREAK_HAS_SAVER: bool,
    const.DATA_STREAK_SEEN_DAY7_OFFER: bool,
    const.DATA_STREAK_SEEN_DAY30_OFFER: bool,
    const.DATA_STREAK_RECEIVED_WELCOME_GIFT: bool,
    const.DATA_STREAK_LAST_WELCOME_GIFT_DATE: _OPTIONAL_DATE,
    const.DATA_STREAK_SUMMARY_CURRENT: _COUNTER,
    const.DATA_STREAK_SUMMARY_LONGEST: _COUNTER,
    const.DATA_STREAK_SUMMARY_LAST_DATE: _OPTIONAL_DATE,
}


# ==============================================================================
# PROFILE
# ==============================================================================


def build_profile(name: str = const.DEFAULT_PROFILE_NAME) -> ProfileData:
    """Build a fresh level-1 profile."""
    now_iso = dt_now_iso()
    return {
        "name": name or const.DEFAULT_PROFILE_NAME,
        "level": const.LEVEL_MIN,
        "xp": 0.0,
        "coins": 0,
        "total_xp_earned": 0.0,
        "completed_measurements": {},
        "ledger": [],
        "created_at": now_iso,
        "updated_at": now_iso,
    }


def load_profile(raw: Any, name: str = const.DEFAULT_PROFILE_NAME) -> ProfileData:
    """Validate a persisted profile, falling back to a fresh one.

    Never raises: a missing or corrupt profile logs a warning and yields the
    default profile.
    """
    if raw is None:
        return build_profile(name)
    try:
        validated = PROFILE_SCHEMA(raw)
    except vol.Invalid as err:
        const.LOGGER.warning(
            "WARNING: Stored profile is invalid (%s); starting a fresh profile",
            err,
        )
        return build_profile(name)

    profile = build_profile(validated[const.DATA_PROFILE_NAME])
    profile.update(validated)  # type: ignore[typeddict-item]
    return profile


# ==============================================================================
# QUESTS
# ==============================================================================


def build_quest(definition: QuestDefinition) -> QuestData:
    """Build the runtime record for a catalog quest."""
    return {
        "name": definition.name,
        "batch": definition.batch,
        "required_count": definition.required_count,
        "completed_count": 0,
        "xp": float(definition.xp),
        "coins": int(definition.coins),
        "rewarded": False,
    }


def build_quest_progress(
    definitions: Iterable[QuestDefinition] = catalog.QUEST_CATALOG,
) -> list[QuestData]:
    """Build zeroed progress for every catalog quest."""
    return [build_quest(definition) for definition in definitions]


def reconcile_quests(
    raw: Any,
    definitions: Iterable[QuestDefinition] = catalog.QUEST_CATALOG,
) -> list[QuestData]:
    """Merge persisted quest progress onto the current catalog.

    Catalog values (required count and rewards) always win; only the counter
    and the rewarded flag are carried over. Unknown or malformed entries are
    dropped.
    """
    saved: dict[tuple[str, int], dict[str, Any]] = {}
    for entry in raw if isinstance(raw, list) else []:
        try:
            item = QUEST_SCHEMA(entry)
        except vol.Invalid as err:
            const.LOGGER.debug("DEBUG: Dropping malformed quest entry: %s", err)
            continue
        saved[(item[const.DATA_QUEST_NAME], item[const.DATA_QUEST_BATCH])] = item

    quests: list[QuestData] = []
    for definition in definitions:
        quest = build_quest(definition)
        previous = saved.get((definition.name, definition.batch))
        if previous is not None:
            quest["completed_count"] = min(
                previous[const.DATA_QUEST_COMPLETED_COUNT], quest["required_count"]
            )
            quest["rewarded"] = previous[const.DATA_QUEST_REWARDED]
        quests.append(quest)
    return quests


# ==============================================================================
# PETS
# ==============================================================================


def build_pet(definition: PetDefinition) -> PetData:
    """Build a locked pet from its catalog entry."""
    return {
        "id": definition.id,
        "name": definition.name,
        "cost": definition.cost,
        "is_unlocked": False,
        "unlock_timestamp": None,
    }


def reconcile_pets(
    raw: Any,
    definitions: Iterable[PetDefinition] = catalog.PET_CATALOG,
) -> list[PetData]:
    """Merge persisted pet state onto the pet catalog, keeping catalog order."""
    saved: dict[str, dict[str, Any]] = {}
    for entry in raw if isinstance(raw, list) else []:
        try:
            item = PET_SCHEMA(entry)
        except vol.Invalid as err:
            const.LOGGER.debug("DEBUG: Dropping malformed pet entry: %s", err)
            continue
        saved[item[const.DATA_PET_ID]] = item

    pets: list[PetData] = []
    for definition in definitions:
        pet = build_pet(definition)
        previous = saved.get(definition.id)
        if previous is not None:
            pet["is_unlocked"] = previous[const.DATA_PET_IS_UNLOCKED]
            pet["unlock_timestamp"] = previous[const.DATA_PET_UNLOCK_TIMESTAMP]
        pets.append(pet)
    return pets


# ==============================================================================
# ACHIEVEMENTS
# ==============================================================================


def build_calendar_achievement() -> AchievementData:
    """Build the calendar achievement at level 1."""
    return {
        "id": const.ACHIEVEMENT_ID_CALENDAR,
        "title": const.ACHIEVEMENT_CALENDAR_TITLE,
        "category": const.ACHIEVEMENT_CATEGORY_CALENDAR,
        "level": 1,
        "current_progress": 0,
        "max_progress": const.ACHIEVEMENT_INITIAL_MAX_PROGRESS,
        "is_unlocked": False,
        "unlocked_at": None,
        "setup_completed": False,
        "highest_level_rewarded": 1,
    }


def build_default_achievements() -> list[AchievementData]:
    """Build the default achievement list."""
    return [build_calendar_achievement()]


def reconcile_achievements(raw: Any) -> list[AchievementData]:
    """Merge persisted achievement state onto the default list."""
    saved: dict[str, dict[str, Any]] = {}
    for entry in raw if isinstance(raw, list) else []:
        try:
            item = ACHIEVEMENT_SCHEMA(entry)
        except vol.Invalid as err:
            const.LOGGER.debug("DEBUG: Dropping malformed achievement: %s", err)
            continue
        saved[item[const.DATA_ACHIEVEMENT_ID]] = item

    achievements = build_default_achievements()
    for achievement in achievements:
        previous = saved.get(achievement["id"])
        if previous is None:
            continue
        for key in (
            const.DATA_ACHIEVEMENT_TITLE,
            const.DATA_ACHIEVEMENT_LEVEL,
            const.DATA_ACHIEVEMENT_CURRENT_PROGRESS,
            const.DATA_ACHIEVEMENT_MAX_PROGRESS,
            const.DATA_ACHIEVEMENT_IS_UNLOCKED,
            const.DATA_ACHIEVEMENT_UNLOCKED_AT,
            const.DATA_ACHIEVEMENT_SETUP_COMPLETED,
            const.DATA_ACHIEVEMENT_HIGHEST_LEVEL_REWARDED,
        ):
            if key in previous:
                achievement[key] = previous[key]  # type: ignore[literal-required]
    return achievements


# ==============================================================================
# STREAKS
# ==============================================================================


def load_streak_record(raw: dict[str, Any]) -> StreakRecord:
    """Validate the persisted streak keys, key by key.

    A missing key takes its default silently; a corrupt one takes its default
    with a warning. Longest streaks are raised to cover the current ones.
    """
    record = StreakEngine.default_record()
    for key, validator in STREAK_FIELD_SCHEMAS.items():
        if raw.get(key) is None:
            continue
        try:
            record[key] = vol.Schema(validator)(raw[key])  # type: ignore[literal-required]
        except vol.Invalid as err:
            const.LOGGER.warning(
                "WARNING: Stored streak value %s is invalid (%s); using default",
                key,
                err,
            )

    for current_key, longest_key in (
        (const.DATA_STREAK_CURRENT, const.DATA_STREAK_LONGEST),
        (const.DATA_STREAK_SUMMARY_CURRENT, const.DATA_STREAK_SUMMARY_LONGEST),
    ):
        if record[current_key] > record[longest_key]:  # type: ignore[literal-required]
            record[longest_key] = record[current_key]  # type: ignore[literal-required]
    return record


# ==============================================================================
# DOCUMENT
# ==============================================================================


def build_quest_state() -> dict[str, Any]:
    """Build the quest-owned document keys."""
    return {
        const.DATA_CURRENT_BATCH: 1,
        const.DATA_QUEST_PROGRESS: build_quest_progress(),
        const.DATA_QUEST_LAST_EVENT_COUNT: 0,
        const.DATA_QUEST_LAST_SCHEDULED_COUNT: 0,
        const.DATA_QUEST_BATCH_GRAPHS: [],
        const.DATA_QUEST_PENDING_REWARDS: [],
        const.DATA_QUEST_SHOW_GLOW_ICON: False,
    }


def build_default_data(profile_name: str = const.DEFAULT_PROFILE_NAME) -> dict[str, Any]:
    """Build a complete fresh document."""
    data: dict[str, Any] = {
        const.DATA_META: {
            const.DATA_META_SCHEMA_VERSION: const.STORAGE_VERSION,
            const.DATA_META_LAST_RESET: None,
        },
        const.DATA_PROFILE: build_profile(profile_name),
        const.DATA_PETS: reconcile_pets(None),
        const.DATA_ACHIEVEMENTS: build_default_achievements(),
    }
    data.update(build_quest_state())
    data.update(StreakEngine.default_record())
    return data


def _as_non_negative_int(value: Any, default: int = 0) -> int:
    """Return value as an int >= 0, or the default when it is unusable."""
    try:
        result = int(value)
    except (TypeError, ValueError):
        return default
    return result if result >= 0 else default


def repair_data(
    raw: Any, profile_name: str = const.DEFAULT_PROFILE_NAME
) -> dict[str, Any]:
    """Return a complete document from whatever was loaded from storage.

    Missing sections get defaults, corrupt records are replaced, and catalog
    lists are re-synced so catalog changes take effect on the next start.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            const.LOGGER.warning(
                "WARNING: Stored document is not a mapping; starting fresh"
            )
        return build_default_data(profile_name)

    data = build_default_data(profile_name)
    data[const.DATA_META].update(raw.get(const.DATA_META) or {})
    data[const.DATA_PROFILE] = load_profile(raw.get(const.DATA_PROFILE), profile_name)
    data[const.DATA_QUEST_PROGRESS] = reconcile_quests(
        raw.get(const.DATA_QUEST_PROGRESS)
    )
    data[const.DATA_PETS] = reconcile_pets(raw.get(const.DATA_PETS))
    data[const.DATA_ACHIEVEMENTS] = reconcile_achievements(
        raw.get(const.DATA_ACHIEVEMENTS)
    )

    max_cursor = catalog.MAX_BATCH + 1
    batch = _as_non_negative_int(raw.get(const.DATA_CURRENT_BATCH), 1)
    data[const.DATA_CURRENT_BATCH] = min(max(batch, 1), max_cursor)
    for key in (
        const.DATA_QUEST_LAST_EVENT_COUNT,
        const.DATA_QUEST_LAST_SCHEDULED_COUNT,
    ):
        data[key] = _as_non_negative_int(raw.get(key))
    for key in (const.DATA_QUEST_BATCH_GRAPHS, const.DATA_QUEST_PENDING_REWARDS):
        value = raw.get(key)
        data[key] = [str(item) for item in value] if isinstance(value, list) else []
    data[const.DATA_QUEST_SHOW_GLOW_ICON] = bool(
        raw.get(const.DATA_QUEST_SHOW_GLOW_ICON, False)
    )

    data.update(load_streak_record(raw))
    return data
