# File: const.py
"""Constants for the Questlog integration.

This file centralizes configuration keys, defaults, storage keys, signal
suffixes and reward values used across the progression engine so that
managers, engines and services agree on one vocabulary.
"""

import logging

from homeassistant.util import dt as dt_util

from .utils import dt_utils


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    tz = dt_util.get_time_zone(hass.config.time_zone)
    if tz is not None:
        dt_utils.set_default_timezone(tz)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
QUESTLOG_TITLE = "Questlog"

# Integration Domain
DOMAIN = "questlog"

# Logger
LOGGER = logging.getLogger(__package__)

# No entity platforms: views subscribe to signals instead
PLATFORMS: list[str] = []

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_KEY = DOMAIN
STORAGE_VERSION = 1

# Float precision for XP arithmetic
DATA_FLOAT_PRECISION = 2

# ------------------------------------------------------------------------------------------------
# Configuration Keys (config entry options)
# ------------------------------------------------------------------------------------------------
CONF_PROFILE_NAME = "profile_name"
CONF_HATCH_DURATION_HOURS = "hatch_duration_hours"
CONF_XP_BASE = "xp_base"
CONF_XP_EXPONENT = "xp_exponent"
CONF_PET_UNLOCK_XP = "pet_unlock_xp"
CONF_PET_UNLOCK_COINS = "pet_unlock_coins"
CONF_ACHIEVEMENT_LEVEL_XP = "achievement_level_xp"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_PROFILE_NAME = "Champion"
DEFAULT_HATCH_DURATION_HOURS = 24.0
DEFAULT_XP_BASE = 50.0
DEFAULT_XP_EXPONENT = 1.0
DEFAULT_PET_UNLOCK_XP = 50.0
DEFAULT_PET_UNLOCK_COINS = 0
DEFAULT_ACHIEVEMENT_LEVEL_XP = 25.0
DEFAULT_UPDATE_INTERVAL = 5  # minutes

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Persisted document keys
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_RESET = "last_reset"

# Profile
DATA_PROFILE = "userProfile"
DATA_PROFILE_NAME = "name"
DATA_PROFILE_LEVEL = "level"
DATA_PROFILE_XP = "xp"
DATA_PROFILE_COINS = "coins"
DATA_PROFILE_TOTAL_XP_EARNED = "total_xp_earned"
DATA_PROFILE_COMPLETED_MEASUREMENTS = "completed_measurements"
DATA_PROFILE_LEDGER = "ledger"
DATA_PROFILE_CREATED_AT = "created_at"
DATA_PROFILE_UPDATED_AT = "updated_at"

# Quests / batches
DATA_CURRENT_BATCH = "currentBatch"
DATA_QUEST_PROGRESS = "questProgress"
DATA_QUEST_LAST_EVENT_COUNT = "lastEventCount"
DATA_QUEST_LAST_SCHEDULED_COUNT = "lastScheduledCount"
DATA_QUEST_BATCH_GRAPHS = "batchGraphs"
DATA_QUEST_PENDING_REWARDS = "pendingRewardQuests"
DATA_QUEST_SHOW_GLOW_ICON = "showGlowIcon"

DATA_QUEST_NAME = "name"
DATA_QUEST_BATCH = "batch"
DATA_QUEST_COMPLETED_COUNT = "completed_count"
DATA_QUEST_REWARDED = "rewarded"

# Streaks
DATA_STREAK_CURRENT = "currentStreak"
DATA_STREAK_LONGEST = "longestStreak"
DATA_STREAK_TOTAL_DAYS = "totalDaysLogged"
DATA_STREAK_LAST_LOGIN_DATE = "lastLoginDate"
DATA_STREAK_HAS_USED_FREEZE = "hasUsedFreeze"
DATA_STREAK_HAS_SAVER = "hasSaverAvailable"
DATA_STREAK_SEEN_DAY7_OFFER = "hasSeenDay7Offer"
DATA_STREAK_SEEN_DAY30_OFFER = "hasSeenDay30Offer"
DATA_STREAK_RECEIVED_WELCOME_GIFT = "hasReceivedWelcomeBackGift"
DATA_STREAK_LAST_WELCOME_GIFT_DATE = "lastWelcomeBackGiftDate"
DATA_STREAK_SUMMARY_CURRENT = "dailySummaryStreak"
DATA_STREAK_SUMMARY_LONGEST = "dailySummaryLongestStreak"
DATA_STREAK_SUMMARY_LAST_DATE = "dailySummaryLastDate"

STREAK_KEYS = (
    DATA_STREAK_CURRENT,
    DATA_STREAK_LONGEST,
    DATA_STREAK_TOTAL_DAYS,
    DATA_STREAK_LAST_LOGIN_DATE,
    DATA_STREAK_HAS_USED_FREEZE,
    DATA_STREAK_HAS_SAVER,
    DATA_STREAK_SEEN_DAY7_OFFER,
    DATA_STREAK_SEEN_DAY30_OFFER,
    DATA_STREAK_RECEIVED_WELCOME_GIFT,
    DATA_STREAK_LAST_WELCOME_GIFT_DATE,
    DATA_STREAK_SUMMARY_CURRENT,
    DATA_STREAK_SUMMARY_LONGEST,
    DATA_STREAK_SUMMARY_LAST_DATE,
)

# Streak popups (in-memory only)
STREAK_POPUP_STREAK = "streak"
STREAK_POPUP_FREEZE = "freeze"
STREAK_POPUP_SAVER_OFFER = "saver_offer"
STREAK_POPUP_WELCOME_BACK = "welcome_back"

STREAK_SAVER_OFFER_DAYS = (7, 30)
STREAK_WELCOME_BACK_GAP_DAYS = 3
STREAK_FREEZE_GAP_DAYS = 2

# Pets
DATA_PETS = "userPets"
DATA_PET_ID = "id"
DATA_PET_IS_UNLOCKED = "is_unlocked"
DATA_PET_UNLOCK_TIMESTAMP = "unlock_timestamp"

PET_STATE_LOCKED = "locked"
PET_STATE_HATCHING = "hatching"
PET_STATE_READY_TO_REVEAL = "ready_to_reveal"
PET_STATE_UNLOCKED = "unlocked"

PURCHASE_FAILURE_UNKNOWN_PET = "unknown_pet"
PURCHASE_FAILURE_NOT_LOCKED = "not_locked"
PURCHASE_FAILURE_INSUFFICIENT_COINS = "insufficient_coins"
PURCHASE_FAILURE_NONE_AVAILABLE = "none_available"

# Achievements
DATA_ACHIEVEMENTS = "userAchievements"
DATA_ACHIEVEMENT_ID = "id"
DATA_ACHIEVEMENT_TITLE = "title"
DATA_ACHIEVEMENT_LEVEL = "level"
DATA_ACHIEVEMENT_CURRENT_PROGRESS = "current_progress"
DATA_ACHIEVEMENT_MAX_PROGRESS = "max_progress"
DATA_ACHIEVEMENT_IS_UNLOCKED = "is_unlocked"
DATA_ACHIEVEMENT_UNLOCKED_AT = "unlocked_at"
DATA_ACHIEVEMENT_SETUP_COMPLETED = "setup_completed"
DATA_ACHIEVEMENT_HIGHEST_LEVEL_REWARDED = "highest_level_rewarded"

ACHIEVEMENT_ID_CALENDAR = "calendar"
ACHIEVEMENT_CATEGORY_CALENDAR = "calendar"
ACHIEVEMENT_CALENDAR_TITLE = "Calendar Beginner"
ACHIEVEMENT_INITIAL_MAX_PROGRESS = 3
ACHIEVEMENT_MAX_PROGRESS_STEP = 2
ACHIEVEMENT_MAX_PROGRESS_CAP = 10
ACHIEVEMENT_CELEBRATION_LEVEL = 2

ACHIEVEMENT_LEVEL_TITLES = {
    1: "Beginner",
    2: "Intermediate",
    3: "Advanced",
    4: "Expert",
}
ACHIEVEMENT_LEVEL_TITLE_MAX = "Master"

# ------------------------------------------------------------------------------------------------
# Levels
# ------------------------------------------------------------------------------------------------
LEVEL_MIN = 1
LEVEL_CELEBRATION = 2

# Feature unlocked when a level is reached
LEVEL_UNLOCKS = {
    1: "graphs",
    2: "pets",
}

MAX_LEDGER_ENTRIES = 50

# Reward / transaction sources
SOURCE_QUEST = "quest"
SOURCE_PET = "pet"
SOURCE_ACHIEVEMENT = "achievement"
SOURCE_MANUAL = "manual"
SOURCE_PURCHASE = "purchase"

# ------------------------------------------------------------------------------------------------
# Event signals (instance-scoped dispatcher suffixes)
# ------------------------------------------------------------------------------------------------
# Consumed from the app layer
SIGNAL_SUFFIX_CALENDAR_EVENT_COUNT_CHANGED = "calendar_event_count_changed"
SIGNAL_SUFFIX_SCHEDULED_EVENT_COUNT_CHANGED = "scheduled_event_count_changed"
SIGNAL_SUFFIX_GRAPH_UPDATED = "graph_updated"
SIGNAL_SUFFIX_DAILY_SUMMARY_VIEWED = "daily_summary_viewed"
SIGNAL_SUFFIX_APP_FOREGROUNDED = "app_foregrounded"
SIGNAL_SUFFIX_CALENDAR_SETUP_COMPLETED = "calendar_setup_completed"

# Produced by the engine
SIGNAL_SUFFIX_PROFILE_UPDATED = "profile_updated"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"
SIGNAL_SUFFIX_QUEST_COMPLETED = "quest_completed"
SIGNAL_SUFFIX_BATCH_UNLOCKED = "batch_unlocked"
SIGNAL_SUFFIX_STREAK_UPDATED = "streak_updated"
SIGNAL_SUFFIX_STREAK_POPUP_READY = "streak_popup_ready"
SIGNAL_SUFFIX_PET_PURCHASED = "pet_purchased"
SIGNAL_SUFFIX_PET_UNLOCKED = "pet_unlocked"
SIGNAL_SUFFIX_PETS_READY = "pets_ready"
SIGNAL_SUFFIX_ACHIEVEMENT_LEVEL_UP = "achievement_level_up"
SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
SIGNAL_SUFFIX_DATA_RESET = "data_reset"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_COMPLETE_QUEST = "complete_quest"
SERVICE_REPORT_CALENDAR_EVENTS = "report_calendar_events"
SERVICE_REPORT_SCHEDULED_EVENTS = "report_scheduled_events"
SERVICE_REPORT_GRAPH_UPDATED = "report_graph_updated"
SERVICE_REPORT_DAILY_SUMMARY_VIEWED = "report_daily_summary_viewed"
SERVICE_REPORT_APP_FOREGROUNDED = "report_app_foregrounded"
SERVICE_COMPLETE_CALENDAR_SETUP = "complete_calendar_setup"
SERVICE_GRANT_XP = "grant_xp"
SERVICE_PURCHASE_PET = "purchase_pet"
SERVICE_REVEAL_PET = "reveal_pet"
SERVICE_MARK_STREAK_POPUP_SHOWN = "mark_streak_popup_shown"
SERVICE_ACKNOWLEDGE_REWARDS = "acknowledge_rewards"
SERVICE_RESET_ALL_DATA = "reset_all_data"

FIELD_QUEST_NAME = "quest_name"
FIELD_BATCH = "batch"
FIELD_AMOUNT = "amount"
FIELD_MODE = "mode"
FIELD_COUNT = "count"
FIELD_GRAPH = "graph"
FIELD_PET_ID = "pet_id"
FIELD_SOURCE = "source"

QUEST_MODE_STEP = "step"
QUEST_MODE_INCREMENT = "increment"
QUEST_MODE_STATIC_FORCE = "static_force"

TRANS_KEY_ERROR_NOT_LOADED = "not_loaded"
TRANS_KEY_ERROR_UNKNOWN_PET = "unknown_pet"

# ------------------------------------------------------------------------------------------------
# Config / Options Flow
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_CFOF_INVALID_PROFILE_NAME = "invalid_profile_name"
TRANS_KEY_CFOF_INVALID_XP_CURVE = "invalid_xp_curve"
