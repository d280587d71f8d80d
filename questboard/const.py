# File: const.py
"""Constants for the Quest Board rules engine.

This file centralizes persisted data keys, enumerations, rank and XP tables,
defaults and rejection reason codes for consistency across the package.

Persisted keys keep the camelCase spelling of the on-disk schema; Python code
always addresses them through the DATA_* names below.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General / Package Information
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# Storage and Versioning
STORAGE_KEY = "questboard_data"
STORAGE_FILENAME = f"{STORAGE_KEY}.json"
SCHEMA_VERSION = 2
SCHEMA_VERSION_LEGACY = 1

# ------------------------------------------------------------------------------------------------
# AppState keys
# ------------------------------------------------------------------------------------------------
DATA_SCHEMA_VERSION = "schemaVersion"
DATA_QUESTS = "quests"
DATA_SETTINGS = "settings"
DATA_DAYS = "days"
DATA_TOTAL_XP = "totalXP"
DATA_LAST_ACTIVE_DATE = "lastActiveDate"
DATA_WEEKLY_CHALLENGE = "weeklyChallenge"
DATA_MYSTERY_BOX = "mysteryBox"
DATA_XP_BY_DAY = "xpByDay"

# ------------------------------------------------------------------------------------------------
# Quest keys
# ------------------------------------------------------------------------------------------------
DATA_QUEST_ID = "id"
DATA_QUEST_NAME = "name"
DATA_QUEST_CREATED_AT = "createdAt"
DATA_QUEST_DOMAIN = "domain"
DATA_QUEST_ACTIVITY_KIND = "activityKind"
DATA_QUEST_MEASUREMENT_TYPE = "measurementType"
DATA_QUEST_UNIT = "unit"
DATA_QUEST_CURRENT_TARGET = "currentTargetValue"
DATA_QUEST_S_TARGET = "sTargetValue"
DATA_QUEST_BASELINE = "baselineValue"
DATA_QUEST_PRIORITY = "priority"
DATA_QUEST_FREQUENCY = "frequency"
DATA_QUEST_DAYS_OF_WEEK = "daysOfWeek"
DATA_QUEST_XP = "xp"

# Live timer (time quests only)
DATA_QUEST_STATUS = "status"
DATA_QUEST_STARTED_AT = "startedAt"
DATA_QUEST_ELAPSED_MS = "elapsedMs"
DATA_QUEST_TARGET_MINUTES = "targetMinutes"
DATA_QUEST_GRACE_MINUTES = "graceMinutes"

# Schema v1 fields, read only by migration and the classifier
DATA_QUEST_LEGACY_CATEGORY = "category"
DATA_QUEST_LEGACY_UNIT_TYPE = "unitType"

QUEST_ID_PREFIX = "q_"

# ------------------------------------------------------------------------------------------------
# Day entry keys
# ------------------------------------------------------------------------------------------------
DATA_DAY_COMPLETED = "completed"
DATA_DAY_COMPLETED_DONE = "done"
DATA_DAY_COMPLETED_XP = "xp"
DATA_DAY_EARNED_XP = "earnedXP"
DATA_DAY_XP_DEBT = "xpDebt"
DATA_DAY_NOTE = "note"
DATA_DAY_DEBT_APPLIED = "debtApplied"

DAY_NOTE_MISSED = "(missed)"
BOSS_KEY_SUFFIX = "_boss"
BOSS_COMPLETION_ID = "boss"

# ------------------------------------------------------------------------------------------------
# Settings keys and defaults
# ------------------------------------------------------------------------------------------------
DATA_SETTINGS_WAKE_TIME = "wakeTime"
DATA_SETTINGS_BED_TIME = "bedTime"
DATA_SETTINGS_XP_DEBT_ENABLED = "xpDebtEnabled"
DATA_SETTINGS_BLOCK_AFTER_BEDTIME = "blockAfterBedtime"
DATA_SETTINGS_NO_PHONE_PENALTY_ENABLED = "noPhonePenaltyEnabled"
DATA_SETTINGS_NO_PHONE_PENALTY_MINUTES = "noPhonePenaltyMinutes"
DATA_SETTINGS_STREAK_BONUS_PCT_PER_DAY = "streakBonusPctPerDay"
DATA_SETTINGS_MAX_STREAK_BONUS_PCT = "maxStreakBonusPct"
DATA_SETTINGS_WEEKLY_BOSS_ENABLED = "weeklyBossEnabled"
DATA_SETTINGS_THEME_MODE = "themeMode"

DEFAULT_WAKE_TIME = "07:00"
DEFAULT_BED_TIME = "23:00"
DEFAULT_XP_DEBT_ENABLED = True
DEFAULT_BLOCK_AFTER_BEDTIME = False
DEFAULT_NO_PHONE_PENALTY_ENABLED = False
DEFAULT_NO_PHONE_PENALTY_MINUTES = 30
DEFAULT_STREAK_BONUS_PCT_PER_DAY = 1
DEFAULT_MAX_STREAK_BONUS_PCT = 20
DEFAULT_WEEKLY_BOSS_ENABLED = True
DEFAULT_THEME_MODE = "system"

THEME_MODE_SYSTEM = "system"
THEME_MODE_LIGHT = "light"
THEME_MODE_DARK = "dark"
THEME_MODES = (THEME_MODE_SYSTEM, THEME_MODE_LIGHT, THEME_MODE_DARK)

# ------------------------------------------------------------------------------------------------
# Challenge keys (weekly challenge + mystery box)
# ------------------------------------------------------------------------------------------------
DATA_CHALLENGE_ID = "id"
DATA_CHALLENGE_CREATED_AT = "createdAt"
DATA_CHALLENGE_EXPIRES_AT = "expiresAt"
DATA_CHALLENGE_STATUS = "status"
DATA_CHALLENGE_COMPLETED_AT = "completedAt"
DATA_CHALLENGE_XP_REWARD = "xpReward"
DATA_CHALLENGE_TITLE = "title"

DATA_WEEKLY_TASK_ID = "taskId"
DATA_WEEKLY_TARGET = "target"
DATA_WEEKLY_META = "meta"

DATA_MYSTERY_BASE_TASK_ID = "baseTaskId"
DATA_MYSTERY_DESCRIPTION_HIDDEN = "descriptionHidden"
DATA_MYSTERY_DESCRIPTION_REVEALED = "descriptionRevealed"
DATA_MYSTERY_TEMPLATE_ID = "templateId"
DATA_MYSTERY_IS_REVEALED = "isRevealed"
DATA_MYSTERY_REROLL_USED = "rerollUsed"
DATA_MYSTERY_METADATA = "metadata"

CHALLENGE_STATUS_ACTIVE = "active"
CHALLENGE_STATUS_COMPLETED = "completed"
CHALLENGE_STATUS_EXPIRED = "expired"

WEEKLY_CHALLENGE_ID_PREFIX = "wc_"
WEEKLY_CONSTRAINT_REQUIRED_DAYS = 3
WEEKLY_TARGET_KIND_QUANTITY = "quantity"
WEEKLY_TARGET_KIND_CONSTRAINT = "constraint"

MYSTERY_BOX_ID_PREFIX = "mb_"
MYSTERY_BOX_TITLE = "Mystery Box Challenge"
MYSTERY_BOX_DESCRIPTION_HIDDEN = "Reveal to see today’s twist"

# ------------------------------------------------------------------------------------------------
# Taxonomy enumerations
# ------------------------------------------------------------------------------------------------
DOMAIN_BODY = "body"
DOMAIN_MIND = "mind"
DOMAIN_HOBBIES = "hobbies"
DOMAIN_LIFE = "life"
DOMAINS = (DOMAIN_BODY, DOMAIN_MIND, DOMAIN_HOBBIES, DOMAIN_LIFE)

# Free-text domain spellings accepted from older data and import sources
DOMAIN_ALIASES = {
    "productivity": DOMAIN_LIFE,
    "hobby": DOMAIN_HOBBIES,
    "craft": DOMAIN_HOBBIES,
}

KIND_STRENGTH = "strength"
KIND_CARDIO = "cardio"
KIND_MOBILITY = "mobility"
KIND_SPORT = "sport"
KIND_LEARNING = "learning"
KIND_MINDFULNESS = "mindfulness"
KIND_FOCUS = "focus"
KIND_SLEEP = "sleep"
KIND_CREATIVE = "creative"
KIND_PRACTICE = "practice"
KIND_SOCIAL = "social"
KIND_EXPLORE = "explore"
KIND_PRODUCTIVITY = "productivity"
KIND_NUTRITION = "nutrition"
KIND_HYDRATION = "hydration"
KIND_CHORES = "chores"
KIND_FINANCE = "finance"
KIND_ADMIN = "admin"

# First entry of each tuple is the fallback for an unrecognised kind
ACTIVITY_KINDS_BY_DOMAIN: dict[str, tuple[str, ...]] = {
    DOMAIN_BODY: (KIND_STRENGTH, KIND_CARDIO, KIND_MOBILITY, KIND_SPORT),
    DOMAIN_MIND: (KIND_LEARNING, KIND_MINDFULNESS, KIND_FOCUS, KIND_SLEEP),
    DOMAIN_HOBBIES: (KIND_CREATIVE, KIND_PRACTICE, KIND_SOCIAL, KIND_EXPLORE),
    DOMAIN_LIFE: (
        KIND_PRODUCTIVITY,
        KIND_NUTRITION,
        KIND_HYDRATION,
        KIND_CHORES,
        KIND_FINANCE,
        KIND_ADMIN,
    ),
}

MEASUREMENT_REPS = "reps"
MEASUREMENT_TIME = "time"
MEASUREMENT_DISTANCE = "distance"
MEASUREMENT_COUNT = "count"
MEASUREMENT_HABIT = "habit"
MEASUREMENT_TYPES = (
    MEASUREMENT_REPS,
    MEASUREMENT_TIME,
    MEASUREMENT_DISTANCE,
    MEASUREMENT_COUNT,
    MEASUREMENT_HABIT,
)

DEFAULT_UNIT_BY_MEASUREMENT = {
    MEASUREMENT_REPS: "reps",
    MEASUREMENT_TIME: "min",
    MEASUREMENT_DISTANCE: "km",
    MEASUREMENT_COUNT: "x",
    MEASUREMENT_HABIT: "",
}
UNIT_CUPS = "cups"
UNIT_PAGES = "pages"

# Legacy unitType values (schema v1) mapped to measurement types
LEGACY_UNIT_TYPE_MEASUREMENT = {
    "minutes": MEASUREMENT_TIME,
    "time": MEASUREMENT_TIME,
    "distance": MEASUREMENT_DISTANCE,
    "reps": MEASUREMENT_REPS,
}

# Measurement types that carry a numeric target the challenges can grow
QUANTITATIVE_MEASUREMENTS = (
    MEASUREMENT_REPS,
    MEASUREMENT_TIME,
    MEASUREMENT_DISTANCE,
    MEASUREMENT_COUNT,
)
# Mystery box twists only treat these as quantitative
MYSTERY_QUANTITATIVE_MEASUREMENTS = (
    MEASUREMENT_REPS,
    MEASUREMENT_TIME,
    MEASUREMENT_DISTANCE,
)

# ------------------------------------------------------------------------------------------------
# Scheduling enumerations
# ------------------------------------------------------------------------------------------------
PRIORITY_MAIN = "main"
PRIORITY_MINOR = "minor"
PRIORITIES = (PRIORITY_MAIN, PRIORITY_MINOR)

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY)

ALL_DAYS_OF_WEEK = (0, 1, 2, 3, 4, 5, 6)

TIMER_STATUS_IDLE = "idle"
TIMER_STATUS_ACTIVE = "active"
TIMER_STATUS_PAUSED = "paused"
TIMER_STATUS_COMPLETED = "completed"
TIMER_STATUSES = (
    TIMER_STATUS_IDLE,
    TIMER_STATUS_ACTIVE,
    TIMER_STATUS_PAUSED,
    TIMER_STATUS_COMPLETED,
)

DEFAULT_QUEST_NAME = "New Quest"
DEFAULT_QUEST_TARGET = 1
DEFAULT_GRACE_MINUTES = 10

# ------------------------------------------------------------------------------------------------
# Rank & XP economy
# ------------------------------------------------------------------------------------------------
RANK_E = "E"
RANK_D = "D"
RANK_C = "C"
RANK_B = "B"
RANK_A = "A"
RANK_S = "S"
RANK_ORDER = (RANK_E, RANK_D, RANK_C, RANK_B, RANK_A, RANK_S)

# (rank, lower bound, upper bound) of each progress band
RANK_THRESHOLDS: tuple[tuple[str, float, float], ...] = (
    (RANK_E, 0.0, 0.19),
    (RANK_D, 0.20, 0.39),
    (RANK_C, 0.40, 0.59),
    (RANK_B, 0.60, 0.74),
    (RANK_A, 0.75, 0.89),
    (RANK_S, 0.90, 1.0),
)

XP_CAP_BY_RANK = {
    RANK_E: 10000,
    RANK_D: 25000,
    RANK_C: 50000,
    RANK_B: 90000,
    RANK_A: 150000,
    RANK_S: 250000,
}

BASE_XP_BY_RANK = {
    RANK_E: 40,
    RANK_D: 60,
    RANK_C: 85,
    RANK_B: 115,
    RANK_A: 150,
    RANK_S: 200,
}

PRIORITY_MULTIPLIERS = {
    PRIORITY_MAIN: 1.0,
    PRIORITY_MINOR: 0.6,
}

IMPROVEMENT_BONUS_FACTOR = 1.5

# Weekly challenge reward multiplier per rank transition
TIER_MULTIPLIERS = {
    (RANK_E, RANK_D): 2.0,
    (RANK_D, RANK_C): 2.25,
    (RANK_C, RANK_B): 2.5,
    (RANK_B, RANK_A): 3.0,
    (RANK_A, RANK_S): 4.0,
    (RANK_S, RANK_S): 3.0,
}
DEFAULT_TIER_MULTIPLIER = 3.0

BOSS_BASE_XP = 220

# ------------------------------------------------------------------------------------------------
# Debt, streaks, progression
# ------------------------------------------------------------------------------------------------
MISSED_DAY_DEBT_XP = 50
BEDTIME_DEBT_FLOOR_XP = 50

LADDER_FRACTIONS = (0.10, 0.25, 0.40, 0.60, 0.80, 1.00)
DEFAULT_SESSIONS_PER_WEEK = 7
DEFAULT_SESSIONS_TO_S = 84

STATS_WINDOW_DAYS = 30
STATS_QUEST_WINDOW_DAYS = 14

MINUTES_PER_DAY = 1440

# ------------------------------------------------------------------------------------------------
# Action outcome reason codes
# ------------------------------------------------------------------------------------------------
REASON_OUTSIDE_DAY_WINDOW = "outside_day_window"
REASON_QUEST_NOT_FOUND = "quest_not_found"
REASON_GRACE_EXCEEDED = "grace_exceeded"
REASON_INVALID_TIMER_STATE = "invalid_timer_state"
REASON_NOT_TIME_QUEST = "not_time_quest"
REASON_FEATURE_DISABLED = "feature_disabled"
REASON_NO_CHALLENGE = "no_challenge"
REASON_NOT_ACTIVE = "not_active"
REASON_EXPIRED = "expired"
REASON_ALREADY_REVEALED = "already_revealed"
REASON_REROLL_USED = "reroll_used"
REASON_NOT_REVEALED = "not_revealed"
REASON_NO_ELIGIBLE_QUEST = "no_eligible_quest"
REASON_NO_CHANGE = "no_change"

# ==============================================================================
# Event signal suffixes
# ==============================================================================

SIGNAL_SUFFIX_XP_CREDITED = "xp_credited"
SIGNAL_SUFFIX_DEBT_ACCRUED = "debt_accrued"
SIGNAL_SUFFIX_QUEST_TOGGLED = "quest_toggled"
SIGNAL_SUFFIX_CHALLENGE_GENERATED = "challenge_generated"
SIGNAL_SUFFIX_CHALLENGE_COMPLETED = "challenge_completed"
SIGNAL_SUFFIX_STATE_CHANGED = "state_changed"
