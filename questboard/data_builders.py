"""Entity builders and input coercion for Quest Board.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults (quests, settings, day entries)
- Coercion of loose input (patches, older snapshots) into valid state
- Complete entity structure building

## Build Functions
Each entity type has a ``build_<entity>()`` function that:
- Takes user_input with DATA_* keys (may be partial)
- Takes an optional existing entity (update mode)
- Resolves each field as user_input > existing > default
- Returns a complete dict ready for storage

## Coercion, not rejection
Patches are passed through voluptuous validators field by field. A value that
cannot be coerced is dropped (and logged) so the existing or default value
stays in place. Numbers are clamped to their range, unknown enum values fall
back to a valid member. Nothing here raises for bad input.

Consumers:
- managers/quest_manager.py (add/update quests)
- managers/system_manager.py (settings patches)
- migration.py and store.py (normalizing loaded snapshots)
"""

from __future__ import annotations

from datetime import datetime
import math
from typing import TYPE_CHECKING, Any
import uuid

import voluptuous as vol

from . import const
from .engines.economy_engine import EconomyEngine
from .engines.taxonomy_engine import TaxonomyEngine
from .utils import dt_utils
from .utils.math_utils import to_number

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .type_defs import AppState, DayEntry, QuestData, SettingsData

# ==============================================================================
# VALIDATORS
# ==============================================================================


def _finite(value: float) -> float:
    if not math.isfinite(value):
        raise vol.Invalid("value must be finite")
    return value


def _tidy_number(value: float) -> float | int:
    """Store whole numbers as int so snapshots read 10, not 10.0."""
    return int(value) if float(value).is_integer() else value


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        raise vol.Invalid("expected text")
    return str(value).strip()


def _one_of(choices: tuple[str, ...], fallback: str) -> Callable[[Any], str]:
    """Coerce to a member of choices, falling back instead of failing."""

    def validator(value: Any) -> str:
        text = str(value or "").strip().lower()
        return text if text in choices else fallback

    return validator


def _days_of_week(value: Any) -> list[int]:
    if not isinstance(value, (list, tuple, set)):
        raise vol.Invalid("expected a list of weekday numbers")
    days: set[int] = set()
    for item in value:
        number = to_number(item, -1.0)
        if number.is_integer() and 0 <= number <= 6:
            days.add(int(number))
    return sorted(days)


def _hhmm(value: Any) -> str:
    """Normalize a clock time to zero-padded HH:MM with clamped components."""
    if not isinstance(value, str) or not value.strip():
        raise vol.Invalid("expected HH:MM")
    minutes = dt_utils.parse_time_to_minutes(value.strip())
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _timestamp_ms(value: Any) -> int:
    """Accept epoch milliseconds or an ISO datetime string."""
    if isinstance(value, str):
        parsed = dt_utils.dt_parse(value)
        if parsed is not None:
            return dt_utils.dt_to_epoch_ms(parsed)
    number = to_number(value, -1)
    if number < 0:
        raise vol.Invalid("expected a timestamp")
    return int(number)


_TARGET = vol.All(vol.Coerce(float), _finite, vol.Clamp(min=1), _tidy_number)
_NON_NEGATIVE = vol.All(vol.Coerce(float), _finite, vol.Clamp(min=0), _tidy_number)
_NON_NEGATIVE_INT = vol.All(
    vol.Coerce(float), _finite, vol.Clamp(min=0), vol.Coerce(int)
)
_OPTIONAL_TARGET = vol.Any(None, _TARGET)
_OPTIONAL_ISO = vol.Any(None, vol.All(_text, vol.Length(min=1)))
_PCT = vol.All(vol.Coerce(float), _finite, vol.Clamp(min=0, max=100), _tidy_number)

QUEST_FIELD_VALIDATORS: dict[str, Callable[[Any], Any]] = {
    const.DATA_QUEST_ID: vol.All(_text, vol.Length(min=1)),
    const.DATA_QUEST_NAME: _text,
    const.DATA_QUEST_CREATED_AT: _timestamp_ms,
    const.DATA_QUEST_DOMAIN: _text,
    const.DATA_QUEST_ACTIVITY_KIND: _text,
    const.DATA_QUEST_MEASUREMENT_TYPE: _text,
    const.DATA_QUEST_UNIT: _text,
    const.DATA_QUEST_LEGACY_CATEGORY: _text,
    const.DATA_QUEST_LEGACY_UNIT_TYPE: _text,
    const.DATA_QUEST_CURRENT_TARGET: _TARGET,
    const.DATA_QUEST_S_TARGET: _TARGET,
    const.DATA_QUEST_BASELINE: _NON_NEGATIVE,
    const.DATA_QUEST_PRIORITY: _one_of(const.PRIORITIES, const.PRIORITY_MAIN),
    const.DATA_QUEST_FREQUENCY: _one_of(const.FREQUENCIES, const.FREQUENCY_DAILY),
    const.DATA_QUEST_DAYS_OF_WEEK: _days_of_week,
    const.DATA_QUEST_XP: _NON_NEGATIVE_INT,
    const.DATA_QUEST_STATUS: _one_of(const.TIMER_STATUSES, const.TIMER_STATUS_IDLE),
    const.DATA_QUEST_STARTED_AT: _OPTIONAL_ISO,
    const.DATA_QUEST_ELAPSED_MS: _NON_NEGATIVE_INT,
    const.DATA_QUEST_TARGET_MINUTES: _OPTIONAL_TARGET,
    const.DATA_QUEST_GRACE_MINUTES: _NON_NEGATIVE_INT,
}

SETTINGS_FIELD_VALIDATORS: dict[str, Callable[[Any], Any]] = {
    const.DATA_SETTINGS_WAKE_TIME: _hhmm,
    const.DATA_SETTINGS_BED_TIME: _hhmm,
    const.DATA_SETTINGS_XP_DEBT_ENABLED: vol.Boolean(),
    const.DATA_SETTINGS_BLOCK_AFTER_BEDTIME: vol.Boolean(),
    const.DATA_SETTINGS_NO_PHONE_PENALTY_ENABLED: vol.Boolean(),
    const.DATA_SETTINGS_NO_PHONE_PENALTY_MINUTES: vol.All(
        vol.Coerce(float),
        _finite,
        vol.Clamp(min=0, max=const.MINUTES_PER_DAY),
        vol.Coerce(int),
    ),
    const.DATA_SETTINGS_STREAK_BONUS_PCT_PER_DAY: _PCT,
    const.DATA_SETTINGS_MAX_STREAK_BONUS_PCT: _PCT,
    const.DATA_SETTINGS_WEEKLY_BOSS_ENABLED: vol.Boolean(),
    const.DATA_SETTINGS_THEME_MODE: _one_of(const.THEME_MODES, const.DEFAULT_THEME_MODE),
}


def coerce_fields(
    raw: Mapping[str, Any] | None,
    validators: Mapping[str, Callable[[Any], Any]],
    entity: str,
) -> dict[str, Any]:
    """Run each known field through its validator.

    Unknown keys and values that fail validation are dropped with a warning,
    so callers fall back to the existing or default value for them.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            const.LOGGER.warning("Ignoring non-mapping %s input: %r", entity, raw)
        return {}
    result: dict[str, Any] = {}
    for key, value in raw.items():
        validator = validators.get(key)
        if validator is None:
            const.LOGGER.debug("Ignoring unknown %s field '%s'", entity, key)
            continue
        try:
            result[key] = validator(value)
        except vol.Invalid as err:
            const.LOGGER.warning(
                "Dropping invalid %s field '%s' (%r): %s", entity, key, value, err
            )
    return result


# ==============================================================================
# QUESTS
# ==============================================================================

_TAXONOMY_KEYS = (
    const.DATA_QUEST_DOMAIN,
    const.DATA_QUEST_ACTIVITY_KIND,
    const.DATA_QUEST_MEASUREMENT_TYPE,
    const.DATA_QUEST_UNIT,
    const.DATA_QUEST_LEGACY_CATEGORY,
    const.DATA_QUEST_LEGACY_UNIT_TYPE,
)


def generate_quest_id() -> str:
    """Return a fresh "q_<hex>" quest id."""
    return f"{const.QUEST_ID_PREFIX}{uuid.uuid4().hex[:12]}"


def _resolve_taxonomy(
    name: str, patch: Mapping[str, Any], existing: Mapping[str, Any] | None
) -> dict[str, str]:
    """Work out domain/kind/measurement/unit for a create or update.

    Create: full classification from name plus any explicit fields.
    Update without taxonomy fields: reclassify only when the name changed,
    keeping the stored values as hints. Update with taxonomy fields: the
    explicit values win and are only normalized.
    """
    if existing is None:
        return dict(
            TaxonomyEngine.classify(
                name,
                domain=patch.get(const.DATA_QUEST_DOMAIN)
                or patch.get(const.DATA_QUEST_LEGACY_CATEGORY),
                activity_kind=patch.get(const.DATA_QUEST_ACTIVITY_KIND),
                measurement_type=patch.get(const.DATA_QUEST_MEASUREMENT_TYPE),
                unit=patch.get(const.DATA_QUEST_UNIT),
                unit_type=patch.get(const.DATA_QUEST_LEGACY_UNIT_TYPE),
            )
        )

    old_measurement = TaxonomyEngine.normalize_measurement_type(
        existing.get(const.DATA_QUEST_MEASUREMENT_TYPE),
        existing.get(const.DATA_QUEST_LEGACY_UNIT_TYPE),
    )
    old_unit = str(existing.get(const.DATA_QUEST_UNIT) or "")
    old_name = str(existing.get(const.DATA_QUEST_NAME) or "")
    # A unit equal to the old default follows the measurement type around
    unit_is_default = old_unit == TaxonomyEngine.default_unit_for(old_measurement, old_name)

    if not any(key in patch for key in _TAXONOMY_KEYS):
        if name != old_name:
            return dict(
                TaxonomyEngine.classify(
                    name,
                    domain=existing.get(const.DATA_QUEST_DOMAIN),
                    activity_kind=existing.get(const.DATA_QUEST_ACTIVITY_KIND),
                    measurement_type=old_measurement,
                    unit=None if unit_is_default else old_unit,
                )
            )
        domain = TaxonomyEngine.normalize_domain(existing.get(const.DATA_QUEST_DOMAIN))
        return {
            const.DATA_QUEST_DOMAIN: domain,
            const.DATA_QUEST_ACTIVITY_KIND: TaxonomyEngine.normalize_activity_kind(
                domain, existing.get(const.DATA_QUEST_ACTIVITY_KIND)
            ),
            const.DATA_QUEST_MEASUREMENT_TYPE: old_measurement,
            const.DATA_QUEST_UNIT: old_unit
            or TaxonomyEngine.default_unit_for(old_measurement, name),
        }

    def pick(key: str) -> Any:
        return patch[key] if key in patch else existing.get(key)

    domain = TaxonomyEngine.normalize_domain(pick(const.DATA_QUEST_DOMAIN))
    measurement = TaxonomyEngine.normalize_measurement_type(
        pick(const.DATA_QUEST_MEASUREMENT_TYPE), pick(const.DATA_QUEST_LEGACY_UNIT_TYPE)
    )
    if const.DATA_QUEST_UNIT in patch:
        unit = str(patch[const.DATA_QUEST_UNIT] or "").strip()
    else:
        unit = "" if unit_is_default else old_unit
    return {
        const.DATA_QUEST_DOMAIN: domain,
        const.DATA_QUEST_ACTIVITY_KIND: TaxonomyEngine.normalize_activity_kind(
            domain, pick(const.DATA_QUEST_ACTIVITY_KIND)
        ),
        const.DATA_QUEST_MEASUREMENT_TYPE: measurement,
        const.DATA_QUEST_UNIT: unit or TaxonomyEngine.default_unit_for(measurement, name),
    }


def build_quest(
    user_input: Mapping[str, Any] | None,
    existing: QuestData | Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> QuestData:
    """Build quest data for create or update operations.

    One function handles both create (existing=None) and update.

    Args:
        user_input: Raw fields with DATA_* keys (coerced here, may be partial)
        existing: None for create, the stored quest for update
        now: Creation time for createdAt (defaults to the wall clock)

    Returns:
        Complete QuestData ready for storage. Habit quests carry targets of
        1, daily quests run every weekday, and xp is clamped to the cap of
        the (possibly new) rank.

    Examples:
        build_quest({"name": "Push-ups", "measurementType": "reps",
                     "currentTargetValue": 20, "sTargetValue": 100})
        build_quest({"currentTargetValue": 30}, existing=quest)
    """
    patch = coerce_fields(user_input or {}, QUEST_FIELD_VALIDATORS, "quest")
    base: Mapping[str, Any] = (
        coerce_fields(dict(existing), QUEST_FIELD_VALIDATORS, "stored quest")
        if existing is not None
        else {}
    )
    is_create = existing is None

    def get_field(data_key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if data_key in patch:
            return patch[data_key]
        if data_key in base:
            return base[data_key]
        return default

    name = get_field(const.DATA_QUEST_NAME, "") or str(
        base.get(const.DATA_QUEST_NAME) or const.DEFAULT_QUEST_NAME
    )
    taxonomy = _resolve_taxonomy(name, patch, None if is_create else base)
    measurement = taxonomy[const.DATA_QUEST_MEASUREMENT_TYPE]

    if measurement == const.MEASUREMENT_HABIT:
        current = s_target = 1
        baseline = 1
    else:
        current = get_field(const.DATA_QUEST_CURRENT_TARGET, const.DEFAULT_QUEST_TARGET)
        s_target = get_field(const.DATA_QUEST_S_TARGET, current)
        baseline = get_field(const.DATA_QUEST_BASELINE, current)

    frequency = get_field(const.DATA_QUEST_FREQUENCY, const.FREQUENCY_DAILY)
    if frequency == const.FREQUENCY_DAILY:
        days = list(const.ALL_DAYS_OF_WEEK)
    else:
        days = get_field(const.DATA_QUEST_DAYS_OF_WEEK, list(const.ALL_DAYS_OF_WEEK))

    created_at = get_field(const.DATA_QUEST_CREATED_AT, None)
    if created_at is None:
        created_at = dt_utils.dt_to_epoch_ms(now or dt_utils.dt_now_local())

    quest: dict[str, Any] = {
        const.DATA_QUEST_ID: base.get(const.DATA_QUEST_ID)
        or patch.get(const.DATA_QUEST_ID)
        or generate_quest_id(),
        const.DATA_QUEST_NAME: name,
        const.DATA_QUEST_CREATED_AT: created_at,
        **taxonomy,
        const.DATA_QUEST_CURRENT_TARGET: current,
        const.DATA_QUEST_S_TARGET: s_target,
        const.DATA_QUEST_BASELINE: baseline,
        const.DATA_QUEST_PRIORITY: get_field(const.DATA_QUEST_PRIORITY, const.PRIORITY_MAIN),
        const.DATA_QUEST_FREQUENCY: frequency,
        const.DATA_QUEST_DAYS_OF_WEEK: days,
        const.DATA_QUEST_STATUS: get_field(const.DATA_QUEST_STATUS, const.TIMER_STATUS_IDLE),
        const.DATA_QUEST_STARTED_AT: get_field(const.DATA_QUEST_STARTED_AT, None),
        const.DATA_QUEST_ELAPSED_MS: get_field(const.DATA_QUEST_ELAPSED_MS, 0),
        const.DATA_QUEST_TARGET_MINUTES: get_field(const.DATA_QUEST_TARGET_MINUTES, None),
        const.DATA_QUEST_GRACE_MINUTES: get_field(
            const.DATA_QUEST_GRACE_MINUTES, const.DEFAULT_GRACE_MINUTES
        ),
    }
    quest[const.DATA_QUEST_XP] = EconomyEngine.clamp_xp_to_cap(
        quest, get_field(const.DATA_QUEST_XP, 0)
    )
    return quest  # type: ignore[return-value]


# ==============================================================================
# SETTINGS
# ==============================================================================

DEFAULT_SETTINGS: dict[str, Any] = {
    const.DATA_SETTINGS_WAKE_TIME: const.DEFAULT_WAKE_TIME,
    const.DATA_SETTINGS_BED_TIME: const.DEFAULT_BED_TIME,
    const.DATA_SETTINGS_XP_DEBT_ENABLED: const.DEFAULT_XP_DEBT_ENABLED,
    const.DATA_SETTINGS_BLOCK_AFTER_BEDTIME: const.DEFAULT_BLOCK_AFTER_BEDTIME,
    const.DATA_SETTINGS_NO_PHONE_PENALTY_ENABLED: const.DEFAULT_NO_PHONE_PENALTY_ENABLED,
    const.DATA_SETTINGS_NO_PHONE_PENALTY_MINUTES: const.DEFAULT_NO_PHONE_PENALTY_MINUTES,
    const.DATA_SETTINGS_STREAK_BONUS_PCT_PER_DAY: const.DEFAULT_STREAK_BONUS_PCT_PER_DAY,
    const.DATA_SETTINGS_MAX_STREAK_BONUS_PCT: const.DEFAULT_MAX_STREAK_BONUS_PCT,
    const.DATA_SETTINGS_WEEKLY_BOSS_ENABLED: const.DEFAULT_WEEKLY_BOSS_ENABLED,
    const.DATA_SETTINGS_THEME_MODE: const.DEFAULT_THEME_MODE,
}


def build_settings(
    user_input: Mapping[str, Any] | None,
    existing: SettingsData | Mapping[str, Any] | None = None,
) -> SettingsData:
    """Merge a settings patch over existing settings (or the defaults)."""
    settings = dict(DEFAULT_SETTINGS)
    if isinstance(existing, dict):
        settings.update(
            coerce_fields(existing, SETTINGS_FIELD_VALIDATORS, "stored settings")
        )
    settings.update(coerce_fields(user_input, SETTINGS_FIELD_VALIDATORS, "settings"))
    return settings  # type: ignore[return-value]


# ==============================================================================
# DAYS
# ==============================================================================


def build_day_entry(note: str = "") -> DayEntry:
    """Return an empty day entry."""
    return {
        const.DATA_DAY_COMPLETED: {},
        const.DATA_DAY_EARNED_XP: 0,
        const.DATA_DAY_XP_DEBT: 0,
        const.DATA_DAY_NOTE: note,
        const.DATA_DAY_DEBT_APPLIED: False,
    }  # type: ignore[return-value]


def normalize_day_entry(raw: Any) -> DayEntry:
    """Coerce a stored day entry, keeping whatever is readable."""
    entry = build_day_entry()
    if not isinstance(raw, dict):
        return entry
    completed = raw.get(const.DATA_DAY_COMPLETED)
    if isinstance(completed, dict):
        for quest_id, record in completed.items():
            if not isinstance(record, dict):
                continue
            entry[const.DATA_DAY_COMPLETED][str(quest_id)] = {
                const.DATA_DAY_COMPLETED_DONE: bool(record.get(const.DATA_DAY_COMPLETED_DONE)),
                const.DATA_DAY_COMPLETED_XP: int(to_number(record.get(const.DATA_DAY_COMPLETED_XP))),
            }  # type: ignore[assignment]
    entry[const.DATA_DAY_EARNED_XP] = max(0, int(to_number(raw.get(const.DATA_DAY_EARNED_XP))))  # type: ignore[literal-required]
    entry[const.DATA_DAY_XP_DEBT] = max(0, int(to_number(raw.get(const.DATA_DAY_XP_DEBT))))  # type: ignore[literal-required]
    entry[const.DATA_DAY_NOTE] = str(raw.get(const.DATA_DAY_NOTE) or "")  # type: ignore[literal-required]
    entry[const.DATA_DAY_DEBT_APPLIED] = bool(raw.get(const.DATA_DAY_DEBT_APPLIED))  # type: ignore[literal-required]
    return entry


# ==============================================================================
# APP STATE
# ==============================================================================


def build_default_app_state(today_key: str | None = None) -> AppState:
    """Return a fresh aggregate with today's entry already in place."""
    key = today_key or dt_utils.date_key(dt_utils.dt_today_local())
    return {
        const.DATA_SCHEMA_VERSION: const.SCHEMA_VERSION,
        const.DATA_QUESTS: [],
        const.DATA_SETTINGS: build_settings(None),
        const.DATA_DAYS: {key: build_day_entry()},
        const.DATA_TOTAL_XP: 0,
        const.DATA_LAST_ACTIVE_DATE: key,
        const.DATA_WEEKLY_CHALLENGE: None,
        const.DATA_MYSTERY_BOX: None,
        const.DATA_XP_BY_DAY: {},
    }  # type: ignore[return-value]


def normalize_app_state(raw: Mapping[str, Any], today_key: str | None = None) -> AppState:
    """Coerce a current-version snapshot into a well-formed AppState.

    Quests that are not mappings are skipped. Challenge instances are kept
    as stored when they are mappings, otherwise cleared.
    """
    state = build_default_app_state(today_key)

    quests = raw.get(const.DATA_QUESTS)
    if isinstance(quests, list):
        state[const.DATA_QUESTS] = [  # type: ignore[literal-required]
            build_quest({}, existing=q) for q in quests if isinstance(q, dict)
        ]

    state[const.DATA_SETTINGS] = build_settings(None, raw.get(const.DATA_SETTINGS))  # type: ignore[literal-required]

    days = raw.get(const.DATA_DAYS)
    if isinstance(days, dict):
        state[const.DATA_DAYS] = {  # type: ignore[literal-required]
            str(key): normalize_day_entry(entry) for key, entry in days.items()
        }

    state[const.DATA_TOTAL_XP] = max(0, int(to_number(raw.get(const.DATA_TOTAL_XP))))  # type: ignore[literal-required]

    last_active = raw.get(const.DATA_LAST_ACTIVE_DATE)
    if dt_utils.dt_parse_date(last_active) is not None:
        state[const.DATA_LAST_ACTIVE_DATE] = last_active  # type: ignore[literal-required]

    for key in (const.DATA_WEEKLY_CHALLENGE, const.DATA_MYSTERY_BOX):
        value = raw.get(key)
        state[key] = dict(value) if isinstance(value, dict) else None  # type: ignore[literal-required]

    xp_by_day = raw.get(const.DATA_XP_BY_DAY)
    if isinstance(xp_by_day, dict):
        state[const.DATA_XP_BY_DAY] = {  # type: ignore[literal-required]
            str(key): max(0, int(to_number(value))) for key, value in xp_by_day.items()
        }
    return state
