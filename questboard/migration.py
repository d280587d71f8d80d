"""Schema migrations for persisted Quest Board snapshots.

Each step is a pure function that upgrades a snapshot by exactly one schema
version. ``migrate()`` composes the steps left to right, starting from the
snapshot's schemaVersion (missing means version 1), and never touches the
caller's object.

Snapshots written by a newer release (version above SCHEMA_VERSION) are
returned unchanged with a warning.

Steps:
    - v1 → v2: re-derive domain/activityKind/measurementType/unit for every
      quest (honouring the v1 ``category`` and ``unitType`` fields) and
      back-fill xpByDay from days[*].earnedXP when it is absent.
"""

from __future__ import annotations

from collections.abc import Callable
import copy
from typing import Any

from . import const
from .engines.statistics_engine import StatisticsEngine
from .engines.taxonomy_engine import TaxonomyEngine
from .utils.math_utils import to_number

Snapshot = dict[str, Any]


class MigrationError(Exception):
    """Raised when a snapshot cannot be upgraded.

    Attributes:
        from_version: Version the failing step started from
    """

    def __init__(self, from_version: int, reason: str) -> None:
        """Initialize MigrationError."""
        self.from_version = from_version
        super().__init__(f"Migration from schema v{from_version} failed: {reason}")


# ==============================================================================
# Steps
# ==============================================================================


def _migrate_v1_to_v2(snapshot: Snapshot) -> Snapshot:
    """Reclassify quests and back-fill xpByDay."""
    quests = snapshot.get(const.DATA_QUESTS)
    if isinstance(quests, list):
        for quest in quests:
            if not isinstance(quest, dict):
                continue
            quest.update(
                TaxonomyEngine.classify(
                    quest.get(const.DATA_QUEST_NAME),
                    domain=quest.get(const.DATA_QUEST_DOMAIN)
                    or quest.get(const.DATA_QUEST_LEGACY_CATEGORY),
                    activity_kind=quest.get(const.DATA_QUEST_ACTIVITY_KIND),
                    measurement_type=quest.get(const.DATA_QUEST_MEASUREMENT_TYPE),
                    unit=quest.get(const.DATA_QUEST_UNIT),
                    unit_type=quest.get(const.DATA_QUEST_LEGACY_UNIT_TYPE),
                )
            )
            quest.pop(const.DATA_QUEST_LEGACY_CATEGORY, None)
            quest.pop(const.DATA_QUEST_LEGACY_UNIT_TYPE, None)

    if not isinstance(snapshot.get(const.DATA_XP_BY_DAY), dict):
        days = snapshot.get(const.DATA_DAYS)
        xp_by_day: dict[str, int] = {}
        if isinstance(days, dict):
            for key, entry in days.items():
                if not StatisticsEngine.is_date_key(key) or not isinstance(entry, dict):
                    continue
                earned = int(to_number(entry.get(const.DATA_DAY_EARNED_XP)))
                if earned > 0:
                    xp_by_day[key] = earned
        snapshot[const.DATA_XP_BY_DAY] = xp_by_day
    return snapshot


# Keyed by the version each step upgrades from
MIGRATIONS: dict[int, Callable[[Snapshot], Snapshot]] = {
    const.SCHEMA_VERSION_LEGACY: _migrate_v1_to_v2,
}


# ==============================================================================
# Runner
# ==============================================================================


def snapshot_version(snapshot: Snapshot) -> int:
    """Schema version of a snapshot; missing or unreadable means v1."""
    version = to_number(snapshot.get(const.DATA_SCHEMA_VERSION), 0)
    if version < const.SCHEMA_VERSION_LEGACY or not float(version).is_integer():
        return const.SCHEMA_VERSION_LEGACY
    return int(version)


def migrate(snapshot: Snapshot) -> Snapshot:
    """Upgrade a snapshot to SCHEMA_VERSION.

    Args:
        snapshot: Raw persisted dict (not modified)

    Returns:
        A new dict at the current schema version

    Raises:
        MigrationError: If a step is missing or fails on malformed data
    """
    version = snapshot_version(snapshot)
    result = copy.deepcopy(snapshot)

    if version > const.SCHEMA_VERSION:
        const.LOGGER.warning(
            "Snapshot schema v%s is newer than supported v%s, loading as-is",
            version,
            const.SCHEMA_VERSION,
        )
        return result

    if version < const.SCHEMA_VERSION:
        const.LOGGER.info(
            "Migrating snapshot from schema v%s to v%s", version, const.SCHEMA_VERSION
        )

    while version < const.SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise MigrationError(version, "no migration step registered")
        try:
            result = step(result)
        except (AttributeError, KeyError, TypeError, ValueError) as err:
            raise MigrationError(version, str(err)) from err
        version += 1
        result[const.DATA_SCHEMA_VERSION] = version
        const.LOGGER.debug("Snapshot upgraded to schema v%s", version)

    return result
