"""Type definitions for Quest Board data structures.

Hybrid strategy: TypedDict for structures whose keys are fixed (quests, day
entries, settings, challenges) and ``dict[str, Any]`` for maps keyed at
runtime (days by date key, completions by quest id, xpByDay).

Field names keep the camelCase spelling of the persisted schema so a loaded
snapshot can be used as-is.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime defaults and coercion live in
data_builders.py.

IMPORTANT: This file must only import from typing. Nothing here may import
managers or the coordinator.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

QuestId = str  # "q_<hex>"
DateKey = str  # Local calendar date "2026-01-18" or boss key "2026-01-12_boss"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
RankLetter = str  # One of E, D, C, B, A, S


# =============================================================================
# Quest
# =============================================================================


class QuestData(TypedDict):
    """A recurring, user-defined habit."""

    id: QuestId
    name: str
    createdAt: int  # epoch milliseconds, ordering tiebreak
    domain: str
    activityKind: str
    measurementType: str
    unit: str
    currentTargetValue: float
    sTargetValue: float
    baselineValue: float
    priority: str
    frequency: str
    daysOfWeek: list[int]
    xp: int
    # Live timer, only meaningful for measurementType == "time"
    status: str
    startedAt: ISODatetime | None
    elapsedMs: int
    targetMinutes: NotRequired[float | None]
    graceMinutes: int


class QuestTaxonomy(TypedDict):
    """Normalized classification returned by the taxonomy engine."""

    domain: str
    activityKind: str
    measurementType: str
    unit: str


# =============================================================================
# Days
# =============================================================================


class CompletionRecord(TypedDict):
    """Per-quest completion inside a day entry."""

    done: bool
    xp: int  # XP actually credited for this completion (after debt repayment)


class DayEntry(TypedDict):
    """One calendar day (or weekly boss slot) of activity."""

    completed: dict[str, CompletionRecord]
    earnedXP: int
    xpDebt: int
    note: str
    debtApplied: bool


# =============================================================================
# Settings
# =============================================================================


class SettingsData(TypedDict):
    """Process-wide configuration, patched through update_settings."""

    wakeTime: str
    bedTime: str
    xpDebtEnabled: bool
    blockAfterBedtime: bool
    noPhonePenaltyEnabled: bool
    noPhonePenaltyMinutes: int
    streakBonusPctPerDay: float
    maxStreakBonusPct: float
    weeklyBossEnabled: bool
    themeMode: str


# =============================================================================
# Generated challenges
# =============================================================================


class WeeklyChallengeData(TypedDict):
    """At most one per weekly window."""

    id: str
    createdAt: ISODatetime
    expiresAt: ISODatetime
    taskId: QuestId
    title: str
    target: str
    xpReward: int
    status: str
    completedAt: NotRequired[ISODatetime]
    meta: dict[str, Any]


class MysteryBoxData(TypedDict):
    """At most one per daily window."""

    id: str
    createdAt: ISODatetime
    expiresAt: ISODatetime
    baseTaskId: QuestId
    title: str
    descriptionHidden: str
    descriptionRevealed: str
    xpReward: int
    templateId: str
    isRevealed: bool
    rerollUsed: bool
    status: str
    completedAt: NotRequired[ISODatetime]
    metadata: dict[str, Any]


# =============================================================================
# Aggregate root
# =============================================================================


class AppState(TypedDict):
    """Everything persisted for one player."""

    schemaVersion: int
    quests: list[QuestData]
    settings: SettingsData
    days: dict[DateKey, DayEntry]
    totalXP: int
    lastActiveDate: str
    weeklyChallenge: WeeklyChallengeData | None
    mysteryBox: MysteryBoxData | None
    xpByDay: dict[DateKey, int]


# =============================================================================
# Engine results
# =============================================================================


class RankLadder(TypedDict):
    """Six integer thresholds, strictly increasing, S pinned to the goal."""

    E: int
    D: int
    C: int
    B: int
    A: int
    S: int


class QuestProgression(TypedDict):
    """Growth plan built from a long-term target."""

    sRankTarget: int
    recommendedStartTarget: int
    startTarget: int
    startTargetWasAuto: bool
    increasePerSession: int
    weeklyIncrease: int
    estimatedWeeksToS: int
    sessionsPerWeek: int
    ladder: RankLadder
    startingRankLetter: RankLetter


class DayWindow(TypedDict):
    """Wake-to-bed window and the current position inside it."""

    wakeMin: int
    bedMin: int
    durationMin: int
    nowMin: int
    progress: float
    withinWindow: bool
    minutesLeft: int


class StatsSummary(TypedDict):
    """Recent-history summary for the stats view."""

    totalDays: int
    activeDays: int
    compliancePct: int
    avgXP: int
    debt: int
    outstandingDebt: int
    questTotals: dict[QuestId, int]
    questDone: dict[QuestId, int]
