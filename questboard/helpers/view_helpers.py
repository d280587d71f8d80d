# File: helpers/view_helpers.py
"""Derived view values for the presentation layer.

Every function here is a pure read of an AppState (plus the wall clock) and
returns plain dicts. Nothing is written back; the same state and the same
``now`` always produce the same view.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.economy_engine import EconomyEngine
from ..engines.schedule_engine import ScheduleEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils import dt_utils
from ..utils.math_utils import round_half_up, to_number

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import AppState, StatsSummary


# ==============================================================================
# Quests
# ==============================================================================


def quest_view(
    quest: Mapping[str, Any], now: datetime, done_today: bool = False
) -> dict[str, Any]:
    """Rank, cap and next-award values for one quest."""
    rank = EconomyEngine.quest_rank(quest)
    cap = EconomyEngine.xp_cap(rank)
    xp = int(to_number(quest.get(const.DATA_QUEST_XP)))
    return {
        const.DATA_QUEST_ID: quest.get(const.DATA_QUEST_ID),
        const.DATA_QUEST_NAME: quest.get(const.DATA_QUEST_NAME),
        "rank": rank,
        "nextRank": EconomyEngine.next_rank(rank),
        "progressFraction": EconomyEngine.quest_progress(quest),
        const.DATA_QUEST_XP: xp,
        "xpCap": cap,
        "xpToCap": max(0, cap - xp),
        "nextAwardPreview": EconomyEngine.calculate_award(quest),
        "isCapped": xp >= cap,
        "doneToday": done_today,
        "timerStatus": quest.get(const.DATA_QUEST_STATUS, const.TIMER_STATUS_IDLE),
        "timerElapsedMs": ScheduleEngine.timer_elapsed_ms(quest, now),
    }


def quest_views(state: AppState, now: datetime) -> list[dict[str, Any]]:
    """quest_view for every quest, with today's completion flag."""
    today = (state[const.DATA_DAYS]).get(dt_utils.date_key(now)) or {}  # type: ignore[literal-required]
    completed = today.get(const.DATA_DAY_COMPLETED) or {}
    return [
        quest_view(
            quest,
            now,
            bool((completed.get(quest.get(const.DATA_QUEST_ID)) or {}).get(
                const.DATA_DAY_COMPLETED_DONE
            )),
        )
        for quest in state[const.DATA_QUESTS]  # type: ignore[literal-required]
    ]


# ==============================================================================
# Day window and overall progress
# ==============================================================================


def day_window_view(state: AppState, now: datetime) -> dict[str, Any]:
    """Where now sits inside today's wake-to-bed window."""
    window = ScheduleEngine.settings_window(state[const.DATA_SETTINGS], now)  # type: ignore[literal-required]
    return {
        "withinWindow": window["withinWindow"],
        "minutesLeft": window["minutesLeft"],
        "progressFraction": window["progress"],
        "durationMin": window["durationMin"],
    }


def progress_summary(state: AppState, now: datetime) -> dict[str, Any]:
    """Streak, overall rank and XP totals.

    Overall progress is the mean quest progress fraction (0 with no quests)
    and the overall rank is the rank of that mean.
    """
    quests = state[const.DATA_QUESTS]  # type: ignore[literal-required]
    days = state[const.DATA_DAYS]  # type: ignore[literal-required]
    settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]

    fractions = [EconomyEngine.quest_progress(q) for q in quests]
    overall = sum(fractions) / len(fractions) if fractions else 0.0
    streak = StatisticsEngine.calculate_streak(days, dt_utils.as_local(now).date())
    return {
        "streakDays": streak,
        "streakBonusPct": StatisticsEngine.streak_bonus_pct(
            streak,
            settings.get(const.DATA_SETTINGS_STREAK_BONUS_PCT_PER_DAY),
            settings.get(const.DATA_SETTINGS_MAX_STREAK_BONUS_PCT),
        ),
        "overallRank": EconomyEngine.rank_from_progress(overall),
        "overallProgressPct": round_half_up(overall * 100),
        const.DATA_TOTAL_XP: int(to_number(state.get(const.DATA_TOTAL_XP))),
        "outstandingDebt": StatisticsEngine.outstanding_debt(days),
    }


# ==============================================================================
# Challenges
# ==============================================================================


def _countdown(instance: Mapping[str, Any], now: datetime, label: str) -> str | None:
    expires = dt_utils.dt_parse(instance.get(const.DATA_CHALLENGE_EXPIRES_AT))
    if expires is None:
        return None
    return dt_utils.format_time_remaining(dt_utils.as_local(now), expires, label)


def weekly_challenge_view(state: AppState, now: datetime) -> dict[str, Any] | None:
    """Weekly challenge card, or None before one has been generated."""
    challenge = state.get(const.DATA_WEEKLY_CHALLENGE)
    if not challenge:
        return None
    status = challenge.get(const.DATA_CHALLENGE_STATUS)
    return {
        const.DATA_CHALLENGE_ID: challenge.get(const.DATA_CHALLENGE_ID),
        const.DATA_CHALLENGE_TITLE: challenge.get(const.DATA_CHALLENGE_TITLE),
        const.DATA_WEEKLY_TARGET: challenge.get(const.DATA_WEEKLY_TARGET),
        const.DATA_CHALLENGE_XP_REWARD: challenge.get(const.DATA_CHALLENGE_XP_REWARD),
        const.DATA_CHALLENGE_STATUS: status,
        "endsIn": (
            _countdown(challenge, now, "Ends in")
            if status == const.CHALLENGE_STATUS_ACTIVE
            else None
        ),
    }


def mystery_box_view(state: AppState, now: datetime) -> dict[str, Any] | None:
    """Mystery box card; the twist text stays hidden until revealed."""
    box = state.get(const.DATA_MYSTERY_BOX)
    if not box:
        return None
    revealed = bool(box.get(const.DATA_MYSTERY_IS_REVEALED))
    status = box.get(const.DATA_CHALLENGE_STATUS)
    return {
        const.DATA_CHALLENGE_ID: box.get(const.DATA_CHALLENGE_ID),
        const.DATA_CHALLENGE_TITLE: box.get(const.DATA_CHALLENGE_TITLE),
        "description": (
            box.get(const.DATA_MYSTERY_DESCRIPTION_REVEALED)
            if revealed
            else box.get(const.DATA_MYSTERY_DESCRIPTION_HIDDEN)
        ),
        const.DATA_MYSTERY_IS_REVEALED: revealed,
        "canReroll": (
            status == const.CHALLENGE_STATUS_ACTIVE
            and not revealed
            and not box.get(const.DATA_MYSTERY_REROLL_USED)
        ),
        const.DATA_CHALLENGE_XP_REWARD: box.get(const.DATA_CHALLENGE_XP_REWARD),
        const.DATA_CHALLENGE_STATUS: status,
        "resetsIn": _countdown(box, now, "Resets in"),
    }


def boss_view(state: AppState, now: datetime) -> dict[str, Any]:
    """This week's boss slot."""
    settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
    key = ScheduleEngine.boss_key(now)
    entry = (state[const.DATA_DAYS]).get(key) or {}  # type: ignore[literal-required]
    record = (entry.get(const.DATA_DAY_COMPLETED) or {}).get(const.BOSS_COMPLETION_ID) or {}
    return {
        "enabled": bool(settings.get(const.DATA_SETTINGS_WEEKLY_BOSS_ENABLED)),
        "key": key,
        "done": bool(record.get(const.DATA_DAY_COMPLETED_DONE)),
        const.DATA_CHALLENGE_XP_REWARD: const.BOSS_BASE_XP,
    }


def stats_view(state: AppState, now: datetime) -> StatsSummary:
    """Recent-history summary."""
    return StatisticsEngine.summarize(
        state[const.DATA_DAYS],  # type: ignore[literal-required]
        [q[const.DATA_QUEST_ID] for q in state[const.DATA_QUESTS]],  # type: ignore[literal-required]
        dt_utils.as_local(now).date(),
    )
