"""Statistics Engine - Pure logic for streaks, backfill planning and summaries.

This engine handles:
- Day activity tests (earned XP or any completed quest)
- Consecutive-activity streak walking
- Planning which skipped dates need a backfilled entry
- Recent-history summaries for the stats view

Day maps hold calendar keys ("2026-01-18") next to weekly boss keys
("2026-01-12_boss"); only calendar keys count as days here.

ARCHITECTURE: Stateless engine. SystemManager and the view helpers call in.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import clamp, round_half_up, to_number

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import StatsSummary


class StatisticsEngine:
    """Pure history calculations. All methods are static."""

    @staticmethod
    def is_date_key(key: str) -> bool:
        """True for plain calendar keys, False for boss keys and junk."""
        return dt_utils.dt_parse_date(key) is not None

    @staticmethod
    def day_has_activity(entry: Mapping[str, Any] | None) -> bool:
        """A day counts as active with earned XP or any completed quest."""
        if not entry:
            return False
        if to_number(entry.get(const.DATA_DAY_EARNED_XP)) > 0:
            return True
        completed = entry.get(const.DATA_DAY_COMPLETED) or {}
        return any(
            bool(record and record.get(const.DATA_DAY_COMPLETED_DONE))
            for record in completed.values()
        )

    @staticmethod
    def all_quests_done(
        entry: Mapping[str, Any] | None, quest_ids: Iterable[str]
    ) -> bool:
        """True when every listed quest is marked done in the entry."""
        return StatisticsEngine.all_quests_done_across([entry], quest_ids)

    @staticmethod
    def all_quests_done_across(
        entries: Iterable[Mapping[str, Any] | None], quest_ids: Iterable[str]
    ) -> bool:
        """True when every listed quest is marked done in at least one entry."""
        done: set[str] = set()
        for entry in entries:
            completed = (entry or {}).get(const.DATA_DAY_COMPLETED) or {}
            done.update(
                qid
                for qid, record in completed.items()
                if (record or {}).get(const.DATA_DAY_COMPLETED_DONE)
            )
        return all(qid in done for qid in quest_ids)

    @staticmethod
    def calculate_streak(days: Mapping[str, Any], today: date) -> int:
        """Count consecutive active days walking back from today.

        Today with no activity yet breaks the streak immediately.
        """
        streak = 0
        cursor = today
        while StatisticsEngine.day_has_activity(days.get(cursor.isoformat())):
            streak += 1
            cursor = dt_utils.dt_add_days(cursor, -1)
        return streak

    @staticmethod
    def plan_backfill(last_active_date: str | None, today: date) -> list[str]:
        """Keys of dates strictly between last_active_date and today.

        Nothing to backfill when the last active date is missing, unreadable
        or not in the past.
        """
        last = dt_utils.dt_parse_date(last_active_date)
        if last is None or last >= today:
            return []
        return [d.isoformat() for d in dt_utils.dates_between(last, today)]

    @staticmethod
    def outstanding_debt(days: Mapping[str, Any]) -> int:
        """Sum of unpaid xpDebt across every entry."""
        return int(
            sum(
                to_number((entry or {}).get(const.DATA_DAY_XP_DEBT))
                for entry in days.values()
            )
        )

    @staticmethod
    def streak_bonus_pct(streak: int, per_day: Any, max_pct: Any) -> float:
        """Streak bonus shown to the player, capped at max_pct."""
        return clamp(streak * to_number(per_day), 0.0, to_number(max_pct))

    @staticmethod
    def summarize(
        days: Mapping[str, Any],
        quest_ids: Iterable[str],
        today: date,
    ) -> StatsSummary:
        """Build the recent-history summary.

        Uses the last 30 recorded calendar days up to today for compliance and
        average XP, and the last 14 for per-quest completion counts.
        """
        today_key = today.isoformat()
        keys = sorted(
            k for k in days if StatisticsEngine.is_date_key(k) and k <= today_key
        )
        last_30 = keys[-const.STATS_WINDOW_DAYS :]
        last_14 = keys[-const.STATS_QUEST_WINDOW_DAYS :]

        def earned(key: str) -> float:
            return to_number((days.get(key) or {}).get(const.DATA_DAY_EARNED_XP))

        active = [k for k in last_30 if earned(k) > 0]
        total_xp = sum(earned(k) for k in last_30)

        ids = list(quest_ids)
        quest_totals: dict[str, int] = dict.fromkeys(ids, 0)
        quest_done: dict[str, int] = dict.fromkeys(ids, 0)
        for key in last_14:
            completed = (days.get(key) or {}).get(const.DATA_DAY_COMPLETED) or {}
            for qid in ids:
                quest_totals[qid] += 1
                if (completed.get(qid) or {}).get(const.DATA_DAY_COMPLETED_DONE):
                    quest_done[qid] += 1

        today_entry = days.get(today_key) or {}
        return {
            "totalDays": len(last_30),
            "activeDays": len(active),
            "compliancePct": (
                round_half_up(len(active) / len(last_30) * 100) if last_30 else 0
            ),
            "avgXP": round_half_up(total_xp / len(active)) if active else 0,
            "debt": int(to_number(today_entry.get(const.DATA_DAY_XP_DEBT))),
            "outstandingDebt": StatisticsEngine.outstanding_debt(days),
            "questTotals": quest_totals,
            "questDone": quest_done,
        }
