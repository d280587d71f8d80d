"""Unit tests for StatisticsEngine streaks, backfill planning and summaries."""

from __future__ import annotations

from datetime import date
from typing import Any

from questboard import const
from questboard.engines.statistics_engine import StatisticsEngine

TODAY = date(2026, 1, 14)


def _day(earned: int = 0, done: tuple[str, ...] = (), debt: int = 0) -> dict[str, Any]:
    return {
        const.DATA_DAY_COMPLETED: {
            qid: {const.DATA_DAY_COMPLETED_DONE: True, const.DATA_DAY_COMPLETED_XP: 0}
            for qid in done
        },
        const.DATA_DAY_EARNED_XP: earned,
        const.DATA_DAY_XP_DEBT: debt,
        const.DATA_DAY_NOTE: "",
        const.DATA_DAY_DEBT_APPLIED: False,
    }


class TestCalculateStreak:
    """Tests for walking back over active days."""

    def test_counts_consecutive_days(self) -> None:
        """XP or a completed quest both count as activity."""
        days = {
            "2026-01-14": _day(earned=60),
            "2026-01-13": _day(done=("q_a",)),
            "2026-01-11": _day(earned=40),
        }
        assert StatisticsEngine.calculate_streak(days, TODAY) == 2

    def test_idle_today_breaks_streak(self) -> None:
        """Checking before today's first completion gives 0."""
        days = {"2026-01-14": _day(), "2026-01-13": _day(earned=60)}
        assert StatisticsEngine.calculate_streak(days, TODAY) == 0

    def test_undone_completion_is_not_activity(self) -> None:
        """A completion record flipped back to not-done does not count."""
        entry = _day()
        entry[const.DATA_DAY_COMPLETED]["q_a"] = {
            const.DATA_DAY_COMPLETED_DONE: False,
            const.DATA_DAY_COMPLETED_XP: 0,
        }
        assert StatisticsEngine.day_has_activity(entry) is False


class TestPlanBackfill:
    """Tests for choosing the dates that need a backfilled entry."""

    def test_dates_strictly_between(self) -> None:
        """Two skipped days between the 11th and the 14th."""
        assert StatisticsEngine.plan_backfill("2026-01-11", TODAY) == [
            "2026-01-12",
            "2026-01-13",
        ]

    def test_nothing_for_yesterday_or_today(self) -> None:
        """Adjacent or equal dates leave no gap."""
        assert StatisticsEngine.plan_backfill("2026-01-13", TODAY) == []
        assert StatisticsEngine.plan_backfill("2026-01-14", TODAY) == []

    def test_future_or_invalid_dates(self) -> None:
        """A clock that moved backwards or a junk value plans nothing."""
        assert StatisticsEngine.plan_backfill("2026-02-01", TODAY) == []
        assert StatisticsEngine.plan_backfill("yesterday", TODAY) == []
        assert StatisticsEngine.plan_backfill(None, TODAY) == []


class TestSummarize:
    """Tests for the recent-history summary."""

    def test_summary(self) -> None:
        """Compliance, average XP and per-quest counts over recorded days."""
        days = {
            "2026-01-11": _day(earned=40, done=("q_a",)),
            "2026-01-12": _day(debt=50),
            "2026-01-12_boss": _day(earned=220),
            "2026-01-13": _day(earned=80, done=("q_a", "q_b")),
            "2026-01-14": _day(debt=10),
        }
        summary = StatisticsEngine.summarize(days, ["q_a", "q_b"], TODAY)

        assert summary["totalDays"] == 4
        assert summary["activeDays"] == 2
        assert summary["compliancePct"] == 50
        assert summary["avgXP"] == 60
        assert summary["debt"] == 10
        assert summary["outstandingDebt"] == 60
        assert summary["questTotals"] == {"q_a": 4, "q_b": 4}
        assert summary["questDone"] == {"q_a": 2, "q_b": 1}

    def test_empty_history(self) -> None:
        """No days means zeros, not division errors."""
        summary = StatisticsEngine.summarize({}, [], TODAY)
        assert summary["compliancePct"] == 0
        assert summary["avgXP"] == 0

    def test_streak_bonus_capped(self) -> None:
        """The streak bonus never exceeds the configured maximum."""
        assert StatisticsEngine.streak_bonus_pct(5, 1, 20) == 5
        assert StatisticsEngine.streak_bonus_pct(30, 1, 20) == 20

    def test_all_quests_done(self) -> None:
        """Every listed quest must be marked done."""
        entry = _day(done=("q_a",))
        assert StatisticsEngine.all_quests_done(entry, ["q_a"]) is True
        assert StatisticsEngine.all_quests_done(entry, ["q_a", "q_b"]) is False
        assert StatisticsEngine.all_quests_done(None, ["q_a"]) is False

    def test_all_quests_done_across(self) -> None:
        """Completions may be split over the days a window touched."""
        entries = [_day(done=("q_a",)), _day(done=("q_b",)), None]
        assert StatisticsEngine.all_quests_done_across(entries, ["q_a", "q_b"]) is True
        assert StatisticsEngine.all_quests_done_across(entries, ["q_a", "q_c"]) is False
