"""Unit tests for ScheduleEngine day and challenge windows."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from questboard import const
from questboard.engines.schedule_engine import ScheduleEngine


def _at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 1, day, hour, minute, tzinfo=UTC)


# =============================================================================
# Test: day window
# =============================================================================


class TestDayWindow:
    """Tests for the wake-to-bed window."""

    @pytest.mark.parametrize(
        ("wake", "bed", "minutes"),
        [("08:00", "00:00", 960), ("23:00", "07:00", 480), ("07:00", "23:00", 960)],
    )
    def test_window_minutes(self, wake: str, bed: str, minutes: int) -> None:
        """Bedtimes at or before wake time wrap to the next day."""
        assert ScheduleEngine.day_window_minutes(wake, bed) == minutes

    def test_before_wake_is_outside(self) -> None:
        """06:00 is outside a 07:00-23:00 window."""
        window = ScheduleEngine.compute_day_window("07:00", "23:00", _at(14, 6))
        assert window["withinWindow"] is False

    def test_inside_window(self) -> None:
        """08:00 is inside with 15 hours left."""
        window = ScheduleEngine.compute_day_window("07:00", "23:00", _at(14, 8))
        assert window["withinWindow"] is True
        assert window["minutesLeft"] == 900
        assert window["progress"] == pytest.approx(60 / 960)

    def test_overnight_window(self) -> None:
        """A night-shift window contains times after midnight."""
        window = ScheduleEngine.compute_day_window("22:00", "06:00", _at(14, 2))
        assert window["withinWindow"] is True
        window = ScheduleEngine.compute_day_window("22:00", "06:00", _at(14, 7))
        assert window["withinWindow"] is False
        window = ScheduleEngine.compute_day_window("22:00", "06:00", _at(14, 23))
        assert window["withinWindow"] is True

    def test_garbage_times_are_clamped(self) -> None:
        """Out of range clock values never raise."""
        assert ScheduleEngine.day_window_minutes("25:99", "07:00") == 421

    def test_window_day(self) -> None:
        """Before wake time the window still belongs to yesterday."""
        settings = {const.DATA_SETTINGS_WAKE_TIME: "07:00"}
        assert ScheduleEngine.window_day(settings, _at(14, 6)) == date(2026, 1, 13)
        assert ScheduleEngine.window_day(settings, _at(14, 7)) == date(2026, 1, 14)

    def test_window_day_keys(self) -> None:
        """A window running past midnight spans two calendar days."""
        daytime = {const.DATA_SETTINGS_WAKE_TIME: "07:00", const.DATA_SETTINGS_BED_TIME: "23:00"}
        assert ScheduleEngine.window_day_keys(daytime, _at(14, 23)) == ["2026-01-14"]

        late = {const.DATA_SETTINGS_WAKE_TIME: "18:00", const.DATA_SETTINGS_BED_TIME: "02:00"}
        assert ScheduleEngine.window_day_keys(late, _at(15, 3)) == [
            "2026-01-14",
            "2026-01-15",
        ]
        assert ScheduleEngine.window_day_keys(late, _at(14, 19)) == [
            "2026-01-14",
            "2026-01-15",
        ]


# =============================================================================
# Test: challenge windows
# =============================================================================


class TestChallengeWindows:
    """Tests for the weekly and daily challenge windows."""

    def test_weekly_window_mid_week(self) -> None:
        """Wednesday falls in the window opened Monday at wake time."""
        start, end = ScheduleEngine.weekly_window(_at(14, 8), "07:00")
        assert start == _at(12, 7)
        assert end == _at(19, 7)

    def test_weekly_window_monday_before_wake(self) -> None:
        """Monday before wake time still belongs to the previous week."""
        start, _end = ScheduleEngine.weekly_window(_at(12, 6), "07:00")
        assert start == _at(5, 7)

    def test_daily_window(self) -> None:
        """The mystery box window runs wake time to wake time."""
        assert ScheduleEngine.daily_window(_at(14, 8), "07:00") == (_at(14, 7), _at(15, 7))
        assert ScheduleEngine.daily_window(_at(14, 6), "07:00") == (_at(13, 7), _at(14, 7))

    def test_boss_key(self) -> None:
        """Every day of the ISO week maps to Monday's boss key."""
        assert ScheduleEngine.boss_key(_at(14, 8)) == "2026-01-12_boss"
        assert ScheduleEngine.boss_key(_at(18, 23)) == "2026-01-12_boss"
        assert ScheduleEngine.boss_key(_at(19, 0)) == "2026-01-19_boss"


class TestTimerElapsed:
    """Tests for live timer arithmetic."""

    def test_active_timer_adds_running_segment(self) -> None:
        """Banked time plus time since startedAt."""
        quest = {
            const.DATA_QUEST_STATUS: const.TIMER_STATUS_ACTIVE,
            const.DATA_QUEST_STARTED_AT: _at(14, 8).isoformat(),
            const.DATA_QUEST_ELAPSED_MS: 60_000,
        }
        assert ScheduleEngine.timer_elapsed_ms(quest, _at(14, 8, 10)) == 660_000

    def test_paused_timer_is_frozen(self) -> None:
        """A paused timer reports only banked time."""
        quest = {
            const.DATA_QUEST_STATUS: const.TIMER_STATUS_PAUSED,
            const.DATA_QUEST_STARTED_AT: None,
            const.DATA_QUEST_ELAPSED_MS: 60_000,
        }
        assert ScheduleEngine.timer_elapsed_ms(quest, _at(14, 9)) == 60_000
