"""Schedule Engine - Pure time arithmetic for day and challenge windows.

Provides:
- Day window (wake → bed, possibly crossing midnight) and "now" inside it
- The calendar day a running window belongs to
- Weekly window (Monday at wake time → +7 days) for the weekly challenge
- Daily window (today at wake time → +1 day) for the mystery box
- ISO week boss key
- Elapsed time of a live quest timer

Nothing here keeps state; every call is re-evaluated from its arguments.

ARCHITECTURE: Stateless engine, all methods static.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from dateutil.relativedelta import relativedelta

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import clamp, round_half_up, to_number

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import DayWindow


class ScheduleEngine:
    """Window calculations shared by the ledger, the sweep and the challenges."""

    @staticmethod
    def compute_day_window(wake_time: Any, bed_time: Any, now: datetime) -> DayWindow:
        """Place now inside the wake-to-bed window.

        A bedtime at or before wake time is read as the next day. A clock
        time before wake time is read as the tail of the previous window.

        Example:
            compute_day_window("07:00", "23:00", 08:00)
            → {"wakeMin": 420, "bedMin": 1380, "durationMin": 960,
               "withinWindow": True, "minutesLeft": 900, ...}
        """
        wake_min = dt_utils.parse_time_to_minutes(wake_time)
        bed_raw = dt_utils.parse_time_to_minutes(bed_time)
        bed_min = bed_raw + const.MINUTES_PER_DAY if bed_raw <= wake_min else bed_raw
        duration = max(1, bed_min - wake_min)

        now_min = dt_utils.minutes_of_day(now)
        if now_min < wake_min:
            now_min += const.MINUTES_PER_DAY

        return {
            "wakeMin": wake_min,
            "bedMin": bed_min,
            "durationMin": duration,
            "nowMin": now_min,
            "progress": clamp((now_min - wake_min) / duration, 0.0, 1.0),
            "withinWindow": wake_min <= now_min <= bed_min,
            "minutesLeft": max(0, round_half_up(bed_min - now_min)),
        }

    @staticmethod
    def day_window_minutes(wake_time: Any, bed_time: Any) -> int:
        """Length of the day window in minutes.

        Examples:
            day_window_minutes("08:00", "00:00") → 960
            day_window_minutes("23:00", "07:00") → 480
        """
        wake_min = dt_utils.parse_time_to_minutes(wake_time)
        bed_raw = dt_utils.parse_time_to_minutes(bed_time)
        bed_min = bed_raw + const.MINUTES_PER_DAY if bed_raw <= wake_min else bed_raw
        return max(1, bed_min - wake_min)

    @staticmethod
    def settings_window(settings: Mapping[str, Any], now: datetime) -> DayWindow:
        """compute_day_window using a settings dict."""
        return ScheduleEngine.compute_day_window(
            settings.get(const.DATA_SETTINGS_WAKE_TIME, const.DEFAULT_WAKE_TIME),
            settings.get(const.DATA_SETTINGS_BED_TIME, const.DEFAULT_BED_TIME),
            now,
        )

    @staticmethod
    def is_within_day_window(settings: Mapping[str, Any], now: datetime) -> bool:
        """True while now lies between wake time and bedtime (inclusive)."""
        return ScheduleEngine.settings_window(settings, now)["withinWindow"]

    @staticmethod
    def window_day(settings: Mapping[str, Any], now: datetime) -> date:
        """Calendar day on which the window containing now opened.

        Before wake time that is yesterday, since the clock is still in the
        previous window (or the gap after it).
        """
        local = dt_utils.as_local(now)
        wake_min = dt_utils.parse_time_to_minutes(
            settings.get(const.DATA_SETTINGS_WAKE_TIME, const.DEFAULT_WAKE_TIME)
        )
        if dt_utils.minutes_of_day(local) < wake_min:
            return dt_utils.dt_add_days(local.date(), -1)
        return local.date()

    @staticmethod
    def window_day_keys(settings: Mapping[str, Any], now: datetime) -> list[str]:
        """Date keys of every calendar day the window containing now touches.

        A window whose bedtime falls past midnight also spans the next day,
        where completions made after midnight are recorded.
        """
        start = ScheduleEngine.window_day(settings, now)
        keys = [start.isoformat()]
        wake_min = dt_utils.parse_time_to_minutes(
            settings.get(const.DATA_SETTINGS_WAKE_TIME, const.DEFAULT_WAKE_TIME)
        )
        duration = ScheduleEngine.day_window_minutes(
            settings.get(const.DATA_SETTINGS_WAKE_TIME, const.DEFAULT_WAKE_TIME),
            settings.get(const.DATA_SETTINGS_BED_TIME, const.DEFAULT_BED_TIME),
        )
        if wake_min + duration > const.MINUTES_PER_DAY:
            keys.append(dt_utils.dt_add_days(start, 1).isoformat())
        return keys

    # ------------------------------------------------------------------
    # Challenge windows
    # ------------------------------------------------------------------

    @staticmethod
    def weekly_window(now: datetime, wake_time: Any) -> tuple[datetime, datetime]:
        """[Monday at wake time, +7 days) containing now."""
        local = dt_utils.as_local(now)
        wake_min = dt_utils.parse_time_to_minutes(wake_time)
        monday = dt_utils.start_of_week(local.date())
        start = dt_utils.dt_at_minutes(monday, wake_min, local.tzinfo)  # type: ignore[arg-type]
        if local < start:
            start -= relativedelta(days=7)
        return start, start + relativedelta(days=7)

    @staticmethod
    def daily_window(now: datetime, wake_time: Any) -> tuple[datetime, datetime]:
        """[today at wake time, +1 day) containing now."""
        local = dt_utils.as_local(now)
        wake_min = dt_utils.parse_time_to_minutes(wake_time)
        start = dt_utils.dt_at_minutes(local.date(), wake_min, local.tzinfo)  # type: ignore[arg-type]
        if local < start:
            start -= relativedelta(days=1)
        return start, start + relativedelta(days=1)

    @staticmethod
    def boss_key(now: datetime) -> str:
        """Day-entry key of the weekly boss, "<Monday>_boss"."""
        monday = dt_utils.start_of_week(dt_utils.as_local(now).date())
        return f"{monday.isoformat()}{const.BOSS_KEY_SUFFIX}"

    # ------------------------------------------------------------------
    # Live timers
    # ------------------------------------------------------------------

    @staticmethod
    def timer_elapsed_ms(quest: Mapping[str, Any], now: datetime) -> int:
        """Banked timer time plus the running segment while active."""
        elapsed = int(to_number(quest.get(const.DATA_QUEST_ELAPSED_MS)))
        if quest.get(const.DATA_QUEST_STATUS) == const.TIMER_STATUS_ACTIVE:
            started = dt_utils.dt_parse(quest.get(const.DATA_QUEST_STARTED_AT))
            if started is not None:
                running = dt_utils.as_local(now) - started
                elapsed += max(0, int(running.total_seconds() * 1000))
        return elapsed
