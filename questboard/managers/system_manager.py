# File: managers/system_manager.py
"""System Manager for Quest Board.

The "Janitor" - keeps the day map consistent with the wall clock.

Responsibilities:
- Day rollover: back-fill entries for skipped dates, accrue missed-day debt,
  advance lastActiveDate and reset live timers
- Bedtime penalty: one-time debt floor once the day window has been left
  with quests still open
- Settings patches

Both sweeps are idempotent: running them again for the same clock value
changes nothing, because applied debt is marked with debtApplied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.schedule_engine import ScheduleEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils import dt_utils
from .base_manager import ActionResult, BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from ..coordinator import QuestBoardCoordinator
    from ..type_defs import AppState
    from .economy_manager import EconomyManager
    from .quest_manager import QuestManager


class SystemManager(BaseManager):
    """Day bookkeeping driven by tick() and settings edits."""

    def __init__(
        self,
        coordinator: QuestBoardCoordinator,
        economy: EconomyManager,
        quests: QuestManager,
    ) -> None:
        """Initialize system manager."""
        super().__init__(coordinator)
        self._economy = economy
        self._quests = quests

    def process_day_rollover(self, state: AppState, now: datetime) -> bool:
        """Back-fill skipped days once the calendar date has moved on.

        Returns:
            True when lastActiveDate changed (and the draft was mutated)
        """
        today = dt_utils.as_local(now).date()
        today_key = today.isoformat()
        last_active = state.get(const.DATA_LAST_ACTIVE_DATE)
        if last_active == today_key:
            return False

        missed = StatisticsEngine.plan_backfill(last_active, today)
        days = state[const.DATA_DAYS]  # type: ignore[literal-required]
        for key in missed:
            entry = self._economy.ensure_day(state, key)
            if StatisticsEngine.day_has_activity(entry):
                continue
            if not self._economy.accrue_debt(state, key, const.MISSED_DAY_DEBT_XP):
                continue
            if not entry.get(const.DATA_DAY_NOTE):
                entry[const.DATA_DAY_NOTE] = const.DAY_NOTE_MISSED  # type: ignore[literal-required]

        if today_key not in days:
            days[today_key] = db.build_day_entry()
        state[const.DATA_LAST_ACTIVE_DATE] = today_key  # type: ignore[literal-required]
        self._quests.reset_timers(state)

        const.LOGGER.info(
            "Day rollover %s → %s, back-filled %s day(s)",
            last_active,
            today_key,
            len(missed),
        )
        return True

    def check_bedtime_penalty(self, state: AppState, now: datetime) -> bool:
        """Apply the one-time bedtime debt floor for the window just left.

        Returns:
            True when debt was applied
        """
        settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
        if ScheduleEngine.is_within_day_window(settings, now):
            return False
        quest_ids = [
            q[const.DATA_QUEST_ID]  # type: ignore[literal-required]
            for q in state[const.DATA_QUESTS]  # type: ignore[literal-required]
        ]
        if not quest_ids:
            return False

        days = state[const.DATA_DAYS]  # type: ignore[literal-required]
        window_keys = ScheduleEngine.window_day_keys(settings, now)
        window_key = window_keys[0]
        entry = days.get(window_key)
        # A window that opened before tracking began has nothing to judge.
        if entry is None or entry.get(const.DATA_DAY_DEBT_APPLIED):
            return False
        if StatisticsEngine.all_quests_done_across(
            (days.get(key) for key in window_keys), quest_ids
        ):
            return False

        applied = self._economy.accrue_debt(
            state, window_key, const.BEDTIME_DEBT_FLOOR_XP, floor=True
        )
        if applied:
            const.LOGGER.info("Bedtime penalty applied to %s", window_key)
        return applied

    def update_settings(
        self, state: AppState, patch: dict[str, Any] | None
    ) -> ActionResult:
        """Merge a coerced settings patch."""
        current = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
        updated = db.build_settings(patch, current)
        if updated == current:
            return ActionResult.rejected(const.REASON_NO_CHANGE)
        state[const.DATA_SETTINGS] = updated  # type: ignore[literal-required]
        const.LOGGER.debug(
            "Settings updated: %s",
            sorted(k for k in updated if updated.get(k) != current.get(k)),
        )
        return ActionResult.ok()
