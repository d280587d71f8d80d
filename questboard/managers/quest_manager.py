"""Quest Manager - Completion ledger, live timers and quest CRUD.

This manager handles every quest-level action on a draft AppState:
- toggle_quest / toggle_boss (debt-aware crediting via EconomyManager)
- Live timer transitions for time quests (start, pause, resume, complete)
- add_quest / update_quest / delete_quest

Award amounts always come from the quest's pre-toggle rank. Undoing a
completion removes exactly the XP that was credited for it; debt repaid by
that completion stays repaid.

ARCHITECTURE:
- QuestManager = STATEFUL quest workflow on a draft state
- EconomyEngine / ScheduleEngine = Pure rules (STATELESS)
- EconomyManager = totals and debt writes
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.economy_engine import EconomyEngine
from ..engines.schedule_engine import ScheduleEngine
from ..utils import dt_utils
from ..utils.math_utils import to_number
from .base_manager import ActionResult, BaseManager

if TYPE_CHECKING:
    from ..coordinator import QuestBoardCoordinator
    from ..type_defs import AppState, QuestData
    from .economy_manager import EconomyManager


class QuestManager(BaseManager):
    """Manager for quest completion, timers and quest definitions."""

    def __init__(
        self, coordinator: QuestBoardCoordinator, economy: EconomyManager
    ) -> None:
        """Initialize the QuestManager.

        Args:
            coordinator: The Quest Board coordinator
            economy: Manager that owns XP and debt writes
        """
        super().__init__(coordinator)
        self._economy = economy

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @staticmethod
    def find_quest(state: AppState, quest_id: str) -> QuestData | None:
        """Return the quest with quest_id, or None."""
        for quest in state[const.DATA_QUESTS]:  # type: ignore[literal-required]
            if quest.get(const.DATA_QUEST_ID) == quest_id:
                return quest
        return None

    @staticmethod
    def _blocked_by_bedtime(state: AppState, now: datetime) -> bool:
        settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
        if not settings.get(const.DATA_SETTINGS_BLOCK_AFTER_BEDTIME):
            return False
        return not ScheduleEngine.is_within_day_window(settings, now)

    # ------------------------------------------------------------------
    # Completion ledger
    # ------------------------------------------------------------------

    def toggle_quest(
        self, state: AppState, quest_id: str, now: datetime
    ) -> ActionResult:
        """Flip today's completion of a quest and credit or undo its XP."""
        if self._blocked_by_bedtime(state, now):
            const.LOGGER.debug("Toggle of %s blocked outside the day window", quest_id)
            return ActionResult.rejected(const.REASON_OUTSIDE_DAY_WINDOW)

        quest = self.find_quest(state, quest_id)
        if quest is None:
            const.LOGGER.debug("Toggle ignored, quest %s no longer exists", quest_id)
            return ActionResult.rejected(const.REASON_QUEST_NOT_FOUND)

        today = dt_utils.date_key(now)
        entry = self._economy.ensure_day(state, today)
        completed = entry[const.DATA_DAY_COMPLETED]  # type: ignore[literal-required]
        record = completed.get(quest_id) or {}
        was_done = bool(record.get(const.DATA_DAY_COMPLETED_DONE))

        if was_done:
            delta = -int(to_number(record.get(const.DATA_DAY_COMPLETED_XP)))
        else:
            delta = EconomyEngine.calculate_award(quest)

        credited = self._economy.credit(state, delta, today, source="quest")
        completed[quest_id] = {
            const.DATA_DAY_COMPLETED_DONE: not was_done,
            const.DATA_DAY_COMPLETED_XP: 0 if was_done else max(0, credited),
        }

        quest[const.DATA_QUEST_XP] = EconomyEngine.clamp_xp_to_cap(  # type: ignore[literal-required]
            quest, to_number(quest.get(const.DATA_QUEST_XP)) + credited
        )
        if not was_done:
            current = to_number(quest.get(const.DATA_QUEST_CURRENT_TARGET))
            baseline = to_number(quest.get(const.DATA_QUEST_BASELINE), current)
            if current > baseline:
                quest[const.DATA_QUEST_BASELINE] = quest[const.DATA_QUEST_CURRENT_TARGET]  # type: ignore[literal-required]

        const.LOGGER.debug(
            "Quest %s %s on %s: delta %s, credited %s",
            quest_id,
            "undone" if was_done else "completed",
            today,
            delta,
            credited,
        )
        self.emit(
            const.SIGNAL_SUFFIX_QUEST_TOGGLED,
            quest_id=quest_id,
            done=not was_done,
            credited=credited,
        )
        return ActionResult.ok(credited, done=not was_done)

    def toggle_boss(self, state: AppState, now: datetime) -> ActionResult:
        """Flip this week's boss completion (fixed reward, own day key)."""
        settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
        if not settings.get(const.DATA_SETTINGS_WEEKLY_BOSS_ENABLED):
            return ActionResult.rejected(const.REASON_FEATURE_DISABLED)
        if self._blocked_by_bedtime(state, now):
            return ActionResult.rejected(const.REASON_OUTSIDE_DAY_WINDOW)

        boss_key = ScheduleEngine.boss_key(now)
        today = dt_utils.date_key(now)
        entry = self._economy.ensure_day(state, boss_key)
        completed = entry[const.DATA_DAY_COMPLETED]  # type: ignore[literal-required]
        record = completed.get(const.BOSS_COMPLETION_ID) or {}
        was_done = bool(record.get(const.DATA_DAY_COMPLETED_DONE))

        delta = (
            -int(to_number(record.get(const.DATA_DAY_COMPLETED_XP)))
            if was_done
            else const.BOSS_BASE_XP
        )
        credited = self._economy.credit(
            state, delta, today, earn_key=boss_key, source="boss"
        )
        completed[const.BOSS_COMPLETION_ID] = {
            const.DATA_DAY_COMPLETED_DONE: not was_done,
            const.DATA_DAY_COMPLETED_XP: 0 if was_done else max(0, credited),
        }
        const.LOGGER.debug("Boss %s toggled, credited %s", boss_key, credited)
        return ActionResult.ok(credited, done=not was_done)

    # ------------------------------------------------------------------
    # Live timers
    # ------------------------------------------------------------------

    def _timer_quest(
        self, state: AppState, quest_id: str
    ) -> tuple[QuestData | None, ActionResult | None]:
        quest = self.find_quest(state, quest_id)
        if quest is None:
            return None, ActionResult.rejected(const.REASON_QUEST_NOT_FOUND)
        if quest.get(const.DATA_QUEST_MEASUREMENT_TYPE) != const.MEASUREMENT_TIME:
            return None, ActionResult.rejected(const.REASON_NOT_TIME_QUEST)
        return quest, None

    def start_quest(self, state: AppState, quest_id: str, now: datetime) -> ActionResult:
        """idle → active."""
        quest, error = self._timer_quest(state, quest_id)
        if quest is None:
            return error  # type: ignore[return-value]
        if quest.get(const.DATA_QUEST_STATUS) != const.TIMER_STATUS_IDLE:
            return ActionResult.rejected(const.REASON_INVALID_TIMER_STATE)
        quest[const.DATA_QUEST_STATUS] = const.TIMER_STATUS_ACTIVE  # type: ignore[literal-required]
        quest[const.DATA_QUEST_STARTED_AT] = dt_utils.dt_to_iso(now)  # type: ignore[literal-required]
        quest[const.DATA_QUEST_ELAPSED_MS] = 0  # type: ignore[literal-required]
        return ActionResult.ok()

    def pause_quest(self, state: AppState, quest_id: str, now: datetime) -> ActionResult:
        """active → paused, banking the running segment."""
        quest, error = self._timer_quest(state, quest_id)
        if quest is None:
            return error  # type: ignore[return-value]
        if quest.get(const.DATA_QUEST_STATUS) != const.TIMER_STATUS_ACTIVE:
            return ActionResult.rejected(const.REASON_INVALID_TIMER_STATE)
        quest[const.DATA_QUEST_ELAPSED_MS] = ScheduleEngine.timer_elapsed_ms(quest, now)  # type: ignore[literal-required]
        quest[const.DATA_QUEST_STATUS] = const.TIMER_STATUS_PAUSED  # type: ignore[literal-required]
        quest[const.DATA_QUEST_STARTED_AT] = None  # type: ignore[literal-required]
        return ActionResult.ok()

    def resume_quest(self, state: AppState, quest_id: str, now: datetime) -> ActionResult:
        """paused → active."""
        quest, error = self._timer_quest(state, quest_id)
        if quest is None:
            return error  # type: ignore[return-value]
        if quest.get(const.DATA_QUEST_STATUS) != const.TIMER_STATUS_PAUSED:
            return ActionResult.rejected(const.REASON_INVALID_TIMER_STATE)
        quest[const.DATA_QUEST_STATUS] = const.TIMER_STATUS_ACTIVE  # type: ignore[literal-required]
        quest[const.DATA_QUEST_STARTED_AT] = dt_utils.dt_to_iso(now)  # type: ignore[literal-required]
        return ActionResult.ok()

    def complete_quest(
        self, state: AppState, quest_id: str, now: datetime
    ) -> ActionResult:
        """Timer-aware completion.

        Time quests are refused once the elapsed time passes the target plus
        the grace period. Completing an already completed quest is a no-op.
        """
        quest = self.find_quest(state, quest_id)
        if quest is None:
            return ActionResult.rejected(const.REASON_QUEST_NOT_FOUND)

        is_time = quest.get(const.DATA_QUEST_MEASUREMENT_TYPE) == const.MEASUREMENT_TIME
        elapsed_ms = ScheduleEngine.timer_elapsed_ms(quest, now)
        if is_time and quest.get(const.DATA_QUEST_STATUS) != const.TIMER_STATUS_IDLE:
            target_min = to_number(quest.get(const.DATA_QUEST_TARGET_MINUTES)) or to_number(
                quest.get(const.DATA_QUEST_CURRENT_TARGET)
            )
            grace_min = to_number(
                quest.get(const.DATA_QUEST_GRACE_MINUTES), const.DEFAULT_GRACE_MINUTES
            )
            if elapsed_ms > (target_min + grace_min) * 60_000:
                const.LOGGER.debug(
                    "Quest %s completion refused: %sms past %s+%s min",
                    quest_id,
                    elapsed_ms,
                    target_min,
                    grace_min,
                )
                return ActionResult.rejected(const.REASON_GRACE_EXCEEDED)

        entry = (state[const.DATA_DAYS] or {}).get(dt_utils.date_key(now)) or {}  # type: ignore[literal-required]
        record = (entry.get(const.DATA_DAY_COMPLETED) or {}).get(quest_id) or {}
        if record.get(const.DATA_DAY_COMPLETED_DONE):
            return ActionResult.rejected(const.REASON_NO_CHANGE)

        result = self.toggle_quest(state, quest_id, now)
        if result.accepted and is_time:
            quest[const.DATA_QUEST_ELAPSED_MS] = elapsed_ms  # type: ignore[literal-required]
            quest[const.DATA_QUEST_STATUS] = const.TIMER_STATUS_COMPLETED  # type: ignore[literal-required]
            quest[const.DATA_QUEST_STARTED_AT] = None  # type: ignore[literal-required]
        return result

    @staticmethod
    def reset_timers(state: AppState) -> None:
        """Return every quest timer to idle (used on day rollover)."""
        for quest in state[const.DATA_QUESTS]:  # type: ignore[literal-required]
            quest[const.DATA_QUEST_STATUS] = const.TIMER_STATUS_IDLE
            quest[const.DATA_QUEST_STARTED_AT] = None
            quest[const.DATA_QUEST_ELAPSED_MS] = 0

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def add_quest(
        self, state: AppState, data: dict[str, Any] | None, now: datetime
    ) -> ActionResult:
        """Append a new quest built from data (a blank quest when None)."""
        quest = db.build_quest(data or {}, now=now)
        state[const.DATA_QUESTS].append(quest)  # type: ignore[literal-required]
        const.LOGGER.info(
            "Added quest '%s' (%s)",
            quest[const.DATA_QUEST_NAME],  # type: ignore[literal-required]
            quest[const.DATA_QUEST_ID],  # type: ignore[literal-required]
        )
        return ActionResult.ok(quest_id=quest[const.DATA_QUEST_ID])  # type: ignore[literal-required]

    def update_quest(
        self, state: AppState, quest_id: str, patch: dict[str, Any] | None
    ) -> ActionResult:
        """Merge a coerced patch into a quest."""
        quests = state[const.DATA_QUESTS]  # type: ignore[literal-required]
        for idx, quest in enumerate(quests):
            if quest.get(const.DATA_QUEST_ID) == quest_id:
                clean_patch = {
                    k: v for k, v in (patch or {}).items() if k != const.DATA_QUEST_ID
                }
                quests[idx] = db.build_quest(clean_patch, existing=quest)
                const.LOGGER.debug("Updated quest %s: %s", quest_id, list(clean_patch))
                return ActionResult.ok(quest_id=quest_id)
        return ActionResult.rejected(const.REASON_QUEST_NOT_FOUND)

    def delete_quest(self, state: AppState, quest_id: str) -> ActionResult:
        """Remove a quest and take its accumulated xp off totalXP."""
        quest = self.find_quest(state, quest_id)
        if quest is None:
            return ActionResult.rejected(const.REASON_QUEST_NOT_FOUND)
        xp = int(to_number(quest.get(const.DATA_QUEST_XP)))
        state[const.DATA_QUESTS].remove(quest)  # type: ignore[literal-required]
        total = int(to_number(state.get(const.DATA_TOTAL_XP)))
        state[const.DATA_TOTAL_XP] = max(0, total - xp)  # type: ignore[literal-required]
        const.LOGGER.info("Deleted quest %s (-%s XP)", quest_id, xp)
        return ActionResult.ok(-xp, quest_id=quest_id)
