"""Integration tests for QuestBoardCoordinator actions, ticks and views.

Every test runs against an in-memory coordinator with a frozen clock
(Wednesday 2026-01-14 08:00 UTC, wake 07:00, bed 23:00) and a seeded RNG.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
import random
from typing import Any

import pytest

from questboard import QuestBoardCoordinator, const

from tests.conftest import NOW, TODAY_KEY

LATE = NOW.replace(hour=23, minute=30)
NEXT_MONDAY = datetime(2026, 1, 19, 8, 0, tzinfo=NOW.tzinfo)

Board = tuple[QuestBoardCoordinator, str]


def _today(board: QuestBoardCoordinator, key: str = TODAY_KEY) -> dict[str, Any]:
    return board.data[const.DATA_DAYS][key]


def _quest(board: QuestBoardCoordinator, quest_id: str) -> dict[str, Any]:
    quest = board.quest_manager.find_quest(board.data, quest_id)
    assert quest is not None
    return quest


def _add_plank(board: QuestBoardCoordinator) -> str:
    return board.add_quest(
        {
            const.DATA_QUEST_NAME: "Plank",
            const.DATA_QUEST_MEASUREMENT_TYPE: const.MEASUREMENT_TIME,
            const.DATA_QUEST_CURRENT_TARGET: 5,
            const.DATA_QUEST_S_TARGET: 20,
        }
    ).payload["quest_id"]


# =============================================================================
# Test: completion ledger
# =============================================================================


class TestToggleQuest:
    """Tests for completing and undoing quests."""

    def test_toggle_round_trip(self, board_with_quest: Board) -> None:
        """Completing credits the award; undoing restores every total."""
        board, quest_id = board_with_quest

        result = board.toggle_quest(quest_id)
        assert result.accepted
        assert result.credited == 60
        assert result.payload["done"] is True
        assert _quest(board, quest_id)[const.DATA_QUEST_XP] == 60
        assert _today(board)[const.DATA_DAY_EARNED_XP] == 60
        assert board.data[const.DATA_TOTAL_XP] == 60
        assert board.data[const.DATA_XP_BY_DAY][TODAY_KEY] == 60

        undo = board.toggle_quest(quest_id)
        assert undo.credited == -60
        assert undo.payload["done"] is False
        assert _quest(board, quest_id)[const.DATA_QUEST_XP] == 0
        assert _today(board)[const.DATA_DAY_EARNED_XP] == 0
        assert board.data[const.DATA_TOTAL_XP] == 0
        assert _today(board)[const.DATA_DAY_COMPLETED][quest_id] == {
            const.DATA_DAY_COMPLETED_DONE: False,
            const.DATA_DAY_COMPLETED_XP: 0,
        }

    def test_debt_repaid_first_and_stays_repaid(self, board_with_quest: Board) -> None:
        """An award pays off debt first; undoing it does not restore the debt."""
        board, quest_id = board_with_quest
        assert board.tick(LATE).payload["penalty"] is True
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 50

        result = board.toggle_quest(quest_id, now=LATE)
        assert result.credited == 10
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 0
        assert _today(board)[const.DATA_DAY_EARNED_XP] == 10

        undo = board.toggle_quest(quest_id, now=LATE)
        assert undo.credited == -10
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 0
        assert board.data[const.DATA_TOTAL_XP] == 0

    def test_blocked_after_bedtime(self, board_with_quest: Board) -> None:
        """With blocking on, toggles outside the window change nothing."""
        board, quest_id = board_with_quest
        board.update_settings({const.DATA_SETTINGS_BLOCK_AFTER_BEDTIME: True})
        before = copy.deepcopy(board.data)

        result = board.toggle_quest(quest_id, now=LATE)
        assert result.accepted is False
        assert result.reason == const.REASON_OUTSIDE_DAY_WINDOW
        assert board.data == before

    def test_unknown_quest(self, coordinator: QuestBoardCoordinator) -> None:
        """A stale id is rejected without touching state."""
        result = coordinator.toggle_quest("q_gone")
        assert result.reason == const.REASON_QUEST_NOT_FOUND

    def test_improvement_moves_baseline(self, board_with_quest: Board) -> None:
        """A raised target earns the bonus once, then becomes the baseline."""
        board, quest_id = board_with_quest
        board.update_quest(quest_id, {const.DATA_QUEST_CURRENT_TARGET: 30})

        # D rank: base 60 + round(60 * 1.5) bonus
        assert board.toggle_quest(quest_id).credited == 150
        assert _quest(board, quest_id)[const.DATA_QUEST_BASELINE] == 30

    def test_complete_quest_is_idempotent(self, board_with_quest: Board) -> None:
        """complete_quest never undoes an existing completion."""
        board, quest_id = board_with_quest
        assert board.complete_quest(quest_id).accepted
        assert board.complete_quest(quest_id).reason == const.REASON_NO_CHANGE
        assert board.data[const.DATA_TOTAL_XP] == 60


# =============================================================================
# Test: live timers
# =============================================================================


class TestTimers:
    """Tests for the idle/active/paused/completed timer of time quests."""

    def test_start_pause_resume_complete(self, coordinator: QuestBoardCoordinator) -> None:
        """Paused time is banked and completion records the total."""
        quest_id = _add_plank(coordinator)

        assert coordinator.start_quest(quest_id).accepted
        assert coordinator.pause_quest(quest_id, now=NOW + timedelta(minutes=3)).accepted
        assert _quest(coordinator, quest_id)[const.DATA_QUEST_ELAPSED_MS] == 180_000
        assert coordinator.resume_quest(quest_id, now=NOW + timedelta(minutes=4)).accepted

        result = coordinator.complete_quest(quest_id, now=NOW + timedelta(minutes=6))
        quest = _quest(coordinator, quest_id)
        assert result.accepted
        assert quest[const.DATA_QUEST_STATUS] == const.TIMER_STATUS_COMPLETED
        assert quest[const.DATA_QUEST_ELAPSED_MS] == 300_000
        assert quest[const.DATA_QUEST_STARTED_AT] is None

    def test_invalid_transitions(self, coordinator: QuestBoardCoordinator) -> None:
        """Only idle timers start and only active timers pause."""
        quest_id = _add_plank(coordinator)
        assert coordinator.pause_quest(quest_id).reason == const.REASON_INVALID_TIMER_STATE
        assert coordinator.resume_quest(quest_id).reason == const.REASON_INVALID_TIMER_STATE
        coordinator.start_quest(quest_id)
        assert coordinator.start_quest(quest_id).reason == const.REASON_INVALID_TIMER_STATE

    def test_grace_exceeded(self, coordinator: QuestBoardCoordinator) -> None:
        """Past target plus grace the completion is refused."""
        quest_id = _add_plank(coordinator)
        coordinator.start_quest(quest_id)

        result = coordinator.complete_quest(quest_id, now=NOW + timedelta(minutes=16))
        assert result.reason == const.REASON_GRACE_EXCEEDED
        assert coordinator.data[const.DATA_TOTAL_XP] == 0

    def test_not_time_quest(self, board_with_quest: Board) -> None:
        """Rep quests have no timer."""
        board, quest_id = board_with_quest
        assert board.start_quest(quest_id).reason == const.REASON_NOT_TIME_QUEST

    def test_rollover_resets_timers(self, coordinator: QuestBoardCoordinator) -> None:
        """A new day puts every timer back to idle."""
        quest_id = _add_plank(coordinator)
        coordinator.start_quest(quest_id)
        coordinator.tick(NOW + timedelta(days=1))
        quest = _quest(coordinator, quest_id)
        assert quest[const.DATA_QUEST_STATUS] == const.TIMER_STATUS_IDLE
        assert quest[const.DATA_QUEST_ELAPSED_MS] == 0


# =============================================================================
# Test: boss
# =============================================================================


class TestBoss:
    """Tests for the weekly boss."""

    def test_boss_round_trip(self, coordinator: QuestBoardCoordinator) -> None:
        """220 XP lands on Monday's boss key and comes off again on undo."""
        result = coordinator.toggle_boss()
        assert result.credited == 220
        assert _today(coordinator, "2026-01-12_boss")[const.DATA_DAY_EARNED_XP] == 220
        assert coordinator.data[const.DATA_TOTAL_XP] == 220
        assert coordinator.data[const.DATA_XP_BY_DAY][TODAY_KEY] == 220
        assert coordinator.boss()["done"] is True

        assert coordinator.toggle_boss().credited == -220
        assert coordinator.data[const.DATA_TOTAL_XP] == 0
        assert coordinator.boss()["done"] is False

    def test_boss_disabled(self, coordinator: QuestBoardCoordinator) -> None:
        """Turning the feature off rejects the toggle."""
        coordinator.update_settings({const.DATA_SETTINGS_WEEKLY_BOSS_ENABLED: False})
        assert coordinator.toggle_boss().reason == const.REASON_FEATURE_DISABLED


# =============================================================================
# Test: tick
# =============================================================================


class TestTick:
    """Tests for rollover, bedtime penalty and idempotence."""

    def test_missed_days_accrue_debt_once(self, coordinator: QuestBoardCoordinator) -> None:
        """Two skipped days get a note and 50 debt each, exactly once."""
        coordinator.data[const.DATA_LAST_ACTIVE_DATE] = "2026-01-11"

        result = coordinator.tick()
        assert result.payload["rolled_over"] is True
        for key in ("2026-01-12", "2026-01-13"):
            entry = _today(coordinator, key)
            assert entry[const.DATA_DAY_XP_DEBT] == 50
            assert entry[const.DATA_DAY_NOTE] == const.DAY_NOTE_MISSED
            assert entry[const.DATA_DAY_DEBT_APPLIED] is True
        assert coordinator.data[const.DATA_LAST_ACTIVE_DATE] == TODAY_KEY
        assert coordinator.progress()["outstandingDebt"] == 100

        assert coordinator.tick().reason == const.REASON_NO_CHANGE
        assert _today(coordinator, "2026-01-12")[const.DATA_DAY_XP_DEBT] == 50

    def test_missed_days_without_debt(self, coordinator: QuestBoardCoordinator) -> None:
        """With debt off, skipped days are left unmarked and cost nothing."""
        coordinator.update_settings({const.DATA_SETTINGS_XP_DEBT_ENABLED: False})
        coordinator.data[const.DATA_LAST_ACTIVE_DATE] = "2026-01-12"
        coordinator.tick()
        entry = _today(coordinator, "2026-01-13")
        assert entry[const.DATA_DAY_NOTE] == ""
        assert entry[const.DATA_DAY_XP_DEBT] == 0
        assert entry[const.DATA_DAY_DEBT_APPLIED] is False

    def test_bedtime_penalty_applies_once(self, board_with_quest: Board) -> None:
        """Leaving the window with open quests floors the debt at 50 once."""
        board, _quest_id = board_with_quest
        assert board.tick(LATE).payload["penalty"] is True
        assert _today(board)[const.DATA_DAY_DEBT_APPLIED] is True
        assert board.tick(LATE + timedelta(minutes=10)).reason == const.REASON_NO_CHANGE
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 50

    def test_no_penalty_when_all_done(self, board_with_quest: Board) -> None:
        """Finishing every quest avoids the penalty."""
        board, quest_id = board_with_quest
        board.toggle_quest(quest_id)
        assert board.tick(LATE).payload["penalty"] is False
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 0

    def test_penalty_after_midnight_hits_previous_day(self, board_with_quest: Board) -> None:
        """Before wake time the window still belongs to yesterday."""
        board, _quest_id = board_with_quest
        result = board.tick(NOW + timedelta(hours=18))
        assert result.payload["rolled_over"] is True
        assert result.payload["penalty"] is True
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 50
        assert _today(board, "2026-01-15")[const.DATA_DAY_XP_DEBT] == 0

    def test_overnight_window_counts_completions_after_midnight(
        self, board_with_quest: Board
    ) -> None:
        """A quest finished after midnight inside a late window is not penalized."""
        board, quest_id = board_with_quest
        board.update_settings(
            {const.DATA_SETTINGS_WAKE_TIME: "18:00", const.DATA_SETTINGS_BED_TIME: "02:00"}
        )
        after_midnight = datetime(2026, 1, 15, 1, 0, tzinfo=NOW.tzinfo)

        assert board.toggle_quest(quest_id, now=after_midnight).accepted
        assert _today(board, "2026-01-15")[const.DATA_DAY_COMPLETED][quest_id]["done"] is True

        result = board.tick(after_midnight + timedelta(minutes=90))
        assert result.payload["penalty"] is False
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 0
        assert _today(board)[const.DATA_DAY_DEBT_APPLIED] is False

    def test_overnight_window_penalizes_open_quests(self, board_with_quest: Board) -> None:
        """Leaving a late window with nothing done charges the day it opened."""
        board, _quest_id = board_with_quest
        board.update_settings(
            {const.DATA_SETTINGS_WAKE_TIME: "18:00", const.DATA_SETTINGS_BED_TIME: "02:00"}
        )
        result = board.tick(datetime(2026, 1, 15, 2, 30, tzinfo=NOW.tzinfo))
        assert result.payload["penalty"] is True
        assert _today(board)[const.DATA_DAY_XP_DEBT] == 50
        assert _today(board, "2026-01-15")[const.DATA_DAY_XP_DEBT] == 0

    def test_no_penalty_for_window_before_first_day(self) -> None:
        """A board first opened before wake time owes nothing for yesterday."""
        early = NOW.replace(hour=6)
        board = QuestBoardCoordinator(rng=random.Random(42), clock=lambda: early)
        board.load(early)
        board.add_quest({const.DATA_QUEST_NAME: "Push-ups", const.DATA_QUEST_CURRENT_TARGET: 20})

        board.tick()
        assert "2026-01-13" not in board.data[const.DATA_DAYS]
        assert board.progress()["outstandingDebt"] == 0


# =============================================================================
# Test: challenges
# =============================================================================


class TestChallenges:
    """Tests for the weekly challenge and mystery box lifecycles."""

    def test_weekly_challenge_completion(self, board_with_quest: Board) -> None:
        """20/100 reps (D) gets a 40 rep target worth round(60 * 2.25)."""
        board, quest_id = board_with_quest
        assert board.tick().payload["challenges"] is True

        weekly = board.data[const.DATA_WEEKLY_CHALLENGE]
        assert weekly[const.DATA_WEEKLY_TASK_ID] == quest_id
        assert weekly[const.DATA_WEEKLY_TARGET] == "40 reps"
        assert weekly[const.DATA_CHALLENGE_XP_REWARD] == 135
        assert board.weekly_challenge()["endsIn"] == "Ends in 4d 23h"

        result = board.complete_weekly_challenge()
        assert result.credited == 135
        assert board.data[const.DATA_TOTAL_XP] == 135
        # The earlier committed snapshot is never mutated in place
        assert weekly[const.DATA_CHALLENGE_STATUS] == const.CHALLENGE_STATUS_ACTIVE
        assert board.data[const.DATA_WEEKLY_CHALLENGE][const.DATA_CHALLENGE_STATUS] == (
            const.CHALLENGE_STATUS_COMPLETED
        )
        assert board.complete_weekly_challenge().reason == const.REASON_NOT_ACTIVE

    def test_no_challenge_before_tick(self, board_with_quest: Board) -> None:
        """Nothing is generated until the first tick."""
        board, _quest_id = board_with_quest
        assert board.complete_weekly_challenge().reason == const.REASON_NO_CHALLENGE
        assert board.mystery_box() is None

    def test_mystery_box_lifecycle(self, board_with_quest: Board) -> None:
        """Reroll once while hidden, reveal once, then claim."""
        board, _quest_id = board_with_quest
        board.tick()
        assert board.mystery_box()["description"] == const.MYSTERY_BOX_DESCRIPTION_HIDDEN
        assert board.mystery_box()["resetsIn"] == "Resets in 23h 0m"
        assert board.complete_mystery_box().reason == const.REASON_NOT_REVEALED

        assert board.reroll_mystery_box().accepted
        assert board.data[const.DATA_MYSTERY_BOX][const.DATA_MYSTERY_REROLL_USED] is True
        assert board.mystery_box()["canReroll"] is False
        assert board.reroll_mystery_box().reason == const.REASON_REROLL_USED

        assert board.reveal_mystery_box().accepted
        assert board.reveal_mystery_box().reason == const.REASON_ALREADY_REVEALED
        assert board.reroll_mystery_box().reason == const.REASON_ALREADY_REVEALED
        box = board.data[const.DATA_MYSTERY_BOX]
        assert board.mystery_box()["description"] == box[const.DATA_MYSTERY_DESCRIPTION_REVEALED]

        result = board.complete_mystery_box()
        assert result.credited == box[const.DATA_CHALLENGE_XP_REWARD]
        assert board.data[const.DATA_TOTAL_XP] == result.credited

    def test_actions_after_expiry(self, board_with_quest: Board) -> None:
        """Once expiresAt passes, claims are refused even before a tick."""
        board, _quest_id = board_with_quest
        board.tick()
        assert board.reveal_mystery_box(now=NOW + timedelta(days=1)).reason == (
            const.REASON_EXPIRED
        )
        assert board.complete_weekly_challenge(now=NEXT_MONDAY).reason == (
            const.REASON_EXPIRED
        )

    def test_new_window_replaces_instances(self, board_with_quest: Board) -> None:
        """A tick in the next window generates fresh instances."""
        board, _quest_id = board_with_quest
        board.tick()
        old_weekly = board.data[const.DATA_WEEKLY_CHALLENGE][const.DATA_CHALLENGE_ID]
        old_box = board.data[const.DATA_MYSTERY_BOX][const.DATA_CHALLENGE_ID]

        board.tick(NEXT_MONDAY)
        assert board.data[const.DATA_WEEKLY_CHALLENGE][const.DATA_CHALLENGE_ID] != old_weekly
        assert board.data[const.DATA_MYSTERY_BOX][const.DATA_CHALLENGE_ID] != old_box
        assert board.weekly_challenge()[const.DATA_CHALLENGE_STATUS] == (
            const.CHALLENGE_STATUS_ACTIVE
        )

    def test_expired_instance_kept_without_quests(self, board_with_quest: Board) -> None:
        """With nothing to pick from, the expired instance stays visible."""
        board, quest_id = board_with_quest
        board.tick()
        board.delete_quest(quest_id)

        board.tick(NEXT_MONDAY)
        assert board.weekly_challenge()[const.DATA_CHALLENGE_STATUS] == (
            const.CHALLENGE_STATUS_EXPIRED
        )
        assert board.weekly_challenge()["endsIn"] is None


# =============================================================================
# Test: CRUD, settings, dispatch, events, views
# =============================================================================


class TestQuestDefinitions:
    """Tests for quest and settings edits."""

    def test_delete_removes_xp_from_total(self, board_with_quest: Board) -> None:
        """Deleting a quest takes its accumulated xp off totalXP."""
        board, quest_id = board_with_quest
        board.toggle_quest(quest_id)

        result = board.delete_quest(quest_id)
        assert result.credited == -60
        assert board.data[const.DATA_QUESTS] == []
        assert board.data[const.DATA_TOTAL_XP] == 0
        assert board.delete_quest(quest_id).reason == const.REASON_QUEST_NOT_FOUND

    def test_update_quest(self, board_with_quest: Board) -> None:
        """Patches keep the id and re-rank the quest."""
        board, quest_id = board_with_quest
        board.update_quest(
            quest_id, {const.DATA_QUEST_ID: "q_hijack", const.DATA_QUEST_CURRENT_TARGET: 50}
        )
        view = board.quest_views()[0]
        assert view[const.DATA_QUEST_ID] == quest_id
        assert view["rank"] == const.RANK_C
        assert board.update_quest("q_missing", {}).reason == const.REASON_QUEST_NOT_FOUND

    def test_update_keeps_earned_xp(self, board_with_quest: Board) -> None:
        """An edit leaves the quest's xp in place, so deleting still refunds it."""
        board, quest_id = board_with_quest
        board.toggle_quest(quest_id)

        assert board.update_quest(quest_id, {const.DATA_QUEST_PRIORITY: "minor"}).accepted
        assert _quest(board, quest_id)[const.DATA_QUEST_XP] == 60
        assert board.delete_quest(quest_id).credited == -60
        assert board.data[const.DATA_TOTAL_XP] == 0

    def test_update_keeps_timer_and_grace(self, coordinator: QuestBoardCoordinator) -> None:
        """Banked timer time and a custom grace survive an edit."""
        quest_id = _add_plank(coordinator)
        coordinator.update_quest(quest_id, {const.DATA_QUEST_GRACE_MINUTES: 3})
        coordinator.start_quest(quest_id)
        coordinator.pause_quest(quest_id, now=NOW + timedelta(minutes=2))

        coordinator.update_quest(quest_id, {const.DATA_QUEST_PRIORITY: "minor"})
        quest = _quest(coordinator, quest_id)
        assert quest[const.DATA_QUEST_GRACE_MINUTES] == 3
        assert quest[const.DATA_QUEST_ELAPSED_MS] == 120_000
        assert quest[const.DATA_QUEST_STATUS] == const.TIMER_STATUS_PAUSED

        coordinator.resume_quest(quest_id, now=NOW + timedelta(minutes=3))
        result = coordinator.complete_quest(quest_id, now=NOW + timedelta(minutes=10))
        assert result.reason == const.REASON_GRACE_EXCEEDED

    def test_update_settings_no_change(self, coordinator: QuestBoardCoordinator) -> None:
        """Re-sending the current values is not a change."""
        assert coordinator.update_settings(
            {const.DATA_SETTINGS_WAKE_TIME: "07:00"}
        ).reason == const.REASON_NO_CHANGE
        assert coordinator.update_settings({const.DATA_SETTINGS_WAKE_TIME: "6:30"}).accepted
        assert coordinator.data[const.DATA_SETTINGS][const.DATA_SETTINGS_WAKE_TIME] == "06:30"


class TestDispatchAndEvents:
    """Tests for the action router and subscriber notifications."""

    def test_dispatch(self, board_with_quest: Board) -> None:
        """Actions are reachable by name; unknown names raise."""
        board, quest_id = board_with_quest
        assert board.dispatch("toggle_quest", quest_id=quest_id).credited == 60
        with pytest.raises(ValueError):
            board.dispatch("explode")

    def test_events_only_after_commit(self, board_with_quest: Board) -> None:
        """Subscribers hear about accepted actions and nothing else."""
        board, quest_id = board_with_quest
        credited: list[dict[str, Any]] = []
        changed: list[dict[str, Any]] = []
        board.subscribe(const.SIGNAL_SUFFIX_XP_CREDITED, credited.append)
        unsubscribe = board.subscribe(const.SIGNAL_SUFFIX_STATE_CHANGED, changed.append)

        board.toggle_quest("q_missing")
        assert credited == [] and changed == []

        board.toggle_quest(quest_id)
        assert credited[0]["credited"] == 60
        assert changed == [{"action": "toggle_quest", "credited": 60}]

        unsubscribe()
        board.toggle_quest(quest_id)
        assert len(changed) == 1
        assert len(credited) == 2


class TestViews:
    """Tests for derived read models."""

    def test_quest_view(self, board_with_quest: Board) -> None:
        """Rank, cap and award preview for a fresh D-rank quest."""
        board, quest_id = board_with_quest
        board.toggle_quest(quest_id)
        view = board.quest_views()[0]
        assert view["rank"] == const.RANK_D
        assert view["nextRank"] == const.RANK_C
        assert view["xpCap"] == 25_000
        assert view["xpToCap"] == 24_940
        assert view["nextAwardPreview"] == 60
        assert view["doneToday"] is True

    def test_progress_and_window(self, board_with_quest: Board) -> None:
        """Streak counts today once a quest is done."""
        board, quest_id = board_with_quest
        board.toggle_quest(quest_id)
        progress = board.progress()
        assert progress["streakDays"] == 1
        assert progress["streakBonusPct"] == 1
        assert progress["overallRank"] == const.RANK_D
        assert progress["overallProgressPct"] == 20
        assert board.day_window()["minutesLeft"] == 900

    def test_quest_progression(self, board_with_quest: Board) -> None:
        """The growth plan starts from the current target."""
        board, quest_id = board_with_quest
        plan = board.quest_progression(quest_id)
        assert plan is not None
        assert plan["startTarget"] == 20
        assert plan["ladder"]["S"] == 100
        assert board.quest_progression("q_missing") is None

    def test_stats(self, board_with_quest: Board) -> None:
        """Today's completion shows in the summary."""
        board, quest_id = board_with_quest
        board.toggle_quest(quest_id)
        stats = board.stats()
        assert stats["questDone"] == {quest_id: 1}
        assert stats["activeDays"] == 1
