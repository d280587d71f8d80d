# File: coordinator.py
"""Coordinator for Quest Board.

Owns the aggregate AppState, dispatches user actions to the managers,
persists accepted transitions and fans out events to subscribers.

Every action runs against a deep copy of the current state. Only an
accepted action replaces the state, is written through to the store and
releases the events its managers emitted; a rejected action leaves the state
and the store untouched.
"""

# pylint: disable=too-many-public-methods

from __future__ import annotations

from collections.abc import Callable
import copy
from datetime import datetime
import random
from typing import TYPE_CHECKING, Any

from . import const, data_builders as db
from .engines.progression_engine import ProgressionEngine
from .helpers import view_helpers as vh
from .managers import (
    ActionResult,
    ChallengeManager,
    EconomyManager,
    QuestManager,
    SystemManager,
)
from .migration import MigrationError, migrate
from .utils import dt_utils
from .utils.math_utils import to_number

if TYPE_CHECKING:
    from .store import QuestBoardStore
    from .type_defs import AppState, QuestProgression, StatsSummary

EventCallback = Callable[[dict[str, Any]], Any]

# Actions reachable through dispatch()
ACTIONS = (
    "toggle_quest",
    "start_quest",
    "pause_quest",
    "resume_quest",
    "complete_quest",
    "toggle_boss",
    "add_quest",
    "update_quest",
    "delete_quest",
    "update_settings",
    "reveal_mystery_box",
    "reroll_mystery_box",
    "complete_mystery_box",
    "complete_weekly_challenge",
    "tick",
)


class QuestBoardCoordinator:
    """Aggregate root for one player's Quest Board.

    Args:
        store: Persistence backend; None keeps everything in memory
        rng: Random source for challenge picks (seed it for reproducibility)
        clock: Returns "now" when an action is called without one
    """

    def __init__(
        self,
        store: QuestBoardStore | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the coordinator with a fresh default state."""
        self.store = store
        self.rng = rng or random.Random()
        self._clock = clock or dt_utils.dt_now_local
        self._data: AppState = db.build_default_app_state(
            dt_utils.date_key(self._now())
        )

        self._pending_events: list[tuple[str, dict[str, Any]]] = []
        self._subscribers: dict[str, list[EventCallback]] = {}

        self.economy_manager = EconomyManager(self)
        self.quest_manager = QuestManager(self, self.economy_manager)
        self.system_manager = SystemManager(
            self, self.economy_manager, self.quest_manager
        )
        self.challenge_manager = ChallengeManager(self, self.economy_manager)

    # -------------------------------------------------------------------------------------
    # State & persistence
    # -------------------------------------------------------------------------------------

    @property
    def data(self) -> AppState:
        """Current committed state (treat as read-only)."""
        return self._data

    def _now(self, now: datetime | None = None) -> datetime:
        return dt_utils.as_local(now if now is not None else self._clock())

    def load(self, now: datetime | None = None) -> AppState:
        """Load, migrate and coerce the stored snapshot.

        Missing, corrupt or unmigratable snapshots load as the default state.
        """
        today_key = dt_utils.date_key(self._now(now))
        raw = self.store.initialize(today_key) if self.store is not None else None
        if not raw:
            self._data = db.build_default_app_state(today_key)
            const.LOGGER.info("Starting with a fresh Quest Board")
            return self._data

        try:
            snapshot = migrate(raw)
        except MigrationError as err:
            const.LOGGER.error("%s; starting with a fresh Quest Board", err)
            self._data = db.build_default_app_state(today_key)
            return self._data

        self._data = db.normalize_app_state(snapshot, today_key)
        const.LOGGER.info(
            "Loaded Quest Board: %s quests, %s XP",
            len(self._data[const.DATA_QUESTS]),  # type: ignore[literal-required]
            self._data[const.DATA_TOTAL_XP],  # type: ignore[literal-required]
        )
        return self._data

    def _persist(self) -> None:
        if self.store is None:
            return
        self.store.set_data(self._data)  # type: ignore[arg-type]
        self.store.save()

    # -------------------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------------------

    def queue_event(self, suffix: str, payload: dict[str, Any]) -> None:
        """Hold an event until the running action commits."""
        self._pending_events.append((suffix, payload))

    def subscribe(self, suffix: str, callback: EventCallback) -> Callable[[], None]:
        """Call callback with the payload of every committed suffix event.

        Returns:
            A function that removes the subscription
        """
        callbacks = self._subscribers.setdefault(suffix, [])
        callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _flush_events(self) -> None:
        events, self._pending_events = self._pending_events, []
        for suffix, payload in events:
            for callback in list(self._subscribers.get(suffix, ())):
                callback(payload)

    # -------------------------------------------------------------------------------------
    # Transition runner
    # -------------------------------------------------------------------------------------

    def _apply(
        self, action: str, handler: Callable[[AppState], ActionResult]
    ) -> ActionResult:
        """Run handler on a draft and commit it only when accepted."""
        draft: AppState = copy.deepcopy(self._data)
        self._pending_events = []
        result = handler(draft)
        if not result.accepted:
            self._pending_events = []
            const.LOGGER.debug("Action %s rejected: %s", action, result.reason)
            return result

        self._data = draft
        self._persist()
        self.queue_event(
            const.SIGNAL_SUFFIX_STATE_CHANGED,
            {"action": action, "credited": result.credited},
        )
        self._flush_events()
        return result

    def dispatch(self, action: str, **kwargs: Any) -> ActionResult:
        """Run an action by name.

        Raises:
            ValueError: If action is not one of ACTIONS
        """
        if action not in ACTIONS:
            raise ValueError(f"Unknown Quest Board action: {action}")
        return getattr(self, action)(**kwargs)

    # -------------------------------------------------------------------------------------
    # Quest actions
    # -------------------------------------------------------------------------------------

    def toggle_quest(self, quest_id: str, now: datetime | None = None) -> ActionResult:
        """Complete or undo a quest for today."""
        at = self._now(now)
        return self._apply(
            "toggle_quest",
            lambda s: self.quest_manager.toggle_quest(s, quest_id, at),
        )

    def start_quest(self, quest_id: str, now: datetime | None = None) -> ActionResult:
        """Start the live timer of a time quest."""
        at = self._now(now)
        return self._apply(
            "start_quest", lambda s: self.quest_manager.start_quest(s, quest_id, at)
        )

    def pause_quest(self, quest_id: str, now: datetime | None = None) -> ActionResult:
        """Pause a running timer."""
        at = self._now(now)
        return self._apply(
            "pause_quest", lambda s: self.quest_manager.pause_quest(s, quest_id, at)
        )

    def resume_quest(self, quest_id: str, now: datetime | None = None) -> ActionResult:
        """Resume a paused timer."""
        at = self._now(now)
        return self._apply(
            "resume_quest", lambda s: self.quest_manager.resume_quest(s, quest_id, at)
        )

    def complete_quest(
        self, quest_id: str, now: datetime | None = None
    ) -> ActionResult:
        """Timer-aware completion (grace period enforced for time quests)."""
        at = self._now(now)
        return self._apply(
            "complete_quest",
            lambda s: self.quest_manager.complete_quest(s, quest_id, at),
        )

    def toggle_boss(self, now: datetime | None = None) -> ActionResult:
        """Complete or undo this week's boss."""
        at = self._now(now)
        return self._apply(
            "toggle_boss", lambda s: self.quest_manager.toggle_boss(s, at)
        )

    def add_quest(
        self, data: dict[str, Any] | None = None, now: datetime | None = None
    ) -> ActionResult:
        """Create a quest; the new id is in result.payload["quest_id"]."""
        at = self._now(now)
        return self._apply(
            "add_quest", lambda s: self.quest_manager.add_quest(s, data, at)
        )

    def update_quest(self, quest_id: str, patch: dict[str, Any]) -> ActionResult:
        """Patch a quest definition."""
        return self._apply(
            "update_quest",
            lambda s: self.quest_manager.update_quest(s, quest_id, patch),
        )

    def delete_quest(self, quest_id: str) -> ActionResult:
        """Remove a quest and its accumulated XP from the total."""
        return self._apply(
            "delete_quest", lambda s: self.quest_manager.delete_quest(s, quest_id)
        )

    def update_settings(self, patch: dict[str, Any]) -> ActionResult:
        """Patch the settings block."""
        return self._apply(
            "update_settings", lambda s: self.system_manager.update_settings(s, patch)
        )

    # -------------------------------------------------------------------------------------
    # Challenge actions
    # -------------------------------------------------------------------------------------

    def complete_weekly_challenge(self, now: datetime | None = None) -> ActionResult:
        """Claim the weekly challenge reward."""
        at = self._now(now)
        return self._apply(
            "complete_weekly_challenge",
            lambda s: self.challenge_manager.complete_weekly_challenge(s, at),
        )

    def reveal_mystery_box(self, now: datetime | None = None) -> ActionResult:
        """Reveal today's twist."""
        at = self._now(now)
        return self._apply(
            "reveal_mystery_box",
            lambda s: self.challenge_manager.reveal_mystery_box(s, at),
        )

    def reroll_mystery_box(self, now: datetime | None = None) -> ActionResult:
        """Swap the hidden twist once."""
        at = self._now(now)
        return self._apply(
            "reroll_mystery_box",
            lambda s: self.challenge_manager.reroll_mystery_box(s, at, self.rng),
        )

    def complete_mystery_box(self, now: datetime | None = None) -> ActionResult:
        """Claim the revealed twist's reward."""
        at = self._now(now)
        return self._apply(
            "complete_mystery_box",
            lambda s: self.challenge_manager.complete_mystery_box(s, at),
        )

    # -------------------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------------------

    def tick(self, now: datetime | None = None) -> ActionResult:
        """Day rollover, bedtime check and challenge refresh for now.

        Rejected with REASON_NO_CHANGE when nothing needed doing, so an idle
        tick never rewrites the store.
        """
        at = self._now(now)

        def run(state: AppState) -> ActionResult:
            rolled = self.system_manager.process_day_rollover(state, at)
            penalized = self.system_manager.check_bedtime_penalty(state, at)
            refreshed = self.challenge_manager.refresh(state, at, self.rng)
            if rolled or penalized or refreshed:
                return ActionResult.ok(
                    rolled_over=rolled, penalty=penalized, challenges=refreshed
                )
            return ActionResult.rejected(const.REASON_NO_CHANGE)

        return self._apply("tick", run)

    # -------------------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------------------

    def quest_views(self, now: datetime | None = None) -> list[dict[str, Any]]:
        """Per-quest rank, cap, award preview and timer values."""
        return vh.quest_views(self._data, self._now(now))

    def quest_progression(self, quest_id: str) -> QuestProgression | None:
        """Ladder and growth plan toward a quest's S target."""
        quest = self.quest_manager.find_quest(self._data, quest_id)
        if quest is None:
            return None
        return ProgressionEngine.build_quest_progression(
            to_number(quest.get(const.DATA_QUEST_S_TARGET), 1),
            to_number(quest.get(const.DATA_QUEST_CURRENT_TARGET), 1),
        )

    def day_window(self, now: datetime | None = None) -> dict[str, Any]:
        """Position of now inside the wake-to-bed window."""
        return vh.day_window_view(self._data, self._now(now))

    def progress(self, now: datetime | None = None) -> dict[str, Any]:
        """Streak, overall rank and XP totals."""
        return vh.progress_summary(self._data, self._now(now))

    def weekly_challenge(self, now: datetime | None = None) -> dict[str, Any] | None:
        """Weekly challenge card."""
        return vh.weekly_challenge_view(self._data, self._now(now))

    def mystery_box(self, now: datetime | None = None) -> dict[str, Any] | None:
        """Mystery box card."""
        return vh.mystery_box_view(self._data, self._now(now))

    def boss(self, now: datetime | None = None) -> dict[str, Any]:
        """Weekly boss slot."""
        return vh.boss_view(self._data, self._now(now))

    def stats(self, now: datetime | None = None) -> StatsSummary:
        """Recent-history summary."""
        return vh.stats_view(self._data, self._now(now))
