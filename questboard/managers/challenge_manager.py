"""Challenge Manager - Weekly challenge and mystery box state machines.

Weekly challenge:
    active → completed   (complete_weekly_challenge, before expiresAt)
    active → expired     (refresh, once now passes expiresAt)

Mystery box:
    hidden → revealed    (reveal_mystery_box, once)
    hidden → hidden'     (reroll_mystery_box, once, regenerates the pick)
    revealed → completed (complete_mystery_box, before expiresAt)
    active → expired     (refresh, once now passes expiresAt)

A new instance is generated whenever the stored one belongs to an older
window (or none exists). Rewards go through EconomyManager.credit so they
repay debt first.
"""

from __future__ import annotations

from datetime import datetime
import random
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.challenge_engine import ChallengeEngine
from ..engines.schedule_engine import ScheduleEngine
from ..utils import dt_utils
from ..utils.math_utils import to_number
from .base_manager import ActionResult, BaseManager

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..coordinator import QuestBoardCoordinator
    from ..type_defs import AppState
    from .economy_manager import EconomyManager

    WindowFn = Callable[[datetime, Any], tuple[datetime, datetime]]


class ChallengeManager(BaseManager):
    """Generation, expiry and completion of both challenge kinds."""

    def __init__(
        self, coordinator: QuestBoardCoordinator, economy: EconomyManager
    ) -> None:
        """Initialize the ChallengeManager."""
        super().__init__(coordinator)
        self._economy = economy

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_overdue(instance: dict[str, Any], now: datetime) -> bool:
        expires = dt_utils.dt_parse(instance.get(const.DATA_CHALLENGE_EXPIRES_AT))
        return expires is not None and now >= expires

    @staticmethod
    def _belongs_to_window(instance: dict[str, Any], start: datetime, end: datetime) -> bool:
        created = dt_utils.dt_parse(instance.get(const.DATA_CHALLENGE_CREATED_AT))
        return created is not None and start <= created < end

    def _refresh_one(
        self,
        state: AppState,
        key: str,
        window_fn: WindowFn,
        build: Callable[..., Any],
        now: datetime,
        rng: random.Random,
    ) -> bool:
        changed = False
        instance = state.get(key)
        if (
            instance
            and instance.get(const.DATA_CHALLENGE_STATUS) == const.CHALLENGE_STATUS_ACTIVE
            and self._is_overdue(instance, now)
        ):
            instance[const.DATA_CHALLENGE_STATUS] = const.CHALLENGE_STATUS_EXPIRED
            const.LOGGER.debug("%s %s expired", key, instance.get(const.DATA_CHALLENGE_ID))
            changed = True

        settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
        start, end = window_fn(now, settings.get(const.DATA_SETTINGS_WAKE_TIME))
        if instance and self._belongs_to_window(instance, start, end):
            return changed

        fresh = build(state[const.DATA_QUESTS], settings, start, end, rng)  # type: ignore[literal-required]
        if fresh is None:
            # Nothing to pick from; keep whatever (expired) instance is stored
            return changed
        state[key] = fresh  # type: ignore[literal-required]
        const.LOGGER.info(
            "Generated %s %s for quest %s",
            key,
            fresh[const.DATA_CHALLENGE_ID],
            fresh.get(const.DATA_WEEKLY_TASK_ID) or fresh.get(const.DATA_MYSTERY_BASE_TASK_ID),
        )
        self.emit(
            const.SIGNAL_SUFFIX_CHALLENGE_GENERATED,
            kind=key,
            challenge_id=fresh[const.DATA_CHALLENGE_ID],
        )
        return True

    def refresh(self, state: AppState, now: datetime, rng: random.Random) -> bool:
        """Expire overdue instances and generate for new windows.

        Returns:
            True when either instance changed
        """
        weekly = self._refresh_one(
            state,
            const.DATA_WEEKLY_CHALLENGE,
            ScheduleEngine.weekly_window,
            ChallengeEngine.build_weekly_challenge,
            now,
            rng,
        )
        mystery = self._refresh_one(
            state,
            const.DATA_MYSTERY_BOX,
            ScheduleEngine.daily_window,
            ChallengeEngine.build_mystery_box,
            now,
            rng,
        )
        return weekly or mystery

    def _check_active(
        self, instance: dict[str, Any] | None, now: datetime
    ) -> str | None:
        """Reason code when instance cannot be acted on, else None."""
        if not instance:
            return const.REASON_NO_CHALLENGE
        if instance.get(const.DATA_CHALLENGE_STATUS) != const.CHALLENGE_STATUS_ACTIVE:
            return const.REASON_NOT_ACTIVE
        if self._is_overdue(instance, now):
            return const.REASON_EXPIRED
        return None

    def _complete(
        self, state: AppState, instance: dict[str, Any], now: datetime, source: str
    ) -> ActionResult:
        reward = int(to_number(instance.get(const.DATA_CHALLENGE_XP_REWARD)))
        credited = self._economy.credit(
            state, reward, dt_utils.date_key(now), source=source
        )
        instance[const.DATA_CHALLENGE_STATUS] = const.CHALLENGE_STATUS_COMPLETED
        instance[const.DATA_CHALLENGE_COMPLETED_AT] = dt_utils.dt_to_iso(now)
        self.emit(
            const.SIGNAL_SUFFIX_CHALLENGE_COMPLETED,
            kind=source,
            challenge_id=instance.get(const.DATA_CHALLENGE_ID),
            credited=credited,
        )
        return ActionResult.ok(credited, challenge_id=instance.get(const.DATA_CHALLENGE_ID))

    # ------------------------------------------------------------------
    # Weekly challenge
    # ------------------------------------------------------------------

    def complete_weekly_challenge(self, state: AppState, now: datetime) -> ActionResult:
        """active → completed, crediting the reward."""
        instance = state.get(const.DATA_WEEKLY_CHALLENGE)
        reason = self._check_active(instance, now)
        if reason is not None:
            return ActionResult.rejected(reason)
        return self._complete(state, instance, now, "weekly_challenge")  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Mystery box
    # ------------------------------------------------------------------

    def reveal_mystery_box(self, state: AppState, now: datetime) -> ActionResult:
        """hidden → revealed."""
        box = state.get(const.DATA_MYSTERY_BOX)
        reason = self._check_active(box, now)
        if reason is not None:
            return ActionResult.rejected(reason)
        if box.get(const.DATA_MYSTERY_IS_REVEALED):  # type: ignore[union-attr]
            return ActionResult.rejected(const.REASON_ALREADY_REVEALED)
        box[const.DATA_MYSTERY_IS_REVEALED] = True  # type: ignore[index]
        return ActionResult.ok(challenge_id=box.get(const.DATA_CHALLENGE_ID))  # type: ignore[union-attr]

    def reroll_mystery_box(
        self, state: AppState, now: datetime, rng: random.Random
    ) -> ActionResult:
        """Regenerate the hidden pick once for the current window."""
        box = state.get(const.DATA_MYSTERY_BOX)
        reason = self._check_active(box, now)
        if reason is not None:
            return ActionResult.rejected(reason)
        if box.get(const.DATA_MYSTERY_IS_REVEALED):  # type: ignore[union-attr]
            return ActionResult.rejected(const.REASON_ALREADY_REVEALED)
        if box.get(const.DATA_MYSTERY_REROLL_USED):  # type: ignore[union-attr]
            return ActionResult.rejected(const.REASON_REROLL_USED)

        settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
        start, end = ScheduleEngine.daily_window(
            now, settings.get(const.DATA_SETTINGS_WAKE_TIME)
        )
        fresh = ChallengeEngine.build_mystery_box(
            state[const.DATA_QUESTS], settings, start, end, rng  # type: ignore[literal-required]
        )
        if fresh is None:
            return ActionResult.rejected(const.REASON_NO_ELIGIBLE_QUEST)
        fresh[const.DATA_MYSTERY_REROLL_USED] = True  # type: ignore[typeddict-unknown-key]
        fresh[const.DATA_MYSTERY_IS_REVEALED] = False  # type: ignore[typeddict-unknown-key]
        state[const.DATA_MYSTERY_BOX] = fresh  # type: ignore[literal-required]
        const.LOGGER.debug(
            "Mystery box rerolled onto quest %s", fresh[const.DATA_MYSTERY_BASE_TASK_ID]  # type: ignore[literal-required]
        )
        return ActionResult.ok(challenge_id=fresh[const.DATA_CHALLENGE_ID])  # type: ignore[literal-required]

    def complete_mystery_box(self, state: AppState, now: datetime) -> ActionResult:
        """revealed → completed, crediting the reward."""
        box = state.get(const.DATA_MYSTERY_BOX)
        reason = self._check_active(box, now)
        if reason is not None:
            return ActionResult.rejected(reason)
        if not box.get(const.DATA_MYSTERY_IS_REVEALED):  # type: ignore[union-attr]
            return ActionResult.rejected(const.REASON_NOT_REVEALED)
        return self._complete(state, box, now, "mystery_box")  # type: ignore[arg-type]
