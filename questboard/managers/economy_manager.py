"""Economy Manager - XP crediting and debt bookkeeping.

This manager handles all XP movements on the draft state:
- Debt-first crediting of positive deltas
- Day earnedXP, totalXP and xpByDay updates (all floored at 0)
- Debt accrual for missed days and bedtime penalties
- Event emission for credited XP and new debt

ARCHITECTURE:
- EconomyManager = STATEFUL bookkeeping on a draft AppState
- EconomyEngine = Pure award and repayment math (STATELESS)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const, data_builders as db
from ..engines.economy_engine import EconomyEngine
from ..utils.math_utils import to_number
from .base_manager import BaseManager

if TYPE_CHECKING:
    from ..type_defs import AppState, DayEntry


class EconomyManager(BaseManager):
    """Owns every write to earnedXP, xpDebt, totalXP and xpByDay.

    NOT responsible for:
    - Deciding award amounts (EconomyEngine / QuestManager)
    - Quest xp toward the rank cap (QuestManager)
    """

    @staticmethod
    def ensure_day(state: AppState, key: str) -> DayEntry:
        """Return the day entry for key, creating an empty one if missing."""
        days = state[const.DATA_DAYS]  # type: ignore[literal-required]
        entry = days.get(key)
        if entry is None:
            entry = db.build_day_entry()
            days[key] = entry
        return entry

    @staticmethod
    def debt_enabled(state: AppState) -> bool:
        settings = state[const.DATA_SETTINGS]  # type: ignore[literal-required]
        return bool(settings.get(const.DATA_SETTINGS_XP_DEBT_ENABLED))

    def credit(
        self,
        state: AppState,
        delta: int,
        debt_key: str,
        earn_key: str | None = None,
        source: str = "quest",
    ) -> int:
        """Apply an XP delta and return what reached the totals.

        Positive deltas repay debt on debt_key's entry first (when enabled).
        The remainder lands on earn_key's earnedXP (debt_key when omitted),
        on totalXP and on xpByDay[debt_key]. Every total is floored at 0.

        Args:
            state: Draft state to mutate
            delta: Award (positive) or undo amount (negative)
            debt_key: Day whose debt is repaid and whose xpByDay is credited
            earn_key: Day entry receiving earnedXP, e.g. the boss key
            source: Label for the emitted event

        Returns:
            Credited XP after debt repayment
        """
        debt_entry = self.ensure_day(state, debt_key)
        earn_entry = self.ensure_day(state, earn_key or debt_key)

        debt_before = int(to_number(debt_entry.get(const.DATA_DAY_XP_DEBT)))
        credited, debt_after = EconomyEngine.apply_debt_repayment(
            int(delta), debt_before, self.debt_enabled(state)
        )
        debt_entry[const.DATA_DAY_XP_DEBT] = debt_after  # type: ignore[literal-required]

        earned = int(to_number(earn_entry.get(const.DATA_DAY_EARNED_XP)))
        earn_entry[const.DATA_DAY_EARNED_XP] = max(0, earned + credited)  # type: ignore[literal-required]

        total = int(to_number(state.get(const.DATA_TOTAL_XP)))
        state[const.DATA_TOTAL_XP] = max(0, total + credited)  # type: ignore[literal-required]

        xp_by_day = state.setdefault(const.DATA_XP_BY_DAY, {})  # type: ignore[misc]
        day_total = int(to_number(xp_by_day.get(debt_key)))
        xp_by_day[debt_key] = max(0, day_total + credited)

        self.emit(
            const.SIGNAL_SUFFIX_XP_CREDITED,
            source=source,
            delta=int(delta),
            credited=credited,
            debt_repaid=debt_before - debt_after,
            day=debt_key,
        )
        return credited

    def accrue_debt(
        self, state: AppState, key: str, amount: int, *, floor: bool = False
    ) -> bool:
        """Add debt to a day entry once, marking it debtApplied.

        Args:
            floor: Raise debt to at least amount instead of adding to it

        Returns:
            True when debt was applied, False when already applied or disabled
        """
        if not self.debt_enabled(state):
            return False
        entry = self.ensure_day(state, key)
        if entry.get(const.DATA_DAY_DEBT_APPLIED):
            return False
        current = int(to_number(entry.get(const.DATA_DAY_XP_DEBT)))
        new_debt = max(current, amount) if floor else current + amount
        entry[const.DATA_DAY_XP_DEBT] = new_debt  # type: ignore[literal-required]
        entry[const.DATA_DAY_DEBT_APPLIED] = True  # type: ignore[literal-required]
        const.LOGGER.debug("Debt on %s raised from %s to %s", key, current, new_debt)
        self.emit(const.SIGNAL_SUFFIX_DEBT_ACCRUED, day=key, debt=new_debt)
        return True
