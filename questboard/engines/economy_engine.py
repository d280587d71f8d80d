"""Economy Engine - Pure logic for ranks, XP awards and debt repayment.

This engine provides stateless functions for:
- Progress fraction and rank lookup
- XP caps, base awards, priority and improvement modifiers
- Per-completion award calculation (clamped to the rank cap)
- Debt-first crediting of positive XP

All rounding is half-up (see math_utils.round_half_up).

ARCHITECTURE: This is a pure logic engine. All methods are static and operate
on passed-in data. State mutation belongs in EconomyManager.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.math_utils import clamp, round_half_up, to_number

if TYPE_CHECKING:
    from collections.abc import Mapping


class EconomyEngine:
    """Pure logic engine for rank and XP calculations.

    Rank bands are inclusive on paper (E 0-0.19, D 0.20-0.39, ...). A value
    between two printed bounds, e.g. 0.195, belongs to the band whose lower
    bound it has reached, so the bands partition [0, 1] without gaps.
    """

    # ------------------------------------------------------------------
    # Progress & rank
    # ------------------------------------------------------------------

    @staticmethod
    def progress_fraction(current_target: Any, s_target: Any) -> float:
        """Return clamp(current / S, 0, 1); 0 when S is not positive."""
        s_value = to_number(s_target)
        if s_value <= 0:
            return 0.0
        return clamp(to_number(current_target) / s_value, 0.0, 1.0)

    @staticmethod
    def quest_progress(quest: Mapping[str, Any]) -> float:
        """Progress fraction of a quest dict."""
        return EconomyEngine.progress_fraction(
            quest.get(const.DATA_QUEST_CURRENT_TARGET),
            quest.get(const.DATA_QUEST_S_TARGET),
        )

    @staticmethod
    def rank_from_progress(progress: float) -> str:
        """Map a progress fraction to its rank letter."""
        value = clamp(to_number(progress), 0.0, 1.0)
        rank = const.RANK_E
        for letter, lower, _upper in const.RANK_THRESHOLDS:
            if value >= lower:
                rank = letter
        return rank

    @staticmethod
    def quest_rank(quest: Mapping[str, Any]) -> str:
        """Rank of a quest dict."""
        return EconomyEngine.rank_from_progress(EconomyEngine.quest_progress(quest))

    @staticmethod
    def next_rank(rank: str) -> str | None:
        """Next rank in E<D<C<B<A<S, or None at S (or for an unknown letter)."""
        if rank not in const.RANK_ORDER:
            return None
        idx = const.RANK_ORDER.index(rank)
        if idx >= len(const.RANK_ORDER) - 1:
            return None
        return const.RANK_ORDER[idx + 1]

    @staticmethod
    def rank_band_min(rank: str) -> float:
        """Lower progress bound of a rank band (S bound for unknown letters)."""
        for letter, lower, _upper in const.RANK_THRESHOLDS:
            if letter == rank:
                return lower
        return const.RANK_THRESHOLDS[-1][1]

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    @staticmethod
    def xp_cap(rank: str) -> int:
        """Maximum cumulative XP a quest may hold at a rank."""
        return const.XP_CAP_BY_RANK.get(rank, const.XP_CAP_BY_RANK[const.RANK_E])

    @staticmethod
    def base_xp(rank: str) -> int:
        """Base per-completion award at a rank."""
        return const.BASE_XP_BY_RANK.get(rank, const.BASE_XP_BY_RANK[const.RANK_E])

    @staticmethod
    def priority_multiplier(priority: Any) -> float:
        """main 1.0, minor 0.6; anything else is treated as main."""
        return const.PRIORITY_MULTIPLIERS.get(
            str(priority or ""), const.PRIORITY_MULTIPLIERS[const.PRIORITY_MAIN]
        )

    @staticmethod
    def tier_multiplier(rank: str) -> float:
        """Weekly challenge multiplier for the step from rank to the next rank."""
        bump = EconomyEngine.next_rank(rank) or const.RANK_S
        key = (rank, bump) if rank in const.RANK_ORDER else (const.RANK_S, const.RANK_S)
        return const.TIER_MULTIPLIERS.get(key, const.DEFAULT_TIER_MULTIPLIER)

    # ------------------------------------------------------------------
    # Awards
    # ------------------------------------------------------------------

    @staticmethod
    def improvement_bonus(quest: Mapping[str, Any], rank: str | None = None) -> int:
        """round(base * 1.5) when the target has grown past the baseline."""
        current = to_number(quest.get(const.DATA_QUEST_CURRENT_TARGET))
        baseline = to_number(quest.get(const.DATA_QUEST_BASELINE), current)
        if current <= baseline:
            return 0
        base = EconomyEngine.base_xp(rank or EconomyEngine.quest_rank(quest))
        return round_half_up(base * const.IMPROVEMENT_BONUS_FACTOR)

    @staticmethod
    def raw_award(quest: Mapping[str, Any]) -> int:
        """Award before the cap clamp: round((base + bonus) * priority)."""
        rank = EconomyEngine.quest_rank(quest)
        base = EconomyEngine.base_xp(rank)
        bonus = EconomyEngine.improvement_bonus(quest, rank)
        multiplier = EconomyEngine.priority_multiplier(
            quest.get(const.DATA_QUEST_PRIORITY)
        )
        return round_half_up((base + bonus) * multiplier)

    @staticmethod
    def calculate_award(quest: Mapping[str, Any]) -> int:
        """Per-completion award, clamped to what is left under the rank cap.

        Example:
            current 20 / S 100 → rank D → base 60, main, no bonus → 60
        """
        room = EconomyEngine.xp_remaining_to_cap(quest)
        return max(0, min(EconomyEngine.raw_award(quest), room))

    @staticmethod
    def xp_remaining_to_cap(quest: Mapping[str, Any]) -> int:
        """XP the quest can still earn before hitting its rank cap."""
        cap = EconomyEngine.xp_cap(EconomyEngine.quest_rank(quest))
        return max(0, cap - int(to_number(quest.get(const.DATA_QUEST_XP))))

    @staticmethod
    def clamp_xp_to_cap(quest: Mapping[str, Any], xp: float) -> int:
        """Bound a candidate xp value to [0, cap(rank)] for this quest."""
        cap = EconomyEngine.xp_cap(EconomyEngine.quest_rank(quest))
        return int(clamp(round_half_up(xp), 0, cap))

    # ------------------------------------------------------------------
    # Debt
    # ------------------------------------------------------------------

    @staticmethod
    def apply_debt_repayment(delta: int, debt: int, enabled: bool) -> tuple[int, int]:
        """Split a delta into (credited, remaining_debt).

        Positive deltas repay outstanding debt first when debt is enabled.
        Negative deltas and disabled debt pass through untouched.

        Examples:
            apply_debt_repayment(60, 50, True) → (10, 0)
            apply_debt_repayment(30, 50, True) → (0, 20)
            apply_debt_repayment(-60, 50, True) → (-60, 50)
        """
        if delta > 0 and enabled and debt > 0:
            pay = min(debt, delta)
            return delta - pay, debt - pay
        return delta, debt
