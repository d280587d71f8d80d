"""Progression Engine - Pure logic for target ladders and growth plans.

Given a long-term (S-rank) target, derives six strictly increasing rank
thresholds E..S and a session-based plan for growing the daily target toward
S. Used by editors to suggest milestones; nothing here is persisted.

ARCHITECTURE: Stateless engine, all methods static.
"""

from __future__ import annotations

import math
import sys

from .. import const
from ..type_defs import QuestProgression, RankLadder
from ..utils.math_utils import clamp_int, round_half_up


class ProgressionEngine:
    """Pure ladder/growth-plan calculations."""

    @staticmethod
    def ensure_monotonic_ladder(base: list[int], s_rank_target: int) -> list[int]:
        """Force interior rungs into [previous + 1, S - rungs still to place].

        The first rung is at least 1 and the last is pinned to the target.
        When the target is too small to fit six distinct rungs the window is
        empty and the rung falls back to max(1, upper bound).
        """
        ladder = list(base)
        ladder[0] = max(1, ladder[0])
        last = len(ladder) - 1
        for i in range(1, last):
            min_next = ladder[i - 1] + 1
            max_next = s_rank_target - (last - i)
            if max_next < min_next:
                ladder[i] = max(1, max_next)
            else:
                ladder[i] = clamp_int(max(ladder[i], min_next), min_next, max_next)
        ladder[last] = s_rank_target
        return ladder

    @staticmethod
    def build_ladder(s_rank_target: int) -> RankLadder:
        """Return the E..S thresholds for a goal."""
        base = [round_half_up(s_rank_target * f) for f in const.LADDER_FRACTIONS[:-1]]
        base.append(s_rank_target)
        values = ProgressionEngine.ensure_monotonic_ladder(base, s_rank_target)
        return dict(zip(const.RANK_ORDER, values, strict=True))  # type: ignore[return-value]

    @staticmethod
    def rank_letter_for_target(target: float, ladder: RankLadder) -> str:
        """Return the rung a target value currently sits on."""
        value = clamp_int(target, 1)
        for lower, upper in zip(const.RANK_ORDER, const.RANK_ORDER[1:]):
            if value < ladder[upper]:  # type: ignore[literal-required]
                return lower
        return const.RANK_S

    @staticmethod
    def build_quest_progression(
        s_rank_target: float,
        start_target: float | None = None,
        sessions_per_week: float = const.DEFAULT_SESSIONS_PER_WEEK,
        sessions_to_s: float = const.DEFAULT_SESSIONS_TO_S,
    ) -> QuestProgression:
        """Build the ladder and growth plan for a goal.

        Args:
            s_rank_target: Long-term goal (coerced to an integer >= 1)
            start_target: Explicit starting target; None means use ladder E
            sessions_per_week: Training sessions per week (clamped 1-7)
            sessions_to_s: Sessions planned to reach the goal (>= 1)

        Returns:
            QuestProgression with ladder, start target and weekly increase

        Example:
            build_quest_progression(100)["ladder"]
            → {"E": 10, "D": 25, "C": 40, "B": 60, "A": 80, "S": 100}
        """
        s_target = clamp_int(s_rank_target, 1, sys.maxsize)
        ladder = ProgressionEngine.build_ladder(s_target)
        recommended = ladder[const.RANK_E]  # type: ignore[literal-required]
        was_auto = start_target is None
        start = clamp_int(recommended if was_auto else start_target, 1, s_target)

        per_week = clamp_int(sessions_per_week, 1, 7)
        total_sessions = clamp_int(sessions_to_s, 1, sys.maxsize)
        increase_per_session = max(1, round_half_up((s_target - start) / total_sessions))

        return {
            "sRankTarget": s_target,
            "recommendedStartTarget": recommended,
            "startTarget": start,
            "startTargetWasAuto": was_auto,
            "increasePerSession": increase_per_session,
            "weeklyIncrease": increase_per_session * per_week,
            "estimatedWeeksToS": max(0, math.ceil(total_sessions / per_week)),
            "sessionsPerWeek": per_week,
            "ladder": ladder,
            "startingRankLetter": ProgressionEngine.rank_letter_for_target(start, ladder),
        }

    @staticmethod
    def suggest_next_target(current: float, progression: QuestProgression) -> int:
        """Next milestone after one session of growth, never past S."""
        return min(
            progression["sRankTarget"],
            clamp_int(current, 1) + progression["increasePerSession"],
        )
