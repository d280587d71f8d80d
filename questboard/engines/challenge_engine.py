"""Challenge Engine - Pure builders for the weekly challenge and mystery box.

Both builders pick one quest at random from the named quests and derive a
reward from the quest's current rank:

- Weekly challenge: reward = round(baseXP(rank) * tier multiplier for the
  step to the next rank). Quantitative quests below their S target get a
  numeric target at the next rank's lower bound; everything else gets the
  "Complete on 3 days this week" constraint.
- Mystery box: a random twist template filtered by measurement type, with
  its own multiplier (1.25-1.6x) on baseXP(rank). Twist text that mentions
  reps/sets on a time or distance quest is swapped for a constraint twist.

Randomness only comes from the random.Random passed in, so a seeded instance
reproduces the same pick.

ARCHITECTURE: Stateless engine. ChallengeManager owns the state machines.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
import math
import random
import re
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import clamp, round_half_up, round_to_tenth, to_number
from .economy_engine import EconomyEngine
from .taxonomy_engine import TaxonomyEngine

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ..type_defs import MysteryBoxData, WeeklyChallengeData

MEASUREMENT_MISMATCH_PATTERN = re.compile(r"\b(reps?|sets?|\d+x)\b", re.IGNORECASE)


# ==============================================================================
# Quest snapshot used by the builders
# ==============================================================================


@dataclass(frozen=True)
class ChallengeSubject:
    """The numbers and labels a challenge needs from its chosen quest."""

    quest_id: str
    name: str
    measurement_type: str
    activity_kind: str
    unit: str
    current: float
    s_target: float
    rank: str

    @property
    def base_xp(self) -> int:
        return EconomyEngine.base_xp(self.rank)


def format_value(value: float) -> str:
    """Render 60.0 as "60" and 2.5 as "2.5"."""
    return str(int(value)) if float(value).is_integer() else str(value)


def unit_label(quest: Mapping[str, Any], measurement_type: str) -> str:
    """Display unit for challenge text; habits have none."""
    if measurement_type == const.MEASUREMENT_HABIT:
        return ""
    unit = str(quest.get(const.DATA_QUEST_UNIT) or "").strip()
    if unit:
        return unit
    return const.DEFAULT_UNIT_BY_MEASUREMENT.get(measurement_type, "reps") or "reps"


def build_subject(quest: Mapping[str, Any]) -> ChallengeSubject:
    """Snapshot a quest. A missing S target falls back to the current target."""
    measurement = TaxonomyEngine.normalize_measurement_type(
        quest.get(const.DATA_QUEST_MEASUREMENT_TYPE),
        quest.get(const.DATA_QUEST_LEGACY_UNIT_TYPE),
    )
    current = to_number(quest.get(const.DATA_QUEST_CURRENT_TARGET), 1)
    s_target = to_number(quest.get(const.DATA_QUEST_S_TARGET), current or 1)
    return ChallengeSubject(
        quest_id=str(quest.get(const.DATA_QUEST_ID, "")),
        name=str(quest.get(const.DATA_QUEST_NAME, "")),
        measurement_type=measurement,
        activity_kind=str(quest.get(const.DATA_QUEST_ACTIVITY_KIND) or "").lower(),
        unit=unit_label(quest, measurement),
        current=current,
        s_target=s_target,
        rank=EconomyEngine.rank_from_progress(
            EconomyEngine.progress_fraction(current, s_target)
        ),
    )


# ==============================================================================
# Mystery box twist templates
# ==============================================================================

TwistResult = tuple[str, dict[str, Any]]


@dataclass(frozen=True)
class TwistTemplate:
    """One mystery box twist."""

    template_id: str
    multiplier: float
    allowed_measurements: tuple[str, ...]
    build: Callable[[ChallengeSubject], TwistResult]

    def allows(self, subject: ChallengeSubject) -> bool:
        return subject.measurement_type in self.allowed_measurements


def _tempo(s: ChallengeSubject) -> TwistResult:
    return (
        f"{s.name}: {format_value(s.current)} {s.unit} with a 3s down, 1s up tempo",
        {"tempo": "3-1"},
    )


def _sets(s: ChallengeSubject) -> TwistResult:
    sets = 3
    per_set = max(1, math.ceil(s.current / sets))
    return (
        f"{s.name}: {sets} sets of {per_set} ({s.unit}), 60s rest",
        {"sets": sets, "perSet": per_set},
    )


def _ladder(s: ChallengeSubject) -> TwistResult:
    top = int(clamp(round_half_up(s.current / 3), 3, 6))
    return f"{s.name}: ladder 1-{top} then back to 1", {"top": top}


def _timebox(s: ChallengeSubject) -> TwistResult:
    if s.measurement_type == const.MEASUREMENT_TIME:
        window_min = max(10, round_half_up(s.current * 1.2))
    else:
        window_min = 12
    return f"{s.name}: finish within {window_min} min", {"windowMin": window_min}


_REPS = (const.MEASUREMENT_REPS,)
_QUANT = const.MYSTERY_QUANTITATIVE_MEASUREMENTS
_ALL = (
    const.MEASUREMENT_HABIT,
    const.MEASUREMENT_TIME,
    const.MEASUREMENT_COUNT,
    const.MEASUREMENT_DISTANCE,
    const.MEASUREMENT_REPS,
)

QUANTITATIVE_TEMPLATES: tuple[TwistTemplate, ...] = (
    TwistTemplate("tempo", 1.35, _REPS, _tempo),
    TwistTemplate("sets", 1.4, _REPS, _sets),
    TwistTemplate("ladder", 1.5, _REPS, _ladder),
    TwistTemplate("timebox", 1.6, _QUANT, _timebox),
    TwistTemplate(
        "no-music",
        1.25,
        _QUANT,
        lambda s: (f"{s.name}: complete with no music or headphones", {"noMusic": True}),
    ),
    TwistTemplate(
        "perfect-form",
        1.35,
        _REPS,
        lambda s: (f"{s.name}: strict form only (self-check each rep)", {"strictForm": True}),
    ),
    TwistTemplate(
        "pause-reps",
        1.45,
        _REPS,
        lambda s: (
            f"{s.name}: add a 2s pause at the hardest point each rep",
            {"pauseSeconds": 2},
        ),
    ),
    TwistTemplate(
        "even-odd",
        1.3,
        _REPS,
        lambda s: (
            f"{s.name}: alternate slow/fast reps (odd slow, even fast)",
            {"pattern": "odd-slow-even-fast"},
        ),
    ),
)

CONSTRAINT_TEMPLATES: tuple[TwistTemplate, ...] = (
    TwistTemplate(
        "streak-blocks",
        1.45,
        _ALL,
        lambda s: (f"{s.name}: complete 3 blocks today", {"blocks": 3}),
    ),
    TwistTemplate(
        "timing-window",
        1.35,
        _ALL,
        lambda s: (
            f"{s.name}: do it within your first waking hour",
            {"timing": "first-hour"},
        ),
    ),
    TwistTemplate(
        "environment",
        1.3,
        _ALL,
        lambda s: (f"{s.name}: complete during meals only", {"environment": "meals"}),
    ),
    TwistTemplate(
        "replacement",
        1.5,
        (const.MEASUREMENT_HABIT, const.MEASUREMENT_TIME, const.MEASUREMENT_COUNT),
        lambda s: (
            f"{s.name}: replace with one healthy alternative action",
            {"replacement": True},
        ),
    ),
    TwistTemplate(
        "double-down",
        1.6,
        _ALL,
        lambda s: (
            f"{s.name}: complete + 5 minutes of reflection",
            {"reflectionMinutes": 5},
        ),
    ),
)


class ChallengeEngine:
    """Pure challenge builders. All methods are static."""

    @staticmethod
    def eligible_quests(quests: Sequence[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
        """Named quests in creation order (stable for equal timestamps)."""
        named = [q for q in quests if q and str(q.get(const.DATA_QUEST_NAME) or "").strip()]
        return sorted(named, key=lambda q: to_number(q.get(const.DATA_QUEST_CREATED_AT)))

    @staticmethod
    def round_target(value: float, measurement_type: str) -> float:
        """Distances round to 0.1; everything else to a whole number >= 1."""
        if measurement_type == const.MEASUREMENT_DISTANCE:
            return round_to_tenth(value)
        return max(1, round_half_up(value))

    @staticmethod
    def text_matches_measurement(text: str, measurement_type: str) -> bool:
        """Reject reps/sets wording on time and distance quests."""
        if measurement_type in (const.MEASUREMENT_TIME, const.MEASUREMENT_DISTANCE):
            return MEASUREMENT_MISMATCH_PATTERN.search(text) is None
        return True

    # ------------------------------------------------------------------
    # Weekly challenge
    # ------------------------------------------------------------------

    @staticmethod
    def build_weekly_challenge(
        quests: Sequence[Mapping[str, Any]],
        settings: Mapping[str, Any],
        window_start: datetime,
        window_end: datetime,
        rng: random.Random,
    ) -> WeeklyChallengeData | None:
        """Build the challenge for one weekly window, or None with no quests.

        Example:
            quest at 50/100 reps (rank C) → bump to B, multiplier 2.5,
            reward round(85 * 2.5) = 213, target "60 reps"
        """
        eligible = ChallengeEngine.eligible_quests(quests)
        if not eligible:
            return None
        chosen = rng.choice(eligible)
        subject = build_subject(chosen)

        bump = EconomyEngine.next_rank(subject.rank)
        multiplier = EconomyEngine.tier_multiplier(subject.rank)
        is_quant = subject.measurement_type in const.QUANTITATIVE_MEASUREMENTS
        at_cap = (
            subject.current >= subject.s_target
            or bump is None
            or subject.measurement_type == const.MEASUREMENT_HABIT
        )

        target_meta: dict[str, Any]
        if is_quant and not at_cap and bump is not None:
            rounding = (
                const.MEASUREMENT_DISTANCE
                if subject.measurement_type == const.MEASUREMENT_DISTANCE
                else const.MEASUREMENT_REPS
            )
            step = 0.1 if rounding == const.MEASUREMENT_DISTANCE else 1
            next_target = ChallengeEngine.round_target(
                subject.s_target * EconomyEngine.rank_band_min(bump), rounding
            )
            if next_target <= subject.current:
                next_target = ChallengeEngine.round_target(subject.current + step, rounding)
            target = min(subject.s_target, next_target)
            target_text = f"{format_value(target)} {subject.unit}".strip()
            target_meta = {
                "type": const.WEEKLY_TARGET_KIND_QUANTITY,
                "value": target,
            }
        else:
            required = const.WEEKLY_CONSTRAINT_REQUIRED_DAYS
            target_text = f"Complete on {required} days this week"
            target_meta = {
                "type": const.WEEKLY_TARGET_KIND_CONSTRAINT,
                "requiredDays": required,
            }

        return {
            const.DATA_CHALLENGE_ID: (
                f"{const.WEEKLY_CHALLENGE_ID_PREFIX}{dt_utils.dt_to_epoch_ms(window_start)}"
            ),
            const.DATA_CHALLENGE_CREATED_AT: dt_utils.dt_to_iso(window_start),
            const.DATA_CHALLENGE_EXPIRES_AT: dt_utils.dt_to_iso(window_end),
            const.DATA_WEEKLY_TASK_ID: subject.quest_id,
            const.DATA_CHALLENGE_TITLE: subject.name,
            const.DATA_WEEKLY_TARGET: target_text,
            const.DATA_CHALLENGE_XP_REWARD: round_half_up(subject.base_xp * multiplier),
            const.DATA_CHALLENGE_STATUS: const.CHALLENGE_STATUS_ACTIVE,
            const.DATA_WEEKLY_META: {
                const.DATA_QUEST_MEASUREMENT_TYPE: subject.measurement_type,
                const.DATA_QUEST_S_TARGET: subject.s_target,
                const.DATA_QUEST_CURRENT_TARGET: subject.current,
                "rank": subject.rank,
                "bumpRank": bump or const.RANK_S,
                "multiplier": multiplier,
                const.DATA_SETTINGS_WAKE_TIME: settings.get(
                    const.DATA_SETTINGS_WAKE_TIME, const.DEFAULT_WAKE_TIME
                ),
                **target_meta,
            },
        }  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Mystery box
    # ------------------------------------------------------------------

    @staticmethod
    def pick_twist(
        subject: ChallengeSubject, rng: random.Random
    ) -> tuple[TwistTemplate, str, dict[str, Any]]:
        """Choose a twist template for a subject and build its text."""
        is_quant = subject.measurement_type in const.MYSTERY_QUANTITATIVE_MEASUREMENTS
        source = QUANTITATIVE_TEMPLATES if is_quant else CONSTRAINT_TEMPLATES
        pool = [t for t in source if t.allows(subject)]
        fallback = [t for t in CONSTRAINT_TEMPLATES if t.allows(subject)]
        template = rng.choice(pool or fallback or list(CONSTRAINT_TEMPLATES))
        text, meta = template.build(subject)

        if not ChallengeEngine.text_matches_measurement(text, subject.measurement_type):
            for candidate in fallback:
                candidate_text, candidate_meta = candidate.build(subject)
                if ChallengeEngine.text_matches_measurement(
                    candidate_text, subject.measurement_type
                ):
                    return candidate, candidate_text, candidate_meta
        return template, text, meta

    @staticmethod
    def build_mystery_box(
        quests: Sequence[Mapping[str, Any]],
        settings: Mapping[str, Any],
        window_start: datetime,
        window_end: datetime,
        rng: random.Random,
    ) -> MysteryBoxData | None:
        """Build a hidden, active mystery box for one daily window."""
        eligible = ChallengeEngine.eligible_quests(quests)
        if not eligible:
            return None
        subject = build_subject(rng.choice(eligible))
        template, text, meta = ChallengeEngine.pick_twist(subject, rng)
        start_iso = dt_utils.dt_to_iso(window_start)

        return {
            const.DATA_CHALLENGE_ID: f"{const.MYSTERY_BOX_ID_PREFIX}{start_iso}",
            const.DATA_CHALLENGE_CREATED_AT: start_iso,
            const.DATA_CHALLENGE_EXPIRES_AT: dt_utils.dt_to_iso(window_end),
            const.DATA_CHALLENGE_STATUS: const.CHALLENGE_STATUS_ACTIVE,
            const.DATA_MYSTERY_IS_REVEALED: False,
            const.DATA_MYSTERY_REROLL_USED: False,
            const.DATA_MYSTERY_BASE_TASK_ID: subject.quest_id,
            const.DATA_CHALLENGE_TITLE: const.MYSTERY_BOX_TITLE,
            const.DATA_MYSTERY_DESCRIPTION_HIDDEN: const.MYSTERY_BOX_DESCRIPTION_HIDDEN,
            const.DATA_MYSTERY_DESCRIPTION_REVEALED: text,
            const.DATA_CHALLENGE_XP_REWARD: round_half_up(
                subject.base_xp * template.multiplier
            ),
            const.DATA_MYSTERY_TEMPLATE_ID: template.template_id,
            const.DATA_MYSTERY_METADATA: {
                const.DATA_QUEST_MEASUREMENT_TYPE: subject.measurement_type,
                const.DATA_QUEST_ACTIVITY_KIND: subject.activity_kind,
                "rank": subject.rank,
                const.DATA_QUEST_CURRENT_TARGET: subject.current,
                const.DATA_QUEST_S_TARGET: subject.s_target,
                const.DATA_SETTINGS_WAKE_TIME: settings.get(
                    const.DATA_SETTINGS_WAKE_TIME, const.DEFAULT_WAKE_TIME
                ),
                **meta,
            },
        }  # type: ignore[return-value]
