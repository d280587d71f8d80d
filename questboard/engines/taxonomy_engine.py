"""Taxonomy Engine - Pure logic for classifying quests.

Infers a quest's domain, activity kind, measurement type and display unit
from its name and whatever explicit fields the caller supplied.

Name rules live in a single priority table. Every rule is tested against the
lowercased name and the highest-priority hit wins, so the outcome never
depends on iteration order. A name hit overrides explicit domain/kind hints.

ARCHITECTURE: Stateless engine, all methods static. No state, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..type_defs import QuestTaxonomy


@dataclass(frozen=True)
class TaxonomyRule:
    """One name pattern and the classification it implies."""

    priority: int
    pattern: re.Pattern[str]
    domain: str
    activity_kind: str


def _rule(priority: int, pattern: str, domain: str, kind: str) -> TaxonomyRule:
    return TaxonomyRule(priority, re.compile(pattern), domain, kind)


# Higher priority wins. Patterns match substrings, so "breathing practice"
# resolves to hobbies/practice rather than mind/mindfulness.
NAME_RULES: tuple[TaxonomyRule, ...] = (
    _rule(10, r"push|pull|sit|squat|deadlift|bench|strength|lift", const.DOMAIN_BODY, const.KIND_STRENGTH),
    _rule(20, r"run|jog|walk|cardio|cycle|bike|swim", const.DOMAIN_BODY, const.KIND_CARDIO),
    _rule(30, r"stretch|yoga|mobility", const.DOMAIN_BODY, const.KIND_MOBILITY),
    _rule(40, r"sport|basketball|soccer|tennis", const.DOMAIN_BODY, const.KIND_SPORT),
    _rule(50, r"medit|breath|mindful", const.DOMAIN_MIND, const.KIND_MINDFULNESS),
    _rule(60, r"journal", const.DOMAIN_MIND, const.KIND_MINDFULNESS),
    _rule(70, r"learn|study|read|language|course", const.DOMAIN_MIND, const.KIND_LEARNING),
    _rule(80, r"focus|no[- ]phone|no[- ]social|pomodoro", const.DOMAIN_MIND, const.KIND_FOCUS),
    _rule(90, r"sleep", const.DOMAIN_MIND, const.KIND_SLEEP),
    _rule(100, r"art|draw|paint|creative", const.DOMAIN_HOBBIES, const.KIND_CREATIVE),
    _rule(110, r"guitar|music|piano|practice", const.DOMAIN_HOBBIES, const.KIND_PRACTICE),
    _rule(120, r"social|friends|family|call", const.DOMAIN_HOBBIES, const.KIND_SOCIAL),
    _rule(130, r"explore|travel|hike", const.DOMAIN_HOBBIES, const.KIND_EXPLORE),
    _rule(140, r"deep work|work session|productiv", const.DOMAIN_LIFE, const.KIND_PRODUCTIVITY),
    _rule(150, r"nutrition|meal|cook|diet|food", const.DOMAIN_LIFE, const.KIND_NUTRITION),
    _rule(160, r"water|hydrate|bottle", const.DOMAIN_LIFE, const.KIND_HYDRATION),
    _rule(170, r"clean|laundry|dishes|tidy", const.DOMAIN_LIFE, const.KIND_CHORES),
    _rule(180, r"budget|finance|money|bill", const.DOMAIN_LIFE, const.KIND_FINANCE),
    _rule(190, r"inbox|email|paperwork|admin", const.DOMAIN_LIFE, const.KIND_ADMIN),
)

# Negative-habit phrasing always means a yes/no habit
HABIT_PATTERN = re.compile(r"no[- ]phone|no[- ]social|avoid|no[- ]junk|no[- ]sugar|limit")
WATER_PATTERN = re.compile(r"water|hydrate|bottle")
PAGES_PATTERN = re.compile(r"page|read")


class TaxonomyEngine:
    """Pure classification helpers. All methods are static."""

    @staticmethod
    def normalize_domain(raw: Any) -> str:
        """Coerce free text to a domain; anything unknown becomes life."""
        value = str(raw or "").strip().lower()
        if value in const.DOMAINS:
            return value
        return const.DOMAIN_ALIASES.get(value, const.DOMAIN_LIFE)

    @staticmethod
    def normalize_activity_kind(domain: Any, raw: Any) -> str:
        """Coerce free text to a kind valid for the domain.

        Unknown kinds fall back to the first kind listed for the domain.
        """
        kinds = const.ACTIVITY_KINDS_BY_DOMAIN[TaxonomyEngine.normalize_domain(domain)]
        value = str(raw or "").strip().lower()
        return value if value in kinds else kinds[0]

    @staticmethod
    def normalize_measurement_type(raw: Any, unit_type: Any = None) -> str:
        """Coerce free text to a measurement type.

        Unknown values are resolved from the legacy unitType field when
        present, otherwise they become habit.
        """
        value = str(raw or "").strip().lower()
        if value in const.MEASUREMENT_TYPES:
            return value
        return const.LEGACY_UNIT_TYPE_MEASUREMENT.get(
            str(unit_type or "").strip().lower(), const.MEASUREMENT_HABIT
        )

    @staticmethod
    def default_unit_for(measurement_type: str, name: str = "") -> str:
        """Return the display unit used when a quest has none of its own."""
        lowered = name.lower()
        if measurement_type == const.MEASUREMENT_COUNT:
            if WATER_PATTERN.search(lowered):
                return const.UNIT_CUPS
            if PAGES_PATTERN.search(lowered):
                return const.UNIT_PAGES
        return const.DEFAULT_UNIT_BY_MEASUREMENT.get(measurement_type, "x")

    @staticmethod
    def allowed_measurement_types(domain: Any, activity_kind: Any) -> tuple[str, ...]:
        """Measurement types an editor should offer for a domain/kind pair."""
        norm_domain = TaxonomyEngine.normalize_domain(domain)
        kind = str(activity_kind or "").strip().lower()
        if norm_domain == const.DOMAIN_BODY and kind == const.KIND_CARDIO:
            return (const.MEASUREMENT_TIME, const.MEASUREMENT_DISTANCE)
        if norm_domain == const.DOMAIN_MIND and kind == const.KIND_SLEEP:
            return (const.MEASUREMENT_TIME, const.MEASUREMENT_HABIT)
        return const.MEASUREMENT_TYPES

    @staticmethod
    def measurement_requires_target(measurement_type: str) -> bool:
        """Habits are binary; everything else carries a numeric target."""
        return measurement_type != const.MEASUREMENT_HABIT

    @staticmethod
    def match_name_rule(name: str) -> TaxonomyRule | None:
        """Return the highest-priority rule whose pattern occurs in name."""
        lowered = name.lower()
        best: TaxonomyRule | None = None
        for rule in NAME_RULES:
            if rule.pattern.search(lowered) and (
                best is None or rule.priority > best.priority
            ):
                best = rule
        return best

    @staticmethod
    def classify(
        name: str | None,
        domain: Any = None,
        activity_kind: Any = None,
        measurement_type: Any = None,
        unit: Any = None,
        unit_type: Any = None,
    ) -> QuestTaxonomy:
        """Classify a quest from its name and optional explicit fields.

        Args:
            name: Free-text quest name
            domain: Explicit domain (or legacy category), may be invalid
            activity_kind: Explicit activity kind, may be invalid
            measurement_type: Explicit measurement type, may be invalid
            unit: Explicit display unit; kept when non-empty
            unit_type: Legacy unitType used to recover a measurement type

        Returns:
            Normalized taxonomy dict with camelCase keys
        """
        lowered = str(name or "").lower()
        norm_domain = TaxonomyEngine.normalize_domain(domain)
        kind = TaxonomyEngine.normalize_activity_kind(norm_domain, activity_kind)

        rule = TaxonomyEngine.match_name_rule(lowered)
        if rule is not None:
            norm_domain, kind = rule.domain, rule.activity_kind

        measurement = TaxonomyEngine.normalize_measurement_type(
            measurement_type, unit_type
        )
        if HABIT_PATTERN.search(lowered):
            measurement = const.MEASUREMENT_HABIT
        if kind == const.KIND_SLEEP and measurement != const.MEASUREMENT_HABIT:
            measurement = const.MEASUREMENT_TIME
        if kind == const.KIND_CARDIO and measurement == const.MEASUREMENT_REPS:
            measurement = const.MEASUREMENT_TIME
        if norm_domain == const.DOMAIN_LIFE and kind == const.KIND_HYDRATION:
            measurement = const.MEASUREMENT_COUNT

        has_hints = any((domain, activity_kind, measurement_type, unit_type))
        if rule is None and not has_hints:
            norm_domain = const.DOMAIN_LIFE
            kind = const.KIND_ADMIN
            measurement = const.MEASUREMENT_HABIT

        display_unit = str(unit or "").strip()
        if not display_unit:
            display_unit = TaxonomyEngine.default_unit_for(measurement, lowered)

        return {
            const.DATA_QUEST_DOMAIN: norm_domain,
            const.DATA_QUEST_ACTIVITY_KIND: kind,
            const.DATA_QUEST_MEASUREMENT_TYPE: measurement,
            const.DATA_QUEST_UNIT: display_unit,
        }  # type: ignore[return-value]
