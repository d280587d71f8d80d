"""Engine modules for Quest Board.

Contains stateless computation engines:
- taxonomy_engine: Quest classification from name and explicit fields
- progression_engine: Target ladders and growth plans
- economy_engine: Ranks, XP awards, caps and debt repayment
- schedule_engine: Day window and challenge window arithmetic
- statistics_engine: Streaks, backfill planning and history summaries
- challenge_engine: Weekly challenge and mystery box builders
"""

# Use relative imports within package to avoid mypy module resolution issues
from .challenge_engine import ChallengeEngine
from .economy_engine import EconomyEngine
from .progression_engine import ProgressionEngine
from .schedule_engine import ScheduleEngine
from .statistics_engine import StatisticsEngine
from .taxonomy_engine import TaxonomyEngine

__all__ = [
    "ChallengeEngine",
    "EconomyEngine",
    "ProgressionEngine",
    "ScheduleEngine",
    "StatisticsEngine",
    "TaxonomyEngine",
]
