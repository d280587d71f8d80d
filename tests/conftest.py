"""Shared fixtures for Quest Board tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
import random
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from questboard import QuestBoardCoordinator, const, data_builders as db
from questboard.utils import dt_utils

# Wednesday; the ISO week started on Monday 2026-01-12
NOW = datetime(2026, 1, 14, 8, 0, tzinfo=UTC)
TODAY_KEY = "2026-01-14"


@pytest.fixture(autouse=True)
def utc_default_timezone() -> Any:
    """Run every test in UTC regardless of the host timezone."""
    previous = dt_utils.get_default_timezone()
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(previous)


@pytest.fixture
def now() -> datetime:
    """Fixed wall clock for coordinator tests."""
    return NOW


@pytest.fixture
def make_quest() -> Callable[..., dict[str, Any]]:
    """Factory for well-formed quests (push-ups at 20/100 reps by default)."""

    def _make(**overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            const.DATA_QUEST_NAME: "Push-ups",
            const.DATA_QUEST_MEASUREMENT_TYPE: const.MEASUREMENT_REPS,
            const.DATA_QUEST_CURRENT_TARGET: 20,
            const.DATA_QUEST_S_TARGET: 100,
        }
        data.update(overrides)
        return dict(db.build_quest(data, now=NOW))

    return _make


@pytest.fixture
def coordinator() -> QuestBoardCoordinator:
    """In-memory coordinator with a seeded RNG and a frozen clock."""
    board = QuestBoardCoordinator(rng=random.Random(42), clock=lambda: NOW)
    board.load(NOW)
    return board


@pytest.fixture
def board_with_quest(
    coordinator: QuestBoardCoordinator,
) -> tuple[QuestBoardCoordinator, str]:
    """Coordinator holding one push-up quest at 20/100 reps (rank D)."""
    result = coordinator.add_quest(
        {
            const.DATA_QUEST_NAME: "Push-ups",
            const.DATA_QUEST_MEASUREMENT_TYPE: const.MEASUREMENT_REPS,
            const.DATA_QUEST_CURRENT_TARGET: 20,
            const.DATA_QUEST_S_TARGET: 100,
        }
    )
    return coordinator, result.payload["quest_id"]
