"""Quest Board: rules engine for a gamified personal-habit tracker.

Quests earn XP by rank, missed days accrue debt, and a weekly challenge and
a daily mystery box are generated from the player's own quests.

Usage:
    from questboard import QuestBoardCoordinator, QuestBoardStore

    board = QuestBoardCoordinator(QuestBoardStore("board.json"))
    board.load()
    board.tick()
"""

from .coordinator import QuestBoardCoordinator
from .managers import ActionResult
from .migration import MigrationError, migrate
from .store import QuestBoardStore

__all__ = [
    "ActionResult",
    "MigrationError",
    "QuestBoardCoordinator",
    "QuestBoardStore",
    "migrate",
]
