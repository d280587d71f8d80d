"""Manager modules for Quest Board.

Managers run workflows against a draft AppState and call into the engines.
They hold no state of their own and report outcomes as ActionResult values.
"""

from .base_manager import ActionResult, BaseManager
from .challenge_manager import ChallengeManager
from .economy_manager import EconomyManager
from .quest_manager import QuestManager
from .system_manager import SystemManager

__all__ = [
    "ActionResult",
    "BaseManager",
    "ChallengeManager",
    "EconomyManager",
    "QuestManager",
    "SystemManager",
]
