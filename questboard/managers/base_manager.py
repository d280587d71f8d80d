"""Base manager class and action outcome type for Quest Board managers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from ..coordinator import QuestBoardCoordinator


@dataclass
class ActionResult:
    """Outcome of a user action.

    Rejections are values, not exceptions: ``accepted`` is False and
    ``reason`` carries one of the const.REASON_* codes. ``credited`` is the
    XP actually applied to totals after debt repayment (negative for undo).
    """

    accepted: bool
    reason: str | None = None
    credited: int = 0
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, credited: int = 0, **payload: Any) -> ActionResult:
        return cls(True, None, credited, payload)

    @classmethod
    def rejected(cls, reason: str) -> ActionResult:
        return cls(False, reason)


class BaseManager:
    """Base class for all Quest Board managers with scoped event support.

    Provides:
    - Event emitting (emit), queued on the coordinator and delivered only
      once the surrounding action has been committed

    Managers never hold state of their own. Every operation receives the
    draft AppState it should mutate.
    """

    def __init__(self, coordinator: QuestBoardCoordinator) -> None:
        """Initialize manager.

        Args:
            coordinator: Parent coordinator owning the aggregate state
        """
        self.coordinator = coordinator

    def emit(self, suffix: str, **payload: Any) -> None:
        """Queue an event for listeners of suffix.

        Example:
            self.emit(
                const.SIGNAL_SUFFIX_XP_CREDITED,
                credited=10,
                debt_repaid=50,
                source="quest",
            )
        """
        const.LOGGER.debug(
            "Emitting event '%s' with payload keys: %s", suffix, list(payload.keys())
        )
        self.coordinator.queue_event(suffix, payload)
