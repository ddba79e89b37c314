"""Review gate.

A push is allowed only after the pending changes have been read back through a
review call. Reading sets the gate; every push attempt that reaches git resets
it, whatever the outcome.
"""

from __future__ import annotations

from gitgate.logging import get_logger

__all__ = ["ReviewGate"]

logger = get_logger(__name__)


class ReviewGate:
    """Boolean latch guarding ``git_push`` for one repository context."""

    def __init__(self, name: str | None = None) -> None:
        self._name = name
        self._reviewed = False

    @property
    def reviewed(self) -> bool:
        return self._reviewed

    def mark_reviewed(self) -> None:
        if not self._reviewed:
            logger.debug("review_gate_opened", repo=self._name)
        self._reviewed = True

    def reset(self) -> None:
        self._reviewed = False
        logger.debug("review_gate_reset", repo=self._name)

    def blocks(self, pending_count: int) -> bool:
        """True when a push must be refused.

        Args:
            pending_count: Number of pending changes in the context.
        """
        return pending_count > 0 and not self._reviewed
