"""gitgate data models."""

from __future__ import annotations

from gitgate.models.context import RepositoryContext
from gitgate.models.journal import (
    OperationLogEntry,
    PendingChange,
    PushHistoryEntry,
    utc_timestamp,
)

__all__ = [
    "OperationLogEntry",
    "PendingChange",
    "PushHistoryEntry",
    "RepositoryContext",
    "utc_timestamp",
]
