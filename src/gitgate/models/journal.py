"""Persisted journal records.

These models round-trip through the JSON files in the log directory, so
field names are part of the on-disk format. Timestamps are stored as the ISO
strings they were written with, which keeps reload-then-save byte-stable.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "OperationLogEntry",
    "PendingChange",
    "PushHistoryEntry",
    "utc_timestamp",
]


def utc_timestamp() -> str:
    """Current time as an ISO 8601 string with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PendingChange(BaseModel):
    """A caller-recorded description of edits awaiting review.

    Attributes:
        id: Millisecond identifier, unique within its store.
        timestamp: When the change was saved.
        repo_name: Repository the change belongs to.
        project_path: Working directory of that repository.
        files: Files touched by the change.
        content: Description of the change.
        reviewed: Whether the change has been returned by a review call.
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    timestamp: str = Field(default_factory=utc_timestamp)
    repo_name: str = ""
    project_path: str = ""
    files: list[str] = Field(min_length=1)
    content: str = Field(min_length=1)
    reviewed: bool = False


class PushHistoryEntry(BaseModel):
    """Audit record of one push attempt."""

    model_config = ConfigDict(extra="ignore")

    id: int
    timestamp: str = Field(default_factory=utc_timestamp)
    repo_name: str = ""
    project_path: str = ""
    remote_name: str = ""
    local_branch: str = ""
    remote_branch: str = ""
    message: str
    success: bool
    error: str | None = None
    exit_code: int | None = None


class OperationLogEntry(BaseModel):
    """One journaled RPC exchange.

    ``params`` and ``result`` hold JSON text so arbitrary payloads are stored
    verbatim.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    method: str
    params: str
    result: str | None = None
    error: str | None = None
    created_at: str = Field(default_factory=utc_timestamp)

    def to_log_line(self) -> str:
        """Render the entry as one line of the append-only text log."""
        return (
            f"{self.created_at} | {self.method} | {self.params} | "
            f"{self.error or 'SUCCESS'} | RESPONSE: {self.result or 'null'}\n"
        )
