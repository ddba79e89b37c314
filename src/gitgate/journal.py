"""Persistent journal store for one repository context.

Each store owns three records:

* the operation log: every RPC exchange, capped in memory and appended to a
  text file without limit;
* the push history: one entry per push attempt, persisted as a JSON array;
* the pending changes: caller-recorded edits awaiting review, persisted as a
  JSON array.

Lists are kept most-recent-first and trimmed from the tail, so eviction is
strictly oldest-first. JSON files are rewritten atomically on every mutation.
Persistence failures are logged and never interrupt the caller.

Usage::

    store = JournalStore("web-app", directory=Path(".setting"))
    store.load()
    store.add_pending(files=["a.txt"], content="fix A", context=ctx)
"""

from __future__ import annotations

import json
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from atomicwrites import atomic_write  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from gitgate.constants import (
    MAX_OPERATION_LOGS,
    MAX_PENDING_CHANGES,
    MAX_PUSH_HISTORY,
    OPERATION_LOG_STEM,
    PENDING_CHANGES_STEM,
    PUSH_HISTORY_STEM,
)
from gitgate.logging import get_logger
from gitgate.models import (
    OperationLogEntry,
    PendingChange,
    PushHistoryEntry,
    RepositoryContext,
)

__all__ = ["JournalPaths", "JournalStore", "journal_paths"]

logger = get_logger(__name__)

_Record = TypeVar("_Record", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class JournalPaths:
    """Files backing one journal store.

    Attributes:
        directory: The log directory.
        operation_log: Append-only text log of RPC exchanges.
        push_history: JSON array of push attempts.
        pending_changes: JSON array of pending changes.
    """

    directory: Path
    operation_log: Path
    push_history: Path
    pending_changes: Path


def journal_paths(directory: Path, name: str | None = None, prefix: str = "") -> JournalPaths:
    """Build the file layout for a store.

    File names are ``[<prefix>.]<stem>[.<name>].<ext>``, so several
    repositories and several prefixed servers can share one directory.
    """
    head = f"{prefix}." if prefix else ""
    tail = f".{name}" if name else ""
    return JournalPaths(
        directory=directory,
        operation_log=directory / f"{head}{OPERATION_LOG_STEM}{tail}.log",
        push_history=directory / f"{head}{PUSH_HISTORY_STEM}{tail}.json",
        pending_changes=directory / f"{head}{PENDING_CHANGES_STEM}{tail}.json",
    )


def _to_json_text(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


class JournalStore:
    """Operation log, push history and pending changes of one context.

    Args:
        name: Repository name used to namespace file names; None for the
            implicit or server-level store.
        directory: Log directory. None keeps everything in memory until
            :meth:`relocate` is called.
        tool_prefix: Tool prefix used to namespace file names.
        max_operation_logs: In-memory operation log cap.
        max_push_history: Push history cap.
        max_pending_changes: Pending change cap.
    """

    def __init__(
        self,
        name: str | None = None,
        *,
        directory: Path | None = None,
        tool_prefix: str = "",
        max_operation_logs: int = MAX_OPERATION_LOGS,
        max_push_history: int = MAX_PUSH_HISTORY,
        max_pending_changes: int = MAX_PENDING_CHANGES,
    ) -> None:
        self._name = name
        self._prefix = tool_prefix
        self._directory = directory
        self._max_operation_logs = max_operation_logs
        self._max_push_history = max_push_history
        self._max_pending_changes = max_pending_changes
        self._operations: list[OperationLogEntry] = []
        self._push_history: list[PushHistoryEntry] = []
        self._pending: list[PendingChange] = []
        self._last_id = 0

    # ------------------------------------------------------------------
    # Location
    # ------------------------------------------------------------------

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def directory(self) -> Path | None:
        return self._directory

    @property
    def paths(self) -> JournalPaths | None:
        """File layout, or None while persistence is disabled."""
        if self._directory is None:
            return None
        return journal_paths(self._directory, self._name, self._prefix)

    @property
    def persistent(self) -> bool:
        return self._directory is not None

    def relocate(self, directory: Path) -> None:
        """Start persisting to ``directory``.

        Each JSON file already present there is loaded and replaces the
        matching in-memory list; a missing file is written from memory.
        """
        self._directory = directory
        paths = journal_paths(directory, self._name, self._prefix)
        if paths.push_history.exists():
            self._load_push_history(paths)
        else:
            self._save_push_history()
        if paths.pending_changes.exists():
            self._load_pending(paths)
        else:
            self._save_pending()
        logger.info("journal_relocated", store=self._name, directory=str(directory))

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Load push history and pending changes from disk.

        Missing files leave the lists empty; unreadable files are logged and
        treated as empty, and invalid entries are skipped. The operation log
        is not reloaded.
        """
        paths = self.paths
        if paths is None:
            return
        self._load_push_history(paths)
        self._load_pending(paths)
        logger.debug(
            "journal_loaded",
            store=self._name,
            push_history=len(self._push_history),
            pending_changes=len(self._pending),
        )

    def _load_push_history(self, paths: JournalPaths) -> None:
        self._push_history = self._load_records(
            paths.push_history, PushHistoryEntry, self._max_push_history
        )
        self._last_id = max([self._last_id, *(e.id for e in self._push_history)])

    def _load_pending(self, paths: JournalPaths) -> None:
        self._pending = self._load_records(
            paths.pending_changes, PendingChange, self._max_pending_changes
        )
        self._last_id = max([self._last_id, *(c.id for c in self._pending)])

    def _load_records(
        self, path: Path, model: type[_Record], cap: int
    ) -> list[_Record]:
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("journal_load_failed", path=str(path), error=str(e))
            return []
        if not isinstance(data, list):
            logger.error("journal_load_failed", path=str(path), error="expected a JSON array")
            return []
        records: list[_Record] = []
        for index, item in enumerate(data):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "journal_record_skipped", path=str(path), index=index, error=str(e)
                )
        return records[:cap]

    def _write_json(self, path: Path, records: Sequence[BaseModel]) -> None:
        content = json.dumps(
            [r.model_dump(mode="json") for r in records],
            indent=2,
            ensure_ascii=False,
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with atomic_write(str(path), mode="w", encoding="utf-8", overwrite=True) as f:
                f.write(content)
        except OSError as e:
            logger.error("journal_save_failed", path=str(path), error=str(e))

    def _save_push_history(self) -> None:
        paths = self.paths
        if paths is not None:
            self._write_json(paths.push_history, self._push_history)

    def _save_pending(self) -> None:
        paths = self.paths
        if paths is not None:
            self._write_json(paths.pending_changes, self._pending)

    def next_id(self) -> int:
        """Millisecond timestamp, strictly increasing within this store."""
        self._last_id = max(time.time_ns() // 1_000_000, self._last_id + 1)
        return self._last_id

    # ------------------------------------------------------------------
    # Operation log
    # ------------------------------------------------------------------

    def record_operation(
        self,
        method: str,
        params: Any,
        result: Any = None,
        error: str | None = None,
    ) -> OperationLogEntry:
        """Journal one exchange in memory and append it to the text log."""
        entry = OperationLogEntry(
            id=self.next_id(),
            method=method,
            params=_to_json_text(params if params is not None else {}),
            result=_to_json_text(result) if result is not None else None,
            error=error,
        )
        self._operations.insert(0, entry)
        del self._operations[self._max_operation_logs :]

        paths = self.paths
        if paths is not None:
            try:
                paths.directory.mkdir(parents=True, exist_ok=True)
                with open(paths.operation_log, "a", encoding="utf-8") as f:
                    f.write(entry.to_log_line())
            except OSError as e:
                logger.error(
                    "operation_log_write_failed",
                    path=str(paths.operation_log),
                    error=str(e),
                )
        return entry

    @property
    def operations(self) -> tuple[OperationLogEntry, ...]:
        """Journaled exchanges, newest first."""
        return tuple(self._operations)

    # ------------------------------------------------------------------
    # Push history
    # ------------------------------------------------------------------

    def record_push(
        self,
        context: RepositoryContext,
        message: str,
        *,
        error: str | None = None,
        exit_code: int | None = None,
    ) -> PushHistoryEntry:
        """Append a push attempt to the history and persist it."""
        entry = PushHistoryEntry(
            id=self.next_id(),
            message=message,
            success=error is None,
            error=error,
            exit_code=exit_code,
            **context.snapshot(),
        )
        self._push_history.insert(0, entry)
        del self._push_history[self._max_push_history :]
        self._save_push_history()
        return entry

    @property
    def push_history(self) -> tuple[PushHistoryEntry, ...]:
        """Push attempts, newest first."""
        return tuple(self._push_history)

    # ------------------------------------------------------------------
    # Pending changes
    # ------------------------------------------------------------------

    def add_pending(
        self,
        files: Sequence[str],
        content: str,
        context: RepositoryContext,
    ) -> PendingChange:
        """Record a pending change, evicting the oldest beyond the cap."""
        change = PendingChange(
            id=self.next_id(),
            repo_name=context.repo_name,
            project_path=str(context.working_directory),
            files=list(files),
            content=content,
        )
        self._pending.insert(0, change)
        del self._pending[self._max_pending_changes :]
        self._save_pending()
        return change

    def mark_reviewed(self, changes: Sequence[PendingChange]) -> None:
        """Flag the given pending changes as reviewed and persist."""
        ids = {c.id for c in changes if not c.reviewed}
        if not ids:
            return
        self._pending = [
            c.model_copy(update={"reviewed": True}) if c.id in ids else c
            for c in self._pending
        ]
        self._save_pending()

    def clear_pending(self) -> int:
        """Remove all pending changes. Returns how many were removed."""
        count = len(self._pending)
        self._pending = []
        self._save_pending()
        return count

    @property
    def pending_changes(self) -> tuple[PendingChange, ...]:
        """Pending changes, newest first."""
        return tuple(self._pending)
