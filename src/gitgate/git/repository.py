"""Subprocess-based git operations for one repository context.

Every operation builds an argument vector and runs the ``git`` binary through
:class:`~gitgate.runners.CommandRunner` in the context's working directory.
Only the text output of ``status --porcelain`` and ``log`` is parsed.

Example:
    ```python
    runner = CommandRunner(cwd=context.working_directory, timeout=30.0)
    repo = GitRepository(context, runner)
    status = await repo.status()
    if not status.staged:
        await repo.add()
    await repo.commit("feat: add feature")
    await repo.push()
    ```
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from gitgate.config import TimeoutConfig
from gitgate.exceptions import CommandFailedError
from gitgate.logging import get_logger
from gitgate.models import RepositoryContext
from gitgate.runners import CommandResult, CommandRunner

logger = get_logger(__name__)

__all__ = [
    "CommitInfo",
    "GitRepository",
    "GitStatus",
    "is_nothing_to_commit",
    "parse_log",
    "parse_oneline_log",
    "parse_porcelain",
]

# =============================================================================
# Constants
# =============================================================================

#: ``git log`` format: hash, author name, author email, date, subject
LOG_FORMAT: str = "--pretty=format:%H|%an|%ae|%ad|%s"

#: ``git log --oneline`` line
_ONELINE_PATTERN = re.compile(r"^(\w+)\s+(.+)$")

_NOTHING_TO_COMMIT: str = "nothing to commit"


# =============================================================================
# Value Objects (Return Types)
# =============================================================================


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Working tree status parsed from ``git status --porcelain``.

    Attributes:
        raw: Unparsed porcelain output.
        staged: Paths with index changes.
        unstaged: Tracked paths with working tree changes.
        untracked: Untracked paths.
    """

    raw: str
    staged: tuple[str, ...] = ()
    unstaged: tuple[str, ...] = ()
    untracked: tuple[str, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.raw.strip())


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """Single commit metadata.

    Attributes:
        hash: Commit hash (abbreviated in oneline mode).
        message: Subject line.
        author: Author name; None in oneline mode.
        email: Author email; None in oneline mode.
        date: Short author date; None in oneline mode.
    """

    hash: str
    message: str
    author: str | None = None
    email: str | None = None
    date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"hash": self.hash}
        for key in ("author", "email", "date"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["message"] = self.message
        return data


# =============================================================================
# Parsers
# =============================================================================


def _porcelain_path(entry: str) -> str:
    path = entry[3:]
    # Renames and copies are reported as "old -> new"
    if " -> " in path:
        path = path.split(" -> ", 1)[1]
    return path


def parse_porcelain(output: str) -> GitStatus:
    """Parse ``git status --porcelain`` (v1) output."""
    staged: list[str] = []
    unstaged: list[str] = []
    untracked: list[str] = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        index, worktree = line[0], line[1]
        path = _porcelain_path(line)
        if index == "?" and worktree == "?":
            untracked.append(path)
            continue
        if index not in (" ", "?", "!"):
            staged.append(path)
        if worktree not in (" ", "?", "!"):
            unstaged.append(path)
    return GitStatus(
        raw=output,
        staged=tuple(staged),
        unstaged=tuple(unstaged),
        untracked=tuple(untracked),
    )


def parse_log(output: str) -> list[CommitInfo]:
    """Parse ``git log`` output produced with :data:`LOG_FORMAT`."""
    commits: list[CommitInfo] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("|", 4)
        if len(parts) < 5:
            logger.debug("log_line_skipped", line=line)
            continue
        sha, author, email, date, subject = parts
        commits.append(
            CommitInfo(hash=sha, message=subject, author=author, email=email, date=date)
        )
    return commits


def parse_oneline_log(output: str) -> list[CommitInfo]:
    """Parse ``git log --oneline`` output."""
    commits: list[CommitInfo] = []
    for line in output.splitlines():
        match = _ONELINE_PATTERN.match(line.strip())
        if match:
            commits.append(CommitInfo(hash=match.group(1), message=match.group(2)))
    return commits


def is_nothing_to_commit(error: CommandFailedError) -> bool:
    """True when a failed ``git commit`` only reported a clean tree."""
    return (
        _NOTHING_TO_COMMIT in error.stdout.lower()
        or _NOTHING_TO_COMMIT in error.stderr.lower()
    )


# =============================================================================
# GitRepository
# =============================================================================


@dataclass
class GitRepository:
    """Async git operations scoped to one repository context.

    Attributes:
        context: Repository the commands run against.
        runner: Command runner; its default cwd is ignored in favour of the
            context's working directory.
        timeouts: Per-operation timeouts.
        push_retries: Retries for transient push/pull network failures.
    """

    context: RepositoryContext
    runner: CommandRunner
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    push_retries: int = 0

    async def _git(
        self,
        *args: str,
        timeout: float,
        max_retries: int = 0,
    ) -> CommandResult:
        return await self.runner.run(
            ["git", *args],
            cwd=self.context.working_directory,
            timeout=timeout,
            max_retries=max_retries,
        )

    async def status(self) -> GitStatus:
        """Run ``git status --porcelain`` and parse the result.

        Raises:
            RunnerError: If git fails, times out or cannot be spawned.
        """
        result = await self._git("status", "--porcelain", timeout=self.timeouts.read)
        return parse_porcelain(result.stdout)

    async def diff(self, *, staged: bool = False, files: Sequence[str] = ()) -> str:
        """Return ``git diff`` output, optionally of the index and selected paths."""
        args = ["diff"]
        if staged:
            args.append("--cached")
        if files:
            args.extend(["--", *files])
        result = await self._git(*args, timeout=self.timeouts.read)
        return result.stdout

    async def add(
        self, files: Sequence[str] = (".",), *, timeout: float | None = None
    ) -> CommandResult:
        """Stage paths with ``git add``."""
        return await self._git(
            "add", *(files or (".",)), timeout=timeout or self.timeouts.read
        )

    async def log(self, limit: int = 10, *, oneline: bool = False) -> list[CommitInfo]:
        """Return up to ``limit`` commits, newest first."""
        if oneline:
            result = await self._git(
                "log", "--oneline", "-n", str(limit), timeout=self.timeouts.read
            )
            return parse_oneline_log(result.stdout)
        result = await self._git(
            "log",
            LOG_FORMAT,
            "--date=short",
            "-n",
            str(limit),
            timeout=self.timeouts.read,
        )
        return parse_log(result.stdout)

    async def commit(self, message: str) -> CommandResult:
        """Run ``git commit -m <message>``.

        Raises:
            CommandFailedError: Also when there is nothing to commit; see
                :func:`is_nothing_to_commit`.
        """
        return await self._git("commit", "-m", message, timeout=self.timeouts.read)

    async def push(self) -> CommandResult:
        """Push ``<local>:<remote_branch>`` to the context's remote."""
        ctx = self.context
        return await self._git(
            "push",
            ctx.remote_name,
            ctx.refspec,
            *ctx.push_flag_list,
            timeout=self.timeouts.push,
            max_retries=self.push_retries,
        )

    async def pull(self) -> CommandResult:
        """Pull the context's pull source branch from its remote."""
        ctx = self.context
        return await self._git(
            "pull",
            ctx.remote_name,
            ctx.pull_branch,
            timeout=self.timeouts.pull,
            max_retries=self.push_retries,
        )
