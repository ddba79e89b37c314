"""Git operations for gitgate.

Example:
    ```python
    from gitgate.git import GitRepository

    repo = GitRepository(context, runner)
    status = await repo.status()
    ```
"""

from __future__ import annotations

from gitgate.git.repository import (
    CommitInfo,
    GitRepository,
    GitStatus,
    is_nothing_to_commit,
    parse_log,
    parse_oneline_log,
    parse_porcelain,
)

__all__ = [
    "CommitInfo",
    "GitRepository",
    "GitStatus",
    "is_nothing_to_commit",
    "parse_log",
    "parse_oneline_log",
    "parse_porcelain",
]
