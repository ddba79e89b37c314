"""Repository context model.

A RepositoryContext is the resolved configuration scoping one operation:
where the repository lives and how local branches map to the remote.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from gitgate.constants import DEFAULT_PUSH_FLAGS, DEFAULT_REMOTE

__all__ = ["RepositoryContext"]


class RepositoryContext(BaseModel):
    """Immutable repository configuration.

    Multi-instance tables may use either the snake_case field names or the
    upper-case keys used by environment-driven deployments (``REPO_NAME``,
    ``PROJECT_PATH``, ...).

    Attributes:
        name: Unique repository name; None for the implicit single context.
        working_directory: Directory git commands run in.
        remote_name: Remote pushed to and pulled from.
        local_branch: Local branch pushed.
        remote_branch: Remote branch receiving the push.
        pull_source_branch: Remote branch pulled; defaults to remote_branch.
        push_flags: Extra ``git push`` flags, whitespace separated.
        language: Language the agent should write messages in.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str | None = Field(
        default=None, validation_alias=AliasChoices("name", "REPO_NAME", "repo_name")
    )
    working_directory: Path = Field(
        validation_alias=AliasChoices(
            "working_directory", "PROJECT_PATH", "project_path"
        )
    )
    remote_name: str = Field(
        default=DEFAULT_REMOTE,
        validation_alias=AliasChoices("remote_name", "REMOTE_NAME"),
    )
    local_branch: str = Field(
        default="main",
        validation_alias=AliasChoices("local_branch", "LOCAL_BRANCH"),
    )
    remote_branch: str = Field(
        default="main",
        validation_alias=AliasChoices("remote_branch", "REMOTE_BRANCH"),
    )
    pull_source_branch: str | None = Field(
        default=None,
        validation_alias=AliasChoices("pull_source_branch", "PULL_SOURCE_BRANCH"),
    )
    push_flags: str = Field(
        default=DEFAULT_PUSH_FLAGS,
        validation_alias=AliasChoices("push_flags", "GIT_PUSH_FLAGS", "git_push_flags"),
    )
    language: str = Field(
        default="en", validation_alias=AliasChoices("language", "LANGUAGE")
    )

    @field_validator("name")
    @classmethod
    def _blank_name_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @property
    def repo_name(self) -> str:
        """Name for display and records; empty for the implicit context."""
        return self.name or ""

    @property
    def pull_branch(self) -> str:
        """Remote branch pulled by ``git_pull``."""
        return self.pull_source_branch or self.remote_branch

    @property
    def push_flag_list(self) -> list[str]:
        """Push flags tokenized on whitespace."""
        return self.push_flags.split()

    @property
    def refspec(self) -> str:
        """``<local>:<remote>`` mapping used by ``git push``."""
        return f"{self.local_branch}:{self.remote_branch}"

    def snapshot(self) -> dict[str, str]:
        """Context fields recorded alongside pushes and pending changes."""
        return {
            "repo_name": self.repo_name,
            "project_path": str(self.working_directory),
            "remote_name": self.remote_name,
            "local_branch": self.local_branch,
            "remote_branch": self.remote_branch,
        }
