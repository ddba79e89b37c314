"""Argument models for tool calls.

Each tool validates its ``arguments`` object against one of these models.
Unknown keys are ignored; validation failures surface as
:class:`~gitgate.exceptions.InvalidArgumentError`.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gitgate.exceptions import InvalidArgumentError

__all__ = [
    "AddArgs",
    "DiffArgs",
    "LogArgs",
    "OperationLogsArgs",
    "PendingChangesArgs",
    "PushArgs",
    "SaveChangesArgs",
    "SetLogDirArgs",
    "ToolArguments",
    "parse_arguments",
]

_Args = TypeVar("_Args", bound="ToolArguments")


class ToolArguments(BaseModel):
    """Arguments shared by every tool.

    Attributes:
        repo: Repository name; required in multi-instance mode.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    repo: str | None = None


def _trimmed_files(value: Any) -> Any:
    if isinstance(value, str):
        value = [value]
    if isinstance(value, list):
        return [f.strip() if isinstance(f, str) else f for f in value]
    return value


class PushArgs(ToolArguments):
    message: str = Field(min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class SaveChangesArgs(ToolArguments):
    """``files`` and ``content`` may both be omitted to list pending changes
    in multi-instance mode."""

    files: list[str] | None = None
    content: str | None = None
    limit: int = Field(default=1000, ge=1, le=1000)

    @field_validator("files", mode="before")
    @classmethod
    def _trim_files(cls, v: Any) -> Any:
        return _trimmed_files(v)

    @field_validator("content", mode="before")
    @classmethod
    def _trim_content(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @property
    def is_listing(self) -> bool:
        return self.files is None and self.content is None

    def require_change(self) -> tuple[list[str], str]:
        """Return the validated files and content of a save.

        Raises:
            InvalidArgumentError: If either is missing or empty.
        """
        if not self.files:
            raise InvalidArgumentError(
                "files parameter must be a non-empty array", field="files"
            )
        if not all(self.files):
            raise InvalidArgumentError(
                "all files must be non-empty strings", field="files"
            )
        if not self.content:
            raise InvalidArgumentError(
                "content parameter must be a non-empty string", field="content"
            )
        return self.files, self.content


class PendingChangesArgs(ToolArguments):
    limit: int = Field(default=1000, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class OperationLogsArgs(ToolArguments):
    limit: int = Field(default=50, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class DiffArgs(ToolArguments):
    staged: bool = False
    files: list[str] = Field(default_factory=list)

    @field_validator("files", mode="before")
    @classmethod
    def _trim_files(cls, v: Any) -> Any:
        if v is None:
            return []
        return [f for f in _trimmed_files(v) if f != ""]


class AddArgs(ToolArguments):
    files: list[str] = Field(default_factory=lambda: ["."])

    @field_validator("files", mode="before")
    @classmethod
    def _trim_files(cls, v: Any) -> Any:
        if v is None:
            return ["."]
        files = [f for f in _trimmed_files(v) if f != ""]
        return files or ["."]


class LogArgs(ToolArguments):
    limit: int = Field(default=10, ge=1, le=100)
    oneline: bool = False


class SetLogDirArgs(ToolArguments):
    log_dir: str = Field(min_length=1)

    @field_validator("log_dir", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


def parse_arguments(model: type[_Args], arguments: Any) -> _Args:
    """Validate raw tool arguments against ``model``.

    Raises:
        InvalidArgumentError: Naming the first offending argument.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidArgumentError("arguments must be an object", field="arguments")
    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"]) or None
        prefix = f"Invalid argument '{field}'" if field else "Invalid arguments"
        raise InvalidArgumentError(
            f"{prefix}: {first_error['msg']}", field=field
        ) from e
