from __future__ import annotations

from gitgate.exceptions.base import GitGateError


class ToolError(GitGateError):
    """Base exception for tool operation failures.

    Attributes:
        message: Human-readable error message.
    """

    pass


class InvalidArgumentError(ToolError):
    """Tool arguments failed validation.

    Attributes:
        message: Human-readable error message.
        field: Name of the offending argument, if known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class RepositoryNotFoundError(ToolError):
    """A caller-supplied repository name matched no configured context.

    Attributes:
        message: Human-readable error message.
        name: The repository name that was requested.
        available: Names of the configured repositories.
    """

    def __init__(
        self,
        name: str,
        available: tuple[str, ...] = (),
    ) -> None:
        self.name = name
        self.available = available
        message = f"Repository not found: {name}"
        if available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message)


class PushFailedError(ToolError):
    """The final ``git push`` step of the push workflow failed.

    Attributes:
        message: Human-readable error message.
        exit_code: Exit status of the push process, if it ran to completion.
        stdout: Captured standard output of the push.
        stderr: Captured standard error of the push.
    """

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)
