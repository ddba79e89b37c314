from __future__ import annotations

from collections.abc import Sequence

from gitgate.exceptions.base import GitGateError


class RunnerError(GitGateError):
    """Base exception for subprocess execution failures.

    Attributes:
        message: Human-readable error message.
        command: The argument vector that was executed.
    """

    def __init__(self, message: str, command: Sequence[str] | None = None) -> None:
        """Initialize the RunnerError.

        Args:
            message: Human-readable error message.
            command: The argument vector that was executed.
        """
        self.command = list(command) if command is not None else None
        super().__init__(message)


class SpawnError(RunnerError):
    """The process could not be started.

    Raised for a missing executable, missing permissions, or a working
    directory that does not exist.

    Attributes:
        message: Human-readable error message.
        command: The argument vector that could not be spawned.
        cwd: Working directory the spawn was attempted in.
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        cwd: str | None = None,
    ) -> None:
        self.cwd = cwd
        super().__init__(message, command)


class CommandTimeoutError(RunnerError):
    """Command execution exceeded its timeout and was terminated.

    Attributes:
        message: Human-readable error message.
        command: The command that timed out.
        timeout_seconds: The timeout that was exceeded.
        stdout: Output captured before termination.
        stderr: Error output captured before termination.
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        timeout_seconds: float | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message, command)


class CommandFailedError(RunnerError):
    """Command exited with a nonzero status.

    Attributes:
        message: Human-readable error message.
        command: The command that failed.
        exit_code: Process exit status.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str] | None = None,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message, command)
