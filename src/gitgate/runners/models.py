"""Data models for subprocess execution.

Frozen dataclasses with slots, mirroring how command output flows from the
runner to the git facade.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = [
    "CommandResult",
    "StreamLine",
]


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of executing a single command.

    Attributes:
        returncode: Exit code from the command (0 = success).
        stdout: Standard output captured from the command.
        stderr: Standard error captured from the command.
        duration_ms: Execution time in milliseconds.
        timed_out: True if the command exceeded its timeout limit.
    """

    returncode: int
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False

    @property
    def success(self) -> bool:
        """True if command completed successfully (returncode 0, no timeout)."""
        return self.returncode == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """Combined stdout and stderr for convenience."""
        if self.stderr:
            return f"{self.stdout}\n{self.stderr}" if self.stdout else self.stderr
        return self.stdout


@dataclass(frozen=True, slots=True)
class StreamLine:
    """A single line from streaming command output.

    Attributes:
        content: The line content without trailing newline.
        stream: Which output stream this line came from.
        timestamp_ms: Milliseconds since command start when line was received.
    """

    content: str
    stream: Literal["stdout", "stderr"]
    timestamp_ms: int
