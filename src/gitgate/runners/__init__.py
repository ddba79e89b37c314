"""Subprocess runners for gitgate.

Exports:
    CommandRunner: async subprocess execution with timeout and retries
    CommandResult: outcome of a completed command
    StreamLine: one line of streamed output
"""

from __future__ import annotations

from gitgate.runners.command import CommandRunner
from gitgate.runners.models import CommandResult, StreamLine

__all__ = [
    "CommandResult",
    "CommandRunner",
    "StreamLine",
]
