"""gitgate exception hierarchy.

All exceptions can be imported from this package:
    from gitgate.exceptions import CommandFailedError, InvalidArgumentError
"""

from __future__ import annotations

# Base exception
from gitgate.exceptions.base import GitGateError

# Configuration exceptions
from gitgate.exceptions.config import ConfigError

# JSON-RPC protocol exceptions
from gitgate.exceptions.rpc import (
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    RpcError,
)

# Subprocess runner exceptions
from gitgate.exceptions.runner import (
    CommandFailedError,
    CommandTimeoutError,
    RunnerError,
    SpawnError,
)

# Tool operation exceptions
from gitgate.exceptions.tools import (
    InvalidArgumentError,
    PushFailedError,
    RepositoryNotFoundError,
    ToolError,
)

__all__ = [
    "CommandFailedError",
    "CommandTimeoutError",
    "ConfigError",
    "GitGateError",
    "InvalidArgumentError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "ParseError",
    "PushFailedError",
    "RepositoryNotFoundError",
    "RpcError",
    "RunnerError",
    "SpawnError",
    "ToolError",
]
