from __future__ import annotations

from gitgate.exceptions.base import GitGateError


class RpcError(GitGateError):
    """Base exception for JSON-RPC protocol violations.

    Attributes:
        message: Human-readable error message.
        code: JSON-RPC error code reported to the caller.
    """

    code: int = -32603


class ParseError(RpcError):
    """An input line was not valid JSON."""

    code = -32700


class InvalidRequestError(RpcError):
    """The message is not a valid JSON-RPC 2.0 request object."""

    code = -32600


class MethodNotFoundError(RpcError):
    """The requested method or tool does not exist."""

    code = -32601
