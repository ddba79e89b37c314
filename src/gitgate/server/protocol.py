"""JSON-RPC 2.0 message model for the stdio protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gitgate.constants import JSONRPC_VERSION
from gitgate.exceptions import InvalidRequestError

__all__ = [
    "NOTIFICATION_PREFIX",
    "Request",
    "RpcMethod",
    "error_message",
    "parse_request",
    "result_message",
]

NOTIFICATION_PREFIX = "notifications/"


class RpcMethod(str, Enum):
    """Protocol methods understood by the dispatcher."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PING = "ping"
    SHUTDOWN = "shutdown"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    NOTIFICATIONS_EXIT = "notifications/exit"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_CALL = "prompts/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"
    LOGGING_LIST = "logging/list"
    LOGGING_READ = "logging/read"
    ROOTS_LIST = "roots/list"
    ROOTS_READ = "roots/read"


@dataclass(frozen=True, slots=True)
class Request:
    """A decoded JSON-RPC request or notification.

    Attributes:
        method: Method name.
        id: Request id; None for notifications.
        params: Parameters object (empty when omitted).
        is_notification: True when no response must be sent.
    """

    method: str
    id: Any = None
    params: dict[str, Any] = field(default_factory=dict)
    is_notification: bool = False


def parse_request(payload: Any) -> Request:
    """Validate a decoded JSON value as a JSON-RPC 2.0 request.

    Messages without an ``id`` and every ``notifications/*`` method are
    notifications.

    Raises:
        InvalidRequestError: If the payload is not a valid request object.
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError("Invalid Request: message must be a JSON object")
    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequestError("Unsupported JSON-RPC version")
    method = payload.get("method")
    if not isinstance(method, str) or not method:
        raise InvalidRequestError("Invalid Request: method must be a non-empty string")
    params = payload.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise InvalidRequestError("Invalid Request: params must be an object")
    return Request(
        method=method,
        id=payload.get("id"),
        params=params,
        is_notification="id" not in payload or method.startswith(NOTIFICATION_PREFIX),
    )


def result_message(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_message(
    request_id: Any,
    code: int,
    message: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}
