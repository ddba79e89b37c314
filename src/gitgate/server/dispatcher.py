"""JSON-RPC dispatcher.

Maps protocol methods and tool names to handlers, converts failures to
JSON-RPC errors and journals every exchange exactly once. Tool calls are
journaled to the resolved repository's journal, everything else to the server
journal.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

from gitgate import __version__
from gitgate.constants import DEFAULT_PROTOCOL_VERSION
from gitgate.exceptions import (
    CommandFailedError,
    CommandTimeoutError,
    GitGateError,
    InvalidArgumentError,
    MethodNotFoundError,
    ParseError,
    PushFailedError,
    RepositoryNotFoundError,
    RpcError,
)
from gitgate.journal import JournalStore
from gitgate.logging import bind_context, clear_context, get_logger
from gitgate.server.protocol import (
    NOTIFICATION_PREFIX,
    Request,
    RpcMethod,
    error_message,
    parse_request,
    result_message,
)
from gitgate.state import AppState
from gitgate.tools import GuidanceResult, lookup_tool, success_response
from gitgate.tools.arguments import parse_arguments
from gitgate.tools.catalog import build_tool_catalog, environment_snapshot

__all__ = ["RpcDispatcher", "error_code_for"]

logger = get_logger(__name__)

INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

_MIRRORED_CAPABILITIES: tuple[str, ...] = ("prompts", "resources", "logging", "roots")

MethodHandler = Callable[[dict[str, Any]], Awaitable[Any]]


def _unsupported_read(kind: str) -> dict[str, Any]:
    return {"contents": [{"uri": "error://unsupported", "text": f"Unsupported {kind} read"}]}


def error_code_for(error: BaseException) -> tuple[int, dict[str, Any] | None]:
    """JSON-RPC error code and optional ``data`` for an exception."""
    if isinstance(error, RpcError):
        return error.code, None
    if isinstance(error, (InvalidArgumentError, RepositoryNotFoundError)):
        return INVALID_PARAMS, None
    if isinstance(error, (CommandFailedError, PushFailedError)):
        return INTERNAL_ERROR, {
            "exit_code": error.exit_code,
            "stdout": error.stdout,
            "stderr": error.stderr,
        }
    if isinstance(error, CommandTimeoutError):
        return INTERNAL_ERROR, {
            "exit_code": None,
            "stdout": error.stdout,
            "stderr": error.stderr,
            "timeout_seconds": error.timeout_seconds,
        }
    return INTERNAL_ERROR, None


class RpcDispatcher:
    """Routes decoded JSON-RPC messages to handlers.

    Args:
        state: Application state; the dispatcher is its only mutator.

    Attributes:
        exit_code: Set once the client asked the process to stop.
    """

    def __init__(self, state: AppState) -> None:
        self.state = state
        self.exit_code: int | None = None
        self._journal: JournalStore = state.server_journal
        self._methods: dict[RpcMethod, MethodHandler] = {
            RpcMethod.INITIALIZE: self._initialize,
            RpcMethod.TOOLS_LIST: self._tools_list,
            RpcMethod.TOOLS_CALL: self._tools_call,
            RpcMethod.PING: self._ping,
            RpcMethod.SHUTDOWN: self._shutdown,
            RpcMethod.NOTIFICATIONS_INITIALIZED: self._initialized,
            RpcMethod.NOTIFICATIONS_EXIT: self._shutdown,
            RpcMethod.PROMPTS_LIST: self._static({"prompts": []}),
            RpcMethod.PROMPTS_CALL: self._static(
                {
                    "messages": [
                        {
                            "role": "assistant",
                            "content": [
                                {"type": "text", "text": "Unsupported prompts call"}
                            ],
                        }
                    ]
                }
            ),
            RpcMethod.RESOURCES_LIST: self._static({"resources": []}),
            RpcMethod.RESOURCES_READ: self._static(_unsupported_read("resources")),
            RpcMethod.LOGGING_LIST: self._static({"logs": []}),
            RpcMethod.LOGGING_READ: self._static(_unsupported_read("logging")),
            RpcMethod.ROOTS_LIST: self._static({"roots": []}),
            RpcMethod.ROOTS_READ: self._static(_unsupported_read("roots")),
        }

    @property
    def should_exit(self) -> bool:
        return self.exit_code is not None

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def handle_line(self, line: str | bytes) -> dict[str, Any] | None:
        """Handle one input line; returns the response to write, if any."""
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        if not line.strip():
            return None
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as e:
            error = ParseError(f"Parse error: {e.msg}")
            logger.warning("rpc_parse_error", error=str(e))
            self.state.server_journal.record_operation(
                "parse_error", {"line": line.strip()[:1000]}, error=str(error)
            )
            return error_message(None, error.code, str(error))
        return await self.handle_message(payload)

    def reject_oversized_line(self) -> dict[str, Any]:
        """Journal a discarded over-long line; returns its parse error."""
        error = ParseError("Parse error: line too long")
        logger.warning("rpc_line_too_long")
        self.state.server_journal.record_operation(
            "parse_error", {"line_too_long": True}, error=str(error)
        )
        return error_message(None, error.code, str(error))

    async def handle_message(self, payload: Any) -> dict[str, Any] | None:
        """Dispatch a decoded message and journal the exchange."""
        is_object = isinstance(payload, dict)
        request_id = payload.get("id") if is_object else None
        raw_method = payload.get("method") if is_object else None
        method = raw_method if isinstance(raw_method, str) else "invalid_request"
        params = payload.get("params") if is_object else payload

        request: Request | None = None
        result: Any = None
        error_text: str | None = None
        self._journal = self.state.server_journal
        bind_context(rpc_method=method, request_id=request_id)
        try:
            request = parse_request(payload)
            result = await self._dispatch(request)
            if request.is_notification:
                return None
            return result_message(request.id, result)
        except GitGateError as e:
            error_text = str(e)
            code, data = error_code_for(e)
            logger.warning("rpc_request_failed", code=code, error=error_text)
            if request is not None and request.is_notification:
                return None
            return error_message(request_id, code, error_text, data)
        except Exception as e:
            error_text = f"Internal error: {e}"
            logger.exception("rpc_request_crashed")
            if request is not None and request.is_notification:
                return None
            return error_message(request_id, INTERNAL_ERROR, error_text)
        finally:
            self._journal.record_operation(method, params, result, error_text)
            clear_context()

    def record_event(self, event: str, params: dict[str, Any], status: str) -> None:
        """Journal a lifecycle event such as a signal or end of input."""
        self.state.server_journal.record_operation(event, params, {"status": status})

    # ------------------------------------------------------------------
    # Method handlers
    # ------------------------------------------------------------------

    async def _dispatch(self, request: Request) -> Any:
        try:
            method = RpcMethod(request.method)
        except ValueError:
            if request.method.startswith(NOTIFICATION_PREFIX):
                logger.debug("notification_ignored", method=request.method)
                return None
            raise MethodNotFoundError(f"Unknown method: {request.method}") from None
        return await self._methods[method](request.params)

    @staticmethod
    def _static(result: dict[str, Any]) -> MethodHandler:
        async def handler(params: dict[str, Any]) -> dict[str, Any]:
            return result

        return handler

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        state = self.state
        protocol_version = params.get("protocolVersion") or DEFAULT_PROTOCOL_VERSION
        client_capabilities = params.get("capabilities") or {}
        if not isinstance(client_capabilities, dict):
            raise InvalidArgumentError("capabilities must be an object", field="capabilities")
        if not state.initialized:
            state.initialized = True
            state.protocol_version = protocol_version
            state.client_info = dict(params.get("clientInfo") or {})
            state.client_capabilities = dict(client_capabilities)
            logger.info(
                "client_initialized",
                client=state.client_info.get("name"),
                protocol_version=protocol_version,
            )

        capabilities: dict[str, Any] = {"tools": {"listChanged": False}}
        for name in _MIRRORED_CAPABILITIES:
            if client_capabilities.get(name):
                capabilities[name] = {"listChanged": False}
        return {
            "protocolVersion": protocol_version,
            "capabilities": capabilities,
            "serverInfo": {"name": state.server_name, "version": __version__},
        }

    async def _initialized(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"status": "initialized"}

    async def _tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "tools": build_tool_catalog(self.state),
            "environment": environment_snapshot(self.state),
        }

    async def _tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        spec = lookup_tool(self.state, params.get("name"))
        args = parse_arguments(spec.arguments, params.get("arguments"))
        target = None
        if spec.context_scoped:
            target = self.state.resolve(args.repo)
            self._journal = target.journal
        bind_context(tool=spec.name.value, repo=args.repo)

        outcome = await spec.handler(self.state, target, args)
        if isinstance(outcome, GuidanceResult):
            return outcome.to_response()
        return success_response(outcome)

    async def _ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"pong": True}

    async def _shutdown(self, params: dict[str, Any]) -> None:
        logger.info("shutdown_requested")
        self.exit_code = 0
        return None
