"""Tool registry mapping tool names to argument models and handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from gitgate.exceptions import MethodNotFoundError
from gitgate.state import AppState
from gitgate.tools import changes, logs, push, repository
from gitgate.tools.arguments import (
    AddArgs,
    DiffArgs,
    LogArgs,
    OperationLogsArgs,
    PendingChangesArgs,
    PushArgs,
    SaveChangesArgs,
    SetLogDirArgs,
    ToolArguments,
)
from gitgate.tools.constants import ToolName, strip_tool_prefix
from gitgate.tools.responses import GuidanceResult

__all__ = ["TOOL_REGISTRY", "ToolHandler", "ToolSpec", "available_tools", "lookup_tool"]

ToolHandler = Callable[
    [AppState, Any, Any], Awaitable[dict[str, Any] | GuidanceResult]
]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """How to validate and run one tool.

    Attributes:
        name: Unprefixed tool name.
        arguments: Argument model.
        handler: Coroutine receiving the app state, the resolved context
            state (None when not context scoped) and the validated arguments.
        context_scoped: Whether the call is resolved to a repository context.
    """

    name: ToolName
    arguments: type[ToolArguments]
    handler: ToolHandler
    context_scoped: bool = True


TOOL_REGISTRY: dict[ToolName, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec(ToolName.GIT_PUSH, PushArgs, push.git_push),
        ToolSpec(ToolName.GIT_PULL, ToolArguments, repository.git_pull),
        ToolSpec(ToolName.GET_PUSH_HISTORY, ToolArguments, push.get_push_history),
        ToolSpec(ToolName.GET_OPERATION_LOGS, OperationLogsArgs, logs.get_operation_logs),
        ToolSpec(ToolName.SAVE_CHANGES, SaveChangesArgs, changes.save_changes),
        ToolSpec(
            ToolName.GET_PENDING_CHANGES, PendingChangesArgs, changes.get_pending_changes
        ),
        ToolSpec(ToolName.GIT_STATUS, ToolArguments, repository.git_status),
        ToolSpec(ToolName.GIT_DIFF, DiffArgs, repository.git_diff),
        ToolSpec(ToolName.GIT_ADD, AddArgs, repository.git_add),
        ToolSpec(ToolName.GIT_LOG, LogArgs, repository.git_log),
        ToolSpec(
            ToolName.SET_LOG_DIR, SetLogDirArgs, logs.set_log_dir, context_scoped=False
        ),
    )
}


def available_tools(state: AppState) -> list[ToolName]:
    """Tools exposed by this server, in listing order.

    ``set_log_dir`` is only offered in multi-instance mode without a configured
    log directory.
    """
    return [
        name
        for name in TOOL_REGISTRY
        if name is not ToolName.SET_LOG_DIR or not state.log_dir_configured
    ]


def lookup_tool(state: AppState, name: Any) -> ToolSpec:
    """Find the ToolSpec for a (possibly prefixed) tool name.

    Raises:
        MethodNotFoundError: If the tool does not exist or is not exposed.
    """
    if not isinstance(name, str) or not name:
        raise MethodNotFoundError("Missing tool name")
    try:
        tool = ToolName(strip_tool_prefix(name, state.tool_prefix))
    except ValueError:
        raise MethodNotFoundError(f"Unknown tool: {name}") from None
    if tool not in available_tools(state):
        raise MethodNotFoundError(f"Unknown tool: {name}")
    return TOOL_REGISTRY[tool]
