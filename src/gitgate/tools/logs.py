"""Journal tools: get_operation_logs and set_log_dir."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from gitgate.state import AppState, ContextState
from gitgate.tools.arguments import OperationLogsArgs, SetLogDirArgs

__all__ = ["get_operation_logs", "set_log_dir"]


async def get_operation_logs(
    state: AppState, target: ContextState, args: OperationLogsArgs
) -> dict[str, Any]:
    """Return a page of journaled exchanges, newest first."""
    operations = target.journal.operations
    page = operations[args.offset : args.offset + args.limit]
    return {
        "logs": [entry.model_dump(mode="json") for entry in page],
        "total": len(operations),
        "limit": args.limit,
        "offset": args.offset,
        "hasMore": args.offset + args.limit < len(operations),
    }


async def set_log_dir(
    state: AppState, target: ContextState | None, args: SetLogDirArgs
) -> dict[str, Any]:
    """Switch every journal to a new directory, creating it if needed.

    Raises:
        OSError: If the directory cannot be created.
    """
    resolved = state.set_log_dir(Path(args.log_dir))
    return {
        "success": True,
        "log_dir": str(resolved),
        "message": f"Log directory set to: {resolved}",
    }
