"""Read-mostly git tools: status, diff, add, log and pull.

Failures of the underlying command propagate unchanged; the dispatcher turns
them into JSON-RPC errors carrying the command's output.
"""

from __future__ import annotations

from typing import Any

from gitgate.logging import get_logger
from gitgate.state import AppState, ContextState
from gitgate.tools.arguments import AddArgs, DiffArgs, LogArgs, ToolArguments

__all__ = ["git_add", "git_diff", "git_log", "git_pull", "git_status"]

logger = get_logger(__name__)


async def git_status(
    state: AppState, target: ContextState, args: ToolArguments
) -> dict[str, Any]:
    status = await target.git.status()
    return {
        "success": True,
        "status": status.raw.rstrip(),
        "has_changes": status.has_changes,
        "project_path": str(target.context.working_directory),
        "message": (
            "Working directory has uncommitted changes"
            if status.has_changes
            else "Working directory is clean"
        ),
        "staged": list(status.staged),
        "unstaged": list(status.unstaged),
        "untracked": list(status.untracked),
    }


async def git_diff(
    state: AppState, target: ContextState, args: DiffArgs
) -> dict[str, Any]:
    diff = await target.git.diff(staged=args.staged, files=args.files)
    return {
        "success": True,
        "diff": diff,
        "has_changes": bool(diff.strip()),
        "staged": args.staged,
        "files": args.files,
        "project_path": str(target.context.working_directory),
    }


async def git_add(
    state: AppState, target: ContextState, args: AddArgs
) -> dict[str, Any]:
    result = await target.git.add(args.files)
    logger.info("files_staged", repo=target.context.name, files=args.files)
    return {
        "success": True,
        "files_added": args.files,
        "output": result.stdout,
        "project_path": str(target.context.working_directory),
        "message": f"Successfully added {len(args.files)} file(s) to staging area",
    }


async def git_log(
    state: AppState, target: ContextState, args: LogArgs
) -> dict[str, Any]:
    commits = await target.git.log(args.limit, oneline=args.oneline)
    return {
        "success": True,
        "commits": [commit.to_dict() for commit in commits],
        "total": len(commits),
        "oneline": args.oneline,
    }


async def git_pull(
    state: AppState, target: ContextState, args: ToolArguments
) -> dict[str, Any]:
    """Pull the pull source branch (or the remote branch) from the remote."""
    ctx = target.context
    result = await target.git.pull()
    logger.info("pull_succeeded", repo=ctx.name, branch=ctx.pull_branch)
    return {
        "success": True,
        "remote_name": ctx.remote_name,
        "pull_source_branch": ctx.pull_branch,
        "project_path": str(ctx.working_directory),
        "output": result.stdout,
        "error_output": result.stderr,
        "message": f"Successfully pulled from {ctx.remote_name}/{ctx.pull_branch}",
    }
