"""Push workflow tools: git_push and get_push_history.

git_push moves through Blocked -> Staging -> Committing -> Pushing -> Done or
Failed. Staging and committing are attempt-log-continue steps; only the final
``git push`` can fail the call. Every attempt that gets past the review gate
resets the gate and is recorded in the push history.
"""

from __future__ import annotations

from typing import Any

from gitgate.constants import PUSH_HISTORY_WINDOW
from gitgate.exceptions import CommandFailedError, PushFailedError, RunnerError
from gitgate.git import GitRepository, is_nothing_to_commit
from gitgate.logging import get_logger
from gitgate.runners import CommandResult
from gitgate.state import AppState, ContextState
from gitgate.tools.arguments import PushArgs, ToolArguments
from gitgate.tools.constants import ToolName, exposed_tool_name
from gitgate.tools.responses import GuidanceResult, changes_not_reviewed

__all__ = ["get_push_history", "git_push"]

logger = get_logger(__name__)


async def _stage(git: GitRepository) -> None:
    """Stage everything when the index is empty. Failures are logged only."""
    staged: tuple[str, ...] = ()
    try:
        staged = (await git.status()).staged
    except RunnerError as e:
        logger.warning("push_status_failed", error=str(e))

    if staged:
        logger.debug("push_stage_skipped", staged=len(staged))
        return
    try:
        await git.add((".",), timeout=git.timeouts.stage)
    except RunnerError as e:
        logger.warning("push_stage_failed", error=str(e))


async def _commit(git: GitRepository, message: str) -> None:
    """Commit the index. Failures are logged only."""
    try:
        await git.commit(message)
    except CommandFailedError as e:
        if is_nothing_to_commit(e):
            logger.info("push_nothing_to_commit")
        else:
            logger.warning(
                "push_commit_failed", error=str(e), stderr=e.stderr.strip()
            )
    except RunnerError as e:
        logger.warning("push_commit_failed", error=str(e))


def _push_failure(error: RunnerError) -> PushFailedError:
    exit_code = getattr(error, "exit_code", None)
    stdout = getattr(error, "stdout", "")
    stderr = getattr(error, "stderr", "")
    detail = str(error)
    if stderr.strip():
        detail = f"{detail}: {stderr.strip()}"
    return PushFailedError(
        f"Git push failed: {detail}",
        exit_code=exit_code,
        stdout=stdout,
        stderr=stderr,
    )


async def git_push(
    state: AppState, target: ContextState, args: PushArgs
) -> dict[str, Any] | GuidanceResult:
    """Stage, commit and push the context's changes.

    Returns:
        The push summary, or a guidance result when pending changes have not
        been reviewed.

    Raises:
        PushFailedError: If the final ``git push`` fails.
    """
    ctx = target.context
    pending = target.pending_count
    if target.gate.blocks(pending):
        logger.warning("push_blocked_unreviewed", repo=ctx.name, pending=pending)
        return changes_not_reviewed(
            exposed_tool_name(ToolName.GET_PENDING_CHANGES, state.tool_prefix),
            pending,
            ctx.name,
        )

    logger.info("push_started", repo=ctx.name, refspec=ctx.refspec)
    result: CommandResult
    try:
        await _stage(target.git)
        await _commit(target.git, args.message)
        try:
            result = await target.git.push()
        except RunnerError as e:
            failure = _push_failure(e)
            target.journal.record_push(
                ctx, args.message, error=str(failure), exit_code=failure.exit_code
            )
            logger.error("push_failed", repo=ctx.name, error=str(failure))
            raise failure from e
    finally:
        target.gate.reset()

    cleared = target.journal.clear_pending()
    target.journal.record_push(ctx, args.message, exit_code=result.returncode)
    logger.info("push_succeeded", repo=ctx.name, cleared_changes=cleared)
    return {
        "success": True,
        "repo_name": ctx.repo_name,
        "project_path": str(ctx.working_directory),
        "remote_name": ctx.remote_name,
        "local_branch": ctx.local_branch,
        "remote_branch": ctx.remote_branch,
        "git_push_flags": ctx.push_flags,
        "message": args.message,
        "cleared_changes": cleared,
        "review_status_reset": True,
        "output": result.stdout,
        "error_output": result.stderr,
        "exit_code": result.returncode,
    }


async def get_push_history(
    state: AppState, target: ContextState, args: ToolArguments
) -> dict[str, Any]:
    """Return the most recent push attempts of the context."""
    history = target.journal.push_history
    records = [entry.model_dump(mode="json") for entry in history[:PUSH_HISTORY_WINDOW]]
    if records:
        message = (
            f"Found {len(records)} recent push record(s). Please review them to "
            "ensure your current changes have not been pushed before. After "
            "reviewing, you can proceed with git_push."
        )
    else:
        message = (
            "No push history found. This appears to be the first push. "
            "You can now proceed with git_push."
        )
    return {"total": len(history), "records": records, "message": message}
