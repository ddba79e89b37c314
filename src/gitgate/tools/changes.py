"""Pending change tools: save_changes and get_pending_changes.

Reading pending changes is what opens the review gate. Both the review call
and the multi-instance listing form of save_changes have that side effect.
"""

from __future__ import annotations

from typing import Any

from gitgate.logging import get_logger
from gitgate.state import AppState, ContextState
from gitgate.tools.arguments import PendingChangesArgs, SaveChangesArgs

__all__ = ["get_pending_changes", "save_changes"]

logger = get_logger(__name__)

_REVIEWED_MESSAGE = (
    "Found {count} pending change(s). Changes have been marked as reviewed. "
    "You can now proceed with git_push."
)


def _review(target: ContextState, offset: int, limit: int) -> list[dict[str, Any]]:
    """Open the gate and mark one page of pending changes reviewed."""
    target.gate.mark_reviewed()
    page = target.journal.pending_changes[offset : offset + limit]
    target.journal.mark_reviewed(page)
    ids = {c.id for c in page}
    return [
        c.model_dump(mode="json")
        for c in target.journal.pending_changes
        if c.id in ids
    ]


async def save_changes(
    state: AppState, target: ContextState, args: SaveChangesArgs
) -> dict[str, Any]:
    """Record a pending change, or list pending changes.

    Raises:
        InvalidArgumentError: If files or content are missing or empty.
    """
    if state.is_multi_instance and args.repo and args.is_listing:
        changes = _review(target, 0, args.limit)
        total = target.pending_count
        logger.info("pending_changes_listed", repo=args.repo, total=total)
        return {
            "success": True,
            "changes": changes,
            "total": total,
            "message": _REVIEWED_MESSAGE.format(count=total),
        }

    files, content = args.require_change()
    change = target.journal.add_pending(files, content, target.context)
    total = target.pending_count
    logger.info(
        "changes_saved",
        repo=target.context.name,
        change_id=change.id,
        files_count=len(files),
        pending=total,
    )
    return {
        "success": True,
        "change_id": change.id,
        "message": (
            f"Successfully saved {len(files)} file changes. "
            f"Total pending changes: {total}"
        ),
        "files_count": len(files),
        "content_length": len(content),
    }


async def get_pending_changes(
    state: AppState, target: ContextState, args: PendingChangesArgs
) -> dict[str, Any]:
    """Return a page of pending changes and mark the context reviewed."""
    changes = _review(target, args.offset, args.limit)
    total = target.pending_count
    logger.info(
        "pending_changes_reviewed",
        repo=target.context.name,
        total=total,
        returned=len(changes),
    )
    return {
        "changes": changes,
        "total": total,
        "limit": args.limit,
        "offset": args.offset,
        "hasMore": args.offset + args.limit < total,
        "reviewed": True,
        "message": (
            _REVIEWED_MESSAGE.format(count=total)
            if total
            else "No pending changes found."
        ),
    }
