"""Tool result formatting helpers.

Plain tool results are serialized into a single text block. Guidance results
are successful tool results flagged ``isError`` that tell the agent which tool
to call next; they are never JSON-RPC errors.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from gitgate.constants import CHANGES_NOT_REVIEWED

__all__ = [
    "GuidanceResult",
    "changes_not_reviewed",
    "success_response",
]


def success_response(data: Any) -> dict[str, Any]:
    """Wrap a plain tool result as one text content block.

    Args:
        data: Result data to serialize.

    Returns:
        ``tools/call`` result payload.
    """
    text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    return {"content": [{"type": "text", "text": text}]}


@dataclass(frozen=True, slots=True)
class GuidanceResult:
    """A soft refusal carrying step-by-step instructions.

    Attributes:
        error_code: Machine-readable reason.
        messages: Text parts, in display order.
    """

    error_code: str
    messages: tuple[str, ...]

    def to_response(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": text} for text in self.messages],
            "isError": True,
            "errorCode": self.error_code,
        }


def changes_not_reviewed(
    review_tool: str,
    pending_count: int,
    repo: str | None = None,
) -> GuidanceResult:
    """Guidance returned when a push is attempted before review.

    Args:
        review_tool: Exposed (possibly prefixed) name of get_pending_changes.
        pending_count: Number of unreviewed pending changes.
        repo: Repository name to include in the example call.
    """
    example: dict[str, Any] = {"limit": 1000}
    if repo:
        example = {"repo": repo, **example}
    return GuidanceResult(
        error_code=CHANGES_NOT_REVIEWED,
        messages=(
            "ERROR: You must review pending changes before pushing code.",
            "REQUIRED ACTION: You must call the get_pending_changes tool "
            "to review pending changes.",
            f'TOOL NAME: "{review_tool}" - Use this tool to review pending changes.',
            f'TOOL CALL EXAMPLE: Call tools/call with name="{review_tool}" '
            f"and arguments: {json.dumps(example, ensure_ascii=False)}",
            f'STEP 1: Call "{review_tool}" tool to review all pending changes.',
            "STEP 2: After reviewing, you can then call git_push tool "
            "to proceed with the push.",
            "IMPORTANT: The review status will be reset after push attempt. "
            "You may need to review again for subsequent pushes.",
            f"Current pending changes: {pending_count} change(s).",
        ),
    )
