"""Tool descriptors and the environment snapshot returned by ``tools/list``.

Descriptions embed the live configuration so the agent sees which branch and
directory a call will touch. In multi-instance mode every tool gains a
required ``repo`` argument enumerating the configured repositories.
"""

from __future__ import annotations

import json
from typing import Any

from gitgate import __version__
from gitgate.state import AppState
from gitgate.tools.constants import (
    LanguageHints,
    ToolName,
    exposed_tool_name,
    language_hints,
)
from gitgate.tools.registry import available_tools

__all__ = ["build_tool_catalog", "environment_snapshot"]


def _limit(description: str) -> dict[str, Any]:
    return {"type": "number", "description": description}


def _files(description: str) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


def _describe(
    tool: ToolName, state: AppState, hints: LanguageHints
) -> tuple[str, dict[str, Any], list[str], dict[str, Any]]:
    """Base description, properties, required names and example arguments."""
    review_tool = exposed_tool_name(ToolName.GET_PENDING_CHANGES, state.tool_prefix)
    if state.is_multi_instance:
        target = "the selected repository"
        push_line = "Push command: git push <remote> <local>:<remote_branch> <flags>"
    else:
        ctx = state.router.contexts[0]
        target = (
            f'"{ctx.local_branch}" to "{ctx.remote_name}/{ctx.remote_branch}" '
            f'in project path "{ctx.working_directory}"'
        )
        push_line = (
            f"Push command: git push {ctx.remote_name} {ctx.refspec} {ctx.push_flags}"
        ).rstrip()

    if tool is ToolName.GIT_PUSH:
        return (
            f"Execute git push command from {target}.\n\n"
            f"{push_line}\n\n"
            f"REQUIREMENT: You MUST call {review_tool} to review changes "
            "before using this tool.\n\n"
            "USAGE:\n"
            f"1. First call {review_tool} to review pending changes\n"
            "2. Then call this tool with the commit message parameter.\n\n"
            f"Please provide the commit message in {hints.name} language.\n\n"
            "NOTE: If the push result contains a branch merge URL, please "
            "output it to the user.\n\n"
            "The review status is reset after each push attempt "
            "(success or failure).",
            {
                "message": {
                    "type": "string",
                    "description": f"Commit message in {hints.name} language",
                }
            },
            ["message"],
            {"message": hints.commit_example},
        )
    if tool is ToolName.GIT_PULL:
        return (
            "Execute git pull command from the remote repository to the "
            "current branch.",
            {},
            [],
            {},
        )
    if tool is ToolName.GET_PUSH_HISTORY:
        return (
            "Get the last 5 push history records for the git repository. "
            "This tool should be called before using git_push to ensure the "
            "current changes have not been pushed before.",
            {},
            [],
            {},
        )
    if tool is ToolName.GET_OPERATION_LOGS:
        return (
            "Get operation logs for debugging and monitoring purposes.",
            {
                "limit": _limit("Limit count (1-1000), default 50"),
                "offset": _limit("Offset, default 0"),
            },
            [],
            {"limit": 50, "offset": 0},
        )
    if tool is ToolName.SAVE_CHANGES:
        properties: dict[str, Any] = {
            "files": _files("Array of modified file paths"),
            "content": {
                "type": "string",
                "description": (
                    f"Description of the changes made in {hints.name} language"
                ),
            },
        }
        description = (
            "Save pending changes before pushing. This tool records modified "
            "files and change content for review before git push.\n\n"
            f"Please provide the change description in {hints.name} language."
        )
        if state.is_multi_instance:
            properties["limit"] = _limit(
                "Limit count (1-1000), default 1000; used when files and "
                "content are omitted to list pending changes"
            )
            description += (
                "\n\nOmit files and content to list pending changes; listing "
                "marks them as reviewed."
            )
        return (
            description,
            properties,
            [] if state.is_multi_instance else ["files", "content"],
            {"files": ["src/main.py"], "content": hints.change_example},
        )
    if tool is ToolName.GET_PENDING_CHANGES:
        return (
            "Get pending changes that need to be reviewed before pushing. "
            "This tool MUST be called before git_push to enable pushing.\n\n"
            "Calling this tool marks the pending changes as reviewed.\n\n"
            "NOTE: Review status is valid only for the next push attempt.",
            {
                "limit": _limit("Limit count (1-1000), default 1000"),
                "offset": _limit("Offset, default 0"),
            },
            [],
            {"limit": 1000, "offset": 0},
        )
    if tool is ToolName.GIT_STATUS:
        return (
            "Show the working directory and staging area status.",
            {},
            [],
            {},
        )
    if tool is ToolName.GIT_DIFF:
        return (
            "Show changes between working directory and HEAD or staging area.",
            {
                "staged": {
                    "type": "boolean",
                    "description": (
                        "Show staged changes instead of unstaged, default false"
                    ),
                },
                "files": _files("Specific files to show diff for"),
            },
            [],
            {"staged": False, "files": ["src/main.py"]},
        )
    if tool is ToolName.GIT_ADD:
        return (
            "Add file contents to the staging area.",
            {"files": _files('Files to add (default: ["."] for all files)')},
            [],
            {"files": ["."]},
        )
    if tool is ToolName.GIT_LOG:
        return (
            "Show commit history.",
            {
                "limit": _limit("Number of commits to show (1-100), default 10"),
                "oneline": {
                    "type": "boolean",
                    "description": "Show commits in oneline format, default false",
                },
            },
            [],
            {"limit": 10, "oneline": False},
        )
    if tool is ToolName.SET_LOG_DIR:
        return (
            "Set the log directory path for storing git operation logs, push "
            "history and pending changes.\n\n"
            "This tool is required when no log directory is configured.",
            {
                "log_dir": {
                    "type": "string",
                    "description": (
                        'Path to the log directory (e.g., "D:/logs" or "/var/logs")'
                    ),
                }
            },
            ["log_dir"],
            {"log_dir": "./logs"},
        )
    raise AssertionError(f"undescribed tool: {tool}")


def _descriptor(tool: ToolName, state: AppState, hints: LanguageHints) -> dict[str, Any]:
    description, properties, required, example = _describe(tool, state, hints)
    properties = dict(properties)
    required = list(required)

    if state.is_multi_instance and tool is not ToolName.SET_LOG_DIR:
        names = list(state.router.names)
        listing = "\n".join(
            f"  - {ctx.repo_name}: {ctx.working_directory}"
            for ctx in state.router.contexts
        )
        description += f"\n\nAvailable repositories:\n{listing}"
        properties["repo"] = {
            "type": "string",
            "description": (
                f"Repository name, required. Available values: {', '.join(names)}"
            ),
            "enum": names,
        }
        required.append("repo")
        example = {"repo": names[0], **example}
    elif not state.is_multi_instance:
        name = state.router.contexts[0].name
        if name:
            description = f"[{name}] {description}"

    if example:
        description += f"\n\nExample: {json.dumps(example, ensure_ascii=False)}"

    return {
        "name": exposed_tool_name(tool, state.tool_prefix),
        "description": description,
        "inputSchema": {
            "type": "object",
            "properties": properties,
            "required": required,
        },
    }


def build_tool_catalog(state: AppState) -> list[dict[str, Any]]:
    """Descriptors for every exposed tool."""
    hints = language_hints(state.config.language)
    return [_descriptor(tool, state, hints) for tool in available_tools(state)]


def environment_snapshot(state: AppState) -> dict[str, Any]:
    """Configuration and review state reported alongside the tool list."""
    snapshot: dict[str, Any] = {
        "tool_prefix": state.tool_prefix,
        "language": state.config.language,
        "log_dir": str(state.log_dir) if state.log_dir else None,
        "multi_instance": state.is_multi_instance,
        "repositories": [
            {
                **ctx_state.context.snapshot(),
                "pull_source_branch": ctx_state.context.pull_branch,
                "git_push_flags": ctx_state.context.push_flags,
                "pending_changes_count": ctx_state.pending_count,
                "changes_reviewed": ctx_state.gate.reviewed,
            }
            for ctx_state in state.contexts.values()
        ],
        "serverInfo": {"name": state.server_name, "version": __version__},
    }
    if not state.is_multi_instance:
        only = next(iter(state.contexts.values()))
        snapshot["pending_changes_count"] = only.pending_count
        snapshot["changes_reviewed"] = only.gate.reviewed
    else:
        snapshot["pending_changes_count"] = sum(
            s.pending_count for s in state.contexts.values()
        )
    return snapshot
