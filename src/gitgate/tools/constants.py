"""Tool names and language tables for the gitgate tool surface."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "LanguageHints",
    "ToolName",
    "exposed_tool_name",
    "language_hints",
    "strip_tool_prefix",
]


class ToolName(str, Enum):
    """Unprefixed names of every tool the server can expose."""

    GIT_PUSH = "git_push"
    GIT_PULL = "git_pull"
    GET_PUSH_HISTORY = "get_push_history"
    GET_OPERATION_LOGS = "get_operation_logs"
    SAVE_CHANGES = "save_changes"
    GET_PENDING_CHANGES = "get_pending_changes"
    GIT_STATUS = "git_status"
    GIT_DIFF = "git_diff"
    GIT_ADD = "git_add"
    GIT_LOG = "git_log"
    SET_LOG_DIR = "set_log_dir"


@dataclass(frozen=True, slots=True)
class LanguageHints:
    """Language name and example texts embedded in tool descriptions.

    Attributes:
        name: Human-readable language name.
        commit_example: Example commit message.
        change_example: Example change description.
    """

    name: str
    commit_example: str
    change_example: str


_ENGLISH = LanguageHints(
    name="English",
    commit_example="Update project files",
    change_example="Fixed bug in user authentication",
)

_SIMPLIFIED_CHINESE = LanguageHints(
    name="Chinese",
    commit_example="更新项目文件",
    change_example="修复用户认证中的bug",
)

_LANGUAGES: dict[str, LanguageHints] = {
    "en": _ENGLISH,
    "zh": _SIMPLIFIED_CHINESE,
    "zh-CN": _SIMPLIFIED_CHINESE,
    "zh-TW": LanguageHints(
        name="Traditional Chinese",
        commit_example="更新專案檔案",
        change_example="修復用戶認證中的錯誤",
    ),
}


def language_hints(language: str) -> LanguageHints:
    """Hints for a language code; unknown codes keep English examples."""
    hints = _LANGUAGES.get(language)
    if hints is not None:
        return hints
    return LanguageHints(
        name=language,
        commit_example=_ENGLISH.commit_example,
        change_example=_ENGLISH.change_example,
    )


def exposed_tool_name(tool: ToolName, prefix: str = "") -> str:
    """Name a tool is listed under, ``<prefix>_<name>`` when prefixed."""
    return f"{prefix}_{tool.value}" if prefix else tool.value


def strip_tool_prefix(name: str, prefix: str = "") -> str:
    """Inverse of :func:`exposed_tool_name`; unprefixed names pass through."""
    if prefix and name.startswith(f"{prefix}_"):
        return name[len(prefix) + 1 :]
    return name
