"""Tool surface exposed through ``tools/list`` and ``tools/call``.

Each tool is an async handler receiving the application state, the resolved
repository context state and a validated argument model. Handlers return a
plain dict (wrapped as one text block) or a GuidanceResult.

Usage:
    from gitgate.tools import build_tool_catalog, lookup_tool

    spec = lookup_tool(state, "git_status")
"""

from __future__ import annotations

from gitgate.tools.constants import ToolName, exposed_tool_name, strip_tool_prefix
from gitgate.tools.responses import GuidanceResult, success_response
from gitgate.tools.registry import TOOL_REGISTRY, ToolSpec, available_tools, lookup_tool
from gitgate.tools.catalog import build_tool_catalog, environment_snapshot

__all__ = [
    "GuidanceResult",
    "TOOL_REGISTRY",
    "ToolName",
    "ToolSpec",
    "available_tools",
    "build_tool_catalog",
    "environment_snapshot",
    "exposed_tool_name",
    "lookup_tool",
    "strip_tool_prefix",
    "success_response",
]
