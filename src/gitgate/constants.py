"""Constants shared across gitgate modules."""

from __future__ import annotations

#: Server identity reported by ``initialize`` and ``tools/list``
SERVER_NAME: str = "gitgate"
MULTI_SERVER_NAME: str = "gitgate-multi"

#: Protocol version echoed when the client does not send one
DEFAULT_PROTOCOL_VERSION: str = "2025-06-18"

#: JSON-RPC version accepted on the wire
JSONRPC_VERSION: str = "2.0"

#: Retention caps (most-recent-first lists, oldest evicted first)
MAX_OPERATION_LOGS: int = 1000
MAX_PUSH_HISTORY: int = 100
MAX_PENDING_CHANGES: int = 50

#: Number of push history records returned by get_push_history
PUSH_HISTORY_WINDOW: int = 5

#: Default subprocess timeouts in seconds
READ_TIMEOUT: float = 30.0
STAGE_TIMEOUT: float = 60.0
PUSH_TIMEOUT: float = 300.0
PULL_TIMEOUT: float = 300.0

#: Default remote and push flags
DEFAULT_REMOTE: str = "origin"
DEFAULT_PUSH_FLAGS: str = "--progress"

#: Default log directory used in single-instance mode when none is configured
DEFAULT_LOG_DIR: str = ".setting"

#: Persisted file stems inside the log directory
OPERATION_LOG_STEM: str = "mcp-git"
PUSH_HISTORY_STEM: str = "push-history"
PENDING_CHANGES_STEM: str = "pending-changes"

#: Error code carried by the review soft-block
CHANGES_NOT_REVIEWED: str = "CHANGES_NOT_REVIEWED"
