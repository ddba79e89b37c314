"""gitgate - a review-gated git command service for tool-calling agents.

gitgate speaks JSON-RPC 2.0 over stdio and exposes a small set of git
operations. Pushes are only allowed once the agent has reviewed the pending
changes it recorded with ``save_changes``.
"""

from __future__ import annotations

__version__ = "1.0.0"

__all__ = ["__version__"]
