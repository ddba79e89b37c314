"""JSON-RPC server: dispatcher and stdio transport.

Usage:
    from gitgate.server import RpcDispatcher, serve

    exit_code = await serve(RpcDispatcher(state))
"""

from __future__ import annotations

from gitgate.server.dispatcher import RpcDispatcher, error_code_for
from gitgate.server.protocol import Request, RpcMethod, parse_request
from gitgate.server.stdio import serve, write_message

__all__ = [
    "Request",
    "RpcDispatcher",
    "RpcMethod",
    "error_code_for",
    "parse_request",
    "serve",
    "write_message",
]
