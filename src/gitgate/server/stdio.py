"""Newline-delimited JSON-RPC over stdin/stdout.

Lines are handled strictly one at a time: each request, including its journal
write, completes before the next line is read. stdout carries nothing but
JSON-RPC responses.
"""

from __future__ import annotations

import asyncio
import json
import signal
import sys
from collections.abc import Callable
from typing import Any, BinaryIO, Protocol, TextIO

import anyio

from gitgate.logging import get_logger
from gitgate.server.dispatcher import RpcDispatcher

__all__ = [
    "LineReader",
    "LineTooLongError",
    "StreamLineReader",
    "open_stdin_reader",
    "serve",
    "write_message",
]

logger = get_logger(__name__)

#: Longest accepted input line in bytes
MAX_LINE_BYTES: int = 16 * 1024 * 1024

_STOP_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)


class LineReader(Protocol):
    """Anything with an awaitable ``readline`` returning b"" at end of input."""

    async def readline(self) -> bytes: ...


class LineTooLongError(ValueError):
    """An input line exceeded the reader limit and was discarded."""


class StreamLineReader:
    """Line reader over an asyncio stream that drops over-long lines whole.

    When a line exceeds the stream limit, the rest of it is read and thrown
    away up to and including its newline before :class:`LineTooLongError`
    is raised, so the tail is never mistaken for a new line.
    """

    def __init__(self, stream: asyncio.StreamReader) -> None:
        self._stream = stream

    async def readline(self) -> bytes:
        try:
            return await self._stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            return e.partial
        except asyncio.LimitOverrunError as e:
            await self._discard(e.consumed)
            raise LineTooLongError(str(e)) from e

    async def _discard(self, consumed: int) -> None:
        while True:
            await self._stream.readexactly(consumed)
            try:
                await self._stream.readuntil(b"\n")
                return
            except asyncio.IncompleteReadError:
                return
            except asyncio.LimitOverrunError as e:
                consumed = e.consumed


class _FileLineReader:
    """Reads lines from a regular file through a worker thread."""

    def __init__(self, stream: BinaryIO) -> None:
        self._file = anyio.wrap_file(stream)

    async def readline(self) -> bytes:
        return await self._file.readline()


async def open_stdin_reader() -> LineReader:
    """Attach a non-blocking line reader to stdin.

    Pipes and terminals are read through the event loop; regular files,
    which the loop cannot watch, through a worker thread.
    """
    reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
    loop = asyncio.get_running_loop()
    try:
        await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
        )
    except (ValueError, OSError):
        logger.debug("stdin_not_a_pipe")
        return _FileLineReader(sys.stdin.buffer)
    return StreamLineReader(reader)


def write_message(message: dict[str, Any], stream: TextIO | None = None) -> None:
    """Write one JSON-RPC message as a single line and flush."""
    out = stream if stream is not None else sys.stdout
    out.write(json.dumps(message, ensure_ascii=False, default=str) + "\n")
    out.flush()


async def _watch_signals(
    dispatcher: RpcDispatcher, scope: anyio.CancelScope
) -> None:
    with anyio.open_signal_receiver(*_STOP_SIGNALS) as signals:
        async for signum in signals:
            name = signal.Signals(signum).name
            logger.info("signal_received", signal=name)
            dispatcher.record_event(name, {"signal": name}, "shutting_down")
            dispatcher.exit_code = 0
            scope.cancel()
            return


async def _read_loop(
    dispatcher: RpcDispatcher,
    reader: LineReader,
    write: Callable[[dict[str, Any]], None],
) -> None:
    while not dispatcher.should_exit:
        try:
            line = await reader.readline()
        except LineTooLongError:
            write(dispatcher.reject_oversized_line())
            continue
        if not line:
            logger.info("stdin_closed")
            dispatcher.record_event("eof", {}, "shutting_down")
            return
        response = await dispatcher.handle_line(line)
        if response is not None:
            write(response)


async def serve(
    dispatcher: RpcDispatcher,
    *,
    reader: LineReader | None = None,
    write: Callable[[dict[str, Any]], None] = write_message,
    handle_signals: bool = True,
) -> int:
    """Serve JSON-RPC until shutdown, end of input or a stop signal.

    Args:
        dispatcher: Handles each decoded line.
        reader: Line source; defaults to stdin.
        write: Receives each response message; defaults to stdout.
        handle_signals: Stop cleanly on SIGTERM and SIGINT.

    Returns:
        Process exit code.
    """
    if reader is None:
        reader = await open_stdin_reader()
    elif isinstance(reader, asyncio.StreamReader):
        reader = StreamLineReader(reader)

    async with anyio.create_task_group() as tg:
        if handle_signals:
            tg.start_soon(_watch_signals, dispatcher, tg.cancel_scope)
        await _read_loop(dispatcher, reader, write)
        tg.cancel_scope.cancel()

    logger.info("server_stopped", exit_code=dispatcher.exit_code or 0)
    return dispatcher.exit_code or 0
