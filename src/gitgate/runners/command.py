"""Command runner for safe async subprocess execution.

This module provides the CommandRunner class for executing external commands
with timeout handling, streaming output, and proper error management.
"""

from __future__ import annotations

import asyncio
import codecs
import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from gitgate.exceptions import CommandFailedError, CommandTimeoutError, SpawnError
from gitgate.logging import get_logger
from gitgate.runners.models import CommandResult, StreamLine

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["CommandRunner", "LineHandler"]

logger = get_logger(__name__)

# Seconds between SIGTERM and SIGKILL on timeout
TERMINATION_GRACE_PERIOD: float = 2.0

# Bytes read per chunk; lines of any length are supported
READ_CHUNK_SIZE: int = 4096

#: Callback receiving each output line as it is produced
LineHandler = Callable[[StreamLine], None]

_RETRYABLE_PATTERNS: tuple[str, ...] = ("connection reset", "rate limit")


def _log_line(line: StreamLine) -> None:
    logger.info("command_output", stream=line.stream, line=line.content)


class _StreamCollector:
    """Buffers one output stream and emits complete lines as they arrive."""

    def __init__(
        self,
        stream: Literal["stdout", "stderr"],
        started: float,
        on_line: LineHandler,
    ) -> None:
        self._stream = stream
        self._started = started
        self._on_line = on_line
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._chunks: list[str] = []
        self._partial = ""

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def feed(self, data: bytes, final: bool = False) -> None:
        text = self._decoder.decode(data, final=final)
        if not text and not final:
            return
        self._chunks.append(text)
        pending = self._partial + text
        *complete, self._partial = pending.split("\n")
        for content in complete:
            self._emit(content)
        if final and self._partial:
            self._emit(self._partial)
            self._partial = ""

    def _emit(self, content: str) -> None:
        self._on_line(
            StreamLine(
                content=content.rstrip("\r"),
                stream=self._stream,
                timestamp_ms=int((time.monotonic() - self._started) * 1000),
            )
        )


class CommandRunner:
    """Execute commands safely with timeout and environment control.

    Provides async command execution with:
    - Direct exec, never through a shell; stdin is closed for the child
    - Incremental stdout/stderr streaming to a line handler while buffering
      the full text for the result
    - Timeout handling with graceful termination (SIGTERM + grace period + SIGKILL)
    - Environment inheritance with per-runner and per-call overlays
    - Optional retries of transient failures (tenacity)

    Attributes:
        cwd: Default working directory for command execution.
        timeout: Default timeout in seconds (None for no timeout).

    Example:
        ```python
        runner = CommandRunner(cwd=Path("/project"), timeout=30.0)
        result = await runner.run(["git", "status", "--porcelain"])
        print(result.stdout)
        ```
    """

    def __init__(
        self,
        cwd: Path | None = None,
        timeout: float | None = 120.0,
        env: dict[str, str] | None = None,
        on_line: LineHandler | None = None,
    ) -> None:
        """Initialize the CommandRunner.

        Args:
            cwd: Working directory for commands. If None, uses current directory.
            timeout: Default timeout in seconds. Use None for no timeout.
            env: Additional environment variables to merge with os.environ.
            on_line: Receives every output line. Defaults to logging each
                line to the diagnostic stream.
        """
        self._cwd = cwd
        self._timeout = timeout
        self._extra_env = env or {}
        self._on_line = on_line or _log_line

    @property
    def cwd(self) -> Path | None:
        """Working directory for command execution."""
        return self._cwd

    @property
    def timeout(self) -> float | None:
        """Default timeout in seconds."""
        return self._timeout

    def _build_env(self, extra_env: dict[str, str] | None = None) -> dict[str, str]:
        """Build environment by merging parent env with overrides."""
        env = os.environ.copy()
        env.update(self._extra_env)
        if extra_env:
            env.update(extra_env)
        return env

    def is_retryable(self, error: BaseException) -> bool:
        """Determine if a failed execution should be retried.

        Args:
            error: The exception raised by a single execution.

        Returns:
            True for timeouts and transient network failures.
        """
        if isinstance(error, CommandTimeoutError):
            return True
        if isinstance(error, CommandFailedError):
            stderr = error.stderr.lower()
            return any(pattern in stderr for pattern in _RETRYABLE_PATTERNS)
        return False

    async def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
        max_retries: int = 0,
        retry_delay: float = 1.0,
        check: bool = True,
    ) -> CommandResult:
        """Execute a command and return the result.

        Args:
            command: Command and arguments as a sequence (no shell expansion).
            cwd: Override working directory for this command.
            timeout: Override timeout. Use 0 or negative for no timeout.
            env: Additional environment variables for this command.
            max_retries: Retry attempts for retryable failures (default 0).
            retry_delay: Initial delay between retries in seconds; doubles on
                each retry.
            check: Raise CommandFailedError on a nonzero exit status.

        Returns:
            CommandResult with returncode, stdout, stderr, duration_ms.

        Raises:
            SpawnError: If the process cannot be started.
            CommandTimeoutError: If the command exceeds its timeout.
            CommandFailedError: If ``check`` is set and the exit status is nonzero.
        """
        effective_cwd = cwd if cwd is not None else self._cwd
        if effective_cwd is not None and not effective_cwd.is_dir():
            raise SpawnError(
                f"Working directory does not exist: {effective_cwd}",
                command=command,
                cwd=str(effective_cwd),
            )

        effective_timeout = timeout if timeout is not None else self._timeout
        if effective_timeout is not None and effective_timeout <= 0:
            effective_timeout = None

        effective_env = self._build_env(env)

        # stop_after_attempt(1) = no retries, (2) = 1 retry, etc.
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max_retries + 1),
            wait=wait_exponential(multiplier=retry_delay, min=retry_delay, max=10),
            retry=retry_if_exception(self.is_retryable),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "command_retry",
                        argv=list(command),
                        attempt=attempt.retry_state.attempt_number,
                    )
                result = await self._execute_once(
                    command, effective_cwd, effective_timeout, effective_env
                )
                if check and result.returncode != 0:
                    raise CommandFailedError(
                        f"Command exited with code {result.returncode}",
                        command=command,
                        exit_code=result.returncode,
                        stdout=result.stdout,
                        stderr=result.stderr,
                    )
        return result

    async def _execute_once(
        self,
        command: Sequence[str],
        cwd: Path | None,
        timeout: float | None,
        env: dict[str, str],
    ) -> CommandResult:
        """Execute a command once without retries."""
        start_time = time.monotonic()
        logger.info("command_started", argv=list(command), cwd=str(cwd or Path.cwd()))

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=env,
            )
        except FileNotFoundError as e:
            raise SpawnError(
                f"Command not found: {command[0]}",
                command=command,
                cwd=str(cwd) if cwd else None,
            ) from e
        except PermissionError as e:
            raise SpawnError(
                f"Permission denied: {command[0]}",
                command=command,
                cwd=str(cwd) if cwd else None,
            ) from e
        except OSError as e:
            raise SpawnError(
                f"Failed to start {command[0]}: {e}",
                command=command,
                cwd=str(cwd) if cwd else None,
            ) from e

        stdout = _StreamCollector("stdout", start_time, self._on_line)
        stderr = _StreamCollector("stderr", start_time, self._on_line)

        async def pump(
            reader: asyncio.StreamReader | None, collector: _StreamCollector
        ) -> None:
            if reader is None:
                return
            while True:
                chunk = await reader.read(READ_CHUNK_SIZE)
                if not chunk:
                    collector.feed(b"", final=True)
                    return
                collector.feed(chunk)

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    pump(process.stdout, stdout),
                    pump(process.stderr, stderr),
                    process.wait(),
                ),
                timeout=timeout,
            )
        except TimeoutError:
            await self._terminate(process)
            logger.error(
                "command_timed_out", argv=list(command), timeout_seconds=timeout
            )
            raise CommandTimeoutError(
                f"Command timed out after {timeout}s",
                command=command,
                timeout_seconds=timeout,
                stdout=stdout.text,
                stderr=stderr.text,
            ) from None

        duration_ms = int((time.monotonic() - start_time) * 1000)
        returncode = process.returncode if process.returncode is not None else -1
        logger.info(
            "command_finished",
            argv=list(command),
            returncode=returncode,
            duration_ms=duration_ms,
        )
        return CommandResult(
            returncode=returncode,
            stdout=stdout.text,
            stderr=stderr.text,
            duration_ms=duration_ms,
        )

    @staticmethod
    async def _terminate(process: asyncio.subprocess.Process) -> None:
        """Terminate a running process, escalating to SIGKILL after a grace period."""
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=TERMINATION_GRACE_PERIOD)
        except TimeoutError:
            process.kill()
            await process.wait()
