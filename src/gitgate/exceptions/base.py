from __future__ import annotations


class GitGateError(Exception):
    """Base exception class for all gitgate-specific errors.

    Every error raised by gitgate derives from this class so the RPC
    dispatcher can translate domain failures into JSON-RPC error envelopes
    while letting genuinely unexpected exceptions surface as internal errors.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            await dispatcher.handle_message(request)
        except GitGateError as e:
            logger.error("request_failed", error=e.message)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the GitGateError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
