from __future__ import annotations

from typing import Any

from gitgate.exceptions.base import GitGateError


class ConfigError(GitGateError):
    """Exception for configuration loading, parsing, and validation errors.

    Raised when the startup configuration cannot be loaded or is inconsistent,
    for example a missing project path in single-instance mode or duplicate
    repository names in the multi-instance table.

    Attributes:
        message: Human-readable error message describing the configuration issue.
        field: Optional field name that caused the error (e.g., "local_branch").
        value: Optional value that failed validation (for debugging).

    Examples:
        ```python
        raise ConfigError(
            "Duplicate repository name in multi_instance",
            field="multi_instance",
            value="web-app",
        )
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
