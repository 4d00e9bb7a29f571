"""Common exception hierarchy for the delayrc packages.

Every package error derives from ``DelayrcError`` so callers can catch the
whole family with one clause. Each exception may carry a ``context`` dict
with structured information about the failure (the offending key, a file
path, a line number).

Example:
    ```python
    from delayrc_common.exceptions import ConfigurationError, NotFoundError

    raise NotFoundError(
        "Unknown configuration key",
        context={"key": "COLOR_ORIGINAL"}
    )

    try:
        store.build()
    except DelayrcError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class DelayrcError(Exception):
    """Base exception for all delayrc packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (both are supported)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        # Details takes precedence if both are provided
        self.context = details or context or {}
        self.details = self.context


class ValidationError(DelayrcError):
    """Raised when input fails validation.

    Typical cases are malformed overlay files or defaults tables with an
    unknown option type.
    """

    pass


class ConfigurationError(DelayrcError):
    """Raised when configuration is invalid and cannot be resolved.

    Covers broken directive structure, self-referencing values and misuse
    of the store lifecycle.

    Example:
        ```python
        raise ConfigurationError(
            "double ELSE in delayed substitution of FORMAT",
            context={"key": "FORMAT", "reason": "double ELSE"}
        )
        ```
    """

    pass


class NotFoundError(DelayrcError):
    """Raised when a requested item is not found.

    Used for lookups of configuration keys and referenced files.
    """

    pass


__all__ = [
    "DelayrcError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
]
