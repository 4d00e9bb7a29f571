"""Common base classes shared by the delayrc packages.

- **Exceptions**: Unified exception hierarchy with context support

Example:
    ```python
    from delayrc_common import DelayrcError

    raise DelayrcError("Something went wrong", context={"key": "FORMAT"})
    ```
"""

from delayrc_common.exceptions import (
    ConfigurationError,
    DelayrcError,
    NotFoundError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "DelayrcError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
]
