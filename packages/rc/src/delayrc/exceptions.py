"""Custom exceptions for the rc package.

This module defines exception types for the rc package,
built on the common exception framework from delayrc_common.
"""

from delayrc_common import (
    ConfigurationError as BaseConfigurationError,
    NotFoundError,
    ValidationError as BaseValidationError,
)

# ConfigError is the package-level name for configuration failures
ConfigError = BaseConfigurationError


class ConfigNotFoundError(NotFoundError):
    """Raised when a requested configuration key is not found."""

    pass


class OverlaySyntaxError(BaseValidationError):
    """Raised when an overlay or defaults file cannot be parsed."""

    def __init__(self, path: str, line: int, message: str) -> None:
        super().__init__(
            f"{path}:{line}: {message}",
            context={"path": path, "line": line},
        )
        self.path = path
        self.line = line


class DirectiveError(BaseConfigurationError):
    """Raised when delayed substitution of a key cannot complete.

    Subclasses fix the ``reason`` text; every instance carries the key
    whose value was being expanded.
    """

    reason = "invalid directive"

    def __init__(self, key: str) -> None:
        super().__init__(
            f"{self.reason} in delayed substitution of {key}",
            context={"key": key, "reason": self.reason},
        )
        self.key = key


class FiWithoutIfError(DirectiveError):
    """A ``%{}`` terminator appeared with no open conditional."""

    reason = "FI without IF"


class ElseWithoutIfError(DirectiveError):
    """A ``%{else}`` appeared with no open conditional."""

    reason = "ELSE without IF"


class DoubleElseError(DirectiveError):
    """A conditional has two ``%{else}`` markers at the same depth."""

    reason = "double ELSE"


class IfWithoutFiError(DirectiveError):
    """A conditional was never closed by ``%{}``."""

    reason = "IF without FI"


class SelfReferenceError(DirectiveError):
    """A key depends on itself along the active expansion path."""

    reason = "self-reference"


# Re-exported so callers need only this module
ValidationError = BaseValidationError
