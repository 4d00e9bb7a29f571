"""Delayrc Package

Layered key/value configuration with delayed references: values may
substitute other keys (``%{NAME}``), choose text conditionally
(``%{?NAME}...%{else}...%{}``) and compute key names (``%{*NAME}``).
"""

from .escapes import collapse_escapes, normalize_escapes
from .exceptions import (
    ConfigError,
    ConfigNotFoundError,
    DirectiveError,
    DoubleElseError,
    ElseWithoutIfError,
    FiWithoutIfError,
    IfWithoutFiError,
    OverlaySyntaxError,
    SelfReferenceError,
    ValidationError,
)
from .layering import Layering, LayeringBuilder, RcSources
from .options import OptionKind, RcOption, is_true, load_defaults, parse_integer
from .overlay import OverlayReader, read_overlay
from .redundancy import RedAtom, RedPair, Redundant, parse_redundant_flags
from .resolver import DelayedResolver
from .scanner import DirectiveKind, DirectiveSpan, find_next_directive, iter_directives
from .store import RcStore, ResolvedConfig, resolve_config

__version__ = "0.1.0"

__all__ = [
    "RcStore",
    "ResolvedConfig",
    "resolve_config",
    "RcOption",
    "OptionKind",
    "RcSources",
    "load_defaults",
    "is_true",
    "parse_integer",
    # Engine
    "DirectiveKind",
    "DirectiveSpan",
    "find_next_directive",
    "iter_directives",
    "Layering",
    "LayeringBuilder",
    "DelayedResolver",
    "collapse_escapes",
    "normalize_escapes",
    "OverlayReader",
    "read_overlay",
    # Redundancy flags
    "Redundant",
    "RedAtom",
    "RedPair",
    "parse_redundant_flags",
    # Errors
    "ConfigError",
    "ConfigNotFoundError",
    "ValidationError",
    "OverlaySyntaxError",
    "DirectiveError",
    "FiWithoutIfError",
    "ElseWithoutIfError",
    "DoubleElseError",
    "IfWithoutFiError",
    "SelfReferenceError",
]
