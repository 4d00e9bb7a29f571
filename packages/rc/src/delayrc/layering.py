"""Layering of defaults, overlay files and environment overrides.

Builds the working map that the resolver expands. Override order is strict:

1. the defaults table
2. the system overlay file
3. the user overlay file (``$HOME/<user_filename>``)
4. environment variables whose name equals a key already present

Afterwards every value is scanned for directives. Keys with substitutions or
conditionals are collected into the has-directives set, and every name they
reference that is not a known key is registered as a ``LOCAL`` option so the
resolver can find it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Set

from .options import RcOption
from .overlay import OverlayReader
from .scanner import DirectiveKind, iter_directives

logger = logging.getLogger(__name__)

DEFAULT_INDIRECT_PREFIXES = ("VAR_", "DIFF_VAR_")

_REFERENCE_KINDS = (DirectiveKind.VARIABLE, DirectiveKind.IF, DirectiveKind.NOTIF)


@dataclass
class RcSources:
    """Where overlay files are looked up.

    Attributes:
        system_path: System-wide overlay, below the root prefix
        user_filename: Per-user overlay, relative to ``$HOME``
        prefix_env: Environment variable naming an installation prefix
        configroot_env: Environment variable naming a configuration root
        use_user: Whether to read the per-user overlay at all
        user_path: Explicit per-user overlay, bypassing ``$HOME``
    """

    system_path: str = "/etc/delayrc"
    user_filename: str = ".delayrc"
    prefix_env: str = "EPREFIX"
    configroot_env: str = "CONFIGROOT"
    use_user: bool = True
    user_path: str | None = None

    def root_prefix(self, environ: Mapping[str, str]) -> str:
        """Prefix prepended to the system path."""
        return environ.get(self.prefix_env, "") + environ.get(self.configroot_env, "")

    def system_file(self, environ: Mapping[str, str]) -> Path:
        return Path(self.root_prefix(environ) + self.system_path)

    def user_file(self, environ: Mapping[str, str]) -> Path | None:
        """Per-user overlay, or None when it cannot or should not be read."""
        if not self.use_user:
            return None
        if self.user_path is not None:
            return Path(self.user_path)
        home = environ.get("HOME")
        if not home:
            logger.warning("No $HOME found in environment.")
            return None
        return Path(home) / self.user_filename


@dataclass
class Layering:
    """Result of the layering step.

    Attributes:
        options: Defaults followed by discovered LOCAL entries
        values: Working map, one entry per option
        has_directives: Keys whose value still holds directives
    """

    options: List[RcOption]
    values: Dict[str, str]
    has_directives: Set[str] = field(default_factory=set)


class LayeringBuilder:
    """Merges all configuration sources into a working map.

    Args:
        options: Defaults table; entries are updated in place
        sources: Overlay file locations
        environ: Environment (default: os.environ)
        reader: Overlay reader (default: one bound to ``environ``)
        indirect_prefixes: Prefixes registered for every ``%{*NAME}``
    """

    def __init__(
        self,
        options: Sequence[RcOption],
        sources: RcSources | None = None,
        environ: Mapping[str, str] | None = None,
        reader: OverlayReader | None = None,
        indirect_prefixes: Sequence[str] = DEFAULT_INDIRECT_PREFIXES,
    ) -> None:
        self.options = list(options)
        self.sources = sources or RcSources()
        self.environ = os.environ if environ is None else environ
        self.reader = reader or OverlayReader(environ=self.environ)
        self.indirect_prefixes = tuple(indirect_prefixes)
        self._known: Set[str] = set()
        self._values: Dict[str, str] = {}

    def build(self) -> Layering:
        """Run the layering step.

        Returns:
            Options, working map and has-directives set
        """
        merged = self.merge_sources()

        self._values = {}
        self._known = set()
        for option in self.options:
            option.current_value = merged.get(option.key, "")
            option.raw_value = option.current_value
            self._values[option.key] = option.current_value
            self._known.add(option.key)

        has_directives = self._discover(merged)
        logger.debug(
            f"Layered {len(self.options)} options, "
            f"{len(has_directives)} with delayed references"
        )
        return Layering(self.options, self._values, has_directives)

    def merge_sources(self) -> Dict[str, str]:
        """Merge defaults, overlay files and environment into one map."""
        merged: Dict[str, str] = {}
        for option in self.options:
            merged[option.key] = option.default_value

        self.reader.read(self.sources.system_file(self.environ), merged)
        user_file = self.sources.user_file(self.environ)
        if user_file is not None:
            self.reader.read(user_file, merged)

        for key in merged:
            if key in self.environ:
                merged[key] = self.environ[key]
        return merged

    def _discover(self, merged: Mapping[str, str]) -> Set[str]:
        """Scan option values and register indirectly referenced keys.

        Options appended by ``join_delayed`` are scanned as well, so
        references reached only through other references are found too.
        """
        has_directives: Set[str] = set()
        i = 0
        while i < len(self.options):
            option = self.options[i]
            i += 1
            for span in iter_directives(option.current_value):
                if span.kind not in _REFERENCE_KINDS:
                    continue
                has_directives.add(option.key)
                if span.is_indirect:
                    suffix = span.name[1:]
                    for prefix in self.indirect_prefixes:
                        self.join_delayed(prefix + suffix, merged)
                else:
                    self.join_delayed(span.name, merged)
        return has_directives

    def join_delayed(self, key: str, merged: Mapping[str, str]) -> None:
        """Register ``key`` as a LOCAL option unless it is already known.

        The value comes from the merged overlays (which already include
        environment overrides), else from the environment, else is empty.
        """
        if key in self._known:
            return
        if key in merged:
            value = merged[key]
        else:
            value = self.environ.get(key, "")
        logger.debug(f"Registering local option {key}")
        self.options.append(RcOption.local(key, value))
        self._known.add(key)
        self._values[key] = value
