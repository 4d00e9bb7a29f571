"""Recursive expansion of delayed references.

A value is expanded by repeatedly scanning for the next directive:

- ``%{NAME}`` is replaced by the fully expanded value of ``NAME``
- ``%{*NAME}`` does the same for the key ``<prefix> + NAME``, where the
  prefix is the expanded value of the prefix key
- ``%{?NAME}``/``%{!NAME}`` keep or drop the text up to the matching
  ``%{else}`` or ``%{}`` depending on the truth of ``NAME``

Expansion of a key finishes when no directive is left, at which point the
key leaves the has-directives set and later lookups return the stored text
directly. The set of keys on the current expansion path is passed down the
recursion; reaching one of them again is a self-reference.
"""

from __future__ import annotations

import logging
from typing import Iterable, MutableMapping, Set

from .exceptions import (
    DoubleElseError,
    ElseWithoutIfError,
    FiWithoutIfError,
    IfWithoutFiError,
    SelfReferenceError,
)
from .options import is_true
from .scanner import DirectiveKind, DirectiveSpan, find_next_directive

logger = logging.getLogger(__name__)

DEFAULT_PREFIX_KEY = "VARPREFIX"


class DelayedResolver:
    """Expands directives in a working map in place.

    Args:
        values: Working map; expanded values are written back
        has_directives: Keys still holding directives; shrinks as keys finish
        prefix_key: Key whose value prefixes ``%{*NAME}`` references
    """

    def __init__(
        self,
        values: MutableMapping[str, str],
        has_directives: Set[str],
        prefix_key: str = DEFAULT_PREFIX_KEY,
    ) -> None:
        self.values = values
        self.has_directives = has_directives
        self.prefix_key = prefix_key

    def resolve_all(self, keys: Iterable[str] | None = None) -> None:
        """Resolve every key, each with a fresh visited set.

        Two keys may legitimately share a dependency; a visited set that
        outlived one top-level call would report that as a cycle.
        """
        for key in list(self.values if keys is None else keys):
            self.resolve(key, set())

    def resolve(self, key: str, visited: Set[str] | None = None) -> str:
        """Expand all directives reachable from ``key``.

        Args:
            key: Key to expand
            visited: Keys on the active expansion path

        Returns:
            The expanded value

        Raises:
            DirectiveError: On malformed conditionals or self-reference
        """
        if visited is None:
            visited = set()
        value = self.values.get(key, "")
        if key not in self.has_directives:
            return value

        pos = 0
        while True:
            span = find_next_directive(value, pos)
            kind = span.kind
            if kind is DirectiveKind.NOT_FOUND:
                self.values[key] = value
                self.has_directives.discard(key)
                return value
            if kind is DirectiveKind.FI:
                raise FiWithoutIfError(key)
            if kind is DirectiveKind.ELSE:
                raise ElseWithoutIfError(key)

            text = self._resolve_reference(key, span, visited)
            if kind is DirectiveKind.VARIABLE:
                value = value[:span.start] + text + value[span.end:]
                pos = span.start + len(text)
                continue

            keep = is_true(text) == (kind is DirectiveKind.IF)
            value = self._apply_conditional(key, value, span, keep)
            # rescan the retained text; it may hold further directives
            pos = span.start

    def _resolve_reference(self, key: str, span: DirectiveSpan, visited: Set[str]) -> str:
        visited.add(key)
        try:
            if span.is_indirect:
                prefix = self._descend(key, self.prefix_key, visited)
                target = prefix + span.name[1:]
            else:
                target = span.name
            return self._descend(key, target, visited)
        finally:
            visited.discard(key)

    def _descend(self, key: str, target: str, visited: Set[str]) -> str:
        if target == key or target in visited:
            logger.debug(f"Cycle through {target} while expanding {key}")
            raise SelfReferenceError(target)
        return self.resolve(target, visited)

    def _apply_conditional(
        self, key: str, value: str, opening: DirectiveSpan, keep: bool
    ) -> str:
        """Cut a conditional block down to its selected branch.

        Args:
            key: Key being expanded (for error reports)
            value: Current text of the key
            opening: The ``%{?NAME}``/``%{!NAME}`` span
            keep: Whether the first branch is selected

        Returns:
            The text with the opening marker, the unselected branch, any
            ``%{else}`` and the closing ``%{}`` removed
        """
        # start of the text to drop at the matching else/fi, if any
        drop_from: int | None
        if keep:
            value = value[:opening.start] + value[opening.end:]
            drop_from = None
            cursor = opening.start
        else:
            drop_from = opening.start
            cursor = opening.end

        seen_else = False
        depth = 0
        while True:
            span = find_next_directive(value, cursor)
            kind = span.kind
            if kind is DirectiveKind.NOT_FOUND:
                raise IfWithoutFiError(key)

            if kind in (DirectiveKind.IF, DirectiveKind.NOTIF):
                depth += 1
                cursor = span.end
            elif kind is DirectiveKind.FI:
                if depth:
                    depth -= 1
                    cursor = span.end
                    continue
                if drop_from is None:
                    return value[:span.start] + value[span.end:]
                return value[:drop_from] + value[span.end:]
            elif kind is DirectiveKind.ELSE:
                if depth:
                    cursor = span.end
                    continue
                if seen_else:
                    raise DoubleElseError(key)
                seen_else = True
                if keep:
                    value = value[:span.start] + value[span.end:]
                    drop_from = span.start
                    cursor = span.start
                else:
                    value = value[:drop_from] + value[span.end:]
                    cursor = drop_from
                    drop_from = None
            else:
                cursor = span.end
