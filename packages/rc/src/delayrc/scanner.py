"""Directive scanner for delayed references.

Finds ``%{...}`` directives in a configuration value and classifies them:

- ``%{NAME}`` / ``%{*NAME}`` - substitution (direct or indirect)
- ``%{?NAME}`` / ``%{!NAME}`` - start of a conditional block
- ``%{else}`` - alternative branch of the enclosing conditional
- ``%{}`` - end of the enclosing conditional

A marker preceded by ``%`` (``%%{``) is an escaped literal and never
reported. The scanner is pure: it only reads the string it is given.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

OPENER = "%{"


class DirectiveKind(Enum):
    """Classification of a scanned directive."""

    VARIABLE = "variable"
    IF = "if"
    NOTIF = "notif"
    ELSE = "else"
    FI = "fi"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class DirectiveSpan:
    """Location and meaning of one directive inside a value.

    Attributes:
        start: Offset of the ``%`` of the opening marker
        length: Number of characters up to and including the closing ``}``
        kind: What the directive does
        name: Referenced variable name (``*`` prefix kept for indirection);
            empty for Fi, Else and NotFound
    """

    start: int
    length: int
    kind: DirectiveKind
    name: str = ""

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def found(self) -> bool:
        return self.kind is not DirectiveKind.NOT_FOUND

    @property
    def is_indirect(self) -> bool:
        return self.name.startswith("*")


NOT_FOUND = DirectiveSpan(start=-1, length=0, kind=DirectiveKind.NOT_FOUND)


def _is_alpha(c: str) -> bool:
    return ("A" <= c <= "Z") or ("a" <= c <= "z")


def _is_first_name_char(c: str) -> bool:
    return c == "*" or c == "_" or _is_alpha(c)


def _is_name_char(c: str) -> bool:
    return c == "_" or ("0" <= c <= "9") or _is_alpha(c)


def find_next_directive(text: str, pos: int = 0) -> DirectiveSpan:
    """Find the next valid directive at or after ``pos``.

    Markers whose name violates the character set, or that are not closed
    by ``}`` right after the name, are skipped and the search continues two
    characters further on.

    Args:
        text: Value to scan
        pos: Offset to start searching from

    Returns:
        The span of the next directive, or ``NOT_FOUND``
    """
    size = len(text)
    while True:
        pos = text.find(OPENER, pos)
        if pos < 0:
            return NOT_FOUND
        if pos > 0 and text[pos - 1] == "%":
            pos += 2
            continue

        i = pos + 2
        c = text[i] if i < size else ""
        i += 1
        if c == "}":
            return DirectiveSpan(start=pos, length=i - pos, kind=DirectiveKind.FI)

        if c == "?":
            kind = DirectiveKind.IF
        elif c == "!":
            kind = DirectiveKind.NOTIF
        else:
            kind = DirectiveKind.VARIABLE
        if kind is not DirectiveKind.VARIABLE:
            c = text[i] if i < size else ""
            i += 1
        name_start = i - 1

        if not _is_first_name_char(c):
            pos += 2
            continue
        while i < size and _is_name_char(text[i]):
            i += 1
        if i >= size or text[i] != "}":
            pos += 2
            continue

        name = text[name_start:i]
        i += 1
        if kind is DirectiveKind.VARIABLE and name.lower() == "else":
            return DirectiveSpan(start=pos, length=i - pos, kind=DirectiveKind.ELSE)
        return DirectiveSpan(start=pos, length=i - pos, kind=kind, name=name)


def iter_directives(text: str) -> Iterator[DirectiveSpan]:
    """Yield every directive of ``text`` from left to right."""
    pos = 0
    while True:
        span = find_next_directive(text, pos)
        if not span.found:
            return
        yield span
        pos = span.end
