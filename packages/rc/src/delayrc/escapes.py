"""Decoding of escaped directive openers.

``%%{`` in a value stands for a literal ``%{``. The scanner never treats it
as a directive, so the escape survives resolution untouched and is decoded
here, once, after every key has been resolved.
"""

from typing import MutableMapping

ESCAPED_OPENER = "%%{"


def collapse_escapes(value: str) -> str:
    """Replace every ``%%{`` with ``%{`` in one left-to-right pass.

    Example:
        >>> collapse_escapes("100%%{x} and %%%{y}")
        '100%{x} and %%{y}'
    """
    pos = value.find(ESCAPED_OPENER)
    if pos < 0:
        return value
    parts = []
    start = 0
    while pos >= 0:
        parts.append(value[start:pos])
        start = pos + 1
        pos = value.find(ESCAPED_OPENER, pos + 3)
    parts.append(value[start:])
    return "".join(parts)


def normalize_escapes(values: MutableMapping[str, str]) -> None:
    """Apply ``collapse_escapes`` to every value of ``values`` in place."""
    for key, value in values.items():
        values[key] = collapse_escapes(value)
