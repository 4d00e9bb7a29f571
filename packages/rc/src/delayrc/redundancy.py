"""Classifier for redundancy-flag settings.

A redundancy setting tells a consumer how to report redundant or obsolete
entries of one category. Its value is one rule, optionally followed by a
second rule::

    all-installed
    -some or all-uninstalled
    +all || no

Each rule is ``no``/``false``, ``some``, ``some-installed``,
``some-uninstalled``, ``all``, ``all-installed`` or ``all-uninstalled``,
with an optional ``+`` or ``-`` sign restricting it to installed or
uninstalled items. Rules are recorded as bits of the category in a pair of
``RedAtom`` masks.
"""

import logging
from dataclasses import dataclass, field
from enum import IntFlag

logger = logging.getLogger(__name__)

FALLBACK_RULE = "all-installed"
_SEPARATORS = frozenset({"or", "||", "|"})


class Redundant(IntFlag):
    """Categories of redundant configuration entries."""

    NOTHING = 0
    DOUBLE = 1 << 0
    DOUBLE_LINE = 1 << 1
    MIXED = 1 << 2
    WEAKER = 1 << 3
    STRANGE = 1 << 4
    NO_CHANGE = 1 << 5
    IN_KEYWORDS = 1 << 6
    MASK = 1 << 7
    DOUBLE_MASK = 1 << 8
    IN_MASK = 1 << 9
    UNMASK = 1 << 10
    DOUBLE_UNMASK = 1 << 11
    IN_UNMASK = 1 << 12
    DOUBLE_USE = 1 << 13
    IN_USE = 1 << 14
    DOUBLE_CFLAGS = 1 << 15
    IN_CFLAGS = 1 << 16


@dataclass
class RedAtom:
    """Bit masks describing one rule, one bit per category.

    Attributes:
        red: Report the category at all
        all: Report only if all entries are redundant (else: some)
        spc: The installed/uninstalled restriction below applies
        ins: Restrict to installed (else: uninstalled)
        only: A sign restricted the rule
        oins: The sign was ``+`` (else: ``-``)
    """

    red: Redundant = Redundant.NOTHING
    all: Redundant = Redundant.NOTHING
    spc: Redundant = Redundant.NOTHING
    ins: Redundant = Redundant.NOTHING
    only: Redundant = Redundant.NOTHING
    oins: Redundant = Redundant.NOTHING


@dataclass
class RedPair:
    """Primary and secondary rule of a redundancy setting."""

    first: RedAtom = field(default_factory=RedAtom)
    second: RedAtom = field(default_factory=RedAtom)


def apply_red_atom(token: str | None, red_type: Redundant, atom: RedAtom) -> bool:
    """Record one rule for ``red_type`` in ``atom``.

    Args:
        token: Rule text, or None for "no rule"
        red_type: Category bit(s) to update
        atom: Masks updated in place

    Returns:
        False if ``token`` is not a known rule
    """
    atom.only &= ~red_type
    if token is None:
        atom.red &= ~red_type
        return True

    if token.startswith("+"):
        token = token[1:]
        atom.only |= red_type
        atom.oins |= red_type
    elif token.startswith("-"):
        token = token[1:]
        atom.only |= red_type
        atom.oins &= ~red_type

    word = token.lower()
    if word in ("no", "false"):
        atom.red &= ~red_type
        return True

    scope, sep, restriction = word.partition("-")
    if scope not in ("some", "all"):
        return False
    if sep and restriction not in ("installed", "uninstalled"):
        return False

    atom.red |= red_type
    if scope == "all":
        atom.all |= red_type
    else:
        atom.all &= ~red_type
    if not restriction:
        atom.spc &= ~red_type
        return True
    atom.spc |= red_type
    if restriction == "installed":
        atom.ins |= red_type
    else:
        atom.ins &= ~red_type
    return True


def _parse_rules(tokens: list, red_type: Redundant, pair: RedPair) -> bool:
    if not tokens or not apply_red_atom(tokens[0], red_type, pair.first):
        return False
    rest = tokens[1:]
    if not rest:
        apply_red_atom(None, red_type, pair.second)
        return True
    if rest[0].lower() in _SEPARATORS:
        rest = rest[1:]
        if not rest:
            return False
    if not apply_red_atom(rest[0], red_type, pair.second):
        return False
    return len(rest) == 1


def parse_redundant_flags(
    value: str,
    red_type: Redundant,
    pair: RedPair | None = None,
    key: str = "",
) -> RedPair:
    """Parse a redundancy setting into ``pair``.

    An unparsable value is not fatal: a warning is logged and the value is
    treated as ``all-installed`` with no secondary rule.

    Args:
        value: Resolved setting text
        red_type: Category the setting configures
        pair: Pair to update (default: a fresh one)
        key: Setting name, used in the warning

    Returns:
        The updated pair
    """
    if pair is None:
        pair = RedPair()
    if _parse_rules(value.split(), red_type, pair):
        return pair

    logger.warning(
        f'{key} has unknown value "{value}"; '
        f'assuming value "{FALLBACK_RULE}" instead.'
    )
    apply_red_atom(FALLBACK_RULE, red_type, pair.first)
    apply_red_atom(None, red_type, pair.second)
    return pair
