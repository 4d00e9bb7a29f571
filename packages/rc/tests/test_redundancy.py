"""Tests for the redundancy-flag classifier."""

import logging

import pytest

from delayrc.redundancy import (
    RedAtom,
    RedPair,
    Redundant,
    apply_red_atom,
    parse_redundant_flags,
)

T = Redundant.MASK


def bits(atom):
    """Which masks have the T bit set."""
    return {name for name in ("red", "all", "spc", "ins", "only", "oins") if getattr(atom, name) & T}


class TestApplyRedAtom:
    """Test single rules."""

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("no", set()),
            ("FALSE", set()),
            ("some", {"red"}),
            ("some-installed", {"red", "spc", "ins"}),
            ("some-uninstalled", {"red", "spc"}),
            ("all", {"red", "all"}),
            ("All-Installed", {"red", "all", "spc", "ins"}),
            ("all-uninstalled", {"red", "all", "spc"}),
            ("+all", {"red", "all", "only", "oins"}),
            ("-some", {"red", "only"}),
        ],
    )
    def test_rules(self, token, expected):
        atom = RedAtom()
        assert apply_red_atom(token, T, atom)
        assert bits(atom) == expected

    @pytest.mark.parametrize("token", ["", "maybe", "all-", "some-both", "++all", "installed"])
    def test_unknown_rules(self, token):
        assert not apply_red_atom(token, T, RedAtom())

    def test_none_clears_red(self):
        atom = RedAtom(red=T, only=T)
        assert apply_red_atom(None, T, atom)
        assert bits(atom) == set()

    def test_other_categories_untouched(self):
        atom = RedAtom(red=Redundant.DOUBLE, all=Redundant.DOUBLE)
        apply_red_atom("no", T, atom)
        assert atom.red == Redundant.DOUBLE
        assert atom.all == Redundant.DOUBLE

    def test_no_clears_previous_rule(self):
        atom = RedAtom()
        apply_red_atom("all", T, atom)
        apply_red_atom("no", T, atom)
        assert not atom.red & T


class TestParseRedundantFlags:
    """Test whole settings."""

    def test_single_rule(self):
        pair = parse_redundant_flags("all-installed", T)
        assert bits(pair.first) == {"red", "all", "spc", "ins"}
        assert bits(pair.second) == set()

    @pytest.mark.parametrize("separator", ["or", "OR", "||", "|"])
    def test_two_rules_with_separator(self, separator):
        pair = parse_redundant_flags(f"-some {separator} all-uninstalled", T)
        assert bits(pair.first) == {"red", "only"}
        assert bits(pair.second) == {"red", "all", "spc"}

    def test_two_rules_without_separator(self):
        pair = parse_redundant_flags("+some all", T)
        assert bits(pair.first) == {"red", "only", "oins"}
        assert bits(pair.second) == {"red", "all"}

    def test_updates_given_pair(self):
        pair = RedPair()
        pair.first.red = Redundant.DOUBLE
        result = parse_redundant_flags("some", T, pair)
        assert result is pair
        assert pair.first.red == Redundant.DOUBLE | T

    @pytest.mark.parametrize(
        "value",
        ["", "bogus", "all or", "all or bogus", "all or some extra", "or all"],
    )
    def test_invalid_falls_back(self, value, caplog):
        with caplog.at_level(logging.WARNING):
            pair = parse_redundant_flags(value, T, key="REDUNDANT_IF_MASKED")
        assert bits(pair.first) == {"red", "all", "spc", "ins"}
        assert not pair.second.red & T
        assert 'REDUNDANT_IF_MASKED has unknown value' in caplog.text
        assert '"all-installed"' in caplog.text
