"""Tests for option entries, predicates and defaults files."""

import json

import pytest

from delayrc.exceptions import OverlaySyntaxError, ValidationError
from delayrc.options import (
    OptionKind,
    RcOption,
    is_true,
    load_defaults,
    option_from_dict,
    parse_integer,
)


class TestRcOption:
    """Test option construction."""

    def test_current_value_defaults_to_default(self):
        option = RcOption("A", OptionKind.BOOLEAN, "true", description="flag")
        assert option.current_value == "true"
        assert option.raw_value == "true"
        assert not option.changed

    def test_local_option_has_no_default(self):
        option = RcOption.local("X", "value")
        assert option.kind is OptionKind.LOCAL
        assert option.current_value == "value"
        assert option.default_value == ""
        assert option.description == ""
        assert option.changed

    def test_changed(self):
        option = RcOption("A", OptionKind.STRING, "default")
        option.raw_value = "other"
        assert option.changed


@pytest.mark.parametrize(
    "value,expected",
    [
        ("true", True),
        ("True", True),
        ("1", True),
        ("yes", True),
        ("Y", True),
        ("ON", True),
        ("false", False),
        ("0", False),
        ("", False),
        ("yes please", False),
        (" true", False),
    ],
)
def test_is_true(value, expected):
    assert is_true(value) is expected


@pytest.mark.parametrize(
    "value,expected",
    [("12", 12), ("  7 days", 7), ("-3", -3), ("+4", 4), ("x1", 0), ("", 0)],
)
def test_parse_integer(value, expected):
    assert parse_integer(value) == expected


class TestDefaultsFiles:
    """Test loading a defaults table."""

    def test_option_from_dict(self):
        option = option_from_dict(
            {"key": "LIMIT", "type": "INTEGER", "default": 10, "description": "max"}
        )
        assert option == RcOption("LIMIT", OptionKind.INTEGER, "10", description="max")

    def test_option_from_dict_boolean_default(self):
        assert option_from_dict({"key": "F", "default": True}).default_value == "true"

    def test_unknown_type(self):
        with pytest.raises(ValidationError, match="Unknown option type"):
            option_from_dict({"key": "A", "type": "float"})

    def test_missing_key(self):
        with pytest.raises(ValidationError):
            option_from_dict({"type": "string"})

    def test_load_yaml(self, write_file):
        path = write_file(
            "defaults.yaml",
            "options:\n"
            "  - key: COLORED\n"
            "    type: boolean\n"
            "    default: true\n"
            "    description: Use colors\n"
            "  - key: FORMAT\n"
            "    default: '%{?COLORED}c%{}'\n",
        )
        options = load_defaults(path)
        assert [(o.key, o.kind, o.default_value) for o in options] == [
            ("COLORED", OptionKind.BOOLEAN, "true"),
            ("FORMAT", OptionKind.STRING, "%{?COLORED}c%{}"),
        ]

    def test_load_json_list(self, write_file):
        path = write_file("defaults.json", json.dumps([{"key": "A", "default": "1"}]))
        assert [o.key for o in load_defaults(path)] == ["A"]

    def test_load_yaml_syntax_error(self, write_file):
        path = write_file("defaults.yaml", "- key: A\n  default: [unclosed\n")
        with pytest.raises(OverlaySyntaxError) as exc_info:
            load_defaults(path)
        assert exc_info.value.path == str(path)
        assert exc_info.value.line > 0

    def test_load_json_syntax_error(self, write_file):
        path = write_file("defaults.json", '[{"key": "A",\n')
        with pytest.raises(OverlaySyntaxError):
            load_defaults(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(OverlaySyntaxError, match="cannot read file"):
            load_defaults(tmp_path / "missing.yaml")

    def test_load_invalid(self, write_file):
        path = write_file("defaults.yaml", "just a string\n")
        with pytest.raises(ValidationError):
            load_defaults(path)
