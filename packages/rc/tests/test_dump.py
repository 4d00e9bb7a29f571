"""Tests for the option table dump."""

from delayrc.dump import as_comment, dump_defaults, dump_option
from delayrc.options import OptionKind, RcOption


def test_as_comment():
    assert as_comment("one\ntwo\nthree") == "one\n# two\n# three"


class TestDumpOption:
    """Test rendering of single entries."""

    def test_unchanged(self):
        option = RcOption("COLORED", OptionKind.BOOLEAN, "true", description="Use colors")
        assert dump_option(option) == (
            "# BOOLEAN\n"
            "# Use colors\n"
            "COLORED='true'\n"
            "\n"
        )

    def test_expanded_value_is_not_a_change(self):
        option = RcOption("FORMAT", OptionKind.STRING, "%{X}")
        option.current_value = "expanded"
        assert not option.changed
        assert dump_option(option).endswith("FORMAT='%{X}'\n\n")

    def test_changed_shows_default(self):
        option = RcOption("LIMIT", OptionKind.INTEGER, "10", description="Max\nitems")
        option.raw_value = "20"
        assert dump_option(option) == (
            "# INTEGER\n"
            "# Max\n# items\n"
            "LIMIT='20'\n"
            "# changed locally, default was:\n"
            "# LIMIT='10'\n"
            "\n"
        )

    def test_changed_with_defaults(self):
        option = RcOption("LIMIT", OptionKind.INTEGER, "10")
        option.raw_value = "20"
        assert dump_option(option, use_defaults=True) == (
            "# INTEGER\n"
            "# \n"
            "LIMIT='10'\n"
            "# was locally changed to:\n"
            "# LIMIT='20'\n"
            "\n"
        )

    def test_local(self):
        option = RcOption.local("EXTRA", "%{X}")
        assert dump_option(option) == "# locally added:\nEXTRA='%{X}'\n\n"


def test_dump_defaults_keeps_order():
    options = [
        RcOption("B", OptionKind.STRING, "b"),
        RcOption("A", OptionKind.STRING, "a"),
    ]
    text = dump_defaults(options)
    assert text.index("B='b'") < text.index("A='a'")
