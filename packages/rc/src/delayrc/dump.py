"""Rendering of the option table as a commented rc file."""

from typing import Iterable

from .options import OptionKind, RcOption

_TYPE_NAMES = {
    OptionKind.BOOLEAN: "BOOLEAN",
    OptionKind.STRING: "STRING",
    OptionKind.INTEGER: "INTEGER",
}


def as_comment(text: str) -> str:
    """Continue every line after the first with ``# ``."""
    return text.replace("\n", "\n# ")


def dump_option(option: RcOption, use_defaults: bool = False) -> str:
    """Render one option.

    Shows the layered value (before delayed substitution) unless
    ``use_defaults`` is set, in which case the default is shown and the
    layered value goes into the trailing comment.
    """
    if option.kind is OptionKind.LOCAL:
        return f"# locally added:\n{option.key}='{option.raw_value}'\n\n"

    default = option.default_value
    value = option.raw_value
    output, comment = (default, value) if use_defaults else (value, default)
    text = (
        f"# {as_comment(_TYPE_NAMES[option.kind])}\n"
        f"# {as_comment(option.description)}\n"
        f"{option.key}='{output}'\n"
    )
    if not option.changed:
        return text + "\n"
    message = "was locally changed to:" if use_defaults else "changed locally, default was:"
    return text + f"# {message}\n# {option.key}='{as_comment(comment)}'\n\n"


def dump_defaults(options: Iterable[RcOption], use_defaults: bool = False) -> str:
    """Render every option, in table order."""
    return "".join(dump_option(option, use_defaults) for option in options)
