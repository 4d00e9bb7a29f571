"""Option table entries and value predicates."""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml  # type: ignore[import-untyped]

from .exceptions import OverlaySyntaxError, ValidationError

TRUE_WORDS = frozenset({"true", "1", "yes", "y", "on"})

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class OptionKind(Enum):
    """Type of a configuration entry."""

    BOOLEAN = "boolean"
    STRING = "string"
    INTEGER = "integer"
    LOCAL = "local"


@dataclass
class RcOption:
    """One entry of the configuration table.

    ``LOCAL`` entries carry no default or description; they are created for
    keys that are only referenced from other values or added ad hoc.

    Attributes:
        key: Variable name
        kind: Declared type
        default_value: Value from the defaults table
        current_value: Layered value, replaced by the expanded text once
            the store has been resolved
        description: Free text shown in dumps
        raw_value: Layered value before expansion
    """

    key: str
    kind: OptionKind = OptionKind.STRING
    default_value: str = ""
    current_value: str = ""
    description: str = ""
    raw_value: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        self.current_value = self.current_value or self.default_value
        self.raw_value = self.raw_value or self.current_value
        if self.kind is OptionKind.LOCAL:
            self.default_value = ""
            self.description = ""

    @classmethod
    def local(cls, key: str, value: str = "") -> "RcOption":
        """Create a LOCAL entry holding ``value``."""
        return cls(key=key, kind=OptionKind.LOCAL, current_value=value)

    @property
    def changed(self) -> bool:
        """Whether the layered value differs from the default."""
        return self.raw_value != self.default_value


def is_true(value: str) -> bool:
    """Interpret a value with the boolean truth predicate.

    ``true``, ``1``, ``yes``, ``y`` and ``on`` (any case) are true;
    everything else, including the empty string, is false.
    """
    return value.lower() in TRUE_WORDS


def parse_integer(value: str) -> int:
    """Read the leading integer of a value, ``0`` if there is none."""
    match = _LEADING_INT.match(value)
    if match is None:
        return 0
    return int(match.group(1))


def option_from_dict(data: Dict[str, Any]) -> RcOption:
    """Build an option from a defaults table entry.

    Args:
        data: Mapping with ``key`` and optional ``type``, ``default`` and
            ``description``

    Returns:
        The option, with its current value equal to the default

    Raises:
        ValidationError: If the entry has no key or an unknown type
    """
    if not isinstance(data, dict) or "key" not in data:
        raise ValidationError(
            "Defaults entry must be a mapping with a 'key'",
            context={"entry": data},
        )
    type_name = str(data.get("type", "string")).lower()
    try:
        kind = OptionKind(type_name)
    except ValueError:
        raise ValidationError(
            f"Unknown option type '{type_name}' for {data['key']}",
            context={"key": data["key"], "type": type_name},
        ) from None
    return RcOption(
        key=str(data["key"]),
        kind=kind,
        default_value=stringify_value(data.get("default", "")),
        description=str(data.get("description", "") or ""),
    )


def load_defaults(path: Union[str, Path]) -> List[RcOption]:
    """Load a defaults table from a YAML or JSON file.

    The file holds a list of entries, or a mapping with an ``options`` list:

    ```yaml
    options:
      - key: COLORED
        type: boolean
        default: "true"
        description: Whether to use colors
    ```

    Args:
        path: Path to the defaults file

    Returns:
        Options in file order

    Raises:
        OverlaySyntaxError: If the file cannot be read or parsed
        ValidationError: If the entries are malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except json.JSONDecodeError as e:
        raise OverlaySyntaxError(str(path), e.lineno, e.msg) from e
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 1 if mark is not None else 0
        raise OverlaySyntaxError(str(path), line, str(e)) from e
    except UnicodeDecodeError as e:
        raise OverlaySyntaxError(str(path), 0, f"not valid UTF-8: {e.reason}") from e
    except OSError as e:
        raise OverlaySyntaxError(str(path), 0, f"cannot read file: {e.strerror or e}") from e

    if isinstance(data, dict):
        data = data.get("options", [])
    if not isinstance(data, list):
        raise ValidationError(
            f"Defaults file must contain a list of options: {path}",
            context={"path": str(path)},
        )
    return [option_from_dict(entry) for entry in data]


def stringify_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
