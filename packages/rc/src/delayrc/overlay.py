"""File overlay reader.

Reads one configuration file into a flat ``key -> value`` map, on top of
whatever the map already holds. Two formats are understood:

- dotenv-style rc files (the default)::

      # comment
      export COLORED=yes
      FORMAT='%{?COLORED}<color>%{}<name>'
      DIFF_FORMAT="${FORMAT} (diff)"
      source ~/.delayrc.local

- flat YAML or JSON mappings, chosen by the ``.yaml``/``.yml``/``.json``
  suffix.

Bindings are tokenized with python-dotenv. ``${NAME}`` and
``${NAME:-default}`` are replaced by the value assigned so far (falling
back to the environment), except in single-quoted values. Directives such
as ``%{NAME}`` are left alone; they are expanded later by the resolver.
"""

import io
import json
import logging
import os
import re
import shlex
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Union

import yaml  # type: ignore[import-untyped]
from dotenv.parser import Binding, parse_stream  # type: ignore[import-not-found]
from dotenv.variables import Variable, parse_variables  # type: ignore[import-not-found]

from .exceptions import OverlaySyntaxError
from .options import stringify_value

logger = logging.getLogger(__name__)

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SOURCE_COMMANDS = ("source", ".")


class OverlayReader:
    """Merges configuration files into a string map.

    Args:
        environ: Environment used for ``${NAME}`` fallbacks (default: os.environ)
        substitute: Expand ``${NAME}`` references in rc files
        allow_source: Honor ``source FILE`` / ``. FILE`` inclusion
    """

    MAX_SOURCE_DEPTH = 16

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        substitute: bool = True,
        allow_source: bool = True,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self.substitute = substitute
        self.allow_source = allow_source

    def read(self, path: Union[str, Path], into: MutableMapping[str, str]) -> bool:
        """Merge a file into ``into``.

        Args:
            path: File to read
            into: Map updated in place

        Returns:
            False if the file does not exist, True otherwise

        Raises:
            OverlaySyntaxError: If the file is malformed or unreadable
        """
        return self._read_file(Path(path), into, depth=0)

    def read_text(
        self,
        text: str,
        into: MutableMapping[str, str],
        path: Union[str, Path] = "<string>",
    ) -> None:
        """Merge rc-format text into ``into``."""
        self._read_rc(text, Path(path), into, depth=0)

    def lookup(self, name: str, into: Mapping[str, str], default: str | None = None) -> str:
        """Value of ``${name}``: the map first, then the environment."""
        if name in into:
            return into[name]
        if name in self.environ:
            return self.environ[name]
        return default or ""

    def _read_file(self, path: Path, into: MutableMapping[str, str], depth: int) -> bool:
        path = path.expanduser()
        if not path.is_file():
            logger.debug(f"Overlay not found, skipping: {path}")
            return False

        logger.debug(f"Reading overlay: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise OverlaySyntaxError(str(path), 0, f"not valid UTF-8: {e.reason}") from e
        except OSError as e:
            raise OverlaySyntaxError(str(path), 0, f"cannot read file: {e.strerror or e}") from e

        suffix = path.suffix.lower()
        if suffix in [".yaml", ".yml"]:
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                mark = getattr(e, "problem_mark", None)
                line = mark.line + 1 if mark is not None else 0
                raise OverlaySyntaxError(str(path), line, str(e)) from e
            self._merge_mapping(data, path, into)
        elif suffix == ".json":
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise OverlaySyntaxError(str(path), e.lineno, e.msg) from e
            self._merge_mapping(data, path, into)
        else:
            self._read_rc(text, path, into, depth)
        return True

    def _merge_mapping(self, data: Any, path: Path, into: MutableMapping[str, str]) -> None:
        if data is None:
            return
        if not isinstance(data, dict):
            raise OverlaySyntaxError(str(path), 0, "overlay must be a mapping")
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                raise OverlaySyntaxError(
                    str(path), 0, f"value of {key} must be a scalar"
                )
            into[str(key)] = stringify_value(value)

    def _read_rc(self, text: str, path: Path, into: MutableMapping[str, str], depth: int) -> None:
        for binding in parse_stream(io.StringIO(text)):
            line = _binding_line(binding)
            if binding.error:
                # dotenv cannot tokenize commands such as ``source FILE``
                self._command(binding.original.string, path, into, depth, line)
            elif binding.key is None:
                continue
            elif binding.value is None:
                if binding.key in _SOURCE_COMMANDS:
                    raise OverlaySyntaxError(
                        str(path), line, f"{binding.key} requires a file name"
                    )
                raise OverlaySyntaxError(
                    str(path), line, f"expected NAME=value, got {binding.key!r}"
                )
            else:
                self._assign(binding, path, into, line)

    def _assign(
        self, binding: Binding, path: Path, into: MutableMapping[str, str], line: int
    ) -> None:
        key = binding.key
        if not _NAME.fullmatch(key):
            raise OverlaySyntaxError(str(path), line, f"invalid name {key!r}")
        value = binding.value
        if self.substitute and not _is_single_quoted(binding):
            value = self._expand(value, into, path, line)
        into[key] = value

    def _expand(self, value: str, into: Mapping[str, str], path: Path, line: int) -> str:
        parts = []
        for atom in parse_variables(value):
            if isinstance(atom, Variable):
                if not _NAME.fullmatch(atom.name):
                    raise OverlaySyntaxError(
                        str(path), line, f"bad substitution: ${{{atom.name}}}"
                    )
                parts.append(self.lookup(atom.name, into, atom.default))
            else:
                parts.append(atom.resolve(into))
        return "".join(parts)

    def _command(
        self, text: str, path: Path, into: MutableMapping[str, str], depth: int, line: int
    ) -> None:
        try:
            words = shlex.split(text, comments=True)
        except ValueError:
            words = []
        if not words or words[0] not in _SOURCE_COMMANDS:
            first = text.strip().splitlines()[0] if text.strip() else text
            raise OverlaySyntaxError(str(path), line, f"expected NAME=value, got {first!r}")
        if len(words) != 2:
            raise OverlaySyntaxError(str(path), line, f"{words[0]} requires a single file name")
        self._source(words[1], path, into, depth, line)

    def _source(
        self, target: str, path: Path, into: MutableMapping[str, str], depth: int, line: int
    ) -> None:
        if not self.allow_source:
            logger.warning(f"{path}:{line}: source ignored: {target}")
            return
        if depth >= self.MAX_SOURCE_DEPTH:
            raise OverlaySyntaxError(str(path), line, "source nesting too deep")
        included = Path(target).expanduser()
        if not included.is_absolute():
            included = path.parent / included
        if not self._read_file(included, into, depth + 1):
            logger.warning(f"{path}:{line}: cannot source {included}")


def _binding_line(binding: Binding) -> int:
    """Line where the binding's text starts, past any leading blank lines."""
    text = binding.original.string
    leading = text[: len(text) - len(text.lstrip())]
    return binding.original.line + leading.count("\n")


def _is_single_quoted(binding: Binding) -> bool:
    _, _, rest = binding.original.string.partition("=")
    return rest.lstrip(" \t").startswith("'")


def read_overlay(
    path: Union[str, Path],
    base: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Dict[str, str]:
    """Read a single file into a new map seeded with ``base``."""
    values: Dict[str, str] = dict(base or {})
    OverlayReader(environ=environ).read(path, values)
    return values
