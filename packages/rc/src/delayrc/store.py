"""Configuration store lifecycle.

``RcStore`` collects the defaults table and the source locations, then
``build()`` runs the whole pipeline once:

1. layering of defaults, overlay files and environment
2. delayed substitution of every key
3. decoding of ``%%{`` escapes

and hands back an immutable ``ResolvedConfig``.

Example:
    ```python
    store = RcStore([
        RcOption("COLORED", OptionKind.BOOLEAN, "true", description="Use colors"),
        RcOption("FORMAT", OptionKind.STRING, "%{?COLORED}<color>%{}<name>"),
    ])
    config = store.build()
    config["FORMAT"]          # '<color><name>'
    config.get_bool("COLORED")  # True
    ```
"""

import copy
import logging
from collections.abc import Iterator, Mapping
from typing import Dict, Iterable, List, Sequence, Tuple

from .dump import dump_defaults
from .escapes import normalize_escapes
from .exceptions import ConfigError, ConfigNotFoundError
from .layering import DEFAULT_INDIRECT_PREFIXES, LayeringBuilder, RcSources
from .options import RcOption, is_true, parse_integer
from .overlay import OverlayReader
from .redundancy import RedPair, Redundant, parse_redundant_flags
from .resolver import DEFAULT_PREFIX_KEY, DelayedResolver

logger = logging.getLogger(__name__)


class ResolvedConfig(Mapping):
    """Read-only view of a fully resolved configuration."""

    def __init__(self, values: Dict[str, str], options: Sequence[RcOption]) -> None:
        self._values = dict(values)
        self._options = tuple(options)
        self._by_key = {option.key: option for option in self._options}

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedConfig({len(self._values)} keys)"

    @property
    def options(self) -> Tuple[RcOption, ...]:
        """Option table: defaults followed by locally added entries."""
        return self._options

    def option(self, key: str) -> RcOption:
        """Get the table entry of ``key``.

        Raises:
            ConfigNotFoundError: If ``key`` is not a configuration key
        """
        try:
            return self._by_key[key]
        except KeyError:
            raise ConfigNotFoundError(
                f"Unknown configuration key: {key}", context={"key": key}
            ) from None

    def require(self, key: str) -> str:
        """Like ``config[key]`` but raising ``ConfigNotFoundError``."""
        return self._values[self.option(key).key]

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Interpret a value with the truth predicate."""
        if key not in self._values:
            return default
        return is_true(self._values[key])

    def get_integer(self, key: str, default: int = 0) -> int:
        """Read the leading integer of a value."""
        if key not in self._values:
            return default
        return parse_integer(self._values[key])

    def get_redundant_flags(
        self, key: str, red_type: Redundant, pair: RedPair | None = None
    ) -> RedPair:
        """Parse a redundancy setting; see ``parse_redundant_flags``."""
        return parse_redundant_flags(self._values.get(key, ""), red_type, pair, key=key)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def dump(self, use_defaults: bool = False) -> str:
        """Render the option table as a commented rc file."""
        return dump_defaults(self._options, use_defaults)


class RcStore:
    """Builder for a ``ResolvedConfig``.

    Args:
        defaults: Defaults table; entries are copied, not modified
        sources: Overlay file locations
        environ: Environment (default: os.environ)
        reader: Overlay reader (default: one bound to ``environ``)
        prefix_key: Key whose value prefixes ``%{*NAME}`` references
        indirect_prefixes: Prefixes registered for every ``%{*NAME}``
    """

    def __init__(
        self,
        defaults: Iterable[RcOption] = (),
        sources: RcSources | None = None,
        environ: Mapping | None = None,
        reader: OverlayReader | None = None,
        prefix_key: str = DEFAULT_PREFIX_KEY,
        indirect_prefixes: Sequence[str] = DEFAULT_INDIRECT_PREFIXES,
    ) -> None:
        self._defaults: List[RcOption] = list(defaults)
        self.sources = sources or RcSources()
        self.environ = environ
        self.reader = reader
        self.prefix_key = prefix_key
        self.indirect_prefixes = tuple(indirect_prefixes)
        self._config: ResolvedConfig | None = None

    @property
    def defaults(self) -> Tuple[RcOption, ...]:
        return tuple(self._defaults)

    @property
    def built(self) -> bool:
        return self._config is not None

    def add_default(self, option: RcOption) -> None:
        """Append an entry to the defaults table."""
        self._check_not_built()
        self._defaults.append(option)

    def clear(self) -> None:
        """Drop all defaults."""
        self._check_not_built()
        self._defaults.clear()

    def build(self) -> ResolvedConfig:
        """Layer, resolve and decode the configuration.

        Returns:
            The resolved configuration

        Raises:
            DirectiveError: If delayed substitution fails for any key
            ConfigError: If the store was already built
        """
        self._check_not_built()

        options = [copy.copy(option) for option in self._defaults]
        layering = LayeringBuilder(
            options,
            sources=self.sources,
            environ=self.environ,
            reader=self.reader,
            indirect_prefixes=self.indirect_prefixes,
        ).build()

        values = layering.values
        resolver = DelayedResolver(values, layering.has_directives, self.prefix_key)
        resolver.resolve_all(option.key for option in layering.options)
        normalize_escapes(values)

        for option in layering.options:
            option.current_value = values[option.key]

        logger.debug(f"Resolved {len(values)} configuration keys")
        self._config = ResolvedConfig(values, layering.options)
        return self._config

    @property
    def config(self) -> ResolvedConfig:
        """The configuration produced by ``build()``."""
        if self._config is None:
            raise ConfigError("Configuration store has not been built yet")
        return self._config

    def _check_not_built(self) -> None:
        if self._config is not None:
            raise ConfigError("Configuration store has already been built")


def resolve_config(defaults: Iterable[RcOption], **kwargs) -> ResolvedConfig:
    """Build a ``ResolvedConfig`` in one call; see ``RcStore``."""
    return RcStore(defaults, **kwargs).build()
