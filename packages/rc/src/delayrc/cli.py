"""Command line driver.

Resolves the configuration and prints it:

    delayrc --defaults defaults.yaml                  # all keys
    delayrc --defaults defaults.yaml FORMAT COLORED   # selected values
    delayrc --defaults defaults.yaml --dump           # commented table

A broken configuration is fatal: the error is reported and the process
exits with status 2.
"""

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .exceptions import DirectiveError, ValidationError
from .layering import RcSources
from .options import load_defaults
from .store import RcStore

FATAL_CONFIG_STATUS = 2

err_console = Console(stderr=True)


@click.command()
@click.version_option(version=__version__)
@click.argument("keys", nargs=-1)
@click.option(
    "--defaults",
    "-d",
    "defaults_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Defaults table (YAML or JSON)",
)
@click.option("--system-rc", default=RcSources.system_path, show_default=True, help="System overlay file")
@click.option("--user-rc", default=None, help="User overlay file (default: $HOME/.delayrc)")
@click.option("--no-user-rc", is_flag=True, help="Do not read the user overlay")
@click.option("--dump", "dump", is_flag=True, help="Print the option table with layered values")
@click.option("--dump-defaults", is_flag=True, help="Print the option table with default values")
@click.option("--verbose", "-v", is_flag=True, help="Log layering and resolution details")
def cli(
    keys: tuple,
    defaults_file: str | None,
    system_rc: str,
    user_rc: str | None,
    no_user_rc: bool,
    dump: bool,
    dump_defaults: bool,
    verbose: bool,
):
    """Resolve layered configuration with delayed references."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    sources = RcSources(system_path=system_rc, use_user=not no_user_rc, user_path=user_rc)
    try:
        defaults = load_defaults(defaults_file) if defaults_file else []
        config = RcStore(defaults, sources=sources).build()
    except DirectiveError as e:
        err_console.print(
            f"[red]fatal config error:[/red] {escape(str(e))}",
            highlight=False,
            soft_wrap=True,
        )
        sys.exit(FATAL_CONFIG_STATUS)
    except ValidationError as e:
        err_console.print(
            f"[red]Error loading configuration:[/red] {escape(str(e))}",
            highlight=False,
            soft_wrap=True,
        )
        sys.exit(1)

    if dump or dump_defaults:
        click.echo(config.dump(use_defaults=dump_defaults), nl=False)
        return

    if not keys:
        for key, value in config.items():
            click.echo(f"{key}='{value}'")
        return

    missing = [key for key in keys if key not in config]
    if missing:
        names = escape(", ".join(missing))
        err_console.print(
            f"[red]Unknown configuration key:[/red] {names}",
            highlight=False,
            soft_wrap=True,
        )
        sys.exit(1)
    for key in keys:
        click.echo(config[key])


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
