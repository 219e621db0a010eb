"""Command-line interface for mailquery."""

from __future__ import annotations

import os
from pathlib import Path

import click

from mailquery import __version__
from mailquery.config import Config, load_config
from mailquery.exceptions import ConfigError
from mailquery.utils.output import (
    error,
    set_color,
    set_verbosity,
    warning,
)

EXIT_SUCCESS = 0
EXIT_QUERY_ERROR = 1
EXIT_CONFIG_ERROR = 2


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config = Config()
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Path to config file (default: ~/.config/mailquery/config.toml)",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (implies --verbose)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress non-error output",
)
@click.version_option(version=__version__, prog_name="mailquery")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """mailquery: Parse Gmail-style search queries into structured terms.

    Queries combine plain words, "quoted phrases", -negation, key:value
    operators, (groups) and OR.

    Configuration is loaded from ~/.config/mailquery/config.toml by default.
    Use --config to specify an alternative configuration file.

    Examples:

        # Show the term tree for a query
        mailquery parse 'from:john -spam after:-7d'

        # Check a query for unbalanced quotes and parentheses
        mailquery validate '("promo" OR discount'
    """
    # Initialize context
    ctx.ensure_object(Context)
    app_ctx = ctx.obj
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet

    # Configure module-level verbosity for output helpers
    set_verbosity(verbose=verbose, debug=debug)

    # Configure color output: disabled by --no-color, NO_COLOR env, or config
    disable_color = no_color or os.environ.get("NO_COLOR") is not None

    if disable_color:
        set_color(False)

    # Load configuration
    try:
        loaded_config, warnings = load_config(config)
    except ConfigError as e:
        error(str(e))
        ctx.exit(EXIT_CONFIG_ERROR)
        return

    app_ctx.config = loaded_config

    # Apply config settings
    if not disable_color and not loaded_config.colored_output:
        set_color(False)

    # Show warnings unless quiet, or running on defaults without --config
    if not quiet and (config is not None or loaded_config.config_path is not None):
        for warn in warnings:
            warning(warn)


def register_commands() -> None:
    """Register all commands from the commands package."""
    from mailquery.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


# Register commands on import
register_commands()


def main() -> None:
    """Console script entry point."""
    cli()
