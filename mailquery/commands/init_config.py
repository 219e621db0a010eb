"""Initialize configuration file for mailquery."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click
from rich.markup import escape

from mailquery.cli import EXIT_CONFIG_ERROR, Context, pass_context
from mailquery.config import get_default_config_path, load_config
from mailquery.exceptions import ConfigError
from mailquery.utils.output import error, info, success, warning


def _load_example_config() -> str:
    """Load the example configuration from package data."""
    return resources.files("mailquery").joinpath("config.example.toml").read_text()


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/mailquery/config.toml)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None) -> None:
    """Create a new configuration file with default settings.

    The generated file documents every parser option and shows how to
    declare a custom operator.

    Examples:

    \b
      # Create config at default location
      mailquery init-config

    \b
      # Create config at custom location
      mailquery init-config --output ./my-config.toml

    \b
      # Overwrite existing config
      mailquery init-config --force
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(1)

    config_content = _load_example_config()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(config_content)
        config_path.chmod(0o600)
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1)

    success(f"Created config file: {config_path}")

    # Re-read the written file so problems show up now
    try:
        config, warnings = load_config(config_path)
    except ConfigError as e:
        error(str(e))
        raise SystemExit(EXIT_CONFIG_ERROR)

    for warn in warnings:
        warning(warn)

    if config.operators:
        names = ", ".join(definition.name for definition in config.operators)
        info(f"Custom operators: {names}")
    else:
        info(escape("No custom operators declared; add [[operators]] tables to define your own."))
    info("Run 'mailquery operators' to review operator names, aliases and policy.")
