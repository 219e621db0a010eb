"""Subcommands of the mailquery CLI.

Each public module in this package exposes a click command named ``cli``.
Modules whose names start with an underscore are helpers and are skipped.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


def discover_commands() -> Iterator[click.Command]:
    """Yield the ``cli`` command of every public module, ordered by command name.

    A module without a click command, or one reusing a name already yielded,
    is logged and skipped.
    """
    import mailquery.commands as commands_pkg

    found: dict[str, click.Command] = {}
    for module_info in pkgutil.iter_modules(commands_pkg.__path__):
        if module_info.name.startswith("_"):
            continue

        module = importlib.import_module(f"mailquery.commands.{module_info.name}")
        command = getattr(module, "cli", None)
        if not isinstance(command, click.Command):
            logger.debug("Module %s has no command, skipping", module_info.name)
            continue
        if command.name in found:
            logger.warning("Duplicate command %r in module %s", command.name, module_info.name)
            continue
        found[command.name] = command

    for name in sorted(found):
        yield found[name]
