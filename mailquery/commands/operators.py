"""List the operators the parser recognizes."""

from __future__ import annotations

import click

from mailquery.cli import Context, pass_context
from mailquery.search import OperatorRegistry
from mailquery.utils.output import console, create_table


def _policy(name: str, allowed: set[str], disallowed: set[str]) -> str:
    if name.lower() in disallowed:
        return "[error]denied[/error]"
    if allowed and name.lower() not in allowed:
        return "[warning]not allowed[/warning]"
    return "[success]allowed[/success]"


@click.command("operators")
@pass_context
def cli(ctx: Context) -> None:
    """Show built-in and configured operators.

    Operators from the config file are listed first, since they are matched
    before the built-ins and replace a built-in of the same name.
    """
    config = ctx.config
    registry = OperatorRegistry(config.operators, case_sensitive=config.case_sensitive)
    custom = {id(definition) for definition in config.operators}
    allowed = {name.lower() for name in config.operators_allowed}
    disallowed = {name.lower() for name in config.operators_disallowed}

    table = create_table(title=f"Operators ({len(registry)})")
    table.add_column("Name", style="term.kind")
    table.add_column("Aliases")
    table.add_column("Kind")
    table.add_column("Value type")
    table.add_column("Negation")
    table.add_column("Source")
    table.add_column("Policy")

    for definition in registry:
        table.add_row(
            definition.name,
            ", ".join(sorted(definition.aliases)) or "-",
            str(definition.kind),
            str(definition.value_kind),
            "yes" if definition.allow_negation else "no",
            "config" if id(definition) in custom else "built-in",
            _policy(definition.name, allowed, disallowed),
        )

    console.print(table)
