"""Show the token stream for a query."""

from __future__ import annotations

import json

import click
from rich.markup import escape

from mailquery.cli import Context, pass_context
from mailquery.search import tokenize
from mailquery.utils.output import console, create_table, info


@click.command("tokens", context_settings={"ignore_unknown_options": True})
@click.argument("query")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output tokens as JSON")
@pass_context
def cli(ctx: Context, query: str, as_json: bool) -> None:
    """Tokenize QUERY without interpreting operators.

    Useful for checking how quotes, negation and parentheses were read.
    """
    tokens = tokenize(query)

    if as_json:
        click.echo(json.dumps([token.to_dict() for token in tokens], indent=2))
        return

    if not tokens:
        info("No tokens")
        return

    table = create_table(title="Tokens")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="term.kind")
    table.add_column("Value", style="term.value")
    table.add_column("Raw")
    table.add_column("Position", justify="right")

    for index, token in enumerate(tokens):
        table.add_row(
            str(index),
            token.kind.name,
            escape(token.value),
            escape(token.raw),
            str(token.position),
        )

    console.print(table)
