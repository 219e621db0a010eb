"""Check a query for unbalanced quotes and parentheses."""

from __future__ import annotations

import click

from mailquery.cli import EXIT_QUERY_ERROR, Context, pass_context
from mailquery.search import validate
from mailquery.utils.output import error, success


@click.command("validate", context_settings={"ignore_unknown_options": True})
@click.argument("query")
@pass_context
def cli(ctx: Context, query: str) -> None:
    """Validate the structure of QUERY.

    Exits with status 1 when a quote or parenthesis is left unmatched.
    Operator names and values are not checked.
    """
    result = validate(query)

    if result.valid:
        if not ctx.quiet:
            success("Query is valid")
        return

    for message in result.errors:
        error(message)
    raise SystemExit(EXIT_QUERY_ERROR)
