"""Describe a query in plain language."""

from __future__ import annotations

import click
from rich.markup import escape

from mailquery.cli import EXIT_QUERY_ERROR, Context, pass_context
from mailquery.exceptions import QueryError
from mailquery.search import summarize
from mailquery.utils.output import console, error, info


@click.command("summarize", context_settings={"ignore_unknown_options": True})
@click.argument("query")
@pass_context
def cli(ctx: Context, query: str) -> None:
    """Print a human-readable summary of QUERY, one filter per line."""
    try:
        lines = summarize(query, ctx.config.parser_options())
    except QueryError as e:
        error(str(e))
        raise SystemExit(EXIT_QUERY_ERROR)

    if not lines:
        info("Empty query")
        return

    for line in lines:
        console.print(escape(line))
