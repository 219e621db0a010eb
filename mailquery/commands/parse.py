"""Parse a query and show the resulting terms."""

from __future__ import annotations

import json

import click
from rich.markup import escape
from rich.tree import Tree

from mailquery.cli import EXIT_QUERY_ERROR, Context, pass_context
from mailquery.exceptions import QueryError
from mailquery.search import Term, parse
from mailquery.utils.output import console, error, info


def _term_label(term: Term) -> str:
    kind = str(term.kind)
    if not term.is_leaf:
        return f"[term.compound]{kind.upper()}[/term.compound]"

    label = f"[term.kind]{kind}[/term.kind] [term.value]{escape(term.value)}[/term.value]"
    if term.negated:
        label = f"[term.negated]NOT[/term.negated] {label}"
    if term.date_range is not None:
        label += f" ({term.date_range.start.isoformat()} .. {term.date_range.end.isoformat()})"
    elif term.date is not None:
        label += f" ({term.date.isoformat()})"
    elif term.size is not None:
        label += f" ({term.size.comparison} {term.size.bytes} bytes)"
    return label


def _add_terms(tree: Tree, terms: list[Term]) -> None:
    for term in terms:
        branch = tree.add(_term_label(term))
        if term.subterms:
            _add_terms(branch, term.subterms)


@click.command("parse", context_settings={"ignore_unknown_options": True})
@click.argument("query")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output terms as JSON")
@click.option(
    "--allow",
    "allowed",
    multiple=True,
    help="Only allow this operator (repeatable, added to the configured list)",
)
@click.option(
    "--deny",
    "denied",
    multiple=True,
    help="Reject this operator (repeatable, added to the configured list)",
)
@pass_context
def cli(
    ctx: Context,
    query: str,
    as_json: bool,
    allowed: tuple[str, ...],
    denied: tuple[str, ...],
) -> None:
    """Parse QUERY and print the term tree.

    \b
    Examples:
      mailquery parse 'from:john -spam'
      mailquery parse 'to:"A","B" after:-7d' --json
      mailquery parse 'from:x subject:y' --deny subject
    """
    options = ctx.config.parser_options()
    if allowed:
        options.operators_allowed = [*(options.operators_allowed or ()), *allowed]
    options.operators_disallowed = [*(options.operators_disallowed or ()), *denied]

    try:
        terms = parse(query, options)
    except QueryError as e:
        error(str(e))
        raise SystemExit(EXIT_QUERY_ERROR)

    if as_json:
        click.echo(json.dumps([term.to_dict() for term in terms], indent=2))
        return

    if not terms:
        info("No terms")
        return

    tree = Tree(f"[bold]{escape(query)}[/bold]")
    _add_terms(tree, terms)
    console.print(tree)
