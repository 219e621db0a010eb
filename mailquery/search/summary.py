"""Convenience helpers built on top of the parsed term list."""

from __future__ import annotations

import re

from mailquery.search.dates import format_date_value
from mailquery.search.operators import OperatorDefinition, OperatorRegistry
from mailquery.search.parser import ParserOptions, parse
from mailquery.search.terms import SizeComparison, Term, TermKind

_REGEX_SPECIAL = re.compile(r"[.*+?^${}()|\[\]\\]")

# Characters that force a value to be quoted when written back as query text.
_NEEDS_QUOTES = frozenset(" \"'(),")

_LABELS: dict[str, str] = {
    TermKind.FROM.value: "From",
    TermKind.TO.value: "To",
    TermKind.SUBJECT.value: "Subject",
    TermKind.BODY.value: "Body",
    TermKind.HAS.value: "Has",
    TermKind.IS.value: "Is",
    TermKind.IN.value: "In",
    TermKind.LABEL.value: "Label",
    TermKind.HEADER_KEY.value: "Header",
    TermKind.HEADER_VALUE.value: "Header value",
}

_SIZE_SYMBOLS: dict[SizeComparison, str] = {
    SizeComparison.GREATER_THAN: ">",
    SizeComparison.LESS_THAN: "<",
    SizeComparison.EQUAL: "=",
}


def has_terms(text: str, options: ParserOptions | None = None) -> bool:
    """Check whether a query string contains any terms."""
    return len(parse(text, options)) > 0


def escape_regex(text: str) -> str:
    """Backslash-escape regular expression metacharacters."""
    return _REGEX_SPECIAL.sub(r"\\\g<0>", text)


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _quote_if_needed(value: str) -> str:
    if not value or value.upper() == "OR" or any(char in _NEEDS_QUOTES for char in value):
        return _quote(value)
    return value


def _format_term(term: Term, registry: OperatorRegistry) -> str:
    kind = str(term.kind)

    if kind == TermKind.OR:
        return " OR ".join(_format_term(subterm, registry) for subterm in term.subterms or ())
    if kind == TermKind.GROUP:
        inner = " ".join(_format_term(subterm, registry) for subterm in term.subterms or ())
        return f"({inner})"

    prefix = "-" if term.negated else ""
    if kind == TermKind.PHRASE:
        return prefix + _quote(term.value)
    if kind == TermKind.TEXT:
        return prefix + term.value

    definition = registry.for_kind(kind)
    if definition is None:
        return prefix + _quote_if_needed(term.value)
    return f"{prefix}{definition.name}:{_quote_if_needed(term.value)}"


def format_query(terms: list[Term], operators: list[OperatorDefinition] | None = None) -> str:
    """Write terms back as query text.

    Parsing the result with the same operators yields an equivalent term list.

    Args:
        terms: Parsed terms.
        operators: Custom operator definitions used when the terms were parsed.
    """
    registry = OperatorRegistry(operators or ())
    return " ".join(_format_term(term, registry) for term in terms)


def _summarize_date(term: Term, label: str) -> str:
    if term.date_range is not None:
        start = format_date_value(term.date_range.start)
        end = format_date_value(term.date_range.end)
        return f"{label}: {start} to {end}"
    if term.date is not None:
        return f"{label}: {format_date_value(term.date)}"
    return f"{label}: {term.value}"


def summarize(query: str | list[Term], options: ParserOptions | None = None) -> list[str]:
    """Describe a query in human-readable lines.

    Plain words and phrases are listed first, operator filters in source
    order, and excluded terms last, e.g.::

        ['Exact: "Promo"', 'From: newsletter', 'Excludes: spam']

    Args:
        query: A query string, or terms that were already parsed.
        options: Parser options used when ``query`` is a string.
    """
    options = options or ParserOptions()
    terms = parse(query, options) if isinstance(query, str) else query
    registry = OperatorRegistry(options.operators)

    summary: list[str] = []
    texts: list[str] = []
    phrases: list[str] = []
    excluded: list[str] = []

    for term in terms:
        kind = str(term.kind)

        if term.negated:
            excluded.append(_quote(term.value) if kind == TermKind.PHRASE else term.value)
            continue

        if kind == TermKind.TEXT:
            texts.append(term.value)
        elif kind == TermKind.PHRASE:
            phrases.append(term.value)
        elif kind in _LABELS:
            summary.append(f"{_LABELS[kind]}: {term.value}")
        elif kind == TermKind.AFTER:
            summary.append(_summarize_date(term, "After"))
        elif kind == TermKind.BEFORE:
            summary.append(_summarize_date(term, "Before"))
        elif kind == TermKind.DATE:
            summary.append(_summarize_date(term, "Date"))
        elif kind == TermKind.SIZE:
            if term.size is not None:
                symbol = _SIZE_SYMBOLS[term.size.comparison]
                summary.append(f"Size: {symbol}{term.size.bytes} bytes")
        elif kind == TermKind.OR:
            summary.append(f"Any of: {_format_term(term, registry)}")
        elif kind == TermKind.GROUP:
            inner = " ".join(_format_term(subterm, registry) for subterm in term.subterms or ())
            summary.append(f"Group: {inner}")
        else:
            summary.append(f"{kind.capitalize()}: {term.value}")

    if texts:
        summary.insert(0, f"Contains: {', '.join(texts)}")
    if phrases:
        summary.insert(0, "Exact: " + ", ".join(_quote(phrase) for phrase in phrases))
    if excluded:
        summary.append(f"Excludes: {', '.join(excluded)}")

    return summary
