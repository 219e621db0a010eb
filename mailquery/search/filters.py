"""Convert parsed terms into a SQLAlchemy filter expression.

The expression is only built, never executed; callers attach it to their own
``select()`` or ``Query``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import Any

from sqlalchemy import String, and_, cast, not_, or_, true

from mailquery.search.terms import SizeComparison, Term, TermKind

logger = logging.getLogger(__name__)


def _contains(column: Any, value: str):
    return column.ilike(f"%{value}%")


def _text_clause(value: str, text_columns: Sequence[Any]):
    """Match ``value`` anywhere in any of the text columns."""
    if not text_columns:
        return None
    return or_(*(_contains(column, value) for column in text_columns))


def _date_clause(term: Term, column: Any):
    kind = str(term.kind)

    if kind == TermKind.AFTER and term.date is not None:
        return column >= term.date
    if kind == TermKind.BEFORE and term.date is not None:
        return column < term.date
    if kind == TermKind.DATE:
        if term.date_range is not None:
            return column.between(term.date_range.start, term.date_range.end)
        if term.date is not None:
            day = term.date.replace(hour=0, minute=0, second=0, microsecond=0)
            return and_(column >= day, column < day + timedelta(days=1))

    logger.debug("Unresolved date %r, matching raw value", term.value)
    return _contains(cast(column, String), term.value)


def _size_clause(term: Term, column: Any):
    if term.size is None:
        return None
    if term.size.comparison is SizeComparison.GREATER_THAN:
        return column > term.size.bytes
    if term.size.comparison is SizeComparison.LESS_THAN:
        return column < term.size.bytes
    return column == term.size.bytes


def _leaf_clause(term: Term, columns: Mapping[str, Any], text_columns: Sequence[Any]):
    kind = str(term.kind)
    column = columns.get(kind)

    if kind in (TermKind.TEXT, TermKind.PHRASE) or column is None:
        return _text_clause(term.value, text_columns)
    if kind in (TermKind.AFTER, TermKind.BEFORE, TermKind.DATE):
        return _date_clause(term, column)
    if kind == TermKind.SIZE:
        return _size_clause(term, column)
    return _contains(column, term.value)


def _term_clause(term: Term, columns: Mapping[str, Any], text_columns: Sequence[Any]):
    kind = str(term.kind)

    if kind in (TermKind.OR, TermKind.GROUP):
        clauses = [
            clause
            for clause in (
                _term_clause(subterm, columns, text_columns) for subterm in term.subterms or ()
            )
            if clause is not None
        ]
        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return or_(*clauses) if kind == TermKind.OR else and_(*clauses)

    clause = _leaf_clause(term, columns, text_columns)
    if clause is None:
        logger.debug("No column for %s term %r, skipping", kind, term.value)
        return None
    if term.negated:
        return not_(clause)
    return clause


def build_clause(
    terms: list[Term],
    columns: Mapping[str, Any],
    text_columns: Sequence[Any] = (),
):
    """Build a boolean SQLAlchemy expression from parsed terms.

    Top-level terms are AND-ed, ``or`` terms OR their subterms and ``group``
    terms AND them. Text, phrase and any kind without a column in
    ``columns`` search ``text_columns`` with a case-insensitive substring
    match.

    Args:
        terms: Output of :func:`mailquery.search.parse`.
        columns: Maps a term kind (``"from"``, ``"after"``, ``"size"``, ...)
            to the column it filters.
        text_columns: Columns searched by free-text terms.

    Returns:
        A SQLAlchemy boolean clause; ``true()`` when nothing filters.
    """
    clauses = [
        clause
        for clause in (_term_clause(term, columns, text_columns) for term in terms)
        if clause is not None
    ]
    if not clauses:
        return true()
    if len(clauses) == 1:
        return clauses[0]
    return and_(*clauses)
