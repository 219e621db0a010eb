"""Gmail-style search query tokenizing, parsing and date resolution."""

from mailquery.search.dates import (
    DateRange,
    DateResolution,
    format_date_value,
    resolve_date,
    resolve_relative_date,
)
from mailquery.search.filters import build_clause
from mailquery.search.operators import (
    DEFAULT_OPERATORS,
    OperatorDefinition,
    OperatorRegistry,
    ValueKind,
)
from mailquery.search.parser import (
    ParserOptions,
    ValidationResult,
    extract_operators,
    parse,
    parse_size,
    validate,
)
from mailquery.search.summary import escape_regex, format_query, has_terms, summarize
from mailquery.search.terms import Size, SizeComparison, Term, TermKind
from mailquery.search.tokenizer import is_operator, parse_operator, tokenize
from mailquery.search.tokens import Token, TokenKind

__all__ = [
    "DEFAULT_OPERATORS",
    "DateRange",
    "DateResolution",
    "OperatorDefinition",
    "OperatorRegistry",
    "ParserOptions",
    "Size",
    "SizeComparison",
    "Term",
    "TermKind",
    "Token",
    "TokenKind",
    "ValidationResult",
    "ValueKind",
    "build_clause",
    "escape_regex",
    "extract_operators",
    "format_date_value",
    "format_query",
    "has_terms",
    "is_operator",
    "parse",
    "parse_operator",
    "parse_size",
    "resolve_date",
    "resolve_relative_date",
    "summarize",
    "tokenize",
    "validate",
]
