"""mailquery: parse Gmail-style search queries into structured terms."""

from mailquery.exceptions import MailQueryError, OperatorNotAllowedError, QueryError
from mailquery.search import (
    OperatorDefinition,
    ParserOptions,
    Term,
    TermKind,
    Token,
    TokenKind,
    ValueKind,
    extract_operators,
    parse,
    resolve_date,
    resolve_relative_date,
    tokenize,
    validate,
)

__version__ = "0.1.0"

__all__ = [
    "MailQueryError",
    "OperatorDefinition",
    "OperatorNotAllowedError",
    "ParserOptions",
    "QueryError",
    "Term",
    "TermKind",
    "Token",
    "TokenKind",
    "ValueKind",
    "__version__",
    "extract_operators",
    "parse",
    "resolve_date",
    "resolve_relative_date",
    "tokenize",
    "validate",
]
