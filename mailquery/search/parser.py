"""Parse Gmail-style search syntax into a list of terms.

The parser works directly on the token list. Parentheses are paired once up
front and each span is parsed recursively as an index window. ``OR`` keywords
are collapsed after each window is resolved, and operator values are expanded
and typed (dates, sizes) as terms are built.

Only an operator allow/deny policy violation raises. Everything else, such as
unknown operators, unmatched parentheses or unparsable dates, degrades to
best-effort terms.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from mailquery.exceptions import OperatorNotAllowedError
from mailquery.search.dates import Clock, resolve_date
from mailquery.search.operators import OperatorDefinition, OperatorRegistry, ValueKind
from mailquery.search.terms import Size, SizeComparison, Term, TermKind
from mailquery.search.tokenizer import (
    QUOTES,
    parse_operator,
    split_operator,
    split_values,
    tokenize,
    unquote,
)
from mailquery.search.tokens import Token, TokenKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

SIZE_PATTERN = re.compile(r"^([<>=]?)(\d+)(b|kb|mb|gb)?$", re.IGNORECASE)

_SIZE_UNITS: dict[str, int] = {
    "": 1,
    "b": 1,
    "kb": 1024,
    "mb": 1024**2,
    "gb": 1024**3,
}

_SIZE_COMPARISONS: dict[str, SizeComparison] = {
    "": SizeComparison.EQUAL,
    "=": SizeComparison.EQUAL,
    ">": SizeComparison.GREATER_THAN,
    "<": SizeComparison.LESS_THAN,
}

# Placeholder left in a window for each OR keyword until the window is collapsed.
_OR_MARKER = Term(kind=TermKind.OR, value="OR")


@dataclass
class ParserOptions:
    """Options controlling a single parse.

    Attributes:
        operators: Extra operator definitions. They are consulted before the
            built-ins and replace any built-in with the same name.
        operators_allowed: If not None, only these operator names may appear.
            An empty list rejects every operator.
        operators_disallowed: Operator names that may not appear.
        case_sensitive: Match operator keys exactly instead of ignoring case.
        clock: Source of "now" for relative and natural dates.
        max_depth: Deepest parenthesis nesting turned into groups. Deeper
            parentheses are dropped and their contents inlined.
    """

    operators: list[OperatorDefinition] = field(default_factory=list)
    operators_allowed: list[str] | None = None
    operators_disallowed: list[str] | None = None
    case_sensitive: bool = False
    clock: Clock | None = None
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of :func:`validate`."""

    valid: bool
    errors: list[str]


def parse_size(value: str) -> Size | None:
    """Parse a size filter value such as ``>1mb``, ``<100kb`` or ``500``.

    Units are binary multiples; no unit means bytes and no sign means equal.
    """
    match = SIZE_PATTERN.match(value.strip())
    if not match:
        return None
    sign, amount, unit = match.groups()
    return Size(
        comparison=_SIZE_COMPARISONS[sign],
        bytes=int(amount) * _SIZE_UNITS[(unit or "").lower()],
    )


def _value_pieces(value: str) -> list[str]:
    return [unquote(piece) for piece in split_values(value) if piece]


def _pair_parentheses(tokens: list[Token]) -> dict[int, int]:
    """Map the index of each matched ``(`` to the index of its ``)``."""
    pairs: dict[int, int] = {}
    open_indexes: list[int] = []
    for index, token in enumerate(tokens):
        if token.kind is TokenKind.GROUP_OPEN:
            open_indexes.append(index)
        elif token.kind is TokenKind.GROUP_CLOSE and open_indexes:
            pairs[open_indexes.pop()] = index
    return pairs


def _collapse_or(terms: list[Term]) -> list[Term]:
    """Turn ``a b OR c`` into a single ``or`` term over ``group(a b)`` and ``c``."""
    if not any(term is _OR_MARKER for term in terms):
        return terms

    runs: list[list[Term]] = [[]]
    for term in terms:
        if term is _OR_MARKER:
            runs.append([])
        else:
            runs[-1].append(term)
    runs = [run for run in runs if run]

    if len(runs) <= 1:
        return runs[0] if runs else []
    return [Term.any_of([run[0] if len(run) == 1 else Term.group(run) for run in runs])]


class _TermBuilder:
    """Resolves tokens into terms for one parse call."""

    def __init__(self, options: ParserOptions) -> None:
        self.options = options
        self.registry = OperatorRegistry(options.operators, case_sensitive=options.case_sensitive)
        self.allowed: set[str] | None = None
        if options.operators_allowed is not None:
            self.allowed = {name.lower() for name in options.operators_allowed}
        self.disallowed = {name.lower() for name in options.operators_disallowed or ()}
        self.tokens: list[Token] = []
        self.pairs: dict[int, int] = {}

    def check_policy(self, definition: OperatorDefinition) -> None:
        name = definition.name.lower()
        if self.allowed is not None and name not in self.allowed:
            raise OperatorNotAllowedError(definition.name)
        if name in self.disallowed:
            raise OperatorNotAllowedError(definition.name)

    def build_leaf(self, definition: OperatorDefinition, value: str, *, negated: bool) -> Term:
        term = Term(kind=definition.kind, value=value, negated=negated)

        if definition.value_kind is ValueKind.DATE:
            resolution = resolve_date(value, clock=self.options.clock)
            if resolution is None:
                logger.debug("Could not resolve date %r for %s", value, definition.name)
            else:
                term.date = resolution.date
                term.date_range = resolution.date_range
        elif definition.value_kind is ValueKind.SIZE:
            term.size = parse_size(value)
            if term.size is None:
                logger.debug("Could not parse size %r", value)

        return term

    def resolve_operator(self, token: Token) -> list[Term]:
        key, value = split_operator(token.value) or (token.value, "")
        definition = self.registry.find(key)
        if definition is None:
            logger.debug("Unknown operator %r, treating as text", key)
            return [Term(kind=TermKind.TEXT, value=token.value)]

        self.check_policy(definition)
        pieces = _value_pieces(value)
        if not pieces:
            return [Term(kind=TermKind.TEXT, value=token.value)]

        leaves = [self.build_leaf(definition, piece, negated=False) for piece in pieces]
        if len(leaves) == 1:
            return leaves
        # key:a,b means either value
        return [Term.any_of(leaves)]

    def resolve_negated(self, token: Token) -> list[Term]:
        quoted = token.raw[1:2] in QUOTES
        parts = None if quoted else split_operator(token.value)

        if parts is not None:
            definition = self.registry.find(parts[0])
            if definition is not None and definition.allow_negation:
                self.check_policy(definition)
                pieces = _value_pieces(parts[1])
                if pieces:
                    # -key:a,b excludes each value
                    return [self.build_leaf(definition, piece, negated=True) for piece in pieces]
            else:
                logger.debug("Operator %r cannot be negated here, treating as text", parts[0])

        is_phrase = any(quote in token.raw for quote in QUOTES)
        kind = TermKind.PHRASE if is_phrase else TermKind.TEXT
        return [Term(kind=kind, value=token.value, negated=True)]

    def resolve(self, token: Token) -> list[Term]:
        if token.kind is TokenKind.TEXT:
            return [Term(kind=TermKind.TEXT, value=token.value)]
        if token.kind is TokenKind.QUOTED_PHRASE:
            return [Term(kind=TermKind.PHRASE, value=token.value)]
        if token.kind is TokenKind.NEGATED_ATOM:
            return self.resolve_negated(token)
        if token.kind is TokenKind.OPERATOR_ATOM:
            return self.resolve_operator(token)
        return []

    def parse_tokens(self, tokens: list[Token]) -> list[Term]:
        self.tokens = tokens
        self.pairs = _pair_parentheses(tokens)
        return self.parse_window(0, len(tokens))

    def parse_window(self, start: int, end: int, depth: int = 0) -> list[Term]:
        tokens = self.tokens
        terms: list[Term] = []
        i = start

        while i < end:
            token = tokens[i]

            if token.kind is TokenKind.GROUP_OPEN:
                if depth >= self.options.max_depth:
                    logger.warning(
                        "Nesting deeper than %d at position %d, ignoring parenthesis",
                        self.options.max_depth,
                        token.position,
                    )
                    i += 1
                    continue

                close = self.pairs.get(i)
                if close is None:
                    logger.debug("Dropping unmatched '(' at position %d", token.position)
                    i += 1
                    continue

                inner = self.parse_window(i + 1, close, depth + 1)
                if inner:
                    terms.append(Term.group(inner))
                i = close + 1
                continue

            if token.kind is TokenKind.GROUP_CLOSE:
                logger.debug("Dropping unmatched ')' at position %d", token.position)
            elif token.kind is TokenKind.OR_KEYWORD:
                terms.append(_OR_MARKER)
            else:
                terms.extend(self.resolve(token))
            i += 1

        return _collapse_or(terms)


def parse(text: str, options: ParserOptions | None = None, **overrides: Any) -> list[Term]:
    """Parse a search query string into terms.

    Args:
        text: The search query to parse.
        options: Parser options. Keyword arguments override individual fields,
            e.g. ``parse(q, operators_allowed=["from"])``.

    Returns:
        Top-level terms in source order, implicitly AND-ed.

    Raises:
        OperatorNotAllowedError: If an operator violates the allow/deny lists.
    """
    if options is None:
        options = ParserOptions(**overrides)
    elif overrides:
        options = dataclasses.replace(options, **overrides)

    tokens = tokenize(text)
    terms = _TermBuilder(options).parse_tokens(tokens)
    logger.debug("Parsed %d tokens into %d terms", len(tokens), len(terms))
    return terms


def extract_operators(text: str) -> list[str]:
    """Return the distinct operator keys in ``text``, lower-cased, in order of appearance.

    Keys are reported whether or not they are registered operators.
    """
    keys: dict[str, None] = {}
    for token in tokenize(text):
        parsed = parse_operator(token)
        if parsed is not None:
            keys.setdefault(parsed[0], None)
    return list(keys)


def validate(text: str) -> ValidationResult:
    """Check quote and parenthesis balance.

    Parentheses inside quotes are ignored. Escapes are not recognized, and
    operator syntax is not checked.
    """
    errors: list[str] = []
    quote_char = ""
    paren_balance = 0

    for char in text:
        if quote_char:
            if char == quote_char:
                quote_char = ""
        elif char in QUOTES:
            quote_char = char
        elif char == "(":
            paren_balance += 1
        elif char == ")":
            paren_balance -= 1

    if quote_char:
        errors.append(f"Unmatched quote: {quote_char}")
    if paren_balance > 0:
        errors.append("Unmatched (")
    elif paren_balance < 0:
        errors.append("Unmatched )")

    return ValidationResult(valid=not errors, errors=errors)
