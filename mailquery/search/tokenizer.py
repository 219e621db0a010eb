"""Split a raw search string into tokens.

The tokenizer never raises. Unbalanced quotes and parentheses degrade to a
best-effort token stream; structural problems are reported separately by
:func:`mailquery.search.parser.validate`.

Only the literal space character separates tokens. Tabs and newlines are
ordinary characters.
"""

from __future__ import annotations

import logging

from mailquery.search.tokens import Token, TokenKind

logger = logging.getLogger(__name__)

SPACE = " "
NEGATION = "-"
COLON = ":"
COMMA = ","
ESCAPE = "\\"
GROUP_OPEN = "("
GROUP_CLOSE = ")"

QUOTES: frozenset[str] = frozenset({'"', "'"})

# A bare run stops at any of these.
_DELIMITERS: frozenset[str] = frozenset({SPACE, GROUP_OPEN, GROUP_CLOSE}) | QUOTES


class _Scanner:
    """Cursor over the input string that accumulates tokens."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.length = len(text)
        self.pos = 0
        self.tokens: list[Token] = []

    def emit(self, kind: TokenKind, value: str, start: int) -> None:
        self.tokens.append(
            Token(kind=kind, value=value, raw=self.text[start : self.pos], position=start)
        )

    def skip_spaces(self) -> None:
        while self.pos < self.length and self.text[self.pos] == SPACE:
            self.pos += 1

    def read_quoted(self) -> str:
        """Read a quoted string starting at its opening quote.

        Returns the content with the surrounding quotes removed and backslash
        escapes resolved. An unterminated quote runs to the end of input.
        """
        quote = self.text[self.pos]
        self.pos += 1
        chars: list[str] = []

        while self.pos < self.length:
            char = self.text[self.pos]
            if char == ESCAPE and self.pos + 1 < self.length:
                chars.append(self.text[self.pos + 1])
                self.pos += 2
                continue
            self.pos += 1
            if char == quote:
                break
            chars.append(char)

        return "".join(chars)

    def read_bare(self) -> str:
        start = self.pos
        while self.pos < self.length and self.text[self.pos] not in _DELIMITERS:
            self.pos += 1
        return self.text[start : self.pos]

    def read_atom(self) -> str:
        """Read a bare run plus any quoted operator values attached to it.

        ``to:"A","B"`` and ``from: "John Doe"`` are read as one atom. Quoted
        values are kept verbatim (quotes and escapes included) and the space
        after ``key:`` is dropped from the returned value.
        """
        parts = [self.read_bare()]
        if parts[0].find(COLON) <= 0:
            return parts[0]

        while parts[-1].endswith((COLON, COMMA)):
            lookahead = self.pos
            if parts[-1].endswith(COLON):
                while lookahead < self.length and self.text[lookahead] == SPACE:
                    lookahead += 1
            if lookahead >= self.length or self.text[lookahead] not in QUOTES:
                break

            self.pos = lookahead
            quote_start = self.pos
            self.read_quoted()
            parts.append(self.text[quote_start : self.pos])

            if self.pos < self.length and self.text[self.pos] == COMMA:
                parts.append(self.read_bare())

        return "".join(parts)

    def scan_negated(self, start: int) -> None:
        self.pos += 1
        if self.text[self.pos] in QUOTES:
            value = self.read_quoted()
            self.emit(TokenKind.NEGATED_ATOM, value, start)
            return

        value = self.read_atom()
        if value:
            self.emit(TokenKind.NEGATED_ATOM, value, start)
        else:
            # -( and -) : negated groups are not supported, the dash is dropped
            logger.debug("Ignoring negation before %r at %d", self.text[self.pos], start)

    def scan_bare(self, start: int) -> None:
        value = self.read_atom()
        if not value:
            self.pos += 1
            return

        if value.upper() == "OR":
            self.emit(TokenKind.OR_KEYWORD, "OR", start)
            return

        colon = value.find(COLON)
        if colon > 0 and any(split_values(value[colon + 1 :])):
            self.emit(TokenKind.OPERATOR_ATOM, value, start)
        else:
            self.emit(TokenKind.TEXT, value, start)

    def scan(self) -> list[Token]:
        while True:
            self.skip_spaces()
            if self.pos >= self.length:
                break

            start = self.pos
            char = self.text[start]

            if char == GROUP_OPEN:
                self.pos += 1
                self.emit(TokenKind.GROUP_OPEN, char, start)
            elif char == GROUP_CLOSE:
                self.pos += 1
                self.emit(TokenKind.GROUP_CLOSE, char, start)
            elif (
                char == NEGATION
                and start + 1 < self.length
                and self.text[start + 1] != SPACE
            ):
                self.scan_negated(start)
            elif char in QUOTES:
                value = self.read_quoted()
                self.emit(TokenKind.QUOTED_PHRASE, value, start)
            else:
                self.scan_bare(start)

        return self.tokens


def tokenize(text: str) -> list[Token]:
    """Tokenize a search query string.

    Handles quoted strings, negation, ``key:value`` operators (including
    quoted and comma-separated values), parentheses and the ``OR`` keyword.

    Args:
        text: The raw query string.

    Returns:
        Tokens in source order.
    """
    return _Scanner(text).scan()


def split_operator(text: str) -> tuple[str, str] | None:
    """Split ``key:value`` at the first colon. Returns None without a key."""
    colon = text.find(COLON)
    if colon <= 0:
        return None
    return text[:colon], text[colon + 1 :]


def parse_operator(token: Token) -> tuple[str, str] | None:
    """Extract the lower-cased key and the raw value of an operator token."""
    if token.kind is not TokenKind.OPERATOR_ATOM:
        return None
    parts = split_operator(token.value)
    if parts is None:
        return None
    return parts[0].lower(), parts[1]


def is_operator(token: Token, key: str) -> bool:
    """Check whether ``token`` is an operator atom with the given key."""
    parsed = parse_operator(token)
    return parsed is not None and parsed[0] == key.lower()


def split_values(value: str) -> list[str]:
    """Split an operator value on commas that are not inside quotes."""
    pieces: list[str] = []
    current: list[str] = []
    quote: str | None = None
    i = 0

    while i < len(value):
        char = value[i]
        if quote is not None:
            current.append(char)
            if char == ESCAPE and i + 1 < len(value):
                current.append(value[i + 1])
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
            current.append(char)
        elif char == COMMA:
            pieces.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    pieces.append("".join(current))
    return pieces


def unquote(piece: str) -> str:
    """Strip one layer of quotes from a value piece and resolve its escapes.

    Bare pieces are returned unchanged; escapes only apply inside quotes.
    """
    if not piece or piece[0] not in QUOTES:
        return piece

    quote = piece[0]
    if len(piece) >= 2 and piece[-1] == quote:
        body = piece[1:-1]
    else:
        body = piece[1:]

    chars: list[str] = []
    i = 0
    while i < len(body):
        if body[i] == ESCAPE and i + 1 < len(body):
            chars.append(body[i + 1])
            i += 2
            continue
        chars.append(body[i])
        i += 1
    return "".join(chars)
