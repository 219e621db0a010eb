"""Token data classes produced by the query tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TokenKind(Enum):
    """Lexical category of a token."""

    TEXT = "text"
    QUOTED_PHRASE = "quoted"
    NEGATED_ATOM = "negated"
    OPERATOR_ATOM = "operator"
    GROUP_OPEN = "lparen"
    GROUP_CLOSE = "rparen"
    OR_KEYWORD = "or"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical unit of a query string.

    Attributes:
        kind: Lexical category.
        value: Decoded payload. Quotes are stripped and escapes resolved for
            phrases; operator atoms keep quoted list items verbatim so the
            parser can split them on unquoted commas.
        raw: Exact slice of the source string.
        position: 0-based offset of the first character in the source.
    """

    kind: TokenKind
    value: str
    raw: str
    position: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "value": self.value,
            "raw": self.raw,
            "position": self.position,
        }
