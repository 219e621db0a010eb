"""Data classes for parsed search terms."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from mailquery.search.dates import DateRange


class TermKind(StrEnum):
    """Built-in term kinds.

    Custom operators may introduce any other string as a kind; members of this
    enum compare equal to their plain string values.
    """

    TEXT = "text"
    PHRASE = "phrase"
    FROM = "from"
    TO = "to"
    SUBJECT = "subject"
    BODY = "body"
    HAS = "has"
    IS = "is"
    IN = "in"
    LABEL = "label"
    DATE = "date"
    BEFORE = "before"
    AFTER = "after"
    HEADER_KEY = "header-key"
    HEADER_VALUE = "header-value"
    SIZE = "size"
    OR = "or"
    GROUP = "group"


COMPOUND_KINDS: frozenset[str] = frozenset({TermKind.OR.value, TermKind.GROUP.value})


class SizeComparison(StrEnum):
    """Comparison applied to a size filter."""

    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    EQUAL = "eq"


@dataclass(frozen=True, slots=True)
class Size:
    """A parsed ``size:`` value such as ``>1mb``."""

    comparison: SizeComparison
    bytes: int


@dataclass
class Term:
    """One resolved unit of a parsed query.

    Leaf terms carry ``value`` (and ``date``/``date_range``/``size`` for typed
    operators). ``or`` and ``group`` terms carry ``subterms`` instead and are
    never negated.
    """

    kind: str
    value: str = ""
    negated: bool = False
    date: datetime | None = None
    date_range: DateRange | None = None
    size: Size | None = None
    subterms: list[Term] | None = None

    @classmethod
    def any_of(cls, subterms: list[Term]) -> Term:
        return cls(kind=TermKind.OR, subterms=subterms)

    @classmethod
    def group(cls, subterms: list[Term]) -> Term:
        return cls(kind=TermKind.GROUP, subterms=subterms)

    @property
    def is_leaf(self) -> bool:
        return str(self.kind) not in COMPOUND_KINDS

    def walk(self) -> Iterator[Term]:
        """Yield this term and all nested subterms, depth first."""
        yield self
        for subterm in self.subterms or ():
            yield from subterm.walk()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict, omitting unset fields."""
        data: dict[str, Any] = {"kind": str(self.kind), "value": self.value, "negated": self.negated}
        if self.date is not None:
            data["date"] = self.date.isoformat()
        if self.date_range is not None:
            data["date_range"] = {
                "start": self.date_range.start.isoformat(),
                "end": self.date_range.end.isoformat(),
            }
        if self.size is not None:
            data["size"] = {"comparison": str(self.size.comparison), "bytes": self.size.bytes}
        if self.subterms is not None:
            data["subterms"] = [subterm.to_dict() for subterm in self.subterms]
        return data
