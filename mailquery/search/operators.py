"""Operator definitions and the per-parse operator registry."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from mailquery.search.terms import TermKind


class ValueKind(StrEnum):
    """How an operator's value is interpreted."""

    STRING = "string"
    DATE = "date"
    SIZE = "size"


@dataclass(frozen=True, slots=True)
class OperatorDefinition:
    """A ``key:value`` operator the parser understands.

    Attributes:
        name: Canonical operator name, used by allow/deny lists.
        kind: Kind assigned to terms built from this operator.
        aliases: Alternative keys accepted for this operator.
        value_kind: How the value is resolved (plain string, date or size).
        allow_negation: Whether ``-name:value`` is treated as this operator.
    """

    name: str
    kind: str
    aliases: frozenset[str] = field(default_factory=frozenset)
    value_kind: ValueKind = ValueKind.STRING
    allow_negation: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", frozenset(self.aliases))
        object.__setattr__(self, "value_kind", ValueKind(self.value_kind))

    @property
    def keys(self) -> tuple[str, ...]:
        return (self.name, *sorted(self.aliases))

    def matches(self, key: str, *, case_sensitive: bool = False) -> bool:
        if case_sensitive:
            return key == self.name or key in self.aliases
        key = key.lower()
        return key == self.name.lower() or any(key == alias.lower() for alias in self.aliases)


DEFAULT_OPERATORS: tuple[OperatorDefinition, ...] = (
    OperatorDefinition("from", TermKind.FROM, frozenset({"f", "sender"})),
    OperatorDefinition("to", TermKind.TO, frozenset({"t", "recipient"})),
    OperatorDefinition("subject", TermKind.SUBJECT, frozenset({"subj", "s"})),
    OperatorDefinition("body", TermKind.BODY, frozenset({"content", "b"})),
    OperatorDefinition("has", TermKind.HAS),
    OperatorDefinition("is", TermKind.IS),
    OperatorDefinition("in", TermKind.IN, frozenset({"folder", "box", "mailbox"})),
    OperatorDefinition("label", TermKind.LABEL, frozenset({"tag", "l"})),
    OperatorDefinition(
        "date", TermKind.DATE, frozenset({"d"}), ValueKind.DATE, allow_negation=False
    ),
    OperatorDefinition(
        "before",
        TermKind.BEFORE,
        frozenset({"b4", "older", "older_than"}),
        ValueKind.DATE,
        allow_negation=False,
    ),
    OperatorDefinition(
        "after",
        TermKind.AFTER,
        frozenset({"af", "newer", "newer_than"}),
        ValueKind.DATE,
        allow_negation=False,
    ),
    OperatorDefinition(
        "header-k", TermKind.HEADER_KEY, frozenset({"hk", "header-key"}), allow_negation=False
    ),
    OperatorDefinition(
        "header-v", TermKind.HEADER_VALUE, frozenset({"hv", "header-value"}), allow_negation=False
    ),
    OperatorDefinition(
        "size", TermKind.SIZE, frozenset({"larger", "smaller"}), ValueKind.SIZE, allow_negation=False
    ),
)


class OperatorRegistry:
    """Ordered operator lookup built fresh for each parse.

    User definitions are consulted before the built-ins, and a user definition
    whose name matches a built-in replaces it entirely.
    """

    def __init__(
        self,
        definitions: Iterable[OperatorDefinition] = (),
        *,
        case_sensitive: bool = False,
    ) -> None:
        custom = list(definitions)
        replaced = {definition.name.lower() for definition in custom}
        self.case_sensitive = case_sensitive
        self._definitions: list[OperatorDefinition] = custom + [
            definition
            for definition in DEFAULT_OPERATORS
            if definition.name.lower() not in replaced
        ]

    def __iter__(self) -> Iterator[OperatorDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def find(self, key: str) -> OperatorDefinition | None:
        """Return the first definition whose name or alias matches ``key``."""
        for definition in self._definitions:
            if definition.matches(key, case_sensitive=self.case_sensitive):
                return definition
        return None

    def for_kind(self, kind: str) -> OperatorDefinition | None:
        """Return the first definition producing terms of ``kind``."""
        for definition in self._definitions:
            if str(definition.kind) == str(kind):
                return definition
        return None
