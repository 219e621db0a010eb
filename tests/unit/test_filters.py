"""Unit tests for building SQLAlchemy filters from parsed terms."""

from __future__ import annotations

from collections.abc import Generator
from datetime import datetime

import pytest
from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    select,
)
from sqlalchemy.engine import Connection

from mailquery.search.filters import build_clause
from mailquery.search.parser import parse

metadata = MetaData()

messages = Table(
    "messages",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("sender", String),
    Column("subject", String),
    Column("body", String),
    Column("sent_at", DateTime),
    Column("size", Integer),
)

COLUMNS = {
    "from": messages.c.sender,
    "subject": messages.c.subject,
    "body": messages.c.body,
    "after": messages.c.sent_at,
    "before": messages.c.sent_at,
    "date": messages.c.sent_at,
    "size": messages.c.size,
}

TEXT_COLUMNS = [messages.c.subject, messages.c.body]

ROWS = [
    {
        "id": 1,
        "sender": "john@example.com",
        "subject": "Big SALE today",
        "body": "discount inside",
        "sent_at": datetime(2024, 6, 10, 9, 0),
        "size": 2_000_000,
    },
    {
        "id": 2,
        "sender": "jane@example.com",
        "subject": "Meeting notes",
        "body": "agenda attached",
        "sent_at": datetime(2024, 5, 1, 10, 0),
        "size": 50_000,
    },
    {
        "id": 3,
        "sender": "spam@junk.example",
        "subject": "You won",
        "body": "claim your prize sale",
        "sent_at": datetime(2023, 3, 15, 8, 30),
        "size": 500,
    },
]


@pytest.fixture
def connection() -> Generator[Connection, None, None]:
    engine = create_engine("sqlite:///:memory:")
    metadata.create_all(engine)
    with engine.connect() as conn:
        conn.execute(insert(messages), ROWS)
        yield conn
    engine.dispose()


@pytest.fixture
def search(connection: Connection, clock):
    def run(query: str, text_columns=TEXT_COLUMNS) -> list[int]:
        clause = build_clause(parse(query, clock=clock), COLUMNS, text_columns)
        stmt = select(messages.c.id).where(clause).order_by(messages.c.id)
        return list(connection.execute(stmt).scalars())

    return run


class TestBuildClause:
    def test_empty_query_matches_everything(self, search) -> None:
        assert search("") == [1, 2, 3]

    def test_operator_substring(self, search) -> None:
        assert search("from:john") == [1]

    def test_text_searches_text_columns(self, search) -> None:
        assert search("sale") == [1, 3]

    def test_case_insensitive(self, search) -> None:
        assert search("subject:sale") == [1]

    def test_negation(self, search) -> None:
        assert search("sale -from:spam") == [1]
        assert search("-sale") == [2]

    def test_or_keyword(self, search) -> None:
        assert search("from:john OR from:jane") == [1, 2]

    def test_comma_list(self, search) -> None:
        assert search("from:john,jane") == [1, 2]

    def test_group_inside_or(self, search) -> None:
        assert search("(from:john meeting) OR from:jane") == [2]
        assert search("(from:john sale) OR from:jane") == [1, 2]

    def test_after_and_before(self, search) -> None:
        assert search("after:2024-06-01") == [1]
        assert search("before:2024-01-01") == [3]

    def test_relative_date(self, search) -> None:
        assert search("after:-7d") == [1]

    def test_single_day(self, search) -> None:
        assert search("date:2024-05-01") == [2]

    def test_date_range(self, search) -> None:
        assert search("date:2023-01-01-2023-12-31") == [3]

    def test_size(self, search) -> None:
        assert search("size:>1mb") == [1]
        assert search("size:<1kb") == [3]
        assert search("size:500") == [3]

    def test_unparsed_size_is_ignored(self, search) -> None:
        assert search("size:huge") == [1, 2, 3]

    def test_kind_without_column_uses_text_columns(self, search) -> None:
        assert search("to:agenda") == [2]

    def test_text_without_text_columns_is_ignored(self, search) -> None:
        assert search("nothing-matches-this", text_columns=()) == [1, 2, 3]

    def test_unresolved_date_matches_raw_text(self, search) -> None:
        assert search("before:whenever") == []
