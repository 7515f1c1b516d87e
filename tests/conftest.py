"""Shared fixtures for the test suite."""

from __future__ import annotations

from typing import Any

import pytest

from schemejs.bootstrap import Session


class RecordingEngine:
    """Engine that records every dispatch and returns canned rows."""

    def __init__(self, rows: list[Any] | None = None) -> None:
        self.rows = rows or []
        self.inserts: list[tuple[str, str, Any]] = []
        self.searches: list[tuple[str, str, Any]] = []
        self.printed: list[Any] = []

    async def insert_row(self, db_name: str, table_name: str, data: Any) -> Any:
        self.inserts.append((db_name, table_name, data))
        return {"inserted": data}

    async def search_rows(self, db_name: str, table_name: str, query: Any) -> list[Any]:
        self.searches.append((db_name, table_name, query))
        return self.rows

    def print(self, message: Any) -> None:
        self.printed.append(message)


@pytest.fixture
def engine():
    return RecordingEngine()


@pytest.fixture
def session(engine):
    """A script (non-REPL) session."""
    return Session(engine)


@pytest.fixture
def repl_session(engine):
    """A REPL session."""
    return Session(engine, repl=True)
