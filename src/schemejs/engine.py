"""Dispatch of insert and search calls to the storage engine."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Protocol

from schemejs.context import Context
from schemejs.errors import UsageError
from schemejs.query import ConditionTree, QueryBuilder

logger = logging.getLogger(__name__)


class Engine(Protocol):
    """The storage engine that persists rows and evaluates filters."""

    async def insert_row(self, db_name: str, table_name: str, data: Any) -> Any: ...

    async def search_rows(self, db_name: str, table_name: str, query: Any) -> list[Any]: ...

    def print(self, message: Any) -> None: ...


class EngineBridge:
    """Translates script calls into engine calls.

    ``query`` and ``insert`` check their arguments synchronously and return
    the engine coroutine for the caller to await. Engine failures propagate
    unchanged.
    """

    def __init__(self, engine: Engine, context: Context) -> None:
        self.engine = engine
        self.context = context

    async def insert_row(self, db_name: str, table_name: str, data: Any) -> Any:
        logger.debug("insert_row %s.%s", db_name, table_name)
        return await self.engine.insert_row(db_name, table_name, data)

    async def search_rows(self, db_name: str, table_name: str, tree: ConditionTree) -> list[Any]:
        wire = tree.to_wire()
        logger.debug("search_rows %s.%s %s", db_name, table_name, wire)
        return await self.engine.search_rows(db_name, table_name, wire)

    def query(self, qb: QueryBuilder) -> Awaitable[list[Any]]:
        """Search the builder's table with its finalized filter.

        Raises:
            TypeError: If ``qb`` is not a QueryBuilder.
        """
        if not isinstance(qb, QueryBuilder):
            raise TypeError(f"query() expects a QueryBuilder, got {type(qb).__name__}")
        return self.search_rows(qb.db_name, qb.table_name, qb.build())  # type: ignore[arg-type]

    def insert(self, *args: Any) -> Awaitable[Any]:
        """Insert ``(data)`` into the current table or ``(table_name, data)``.

        The two-argument form also makes ``table_name`` the current table.

        Raises:
            UsageError: Without a current database, or without a table.
        """
        ctx = self.context
        if not ctx.db_name:
            raise UsageError("insert requires a database")
        if len(args) == 1 and ctx.tbl_name:
            (data,) = args
        elif len(args) == 2:
            ctx.tbl_name, data = args
        else:
            raise UsageError("insert requires a table")
        return self.insert_row(ctx.db_name, ctx.tbl_name, data)  # type: ignore[arg-type]

    def print(self, message: Any) -> None:
        self.engine.print(message)


class DryRunEngine:
    """Engine stand-in that logs dispatches instead of storing rows."""

    def __init__(self, out: Any = None) -> None:
        self.out = out

    async def insert_row(self, db_name: str, table_name: str, data: Any) -> Any:
        logger.info("dry-run insert into %s.%s: %r", db_name, table_name, data)
        return data

    async def search_rows(self, db_name: str, table_name: str, query: Any) -> list[Any]:
        logger.info("dry-run search on %s.%s: %s", db_name, table_name, query)
        return []

    def print(self, message: Any) -> None:
        print(message, file=self.out)
