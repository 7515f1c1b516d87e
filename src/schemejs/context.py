"""Session database context and the REPL navigation commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from schemejs.errors import ContextFrozenError

logger = logging.getLogger(__name__)


@dataclass
class Context:
    """The database and table a session is currently pointed at."""

    db_name: str | None = None
    tbl_name: str | None = None
    repl_exit: bool = False


class ReplError(Enum):
    """Navigation outcomes reported back to the REPL host."""

    ALREADY_IN_CONTEXT = "AlreadyInContext"
    UNEXPECTED_USE_ARGS_LENGTH = "UnexpectedUseArgsLength"
    ALREADY_IN_GLOBAL = "AlreadyInGlobal"

    def response(self) -> dict[str, str]:
        return {"REPL_ERR": self.value}


class ReplQueryState(Enum):
    """Which level of the database hierarchy the REPL is at."""

    GLOBAL = "global"
    DATABASE = "database"
    TABLE = "table"


def query_state(context: Context) -> ReplQueryState:
    if context.db_name and context.tbl_name:
        return ReplQueryState.TABLE
    if context.db_name:
        return ReplQueryState.DATABASE
    # A table without a database is treated as global
    return ReplQueryState.GLOBAL


_CONTEXT_FIELDS = frozenset(f.name for f in fields(Context))


class ContextRegistry:
    """Owns a session's Context and guards how often it may be initialized."""

    def __init__(self, context: Context | None = None, repl: bool = False) -> None:
        self.context = context if context is not None else Context()
        self.repl = repl
        self._initialized = False

    def initialize_db_context(self, partial: dict[str, Any] | None = None) -> Context:
        """Merge fields into the context; absent fields keep their value.

        Raises:
            ContextFrozenError: On a second call outside REPL mode.
            ValueError: If ``partial`` names a field the context lacks.
        """
        if self._initialized and not self.repl:
            raise ContextFrozenError("Database context is already initialized")
        partial = partial or {}
        unknown = set(partial) - _CONTEXT_FIELDS
        if unknown:
            raise ValueError(f"Unknown context fields: {', '.join(sorted(unknown))}")
        for name, value in partial.items():
            setattr(self.context, name, value)
        self._initialized = True
        logger.debug("Context initialized: %s", self.context)
        return self.context


class ReplCommands:
    """The ``use``/``exit``/``close`` navigation commands.

    Commands return None on success and a ``{"REPL_ERR": ...}`` dict when
    the move is not possible; they never raise.
    """

    def __init__(self, context: Context) -> None:
        self.context = context

    def _set(self, db_name: str | None, tbl_name: str | None) -> None:
        self.context.db_name = db_name
        self.context.tbl_name = tbl_name

    def use(self, *args: str) -> dict[str, str] | None:
        if len(args) == 1:
            return self._use_single(args[0])
        if len(args) == 2:
            self._set(args[0], args[1])
            logger.debug("use: %s.%s", args[0], args[1])
            return None
        return ReplError.UNEXPECTED_USE_ARGS_LENGTH.response()

    def _use_single(self, target: str) -> dict[str, str] | None:
        ctx = self.context
        if not ctx.db_name:
            ctx.db_name = target
        elif not ctx.tbl_name:
            ctx.tbl_name = target
        else:
            parts = [part for part in target.split(".") if part.strip()]
            if len(parts) < 2:
                return ReplError.ALREADY_IN_CONTEXT.response()
            self._set(parts[0], parts[1])
        logger.debug("use: %s.%s", ctx.db_name, ctx.tbl_name)
        return None

    def exit(self) -> dict[str, str] | None:
        ctx = self.context
        if ctx.tbl_name:
            ctx.tbl_name = None
        elif ctx.db_name:
            ctx.db_name = None
        else:
            return ReplError.ALREADY_IN_GLOBAL.response()
        return None

    def close(self) -> None:
        self.context.repl_exit = True
