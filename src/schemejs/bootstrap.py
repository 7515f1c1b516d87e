"""Session setup and the namespace scripts run in."""

from __future__ import annotations

import ast
import builtins
import inspect
import logging
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Iterator

from schemejs.context import Context, ContextRegistry, ReplCommands
from schemejs.engine import Engine, EngineBridge
from schemejs.errors import BootstrapError, FrozenGlobalError, ScriptError, UsageError
from schemejs.query import QueryBuilder
from schemejs.schema import Column, Table
from schemejs.types import DataTypes, DataValue

logger = logging.getLogger(__name__)

# Names every script sees
SCRIPT_GLOBALS = (
    "Table",
    "Column",
    "DataTypes",
    "DataValue",
    "QueryBuilder",
    "insert",
    "raw_insert",
    "query",
    "print",
    "context",
)

# Extra names installed in REPL sessions
REPL_GLOBALS = ("use", "exit", "close")


class ScriptNamespace(MutableMapping):
    """Namespace a script executes in.

    Installed names are frozen: rebinding or deleting them raises
    FrozenGlobalError unless the namespace is reconfigurable (REPL mode).
    Module-level assignments land in ``globals`` so functions defined by
    the script see them.
    """

    def __init__(self, installed: dict[str, Any], reconfigurable: bool = False) -> None:
        self.installed = dict(installed)
        self.reconfigurable = reconfigurable
        self.globals: dict[str, Any] = {
            "__builtins__": builtins,
            "__name__": "__sjs__",
            **installed,
        }

    def child(self) -> ScriptNamespace:
        """Return a fresh namespace with the same installed names."""
        return ScriptNamespace(self.installed, self.reconfigurable)

    def _check_frozen(self, key: str) -> None:
        if key in self.installed and not self.reconfigurable:
            raise FrozenGlobalError(f"Cannot redefine global '{key}'")

    def __getitem__(self, key: str) -> Any:
        return self.globals[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._check_frozen(key)
        self.globals[key] = value

    def __delitem__(self, key: str) -> None:
        self._check_frozen(key)
        del self.globals[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.globals)

    def __len__(self) -> int:
        return len(self.globals)

    def run(self, source: str, filename: str = "<script>") -> None:
        """Execute a script's statements in this namespace."""
        exec(self._compile_statements(source, filename), self.globals, self)

    def evaluate(self, line: str) -> Any:
        """Evaluate one REPL line.

        Expressions return their value. Statements return None, or a
        coroutine to await when the line uses top-level ``await``.

        Raises:
            UsageError: If a statement stored an engine call without
                awaiting it.
        """
        try:
            code = compile(line, "<repl>", "eval", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT)
        except SyntaxError:
            pass
        else:
            return eval(code, self.globals, self)

        code = self._compile_statements(line, "<repl>", ast.PyCF_ALLOW_TOP_LEVEL_AWAIT)
        pending = self._coroutine_ids()
        result = eval(code, self.globals, self)
        if inspect.iscoroutine(result):
            return self._finish(result, pending)
        self._reject_unawaited(pending)
        return None

    async def _finish(self, coro: Any, pending: set[int]) -> Any:
        result = await coro
        self._reject_unawaited(pending)
        return result

    def _compile_statements(self, source: str, filename: str, flags: int = 0) -> Any:
        tree = ast.parse(source, filename)
        if not self.reconfigurable:
            _FrozenDeletionCheck(self.installed).visit(tree)
        return compile(tree, filename, "exec", flags=flags)

    def _coroutine_ids(self) -> set[int]:
        return {id(v) for v in self.globals.values() if inspect.iscoroutine(v)}

    def _reject_unawaited(self, pending: set[int]) -> None:
        for name, value in list(self.globals.items()):
            if inspect.iscoroutine(value) and id(value) not in pending:
                value.close()
                del self.globals[name]
                raise UsageError(
                    f"'{name}' was assigned an engine call that never ran; "
                    f"write '{name} = await ...'"
                )


class _FrozenDeletionCheck(ast.NodeVisitor):
    """Rejects module-level ``del`` of installed names.

    The interpreter turns errors from a namespace's ``__delitem__`` into
    NameError, so deletions are checked before the code runs.
    """

    def __init__(self, installed: dict[str, Any]) -> None:
        self.installed = installed

    def _skip(self, node: ast.AST) -> None:
        # Names inside functions and classes are not module globals
        pass

    visit_FunctionDef = visit_AsyncFunctionDef = visit_Lambda = visit_ClassDef = _skip

    def visit_Name(self, node: ast.Name) -> None:
        if isinstance(node.ctx, ast.Del) and node.id in self.installed:
            raise FrozenGlobalError(f"Cannot redefine global '{node.id}'")


def _context_query_builder(context: Context) -> type[QueryBuilder]:
    """Build a QueryBuilder whose missing scope comes from the context."""

    class ContextQueryBuilder(QueryBuilder):
        def __init__(self, db_name: str | None = None, table_name: str | None = None) -> None:
            super().__init__(db_name or context.db_name, table_name or context.tbl_name)

    ContextQueryBuilder.__name__ = ContextQueryBuilder.__qualname__ = "QueryBuilder"
    return ContextQueryBuilder


class Session:
    """One script session: its context, engine bridge and namespace.

    A REPL session may re-initialize its context and rebind globals; other
    sessions initialize the context once.
    """

    def __init__(self, engine: Engine, repl: bool = False) -> None:
        self.repl = repl
        self.registry = ContextRegistry(repl=repl)
        self.bridge = EngineBridge(engine, self.registry.context)
        self.namespace: ScriptNamespace | None = None

    @property
    def context(self) -> Context:
        return self.registry.context

    def initialize_db_context(self, partial: dict[str, Any] | None = None) -> Context:
        return self.registry.initialize_db_context(partial)


def bootstrap(session: Session) -> ScriptNamespace:
    """Install the script API for a session. Runs once per session.

    Raises:
        BootstrapError: If the session was already bootstrapped.
    """
    if session.namespace is not None:
        raise BootstrapError("Session is already bootstrapped")

    bridge = session.bridge
    installed: dict[str, Any] = {
        "Table": Table,
        "Column": Column,
        "DataTypes": DataTypes,
        "DataValue": DataValue,
        "QueryBuilder": _context_query_builder(session.context),
        "insert": bridge.insert,
        "raw_insert": bridge.insert_row,
        "query": bridge.query,
        "print": bridge.print,
        "context": session.context,
    }
    if session.repl:
        commands = ReplCommands(session.context)
        installed.update(use=commands.use, exit=commands.exit, close=commands.close)

    session.namespace = ScriptNamespace(installed, reconfigurable=session.repl)
    if session.repl:
        session.initialize_db_context({})
    logger.debug("Bootstrapped %s session", "REPL" if session.repl else "script")
    return session.namespace


def load_table(session: Session, path: Path | str) -> Table:
    """Run a table-definition script and return the table its main() builds.

    Raises:
        ScriptError: If the script has no main() or main() returns
            something other than a Table.
    """
    if session.namespace is None:
        bootstrap(session)
    path = Path(path)
    namespace = session.namespace.child()  # type: ignore[union-attr]
    namespace.run(path.read_text(), str(path))

    main = namespace.globals.get("main")
    if not callable(main):
        raise ScriptError(f"{path} does not define main()")
    table = main()
    if not isinstance(table, Table):
        raise ScriptError(f"main() in {path} returned {type(table).__name__}, expected Table")
    logger.debug("Loaded table '%s' from %s", table.name, path)
    return table
