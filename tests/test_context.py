"""Tests for the session context and REPL navigation."""

import pytest

from schemejs.context import (
    Context,
    ContextRegistry,
    ReplCommands,
    ReplError,
    ReplQueryState,
    query_state,
)
from schemejs.errors import ContextFrozenError


class TestContextRegistry:
    """Tests for context initialization."""

    def test_starts_unset(self):
        ctx = ContextRegistry().context
        assert ctx == Context(db_name=None, tbl_name=None, repl_exit=False)

    def test_merge_keeps_absent_fields(self):
        registry = ContextRegistry(repl=True)
        registry.initialize_db_context({"db_name": "app", "tbl_name": "users"})
        registry.initialize_db_context({"tbl_name": "orders"})
        assert registry.context.db_name == "app"
        assert registry.context.tbl_name == "orders"

    def test_merge_is_in_place(self):
        registry = ContextRegistry(repl=True)
        ctx = registry.context
        assert registry.initialize_db_context({"db_name": "app"}) is ctx

    def test_empty_merge(self):
        registry = ContextRegistry()
        registry.initialize_db_context()
        assert registry.context == Context()

    def test_second_merge_outside_repl_fails(self):
        registry = ContextRegistry()
        registry.initialize_db_context({"db_name": "app"})
        with pytest.raises(ContextFrozenError):
            registry.initialize_db_context({"db_name": "other"})
        assert registry.context.db_name == "app"

    def test_repeated_merges_in_repl(self):
        registry = ContextRegistry(repl=True)
        for name in ("a", "b", "c"):
            registry.initialize_db_context({"db_name": name})
        assert registry.context.db_name == "c"

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown context fields: schema"):
            ContextRegistry().initialize_db_context({"schema": "x"})


class TestUse:
    """Tests for the use() command."""

    @pytest.fixture
    def ctx(self):
        return Context()

    @pytest.fixture
    def commands(self, ctx):
        return ReplCommands(ctx)

    def test_fills_database_then_table(self, ctx, commands):
        assert commands.use("db1") is None
        assert (ctx.db_name, ctx.tbl_name) == ("db1", None)
        assert commands.use("tbl1") is None
        assert (ctx.db_name, ctx.tbl_name) == ("db1", "tbl1")

    def test_dotted_form_when_both_set(self, ctx, commands):
        """A dotted target switches database and table even when both are set.

        Only a dotted target without two non-empty parts reports
        AlreadyInContext; see DESIGN.md for why this differs from a
        bare name, which is refused.
        """
        commands.use("db1")
        commands.use("tbl1")
        assert commands.use("x.y") is None
        assert (ctx.db_name, ctx.tbl_name) == ("x", "y")

    def test_plain_name_when_both_set(self, ctx, commands):
        commands.use("db1")
        commands.use("tbl1")
        assert commands.use("other") == {"REPL_ERR": "AlreadyInContext"}
        assert (ctx.db_name, ctx.tbl_name) == ("db1", "tbl1")

    @pytest.mark.parametrize("target", ["x.", ".y", "."])
    def test_incomplete_dotted_form(self, commands, target):
        commands.use("db1", "tbl1")
        assert commands.use(target) == ReplError.ALREADY_IN_CONTEXT.response()

    def test_two_arguments(self, ctx, commands):
        assert commands.use("db", "tbl") is None
        assert (ctx.db_name, ctx.tbl_name) == ("db", "tbl")

    def test_two_arguments_replace_context(self, ctx, commands):
        commands.use("db1", "tbl1")
        commands.use("db2", "tbl2")
        assert (ctx.db_name, ctx.tbl_name) == ("db2", "tbl2")

    @pytest.mark.parametrize("args", [(), ("a", "b", "c")])
    def test_unexpected_arity(self, commands, args):
        assert commands.use(*args) == {"REPL_ERR": "UnexpectedUseArgsLength"}


class TestExitClose:
    """Tests for exit() and close()."""

    def test_exit_walks_up(self):
        ctx = Context(db_name="db", tbl_name="tbl")
        commands = ReplCommands(ctx)

        assert commands.exit() is None
        assert (ctx.db_name, ctx.tbl_name) == ("db", None)
        assert commands.exit() is None
        assert (ctx.db_name, ctx.tbl_name) == (None, None)
        assert commands.exit() == {"REPL_ERR": "AlreadyInGlobal"}

    def test_close(self):
        ctx = Context()
        ReplCommands(ctx).close()
        assert ctx.repl_exit is True


class TestQueryState:
    """Tests for the prompt state."""

    def test_states(self):
        assert query_state(Context()) is ReplQueryState.GLOBAL
        assert query_state(Context(db_name="db")) is ReplQueryState.DATABASE
        assert query_state(Context(db_name="db", tbl_name="t")) is ReplQueryState.TABLE

    def test_table_without_database(self):
        assert query_state(Context(tbl_name="t")) is ReplQueryState.GLOBAL
