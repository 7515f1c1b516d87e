"""Exceptions raised by the scripting bridge."""

from __future__ import annotations


class SchemeJSError(Exception):
    """Base class for all bridge errors."""


class SchemaDefinitionError(SchemeJSError):
    """A table or column was declared with invalid settings."""


class InvalidDataTypeError(SchemeJSError, TypeError):
    """A query value has no DataValue representation."""


class QueryDefinitionError(SchemeJSError):
    """A query builder cannot be finalized."""


class UsageError(SchemeJSError):
    """A script-facing function was called without the state it needs."""


class BootstrapError(SchemeJSError):
    """The script namespace was already installed for this session."""


class FrozenGlobalError(SchemeJSError):
    """A script tried to rebind or delete an installed global."""


class ContextFrozenError(SchemeJSError):
    """The database context can only be initialized once outside the REPL."""


class ScriptError(SchemeJSError):
    """A table-definition script did not produce a table."""
