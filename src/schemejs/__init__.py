"""SchemeJS - table-definition scripts and a query builder for the storage engine."""

from schemejs.bootstrap import ScriptNamespace, Session, bootstrap, load_table
from schemejs.context import Context, ContextRegistry, ReplCommands, ReplError
from schemejs.engine import DryRunEngine, Engine, EngineBridge
from schemejs.query import And, Condition, ConditionTree, Or, QueryBuilder
from schemejs.schema import Column, Helper, Table
from schemejs.types import DataTypes, DataValue, HelperType

__all__ = [
    # Sessions
    "Session",
    "ScriptNamespace",
    "bootstrap",
    "load_table",
    # Context
    "Context",
    "ContextRegistry",
    "ReplCommands",
    "ReplError",
    # Engine
    "Engine",
    "EngineBridge",
    "DryRunEngine",
    # Schema
    "Table",
    "Column",
    "Helper",
    "DataTypes",
    "DataValue",
    "HelperType",
    # Queries
    "QueryBuilder",
    "ConditionTree",
    "Condition",
    "And",
    "Or",
]

__version__ = "0.1.0"
