"""Query builder compiling where/and/or calls into a condition tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Union

from schemejs.errors import QueryDefinitionError
from schemejs.types import DataValue, classify


@dataclass
class Condition:
    """A single comparison leaf."""

    key: str
    filter_type: str  # =, !=, <, <=, >, >=
    value: DataValue

    def to_wire(self) -> dict[str, Any]:
        return {
            "Condition": {
                "key": self.key,
                "filter_type": self.filter_type,
                "value": self.value.to_wire(),
            }
        }


@dataclass
class And:
    """All children must match."""

    children: list[ConditionTree] = field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"And": [child.to_wire() for child in self.children]}


@dataclass
class Or:
    """At least one child must match."""

    children: list[ConditionTree] = field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"Or": [child.to_wire() for child in self.children]}


ConditionTree = Union[Condition, And, Or]

BuilderCallback = Callable[["QueryBuilder"], Any]

_filter_parser = None


def filter_parser():
    """Return the shared filter parser, building its tables on first use."""
    global _filter_parser
    if _filter_parser is None:
        from schemejs.parsing import FilterParser

        _filter_parser = FilterParser()
    return _filter_parser


class QueryBuilder:
    """Fluent builder for a table's row filter.

    Each call appends one node to the builder's sibling list::

        qb = QueryBuilder("app", "users").where("username", "=", "Luis")
        qb.build()  # Condition(key="username", ...)

    ``and_`` and ``or_`` hand a nested builder to a callback and wrap
    everything the callback registered in one And/Or node.
    """

    def __init__(self, db_name: str | None = None, table_name: str | None = None) -> None:
        self.db_name = db_name
        self.table_name = table_name
        self._nodes: list[ConditionTree] = []

    @classmethod
    def scoped_where(
        cls, db_name: str, table_name: str, key: str, filter_type: str, value: Any
    ) -> QueryBuilder:
        return cls(db_name, table_name).where(key, filter_type, value)

    @classmethod
    def scoped_and(cls, db_name: str, table_name: str, callback: BuilderCallback) -> QueryBuilder:
        return cls(db_name, table_name).and_(callback)

    @classmethod
    def scoped_or(cls, db_name: str, table_name: str, callback: BuilderCallback) -> QueryBuilder:
        return cls(db_name, table_name).or_(callback)

    @classmethod
    def parse(
        cls, text: str, db_name: str | None = None, table_name: str | None = None
    ) -> QueryBuilder:
        """Create a builder from a filter expression such as ``a = 1 and b != "x"``."""
        builder = cls(db_name, table_name)
        builder._nodes.append(filter_parser().parse(text))
        return builder

    def where(self, key: str, filter_type: str, value: Any) -> QueryBuilder:
        """Add a condition. ``value`` may be a DataValue or a plain value.

        Raises:
            InvalidDataTypeError: If a plain value has no DataValue variant.
        """
        self._nodes.append(Condition(key=key, filter_type=filter_type, value=classify(value)))
        return self

    def and_(self, callback: BuilderCallback) -> QueryBuilder:
        self._nodes.append(And(self._nested(callback)))
        return self

    def or_(self, callback: BuilderCallback) -> QueryBuilder:
        self._nodes.append(Or(self._nested(callback)))
        return self

    def _nested(self, callback: BuilderCallback) -> list[ConditionTree]:
        # Nested builders keep this builder's scope, never the ambient one
        builder = QueryBuilder(self.db_name, self.table_name)
        callback(builder)
        return builder.build(top_level=False)

    def build(self, top_level: bool = True, strict: bool = False) -> Any:
        """Finalize the builder.

        At top level a query is a single expression: the first node is
        returned and any further siblings are dropped. Pass ``strict=True``
        to raise instead of dropping. With ``top_level=False`` the whole
        sibling list is returned, as used for And/Or composition.

        Raises:
            QueryDefinitionError: At top level when nothing was added, or
                in strict mode when more than one node was added.
        """
        if not top_level:
            return list(self._nodes)
        if not self._nodes:
            raise QueryDefinitionError("Query has no conditions")
        if strict and len(self._nodes) > 1:
            raise QueryDefinitionError(
                f"Query has {len(self._nodes)} top-level expressions; "
                "combine them with and_() or or_()"
            )
        return self._nodes[0]

    def __repr__(self) -> str:
        return f"QueryBuilder({self.db_name!r}, {self.table_name!r}, nodes={len(self._nodes)})"
