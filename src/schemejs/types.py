"""Data types shared by the schema builder and the query builder."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from functools import singledispatch
from typing import Any

from schemejs.errors import InvalidDataTypeError


class DataTypes(Enum):
    """Column and value types understood by the engine."""

    NULL = "Null"
    UUID = "Uuid"
    STRING = "String"
    BOOLEAN = "Boolean"
    NUMBER = "Number"


class HelperType(Enum):
    """Kinds of callbacks a table can carry."""

    CUSTOM_QUERY = "CustomQuery"
    INSERT_HOOK = "InsertHook"


@dataclass(frozen=True)
class DataValue:
    """A query value tagged with its DataTypes variant.

    Use the named constructors to pick the variant explicitly; ``classify``
    picks it from the Python type of a plain value.
    """

    kind: DataTypes
    value: Any = None

    @classmethod
    def string(cls, value: str) -> DataValue:
        return cls(DataTypes.STRING, value)

    @classmethod
    def number(cls, value: int | float) -> DataValue:
        return cls(DataTypes.NUMBER, value)

    @classmethod
    def boolean(cls, value: bool) -> DataValue:
        return cls(DataTypes.BOOLEAN, value)

    @classmethod
    def uuid(cls, value: uuid.UUID | str) -> DataValue:
        if isinstance(value, str):
            value = uuid.UUID(value)
        return cls(DataTypes.UUID, value)

    @classmethod
    def null(cls) -> DataValue:
        return cls(DataTypes.NULL)

    def to_wire(self) -> Any:
        """Return the externally tagged form sent to the engine."""
        if self.kind is DataTypes.NULL:
            return DataTypes.NULL.value
        if self.kind is DataTypes.UUID:
            return {self.kind.value: str(self.value)}
        return {self.kind.value: self.value}


@singledispatch
def classify(value: Any) -> DataValue:
    """Wrap a plain Python value in the matching DataValue variant."""
    raise InvalidDataTypeError(
        f"Invalid data type: {type(value).__name__} cannot be used as a query value"
    )


@classify.register
def _(value: DataValue) -> DataValue:
    return value


@classify.register
def _(value: str) -> DataValue:
    return DataValue.string(value)


# bool is a subclass of int; singledispatch picks the most specific match
@classify.register
def _(value: bool) -> DataValue:
    return DataValue.boolean(value)


@classify.register(int)
@classify.register(float)
def _(value: int | float) -> DataValue:
    return DataValue.number(value)


@classify.register
def _(value: uuid.UUID) -> DataValue:
    return DataValue.uuid(value)


@classify.register(type(None))
def _(value: None) -> DataValue:
    return DataValue.null()
