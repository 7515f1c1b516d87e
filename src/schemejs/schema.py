"""Schema builder: tables, columns and the helpers attached to them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from schemejs.errors import SchemaDefinitionError
from schemejs.types import DataTypes, HelperType

# Synthetic key the engine adds to every inserted row
DEFAULT_PRIMARY_KEY = "_uid"

# Identifier shared by every insert hook registered through Table.on
INSERT_HOOK_IDENTIFIER = "default"

CustomQueryCallback = Callable[[Any], Any]
InsertHookCallback = Callable[[dict[str, Any]], "dict[str, Any] | None"]


def _default_value_text(value: Any) -> str:
    """Render a default value the way scripts spell literals."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# Per-type validators for default values; unlisted types accept anything
_DEFAULT_VALIDATORS: dict[DataTypes, tuple[str, Callable[[Any], bool]]] = {
    DataTypes.STRING: ("string", lambda v: isinstance(v, str)),
    DataTypes.BOOLEAN: ("boolean", lambda v: isinstance(v, bool)),
}


class Column:
    """A column declaration.

    Setters return the column so declarations chain::

        Column("enabled").boolean().with_default_value(True)
    """

    def __init__(self, name: str, data_type: DataTypes | None = None) -> None:
        self.name = name
        self.data_type = data_type or DataTypes.STRING
        self.default_value: str | None = None
        self.required = False
        self.primary_key = False
        self.comment: str | None = None

    def string(self) -> Column:
        self.data_type = DataTypes.STRING
        return self

    def boolean(self) -> Column:
        self.data_type = DataTypes.BOOLEAN
        return self

    def number(self) -> Column:
        self.data_type = DataTypes.NUMBER
        return self

    def uuid(self) -> Column:
        self.data_type = DataTypes.UUID
        return self

    def require(self, required: bool = True) -> Column:
        self.required = required
        return self

    def set_primary_key(self, primary_key: bool = True) -> Column:
        self.primary_key = primary_key
        return self

    def with_comment(self, comment: str) -> Column:
        self.comment = comment
        return self

    def with_default_value(self, value: Any) -> Column:
        """Set the default value, checked against the declared type.

        Raises:
            SchemaDefinitionError: If the column type has a validator and
                the value does not satisfy it.
        """
        entry = _DEFAULT_VALIDATORS.get(self.data_type)
        if entry is not None:
            type_name, validator = entry
            if not validator(value):
                raise SchemaDefinitionError(
                    f"Default value does not match column type. "
                    f"{self.name} is of type '{type_name}'."
                )
        self.default_value = _default_value_text(value)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "dataType": self.data_type.value,
            "defaultValue": self.default_value,
            "required": self.required,
            "comment": self.comment,
            "primaryKey": self.primary_key,
        }

    def __repr__(self) -> str:
        return f"Column({self.name!r}, {self.data_type.value})"


@dataclass
class Helper:
    """A named callback attached to a table.

    Custom queries take a request and return a response. Insert hooks take
    a row and return a replacement row, or None to keep the row unchanged.
    """

    identifier: str
    internal_type: HelperType
    cb: Callable[..., Any]

    def __post_init__(self) -> None:
        if not self.identifier:
            self.identifier = ""

    @property
    def is_custom_query(self) -> bool:
        return self.internal_type is HelperType.CUSTOM_QUERY

    @property
    def is_insert_hook(self) -> bool:
        return self.internal_type is HelperType.INSERT_HOOK

    def handle_request(self, request: Any) -> Any:
        """Run a custom query callback."""
        if not self.is_custom_query:
            raise TypeError(f"Helper '{self.identifier}' is not a custom query")
        return self.cb(request)

    def transform_row(self, row: dict[str, Any]) -> dict[str, Any]:
        """Run an insert hook callback and return the resulting row."""
        if not self.is_insert_hook:
            raise TypeError(f"Helper '{self.identifier}' is not an insert hook")
        result = self.cb(row)
        return row if result is None else result


class Table:
    """A table declaration built by a table-definition script."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.columns: dict[str, Column] = {}
        self.indexes: list[Any] = []
        self.primary_key = DEFAULT_PRIMARY_KEY
        self.helpers: list[Helper] = []

    def add_column(self, column: Column) -> Table:
        """Add a column; a later column with the same name replaces it."""
        self.columns[column.name] = column
        if column.primary_key:
            self.primary_key = column.name
        return self

    def add_index(self, index: Any) -> Table:
        # Indexes are carried to the engine but not interpreted yet
        self.indexes.append(index)
        return self

    def add_query(self, name: str, cb: CustomQueryCallback) -> Table:
        self.helpers.append(Helper(name, HelperType.CUSTOM_QUERY, cb))
        return self

    def on(self, hook_type: str, cb: InsertHookCallback) -> Table:
        """Attach a lifecycle hook. Only ``"insert"`` is supported."""
        if hook_type.lower() == "insert":
            self.helpers.append(Helper(INSERT_HOOK_IDENTIFIER, HelperType.INSERT_HOOK, cb))
        else:
            raise SchemaDefinitionError(f"Unknown hook type '{hook_type}'")
        return self

    def get_column(self, name: str) -> Column | None:
        return self.columns.get(name)

    def list_columns(self) -> list[str]:
        return list(self.columns.keys())

    def custom_query(self, name: str) -> Helper | None:
        """Get the first custom query registered under a name."""
        for helper in self.helpers:
            if helper.is_custom_query and helper.identifier == name:
                return helper
        return None

    def insert_hooks(self) -> list[Helper]:
        return [h for h in self.helpers if h.is_insert_hook]

    def apply_insert_hooks(self, row: dict[str, Any]) -> dict[str, Any]:
        """Pass a row through every insert hook in registration order."""
        for hook in self.insert_hooks():
            row = hook.transform_row(row)
        return row

    def to_dict(self) -> dict[str, Any]:
        """Return the descriptor handed to engine schema registration."""
        return {
            "name": self.name,
            "columns": {name: col.to_dict() for name, col in self.columns.items()},
            "indexes": list(self.indexes),
            "primaryKey": self.primary_key,
            "helpers": [
                {"identifier": h.identifier, "internalType": h.internal_type.value}
                for h in self.helpers
            ],
        }

    def __repr__(self) -> str:
        return f"Table({self.name!r}, columns={self.list_columns()})"
