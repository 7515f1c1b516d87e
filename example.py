"""Example usage of the schemejs library."""

import asyncio
from pathlib import Path
import tempfile

from schemejs import DryRunEngine, QueryBuilder, Session, bootstrap, load_table

# A table-definition script: the API names are provided by the session
users_script = '''
def main():
    return (
        Table("users")
        .add_column(Column("id").string())
        .add_column(Column("username").string())
        .add_column(Column("password").string())
        .add_column(Column("enabled").boolean().with_default_value(True))
        .add_query("helloWorld", lambda request: "hello")
        .on("insert", lambda row: {**row, "enabled": row.get("enabled", True)})
    )
'''

with tempfile.TemporaryDirectory() as tmp:
    script = Path(tmp) / "users.py"
    script.write_text(users_script)

    session = Session(DryRunEngine())
    bootstrap(session)
    table = load_table(session, script)
    print("Loaded table:", table)
    print("Descriptor:", table.to_dict())

# Point the session at the table and dispatch through the engine
session.initialize_db_context({"db_name": "app", "tbl_name": "users"})

query = (
    QueryBuilder("app", "users")
    .and_(lambda b: b.where("enabled", "=", True).where("username", "=", "Luis"))
)
print("Filter:", query.build().to_wire())

parsed = QueryBuilder.parse('enabled = true and username = "Luis"', "app", "users")
print("Parsed filter matches:", parsed.build() == query.build())


async def run() -> None:
    row = table.apply_insert_hooks({"username": "Luis"})
    await session.bridge.insert(row)
    rows = await session.bridge.query(query)
    print("Rows:", rows)


asyncio.run(run())
