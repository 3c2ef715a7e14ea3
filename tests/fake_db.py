"""In-memory stand-in for a SQLAlchemy connection to a MySQL catalog."""

from __future__ import annotations

import re

from sqlalchemy.exc import OperationalError


class FakeResult:
    def __init__(self, rows: list[dict]) -> None:
        self._rows = rows

    def mappings(self) -> list[dict]:
        return [dict(row) for row in self._rows]


class FakeConnection:
    """Answers SHOW TABLES / SHOW COLUMNS / SHOW KEYS / KEY_COLUMN_USAGE / SELECT *.

    `schema` maps table name to a dict with `columns` [(name, type)],
    `primary_key` and `foreign_keys` [(column, on_table, references)].
    """

    def __init__(self, schema: dict, rows: dict | None = None, fail_on: str | None = None) -> None:
        self.schema = schema
        self.rows = rows or {}
        self.fail_on = fail_on
        self.executed: list[str] = []

    def execute(self, clause, params=None) -> FakeResult:
        sql = str(clause)
        params = params or {}
        self.executed.append(sql)
        if self.fail_on and self.fail_on in sql:
            raise OperationalError(sql, params, Exception("MySQL server has gone away"))

        if sql == "SHOW TABLES":
            return FakeResult([{"Tables_in_app": name} for name in self.schema])

        m = re.match(r"^SHOW COLUMNS FROM `(.+)`$", sql)
        if m:
            columns = self.schema[m.group(1)]["columns"]
            return FakeResult([{"Field": name, "Type": col_type, "Null": "YES"} for name, col_type in columns])

        m = re.match(r"^SHOW KEYS FROM `(.+)` WHERE Key_name = 'PRIMARY'$", sql)
        if m:
            pk = self.schema[m.group(1)].get("primary_key")
            if not pk:
                return FakeResult([])
            return FakeResult([{"Key_name": "PRIMARY", "Seq_in_index": 1, "Column_name": pk}])

        if "INFORMATION_SCHEMA.KEY_COLUMN_USAGE" in sql:
            fks = self.schema[params["table"]].get("foreign_keys", [])
            return FakeResult(
                [{"column": col, "on_table": on_table, "references": ref} for col, on_table, ref in fks]
            )

        m = re.match(r"^SELECT \* FROM `(.+)`$", sql)
        if m:
            return FakeResult(self.rows.get(m.group(1), []))

        raise AssertionError(f"unexpected query: {sql}")


USERS_ORDERS_SCHEMA = {
    "orders": {
        "columns": [("id", "bigint(20) unsigned"), ("user_id", "int(11)"), ("total", "decimal(10,2)")],
        "primary_key": "id",
        "foreign_keys": [("user_id", "users", "id")],
    },
    "users": {
        "columns": [("id", "bigint(20) unsigned"), ("name", "varchar(255)"), ("email", "varchar(255)")],
        "primary_key": "id",
    },
    "jobs": {
        "columns": [("id", "bigint(20) unsigned"), ("payload", "longtext")],
        "primary_key": "id",
    },
}

USERS_ORDERS_ROWS = {
    "users": [
        {"id": 1, "name": "Ann", "email": "ann@example.com"},
        {"id": 2, "name": "O'Brien", "email": ""},
    ],
    "orders": [
        {"id": 10, "user_id": 1, "total": "19.99"},
    ],
}
