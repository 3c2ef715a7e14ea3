#!/usr/bin/env python3
"""Read table, column, key and row metadata from a live MySQL database.

All lookups go through one SQLAlchemy connection; within a single connection
InnoDB serves every read of the run from the same transaction snapshot.

Usage:
    python read_schema.py [--database-url URL]
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from typing import Iterable

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, URL
from sqlalchemy.exc import SQLAlchemyError


DEFAULT_EXCLUDED_TABLES = frozenset(
    {"failed_jobs", "jobs", "personal_access_tokens", "migrations", "alembic_version"}
)


class IntrospectionError(RuntimeError):
    """A catalog or row query against the live database failed."""


@dataclasses.dataclass(frozen=True)
class Column:
    name: str
    native_type: str


@dataclasses.dataclass(frozen=True)
class ForeignKey:
    column: str
    on_table: str
    references: str


@dataclasses.dataclass(frozen=True)
class TableMetadata:
    name: str
    columns: tuple[Column, ...]
    primary_key: str | None = None
    foreign_keys: tuple[ForeignKey, ...] = ()

    def foreign_key_columns(self) -> set[str]:
        return {fk.column for fk in self.foreign_keys}

    def column(self, name: str) -> Column | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None


def build_database_url(
    *,
    driver: str = "mysql+pymysql",
    host: str = "localhost",
    port: int = 3306,
    name: str | None = None,
    user: str | None = None,
    password: str | None = None,
) -> URL:
    # URL.create keeps the password out of the rendered string.
    return URL.create(
        drivername=driver,
        username=user,
        password=password,
        host=host,
        port=port,
        database=name,
        query={"charset": "utf8mb4"} if driver.startswith("mysql") else {},
    )


def create_db_engine(url: str | URL) -> Engine:
    return create_engine(url, pool_pre_ping=True)


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def as_text(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return "" if value is None else str(value)


def query_rows(conn: Connection, sql: str, params: dict | None = None) -> list[dict]:
    try:
        result = conn.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings()]
    except SQLAlchemyError as exc:
        statement = " ".join(sql.split())
        raise IntrospectionError(f"query failed ({statement}): {exc}") from exc


def list_tables(conn: Connection) -> list[str]:
    tables: list[str] = []
    for row in query_rows(conn, "SHOW TABLES"):
        # Single column named Tables_in_<database>.
        values = list(row.values())
        if values and values[0]:
            tables.append(as_text(values[0]))
    return tables


def filter_tables(tables: Iterable[str], excluded: Iterable[str]) -> tuple[list[str], list[str]]:
    excluded = set(excluded)
    kept: list[str] = []
    skipped: list[str] = []
    for table in tables:
        (skipped if table in excluded else kept).append(table)
    return kept, skipped


def get_columns(conn: Connection, table: str) -> list[Column]:
    rows = query_rows(conn, f"SHOW COLUMNS FROM {quote_identifier(table)}")
    return [Column(name=as_text(row["Field"]), native_type=as_text(row["Type"])) for row in rows]


def get_primary_key(conn: Connection, table: str) -> str | None:
    rows = query_rows(conn, f"SHOW KEYS FROM {quote_identifier(table)} WHERE Key_name = 'PRIMARY'")
    if not rows:
        return None
    # Composite keys: only the leading column becomes the identity column.
    rows.sort(key=lambda row: int(row.get("Seq_in_index") or 0))
    return as_text(rows[0]["Column_name"])


def get_foreign_keys(conn: Connection, table: str) -> list[ForeignKey]:
    sql = (
        "SELECT COLUMN_NAME AS `column`, "
        "REFERENCED_TABLE_NAME AS `on_table`, "
        "REFERENCED_COLUMN_NAME AS `references` "
        "FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE "
        "WHERE TABLE_SCHEMA = DATABASE() "
        "AND TABLE_NAME = :table "
        "AND REFERENCED_TABLE_NAME IS NOT NULL "
        "ORDER BY CONSTRAINT_NAME, ORDINAL_POSITION"
    )
    foreign_keys: list[ForeignKey] = []
    seen: set[str] = set()
    for row in query_rows(conn, sql, {"table": table}):
        column = as_text(row["column"])
        if column in seen:
            continue
        seen.add(column)
        foreign_keys.append(
            ForeignKey(
                column=column,
                on_table=as_text(row["on_table"]),
                references=as_text(row["references"]),
            )
        )
    return foreign_keys


def fetch_rows(conn: Connection, table: str) -> list[dict]:
    return query_rows(conn, f"SELECT * FROM {quote_identifier(table)}")


def load_table(conn: Connection, table: str) -> TableMetadata:
    return TableMetadata(
        name=table,
        columns=tuple(get_columns(conn, table)),
        primary_key=get_primary_key(conn, table),
        foreign_keys=tuple(get_foreign_keys(conn, table)),
    )


def describe_table(meta: TableMetadata) -> str:
    lines = [meta.name]
    for col in meta.columns:
        marker = ""
        if col.name == meta.primary_key:
            marker = " [pk]"
        elif col.name in meta.foreign_key_columns():
            fk = next(fk for fk in meta.foreign_keys if fk.column == col.name)
            marker = f" [fk -> {fk.on_table}.{fk.references}]"
        lines.append(f"    {col.name} {col.native_type}{marker}")
    return "\n".join(lines)


def main() -> int:
    parser = argparse.ArgumentParser(description="Print the live schema as seen by the generator")
    parser.add_argument("--database-url", default=os.environ.get("DATABASE_URL"), help="SQLAlchemy database URL")
    parser.add_argument("--exclude", action="append", default=[], help="Table to skip (repeatable)")
    args = parser.parse_args()

    if not args.database_url:
        print("[error] --database-url or DATABASE_URL is required", file=sys.stderr)
        return 2

    engine = create_db_engine(args.database_url)
    try:
        with engine.connect() as conn:
            tables, skipped = filter_tables(list_tables(conn), DEFAULT_EXCLUDED_TABLES | set(args.exclude))
            for table in skipped:
                print(f"[skip] {table}")
            for i, table in enumerate(tables, 1):
                print(f"[{i}/{len(tables)}] {describe_table(load_table(conn, table))}", flush=True)
    except (IntrospectionError, SQLAlchemyError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()

    print(f"\nTotal: {len(tables)} tables")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
