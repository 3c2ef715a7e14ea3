import unittest

from fake_db import USERS_ORDERS_SCHEMA, FakeConnection, FakeResult
from read_schema import (
    Column,
    ForeignKey,
    IntrospectionError,
    filter_tables,
    get_columns,
    get_foreign_keys,
    get_primary_key,
    list_tables,
    load_table,
    quote_identifier,
)


class TestReadSchema(unittest.TestCase):
    def setUp(self) -> None:
        self.conn = FakeConnection(USERS_ORDERS_SCHEMA)

    def test_lists_tables_in_server_order(self) -> None:
        self.assertEqual(list_tables(self.conn), ["orders", "users", "jobs"])

    def test_filters_excluded_tables(self) -> None:
        kept, skipped = filter_tables(["orders", "jobs", "users"], {"jobs", "migrations"})
        self.assertEqual(kept, ["orders", "users"])
        self.assertEqual(skipped, ["jobs"])

    def test_reads_columns_with_native_types(self) -> None:
        self.assertEqual(
            get_columns(self.conn, "users"),
            [
                Column("id", "bigint(20) unsigned"),
                Column("name", "varchar(255)"),
                Column("email", "varchar(255)"),
            ],
        )

    def test_decodes_byte_column_types(self) -> None:
        conn = FakeConnection({"t": {"columns": [("payload", b"mediumtext")]}})
        self.assertEqual(get_columns(conn, "t"), [Column("payload", "mediumtext")])

    def test_primary_key_missing(self) -> None:
        conn = FakeConnection({"t": {"columns": [("x", "int")]}})
        self.assertIsNone(get_primary_key(conn, "t"))

    def test_composite_primary_key_uses_leading_column(self) -> None:
        conn = FakeConnection({})
        conn.execute = lambda clause, params=None: FakeResult(
            [
                {"Seq_in_index": 2, "Column_name": "role_id"},
                {"Seq_in_index": 1, "Column_name": "user_id"},
            ]
        )
        self.assertEqual(get_primary_key(conn, "role_user"), "user_id")

    def test_foreign_keys_are_scoped_to_one_table(self) -> None:
        self.assertEqual(get_foreign_keys(self.conn, "orders"), [ForeignKey("user_id", "users", "id")])
        self.assertEqual(get_foreign_keys(self.conn, "users"), [])
        fk_sql = [sql for sql in self.conn.executed if "KEY_COLUMN_USAGE" in sql]
        self.assertTrue(all("TABLE_SCHEMA = DATABASE()" in sql for sql in fk_sql))

    def test_duplicate_foreign_key_columns_collapse(self) -> None:
        conn = FakeConnection(
            {"t": {"columns": [], "foreign_keys": [("a_id", "a", "id"), ("a_id", "a", "id")]}}
        )
        self.assertEqual(get_foreign_keys(conn, "t"), [ForeignKey("a_id", "a", "id")])

    def test_load_table_builds_metadata(self) -> None:
        meta = load_table(self.conn, "orders")
        self.assertEqual(meta.name, "orders")
        self.assertEqual(meta.primary_key, "id")
        self.assertEqual(meta.foreign_key_columns(), {"user_id"})
        self.assertEqual(meta.column("total"), Column("total", "decimal(10,2)"))
        self.assertIsNone(meta.column("missing"))

    def test_query_failure_raises_introspection_error(self) -> None:
        conn = FakeConnection(USERS_ORDERS_SCHEMA, fail_on="SHOW TABLES")
        with self.assertRaises(IntrospectionError) as ctx:
            list_tables(conn)
        self.assertIn("gone away", str(ctx.exception))

    def test_quotes_identifiers(self) -> None:
        self.assertEqual(quote_identifier("users"), "`users`")
        self.assertEqual(quote_identifier("we`ird"), "`we``ird`")


if __name__ == "__main__":
    unittest.main()
