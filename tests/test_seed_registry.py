import unittest

from seed_registry import merge_registry, merge_seeders, parse_registered_seeders, render_registry


class TestSeedRegistry(unittest.TestCase):
    def test_fresh_registry_registers_exactly_new_entries(self) -> None:
        content = merge_registry(None, ["usersSeeder", "ordersSeeder"])
        self.assertEqual(parse_registered_seeders(content), ["usersSeeder", "ordersSeeder"])
        self.assertIn("from seeders.usersSeeder import usersSeeder", content)
        self.assertIn("class DatabaseSeeder:", content)
        compile(content, "DatabaseSeeder.py", "exec")

    def test_merge_keeps_unrelated_registrations(self) -> None:
        existing = render_registry(["ASeeder", "BSeeder"])
        content = merge_registry(existing, ["BSeeder", "CSeeder"])
        self.assertEqual(parse_registered_seeders(content), ["ASeeder", "BSeeder", "CSeeder"])

    def test_merge_is_idempotent(self) -> None:
        once = merge_registry(None, ["usersSeeder", "ordersSeeder"])
        twice = merge_registry(once, ["usersSeeder", "ordersSeeder"])
        self.assertEqual(once, twice)
        self.assertEqual(twice.count("usersSeeder().run(conn)"), 1)

    def test_malformed_registry_is_treated_as_empty(self) -> None:
        content = merge_registry("this is not a registry\n", ["usersSeeder"])
        self.assertEqual(parse_registered_seeders(content), ["usersSeeder"])

    def test_hand_edited_registry_is_recovered(self) -> None:
        existing = (
            "import sqlalchemy as sa\n"
            "from seeders.RolesSeeder import RolesSeeder\n"
            "\n"
            "class DatabaseSeeder:\n"
            "    def run(self, conn: sa.Connection) -> None:\n"
            "        # roles first\n"
            "        RolesSeeder().run(conn)\n"
            "        RolesSeeder().run(conn)\n"
        )
        self.assertEqual(parse_registered_seeders(existing), ["RolesSeeder"])
        content = merge_registry(existing, ["usersSeeder"])
        self.assertEqual(parse_registered_seeders(content), ["RolesSeeder", "usersSeeder"])

    def test_empty_registry_renders_valid_module(self) -> None:
        content = render_registry([])
        self.assertIn("        pass", content)
        compile(content, "DatabaseSeeder.py", "exec")

    def test_custom_package_and_name(self) -> None:
        content = merge_registry(None, ["usersSeeder"], package="db.seeds", name="AllSeeders")
        self.assertIn("from db.seeds.usersSeeder import usersSeeder", content)
        self.assertIn("class AllSeeders:", content)

    def test_merge_seeders_order(self) -> None:
        self.assertEqual(merge_seeders(["b", "a"], ["c", "a", "c"]), ["b", "a", "c"])


if __name__ == "__main__":
    unittest.main()
