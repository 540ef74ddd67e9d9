"""
Tests for the schema migration system
"""

import sqlite3

import pytest

from core_ledger.migrations import MIGRATIONS, Migration, MigrationManager, SQLITE, POSTGRESQL


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:", isolation_level=None)
    yield conn
    conn.close()


def _tables(conn):
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row[0] for row in rows}


class TestMigrationManager:

    def test_fresh_database_applies_all(self, connection):
        manager = MigrationManager(connection, SQLITE)
        applied = manager.migrate()

        assert [m.version for m in applied] == [1, 2, 3]
        assert {"accounts", "transactions", "schema_migrations"} <= _tables(connection)
        assert manager.applied_versions() == {1, 2, 3}
        assert manager.pending_migrations() == []

    def test_migrate_is_idempotent(self, connection):
        MigrationManager(connection, SQLITE).migrate()
        assert MigrationManager(connection, SQLITE).migrate() == []

    def test_status_check_constraint(self, connection):
        MigrationManager(connection, SQLITE).migrate()
        connection.execute(
            "INSERT INTO accounts (account_id, balance, created_at, updated_at) "
            "VALUES (1, '1', 'now', 'now')"
        )
        with pytest.raises(sqlite3.IntegrityError):
            connection.execute(
                "INSERT INTO transactions (source_account_id, destination_account_id, amount, "
                "status, created_at, updated_at) VALUES (1, 1, '1', 'bogus', 'now', 'now')"
            )

    def test_failed_migration_rolls_back(self, connection):
        broken = MIGRATIONS + [
            Migration(4, "Broken", sqlite=[
                "CREATE TABLE half_done (id INTEGER)",
                "THIS IS NOT SQL",
            ]),
        ]
        manager = MigrationManager(connection, SQLITE, broken)
        with pytest.raises(sqlite3.Error):
            manager.migrate()

        assert manager.applied_versions() == {1, 2, 3}
        assert "half_done" not in _tables(connection)
        assert not connection.in_transaction

    def test_migrations_sorted_by_version(self, connection):
        unordered = [MIGRATIONS[2], MIGRATIONS[0], MIGRATIONS[1]]
        manager = MigrationManager(connection, SQLITE, unordered)
        assert [m.version for m in manager.migrate()] == [1, 2, 3]

    def test_unknown_dialect(self, connection):
        with pytest.raises(ValueError):
            MigrationManager(connection, "oracle")


class TestMigration:

    def test_statements_per_dialect(self):
        migration = MIGRATIONS[0]
        assert "TEXT" in migration.statements(SQLITE)[0]
        assert "DECIMAL(20, 10)" in migration.statements(POSTGRESQL)[0]

    def test_str(self):
        assert str(MIGRATIONS[0]) == "Migration v001: Create accounts table"
