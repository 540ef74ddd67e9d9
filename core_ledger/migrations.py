"""
Database Migration System

Versioned schema migrations for the ledger tables. Each migration carries
DDL for both SQLite and PostgreSQL; applied versions are recorded in the
schema_migrations table.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set
from datetime import datetime, timezone
import logging


logger = logging.getLogger("core_ledger.migrations")

SQLITE = "sqlite"
POSTGRESQL = "postgresql"


@dataclass
class Migration:
    """Represents a single database migration"""
    version: int
    name: str
    sqlite: List[str] = field(default_factory=list)
    postgresql: List[str] = field(default_factory=list)

    def statements(self, dialect: str) -> List[str]:
        if dialect == SQLITE:
            return self.sqlite
        if dialect == POSTGRESQL:
            return self.postgresql
        raise ValueError(f"Unsupported dialect: {dialect}")

    def __str__(self) -> str:
        return f"Migration v{self.version:03d}: {self.name}"


MIGRATIONS: List[Migration] = [
    Migration(
        1, "Create accounts table",
        sqlite=["""
            CREATE TABLE IF NOT EXISTS accounts (
                account_id INTEGER PRIMARY KEY,
                balance TEXT NOT NULL DEFAULT '0.0000000000',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """],
        postgresql=["""
            CREATE TABLE IF NOT EXISTS accounts (
                account_id BIGINT PRIMARY KEY,
                balance DECIMAL(20, 10) NOT NULL DEFAULT 0,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
        """],
    ),
    Migration(
        2, "Create transactions table",
        sqlite=["""
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source_account_id INTEGER NOT NULL REFERENCES accounts(account_id),
                destination_account_id INTEGER NOT NULL REFERENCES accounts(account_id),
                amount TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending'
                    CHECK (status IN ('pending', 'completed', 'failed')),
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """],
        postgresql=["""
            CREATE TABLE IF NOT EXISTS transactions (
                id BIGSERIAL PRIMARY KEY,
                source_account_id BIGINT NOT NULL REFERENCES accounts(account_id),
                destination_account_id BIGINT NOT NULL REFERENCES accounts(account_id),
                amount DECIMAL(20, 10) NOT NULL,
                status VARCHAR(20) NOT NULL DEFAULT 'pending'
                    CHECK (status IN ('pending', 'completed', 'failed')),
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
        """],
    ),
    Migration(
        3, "Index transactions",
        sqlite=[
            "CREATE INDEX IF NOT EXISTS idx_transactions_source_account ON transactions(source_account_id)",
            "CREATE INDEX IF NOT EXISTS idx_transactions_destination_account ON transactions(destination_account_id)",
            "CREATE INDEX IF NOT EXISTS idx_transactions_status ON transactions(status)",
            "CREATE INDEX IF NOT EXISTS idx_transactions_created_at ON transactions(created_at)",
        ],
        postgresql=[
            "CREATE INDEX IF NOT EXISTS idx_transactions_source_account ON transactions(source_account_id)",
            "CREATE INDEX IF NOT EXISTS idx_transactions_destination_account ON transactions(destination_account_id)",
            "CREATE INDEX IF NOT EXISTS idx_transactions_status ON transactions(status)",
            "CREATE INDEX IF NOT EXISTS idx_transactions_created_at ON transactions(created_at)",
        ],
    ),
]


class MigrationManager:
    """
    Applies pending migrations over a DB-API connection.

    The connection must be dedicated to the manager while it runs. For
    SQLite it is expected in autocommit mode (isolation_level=None); each
    migration runs inside its own explicit BEGIN/COMMIT.
    """

    def __init__(self, connection, dialect: str, migrations: Optional[List[Migration]] = None):
        if dialect not in (SQLITE, POSTGRESQL):
            raise ValueError(f"Unsupported dialect: {dialect}")
        self.connection = connection
        self.dialect = dialect
        self.migrations = sorted(migrations if migrations is not None else MIGRATIONS,
                                 key=lambda m: m.version)
        self._placeholder = "?" if dialect == SQLITE else "%s"
        self._ensure_migration_table()

    def _ensure_migration_table(self) -> None:
        cursor = self.connection.cursor()
        try:
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    applied_at TEXT NOT NULL
                )
            """)
            if self.dialect == POSTGRESQL:
                self.connection.commit()
        finally:
            cursor.close()

    def applied_versions(self) -> Set[int]:
        cursor = self.connection.cursor()
        try:
            cursor.execute("SELECT version FROM schema_migrations")
            rows = cursor.fetchall()
        finally:
            cursor.close()
        if self.dialect == POSTGRESQL:
            self.connection.commit()
        # sqlite3.Row, RealDictRow and plain tuples all index by position or key
        return {row["version"] if not isinstance(row, tuple) else row[0] for row in rows}

    def pending_migrations(self) -> List[Migration]:
        applied = self.applied_versions()
        return [m for m in self.migrations if m.version not in applied]

    def migrate(self) -> List[Migration]:
        """Apply all pending migrations in version order"""
        applied = []
        for migration in self.pending_migrations():
            self._apply(migration)
            applied.append(migration)
            logger.info("Applied %s", migration)
        return applied

    def _apply(self, migration: Migration) -> None:
        cursor = self.connection.cursor()
        try:
            if self.dialect == SQLITE:
                cursor.execute("BEGIN")
            for statement in migration.statements(self.dialect):
                cursor.execute(statement)
            cursor.execute(
                f"INSERT INTO schema_migrations (version, name, applied_at) "
                f"VALUES ({self._placeholder}, {self._placeholder}, {self._placeholder})",
                (migration.version, migration.name, datetime.now(timezone.utc).isoformat())
            )
            if self.dialect == SQLITE:
                cursor.execute("COMMIT")
            else:
                self.connection.commit()
        except Exception:
            if self.dialect == SQLITE:
                if self.connection.in_transaction:
                    cursor.execute("ROLLBACK")
            else:
                self.connection.rollback()
            raise
        finally:
            cursor.close()
