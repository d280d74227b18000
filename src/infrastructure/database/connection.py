"""SQLite database connection management."""

import sqlite3
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite
import structlog

logger = structlog.get_logger()

# Users are stored as documents: fixed identity columns plus a JSON profile.
_CREATE_TABLES = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT UNIQUE NOT NULL,
    username TEXT,
    password TEXT NOT NULL,
    profile TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_users_username ON users(username);
"""


class Database:
    """Async SQLite database wrapper.

    Provides connection management and query execution for SQLite.
    Uses aiosqlite for async operations.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the database.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Connect to the database and create tables if needed."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._connection.executescript(_CREATE_TABLES)
        await self._connection.commit()

        logger.info("database_connected", path=str(self._db_path))

    async def disconnect(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.info("database_disconnected", path=str(self._db_path))

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection]:
        """Context manager for database transactions.

        Statements executed on the yielded connection are committed together
        when the block exits, or rolled back if it raises.

        Yields:
            The database connection for executing queries.

        Raises:
            RuntimeError: If database is not connected.
        """
        if not self._connection:
            raise RuntimeError("Database not connected")

        try:
            yield self._connection
            await self._connection.commit()
        except Exception:
            await self._connection.rollback()
            raise

    async def execute(
        self,
        sql: str,
        parameters: tuple[object, ...] | dict[str, object] | None = None,
    ) -> aiosqlite.Cursor:
        """Execute a SQL statement and commit.

        Args:
            sql: SQL statement to execute.
            parameters: Optional parameters for the statement.

        Returns:
            Cursor with execution results.

        Raises:
            RuntimeError: If database is not connected.
        """
        if not self._connection:
            raise RuntimeError("Database not connected")

        if parameters:
            cursor = await self._connection.execute(sql, parameters)
        else:
            cursor = await self._connection.execute(sql)

        await self._connection.commit()
        return cursor

    async def fetch_one(
        self,
        sql: str,
        parameters: tuple[object, ...] | dict[str, object] | None = None,
    ) -> sqlite3.Row | None:
        """Fetch a single row.

        Args:
            sql: SQL query to execute.
            parameters: Optional parameters for the query.

        Returns:
            The first row or None.
        """
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()


# Global database instance
_database: Database | None = None


def get_database() -> Database:
    """Get the global database instance.

    Raises:
        RuntimeError: If database not initialized.
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Call init_database first.")
    return _database


async def init_database(db_path: str | Path) -> Database:
    """Initialize and connect to the database.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        Connected database instance.
    """
    global _database
    _database = Database(db_path)
    await _database.connect()
    return _database
