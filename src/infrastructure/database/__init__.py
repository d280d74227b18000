"""Database infrastructure for SQLite persistence."""

from src.infrastructure.database.connection import (
    Database,
    get_database,
    init_database,
)

__all__ = [
    "Database",
    "get_database",
    "init_database",
]
