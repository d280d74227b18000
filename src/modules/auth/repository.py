"""SQLite-backed user document store."""

import json
import re
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import structlog

from src.infrastructure.database import Database
from src.modules.auth.exceptions import DuplicateKeyError, InvalidFilterError
from src.modules.auth.models import (
    USER_COLUMNS,
    User,
    apply_fields,
    normalize_email,
    optional_str,
)

logger = structlog.get_logger()

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _where_clause(filters: dict[str, Any]) -> tuple[str, list[object]]:
    """Build a WHERE clause matching columns directly and profile fields via JSON."""
    conditions = []
    params: list[object] = []
    for key, value in filters.items():
        if not _FIELD_NAME.match(key):
            raise InvalidFilterError(key)
        if key == "email" and isinstance(value, str):
            value = value.lower()
        if key in USER_COLUMNS:
            conditions.append(f"{key} = ?")
        else:
            conditions.append(f"json_extract(profile, '$.{key}') = ?")
        params.append(value)
    return " AND ".join(conditions) or "1 = 1", params


class SqliteUserStore:
    """UserStore persisting users as documents in SQLite.

    Identity fields live in their own columns; everything else is kept in a
    JSON ``profile`` column. The unique index on ``email`` is the only
    uniqueness guarantee.
    """

    def __init__(self, database: Database) -> None:
        """Initialize the store.

        Args:
            database: Database connection.
        """
        self._db = database

    async def find_one(self, **filters: Any) -> User | None:
        """Get the first user matching all filters.

        Args:
            **filters: Field/value pairs. Profile fields are matched too.

        Returns:
            User if found, None otherwise.

        Raises:
            InvalidFilterError: If a filter key is not a plain identifier.
        """
        where, params = _where_clause(filters)
        row = await self._db.fetch_one(
            f"SELECT * FROM users WHERE {where} LIMIT 1",  # nosec B608 - keys are validated identifiers
            tuple(params),
        )

        if row is None:
            return None

        return User.from_row(dict(row))

    async def create(self, document: dict[str, Any]) -> User:
        """Create a new user document.

        Args:
            document: Must contain ``email`` and a hashed ``password``.
                ``username`` is optional; other keys go to the profile.

        Returns:
            The created User.

        Raises:
            DuplicateKeyError: If email already exists.
            InvalidFieldValueError: If email is not a non-empty string.
        """
        now = datetime.now(UTC)
        user = User(
            id=uuid4().hex,
            email=normalize_email(document["email"]),
            username=optional_str(document.get("username")),
            password=str(document["password"]),
            profile={k: v for k, v in document.items() if k not in USER_COLUMNS},
            created_at=now,
            updated_at=now,
        )

        try:
            await self._db.execute(
                """
                INSERT INTO users (id, email, username, password, profile,
                                   created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user.id,
                    user.email,
                    user.username,
                    user.password,
                    json.dumps(user.profile),
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        except sqlite3.IntegrityError as e:
            if "UNIQUE constraint failed: users.email" in str(e):
                raise DuplicateKeyError("email", user.email) from e
            raise

        logger.info("user_created", user_id=user.id, email=user.email)
        return user

    async def update_by_id(self, user_id: str, fields: dict[str, Any]) -> User | None:
        """Merge fields into a user.

        Identity columns are overwritten; any other field is merged into
        the profile. The read and the write share one transaction.

        Args:
            user_id: Id of the user to update.
            fields: Fields to set. ``id`` is ignored.

        Returns:
            The updated User, or None if not found (nothing is written).

        Raises:
            DuplicateKeyError: If the new email belongs to another user.
            InvalidFieldValueError: If the new email is not a string.
            InvalidFilterError: If a field name is not a plain identifier.
        """
        for key in fields:
            if not _FIELD_NAME.match(key):
                raise InvalidFilterError(key)

        async with self._db.transaction() as conn:
            cursor = await conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
            if row is None:
                return None

            user = User.from_row(dict(row))
            apply_fields(user, fields)
            user.updated_at = datetime.now(UTC)

            try:
                await conn.execute(
                    """
                    UPDATE users
                    SET email = ?, username = ?, password = ?, profile = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        user.email,
                        user.username,
                        user.password,
                        json.dumps(user.profile),
                        user.updated_at.isoformat(),
                        user.id,
                    ),
                )
            except sqlite3.IntegrityError as e:
                if "UNIQUE constraint failed: users.email" in str(e):
                    raise DuplicateKeyError("email", user.email) from e
                raise

        logger.info("user_updated", user_id=user.id, fields=sorted(fields))
        return user
