"""In-memory user store for tests and local runs."""

import copy
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.modules.auth.exceptions import DuplicateKeyError
from src.modules.auth.models import (
    USER_COLUMNS,
    User,
    apply_fields,
    normalize_email,
    optional_str,
)


class InMemoryUserStore:
    """UserStore keeping users in a dict, with the same unique-email rule."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self.writes = 0

    def __len__(self) -> int:
        return len(self._users)

    def _matches(self, user: User, filters: dict[str, Any]) -> bool:
        for key, value in filters.items():
            if key == "email" and isinstance(value, str):
                value = value.lower()
            actual = getattr(user, key) if key in USER_COLUMNS else user.profile.get(key)
            if actual != value:
                return False
        return True

    def _email_taken(self, email: str, *, exclude_id: str | None = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self._users.values())

    async def find_one(self, **filters: Any) -> User | None:
        for user in self._users.values():
            if self._matches(user, filters):
                return copy.deepcopy(user)
        return None

    async def create(self, document: dict[str, Any]) -> User:
        email = normalize_email(document["email"])
        if self._email_taken(email):
            raise DuplicateKeyError("email", email)

        now = datetime.now(UTC)
        user = User(
            id=uuid4().hex,
            email=email,
            username=optional_str(document.get("username")),
            password=str(document["password"]),
            profile={k: v for k, v in document.items() if k not in USER_COLUMNS},
            created_at=now,
            updated_at=now,
        )
        self._users[user.id] = user
        self.writes += 1
        return copy.deepcopy(user)

    async def update_by_id(self, user_id: str, fields: dict[str, Any]) -> User | None:
        current = self._users.get(user_id)
        if current is None:
            return None

        user = copy.deepcopy(current)
        apply_fields(user, fields)

        if self._email_taken(user.email, exclude_id=user.id):
            raise DuplicateKeyError("email", user.email)

        user.updated_at = datetime.now(UTC)
        self._users[user.id] = user
        self.writes += 1
        return copy.deepcopy(user)
