"""User domain model."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.modules.auth.exceptions import InvalidFieldValueError

# Columns stored outside the JSON profile.
USER_COLUMNS = frozenset({"id", "email", "username", "password"})


@dataclass
class User:
    """User domain model.

    A user document: fixed identity fields plus arbitrary profile fields
    supplied at registration or through profile updates.

    Attributes:
        id: Unique user identifier, generated by the store.
        email: User's email address (unique, used for login).
        username: Display/handle name, carried in tokens.
        password: Bcrypt hash of the password. Never plaintext.
        profile: Any other fields attached to the user.
        created_at: When the user was created.
        updated_at: When the user was last updated.
    """

    id: str
    email: str
    username: str | None
    password: str
    created_at: datetime
    updated_at: datetime
    profile: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, object]) -> "User":
        """Create a User from a database row.

        Args:
            row: Database row as a dictionary.

        Returns:
            User instance.
        """
        profile = row.get("profile") or "{}"
        return cls(
            id=str(row["id"]),
            email=str(row["email"]),
            username=str(row["username"]) if row["username"] is not None else None,
            password=str(row["password"]),
            profile=json.loads(str(profile)),
            created_at=datetime.fromisoformat(str(row["created_at"])),
            updated_at=datetime.fromisoformat(str(row["updated_at"])),
        )

    def to_public_dict(self) -> dict[str, Any]:
        """Flatten the user into a response document without the password hash."""
        return {
            **self.profile,
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def normalize_email(value: object) -> str:
    """Lower-case an email, rejecting anything that is not a non-empty string.

    Raises:
        InvalidFieldValueError: If the value cannot be stored as an email.
    """
    if not isinstance(value, str) or not value:
        raise InvalidFieldValueError("email", value)
    return value.lower()


def optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def apply_fields(user: User, fields: dict[str, Any]) -> None:
    """Merge fields into a user in place.

    Identity columns are overwritten, ``id`` is ignored and any other field
    goes to the profile.

    Raises:
        InvalidFieldValueError: If ``email`` is not a usable email string.
    """
    for key, value in fields.items():
        if key == "id":
            continue
        if key == "email":
            user.email = normalize_email(value)
        elif key == "username":
            user.username = optional_str(value)
        elif key == "password":
            user.password = str(value)
        else:
            user.profile[key] = value
