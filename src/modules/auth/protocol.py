"""Protocol definitions for the collaborators of AuthService."""

from typing import Any, Protocol

from src.modules.auth.models import User


class UserStore(Protocol):
    """Protocol for user document persistence.

    Implementations must enforce a unique index on email and report
    violations as DuplicateKeyError rather than overwriting.
    """

    async def find_one(self, **filters: Any) -> User | None:
        """Find the first user whose fields equal all given filters.

        Args:
            **filters: Field/value pairs, e.g. ``email="a@x.com"``.

        Returns:
            The matching User, or None.
        """
        ...

    async def create(self, document: dict[str, Any]) -> User:
        """Persist a new user document.

        Args:
            document: Fields of the new user. Must contain ``email`` and
                ``password`` (already hashed).

        Returns:
            The stored User with its generated id.

        Raises:
            DuplicateKeyError: If the email is already taken.
        """
        ...

    async def update_by_id(self, user_id: str, fields: dict[str, Any]) -> User | None:
        """Merge fields into an existing user.

        Args:
            user_id: Id of the user to update.
            fields: Fields to set.

        Returns:
            The updated User, or None if no user has this id.

        Raises:
            DuplicateKeyError: If the update would duplicate an email.
        """
        ...


class TokenSigner(Protocol):
    """Protocol for bearer token signing and verification."""

    def sign(self, payload: dict[str, Any]) -> str:
        """Sign a payload, adding standard claims."""
        ...

    def verify(self, token: str) -> dict[str, Any]:
        """Verify a token and return its claims.

        Raises:
            TokenError: If the signature or expiry check fails.
        """
        ...


class PasswordHasher(Protocol):
    """Protocol for one-way password hashing."""

    def hash(self, password: str) -> str:
        """Return a salted one-way hash of the password."""
        ...

    def verify(self, password: str, hashed: str) -> bool:
        """Compare a password against a hash in constant time."""
        ...
