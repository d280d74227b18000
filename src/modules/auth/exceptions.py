"""Exceptions raised by authentication collaborators.

These never leave AuthService: the service translates them into
AuthResult failures.
"""


class AuthStoreError(Exception):
    """Base exception for user store operations."""

    pass


class DuplicateKeyError(AuthStoreError):
    """Raised when a write violates a unique index."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for unique field '{field}': {value}")


class InvalidFilterError(AuthStoreError):
    """Raised when a lookup or update names a field that cannot be addressed."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Invalid field name: {field}")


class TokenError(Exception):
    """Raised when a token fails signature or expiry verification."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidFieldValueError(AuthStoreError):
    """Raised when a write would store an unusable value in an identity field."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid value for field '{field}': {value!r}")


class PasswordTooLongError(ValueError):
    """Raised when a password exceeds bcrypt's 72-byte input limit."""

    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes
        super().__init__(f"Password must be at most {max_bytes} bytes")
