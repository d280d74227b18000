"""Result type returned by every AuthService operation."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")

# Every failure currently maps to the same status code.
DEFAULT_ERROR_STATUS = 400


class AuthErrorKind(StrEnum):
    """Kinds of failure an auth operation can report."""

    ALREADY_EXISTS = "already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    INTERNAL = "internal"


@dataclass(frozen=True)
class AuthError:
    """A structured failure: kind, human-readable message and status code."""

    kind: AuthErrorKind
    message: str
    status: int = DEFAULT_ERROR_STATUS

    def to_dict(self) -> dict[str, object]:
        return {"status": self.status, "message": self.message, "kind": str(self.kind)}


class AuthResultError(Exception):
    """Raised by AuthResult.unwrap() on a failed result."""

    def __init__(self, error: AuthError) -> None:
        self.error = error
        super().__init__(f"{error.kind}: {error.message}")


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    """Either a value or an AuthError, never both.

    Build instances with ``success`` and ``failure`` rather than the
    constructor.
    """

    value: T | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "AuthResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: AuthErrorKind,
        message: str,
        *,
        status: int = DEFAULT_ERROR_STATUS,
    ) -> "AuthResult[T]":
        return cls(error=AuthError(kind=kind, message=message, status=status))

    def unwrap(self) -> T:
        """Return the value.

        Raises:
            AuthResultError: If the result is a failure.
        """
        if self.error is not None:
            raise AuthResultError(self.error)
        return self.value  # type: ignore[return-value]
