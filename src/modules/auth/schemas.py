"""Pydantic schemas for the authentication API."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from src.modules.auth.password import MAX_PASSWORD_BYTES

_SYMBOL = re.compile(r"[^A-Za-z0-9]")


def check_password_strength(password: str) -> str:
    """Require at least 8 characters with lower, upper, digit and symbol.

    The UTF-8 encoding must also fit in bcrypt's 72-byte input.
    """
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    problems = []
    if len(password) < 8:
        problems.append("at least 8 characters")
    if not re.search(r"[a-z]", password):
        problems.append("a lowercase letter")
    if not re.search(r"[A-Z]", password):
        problems.append("an uppercase letter")
    if not re.search(r"[0-9]", password):
        problems.append("a number")
    if not _SYMBOL.search(password):
        problems.append("a symbol")
    if problems:
        raise ValueError("Password is not strong enough: needs " + ", ".join(problems))
    return password


# ---------- Requests ----------


class RegisterUserRequest(BaseModel):
    """Schema for registering a user. Extra fields become profile fields."""

    model_config = ConfigDict(extra="allow")

    email: EmailStr
    password: str = Field(min_length=8)
    username: str = Field(min_length=1, max_length=64)

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)

    def profile_fields(self) -> dict[str, Any]:
        """Fields supplied beyond email, password and username."""
        return dict(self.model_extra or {})


class LoginUserRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str = Field(min_length=1)


class VerifyUserRequest(BaseModel):
    """Schema for token verification."""

    token: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    """Schema for password change."""

    token: str = Field(min_length=1)
    password: str = Field(min_length=1)
    new_password: str
    repeat_new_password: str

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.repeat_new_password != self.new_password:
            raise ValueError("New passwords do not match")
        return self


class UpdateUserRequest(BaseModel):
    """Schema for partial profile updates.

    ``email`` and ``username`` are validated when present; any extra field
    is applied as a profile field.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    email: EmailStr | None = None
    username: str | None = Field(default=None, min_length=1, max_length=64)

    @model_validator(mode="after")
    def has_updatable_fields(self) -> "UpdateUserRequest":
        for name in ("email", "username"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        if "password" in (self.model_extra or {}):
            raise ValueError("Use change-password to update the password")
        if not self.update_fields():
            raise ValueError("No fields to update")
        return self

    def update_fields(self) -> dict[str, Any]:
        """Explicitly supplied fields other than ``id``."""
        fields = dict(self.model_extra or {})
        for name in ("email", "username"):
            if name in self.model_fields_set:
                fields[name] = getattr(self, name)
        return fields


# ---------- Payloads and responses ----------


class JwtPayload(BaseModel):
    """Identity carried in every token."""

    id: str
    email: str
    username: str | None = None


class AuthSession(BaseModel):
    """A user together with a freshly signed token."""

    user: dict[str, Any]
    token: str
    message: str


class UserEnvelope(BaseModel):
    """A user document without a token."""

    user: dict[str, Any]
    message: str


class ErrorResponse(BaseModel):
    """Uniform error body."""

    status: int
    message: str
    kind: str
