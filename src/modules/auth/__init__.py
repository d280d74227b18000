"""Authentication module: registration, login, tokens and profile updates."""

from src.modules.auth.exceptions import (
    DuplicateKeyError,
    InvalidFieldValueError,
    PasswordTooLongError,
    TokenError,
)
from src.modules.auth.memory import InMemoryUserStore
from src.modules.auth.models import User
from src.modules.auth.password import (
    BcryptPasswordHasher,
    hash_password,
    verify_password,
)
from src.modules.auth.protocol import PasswordHasher, TokenSigner, UserStore
from src.modules.auth.repository import SqliteUserStore
from src.modules.auth.result import AuthError, AuthErrorKind, AuthResult, AuthResultError
from src.modules.auth.schemas import (
    AuthSession,
    ChangePasswordRequest,
    JwtPayload,
    LoginUserRequest,
    RegisterUserRequest,
    UpdateUserRequest,
    UserEnvelope,
    VerifyUserRequest,
)
from src.modules.auth.service import AuthService
from src.modules.auth.tokens import JwtTokenSigner

__all__ = [
    "AuthError",
    "AuthErrorKind",
    "AuthResult",
    "AuthResultError",
    "AuthService",
    "AuthSession",
    "BcryptPasswordHasher",
    "ChangePasswordRequest",
    "DuplicateKeyError",
    "InMemoryUserStore",
    "InvalidFieldValueError",
    "JwtPayload",
    "JwtTokenSigner",
    "LoginUserRequest",
    "PasswordHasher",
    "PasswordTooLongError",
    "RegisterUserRequest",
    "SqliteUserStore",
    "TokenError",
    "TokenSigner",
    "UpdateUserRequest",
    "User",
    "UserEnvelope",
    "UserStore",
    "VerifyUserRequest",
    "hash_password",
    "verify_password",
]
