"""Authentication service: registration, login, tokens and profile updates."""

import secrets
from typing import Any

import structlog

from src.infrastructure.observability import add_span_attributes, traced
from src.modules.auth.exceptions import (
    DuplicateKeyError,
    InvalidFieldValueError,
    PasswordTooLongError,
    TokenError,
)
from src.modules.auth.models import User
from src.modules.auth.protocol import PasswordHasher, TokenSigner, UserStore
from src.modules.auth.result import AuthErrorKind, AuthResult
from src.modules.auth.schemas import AuthSession, JwtPayload, UserEnvelope
from src.modules.auth.tokens import STANDARD_CLAIMS

logger = structlog.get_logger()

ALREADY_EXISTS_MESSAGE = "User already exists"
INVALID_CREDENTIALS_MESSAGE = "User/Password not valid"


def _internal(operation: str, error: Exception) -> AuthResult[Any]:
    logger.exception("auth_operation_failed", operation=operation, error_type=type(error).__name__)
    add_span_attributes({"auth.error_kind": str(AuthErrorKind.INTERNAL)})
    return AuthResult.failure(AuthErrorKind.INTERNAL, str(error))


def _fail(kind: AuthErrorKind, message: str) -> AuthResult[Any]:
    add_span_attributes({"auth.error_kind": str(kind)})
    return AuthResult.failure(kind, message)


class AuthService:
    """Service for credential and identity operations.

    Every operation returns an AuthResult. Expected failures (duplicate
    email, bad credentials, bad token, unknown user) are reported as
    failures of the matching kind; anything unexpected raised by a
    collaborator is logged and reported as ``INTERNAL``.
    """

    def __init__(
        self,
        store: UserStore,
        signer: TokenSigner,
        hasher: PasswordHasher,
    ) -> None:
        """Initialize the auth service.

        Args:
            store: User document persistence.
            signer: Bearer token signing and verification.
            hasher: One-way password hashing.
        """
        self._store = store
        self._signer = signer
        self._hasher = hasher
        # Compared against when a login names an unknown email.
        self._dummy_hash = hasher.hash(secrets.token_urlsafe(16))

    def sign_jwt(self, payload: JwtPayload | dict[str, Any]) -> str:
        """Sign a token carrying the given identity."""
        if isinstance(payload, JwtPayload):
            payload = payload.model_dump()
        return self._signer.sign(payload)

    def _token_for(self, user: User) -> str:
        return self.sign_jwt(JwtPayload(id=user.id, email=user.email, username=user.username))

    @traced(span_name="auth.register_user")
    async def register_user(
        self, email: str, password: str, **profile: Any
    ) -> AuthResult[AuthSession]:
        """Register a new user.

        The store's unique index on email decides whether the email is
        taken; there is no separate lookup before the write.

        Args:
            email: User's email address.
            password: Plain text password, hashed before it is stored.
            **profile: Username and any other fields to store with the user.

        Returns:
            The created user and a token, or ALREADY_EXISTS or
            VALIDATION_FAILED.
        """
        try:
            user = await self._store.create(
                {**profile, "email": email, "password": self._hasher.hash(password)}
            )
        except DuplicateKeyError:
            logger.warning("register_failed_duplicate_email", email=email)
            return _fail(AuthErrorKind.ALREADY_EXISTS, ALREADY_EXISTS_MESSAGE)
        except (PasswordTooLongError, InvalidFieldValueError) as e:
            logger.warning("register_failed_invalid_input", error=str(e))
            return _fail(AuthErrorKind.VALIDATION_FAILED, str(e))
        except Exception as e:
            return _internal("register_user", e)

        logger.info("user_registered", user_id=user.id, email=user.email)
        return AuthResult.success(
            AuthSession(
                user=user.to_public_dict(),
                token=self._token_for(user),
                message="The user was created successfully",
            )
        )

    @traced(span_name="auth.login_user")
    async def login_user(self, email: str, password: str) -> AuthResult[AuthSession]:
        """Authenticate by email and password.

        Unknown email and wrong password return the same failure.

        Args:
            email: User's email address.
            password: Plain text password.

        Returns:
            The user and a token, or INVALID_CREDENTIALS.
        """
        try:
            user = await self._store.find_one(email=email)
        except Exception as e:
            return _internal("login_user", e)

        if user is None:
            self._hasher.verify(password, self._dummy_hash)
            logger.warning("login_failed_user_not_found", email=email)
            return _fail(AuthErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        if not self._hasher.verify(password, user.password):
            logger.warning("login_failed_invalid_password", email=email)
            return _fail(AuthErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

        logger.info("user_logged_in", user_id=user.id)
        return AuthResult.success(
            AuthSession(
                user=user.to_public_dict(),
                token=self._token_for(user),
                message="The user logged in correctly",
            )
        )

    @traced(span_name="auth.verify_user")
    async def verify_user(self, token: str) -> AuthResult[AuthSession]:
        """Verify a token and issue a renewed one.

        Args:
            token: Bearer token from a previous sign.

        Returns:
            The token's identity with a fresh token, or INVALID_TOKEN.
        """
        try:
            claims = self._signer.verify(token)
            data = {key: value for key, value in claims.items() if key not in STANDARD_CLAIMS}
            renewed = self.sign_jwt(data)
        except TokenError as e:
            return _fail(AuthErrorKind.INVALID_TOKEN, e.message)
        except Exception as e:
            return _internal("verify_user", e)

        return AuthResult.success(
            AuthSession(
                user=data,
                token=renewed,
                message="Successfully verified user",
            )
        )

    @traced(span_name="auth.change_password")
    async def change_password(
        self,
        token: str,
        password: str,
        new_password: str,
        repeat_new_password: str,
    ) -> AuthResult[UserEnvelope]:
        """Replace a user's password.

        Strength of ``new_password`` is checked by the request schema;
        the repeat is checked again here.

        Args:
            token: Token identifying the user.
            password: Current plain text password.
            new_password: Replacement password.
            repeat_new_password: Must equal ``new_password``.

        Returns:
            The updated user, or INVALID_TOKEN, NOT_FOUND,
            INVALID_CREDENTIALS or VALIDATION_FAILED.
        """
        if new_password != repeat_new_password:
            return _fail(AuthErrorKind.VALIDATION_FAILED, "New passwords do not match")

        try:
            claims = self._signer.verify(token)
        except TokenError as e:
            return _fail(AuthErrorKind.INVALID_TOKEN, e.message)
        except Exception as e:
            return _internal("change_password", e)

        username = claims.get("username")
        user_id = claims.get("id")
        if not username or not user_id:
            return _fail(AuthErrorKind.NOT_FOUND, "User not valid")

        try:
            # Usernames are not unique; the id pins the token's own user.
            user = await self._store.find_one(id=user_id, username=username)
            if user is None:
                logger.warning("change_password_user_not_found", username=username)
                return _fail(AuthErrorKind.NOT_FOUND, "User not valid")

            if not self._hasher.verify(password, user.password):
                logger.warning("change_password_invalid_password", user_id=user.id)
                return _fail(AuthErrorKind.INVALID_CREDENTIALS, "Password not valid")

            updated = await self._store.update_by_id(
                user.id, {"password": self._hasher.hash(new_password)}
            )
        except PasswordTooLongError as e:
            return _fail(AuthErrorKind.VALIDATION_FAILED, str(e))
        except Exception as e:
            return _internal("change_password", e)

        if updated is None:
            # Deleted between the lookup and the write.
            return _fail(AuthErrorKind.NOT_FOUND, "User not valid")

        logger.info("password_changed", user_id=updated.id)
        return AuthResult.success(
            UserEnvelope(user=updated.to_public_dict(), message="Password changed successfully")
        )

    @traced(span_name="auth.update_user")
    async def update_user(self, id: str, **fields: Any) -> AuthResult[UserEnvelope]:  # noqa: A002
        """Apply a partial update to a user.

        The returned ``user`` echoes the submitted fields, not the stored
        record, so it does not reflect values computed by the store.

        Args:
            id: Id of the user to update.
            **fields: Fields to set.

        Returns:
            The submitted fields, or NOT_FOUND, ALREADY_EXISTS or
            VALIDATION_FAILED.
        """
        try:
            updated = await self._store.update_by_id(id, fields)
        except DuplicateKeyError:
            logger.warning("update_failed_duplicate_email", user_id=id)
            return _fail(AuthErrorKind.ALREADY_EXISTS, ALREADY_EXISTS_MESSAGE)
        except InvalidFieldValueError as e:
            logger.warning("update_failed_invalid_field", user_id=id, field=e.field)
            return _fail(AuthErrorKind.VALIDATION_FAILED, str(e))
        except Exception as e:
            return _internal("update_user", e)

        if updated is None:
            logger.warning("update_failed_user_not_found", user_id=id)
            return _fail(AuthErrorKind.NOT_FOUND, "User's information could not be updated")

        logger.info("user_profile_updated", user_id=id, fields=sorted(fields))
        return AuthResult.success(
            UserEnvelope(
                user={"id": id, **fields},
                message="User information updated correctly",
            )
        )
