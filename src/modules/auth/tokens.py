"""JWT signing and verification."""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import structlog

from src.modules.auth.exceptions import TokenError

logger = structlog.get_logger()

# Claims added on sign and stripped when a verified payload is re-derived.
STANDARD_CLAIMS = ("sub", "iat", "exp")


class JwtTokenSigner:
    """TokenSigner backed by PyJWT.

    Signs payloads with a shared secret and adds ``sub`` (the payload id),
    ``iat`` and ``exp`` claims.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expire_hours: int = 24,
    ) -> None:
        """Initialize the signer.

        Args:
            secret: Secret key for JWT signing.
            algorithm: Algorithm for JWT signing.
            expire_hours: Hours until token expiration.

        Raises:
            ValueError: If the secret is empty.
        """
        if not secret:
            raise ValueError("JwtTokenSigner requires a non-empty secret")
        self._secret = secret
        self._algorithm = algorithm
        self._expire_hours = expire_hours

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self._expire_hours * 3600

    def sign(self, payload: dict[str, Any]) -> str:
        """Sign a payload.

        Args:
            payload: Claims to carry. Standard claims already present are
                replaced.

        Returns:
            Encoded JWT.
        """
        now = datetime.now(UTC)
        expires = now + timedelta(hours=self._expire_hours)

        claims = {key: value for key, value in payload.items() if key not in STANDARD_CLAIMS}
        # JWT requires integer timestamps for exp and iat
        claims["iat"] = int(now.timestamp())
        claims["exp"] = int(expires.timestamp())
        if "id" in payload:
            claims["sub"] = str(payload["id"])

        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Verify and decode a JWT.

        Args:
            token: JWT string.

        Returns:
            All claims of the token, standard claims included.

        Raises:
            TokenError: If token is invalid or expired.
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])

        except jwt.ExpiredSignatureError as e:
            logger.warning("token_expired")
            raise TokenError("Token has expired") from e

        except jwt.InvalidTokenError as e:
            logger.warning("token_invalid", error=str(e))
            raise TokenError("Invalid token") from e
