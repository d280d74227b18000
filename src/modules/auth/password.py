"""Password hashing with bcrypt."""

import bcrypt

from src.modules.auth.exceptions import PasswordTooLongError

DEFAULT_ROUNDS = 10

# bcrypt only reads this many bytes of its input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, *, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt (auto-salted).

    Raises:
        PasswordTooLongError: If the UTF-8 encoded password exceeds 72 bytes.
    """
    encoded = password.encode()
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise PasswordTooLongError(MAX_PASSWORD_BYTES)
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, hashed_password: str) -> bool:
    """Constant-time comparison against a bcrypt hash.

    Malformed hashes and overlong passwords compare as False instead of
    raising.
    """
    try:
        return bcrypt.checkpw(password.encode(), hashed_password.encode())
    except (ValueError, TypeError):
        return False


class BcryptPasswordHasher:
    """PasswordHasher backed by bcrypt."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        return hash_password(password, rounds=self._rounds)

    def verify(self, password: str, hashed: str) -> bool:
        return verify_password(password, hashed)
