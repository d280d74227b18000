#!/usr/bin/env python3
"""CLI script to register users against the configured database.

Usage:
    uv run python scripts/create_user.py user@example.com 'Secret123!' --username user
    uv run python scripts/create_user.py a@x.com 'Secret123!' --username a --field team=blue
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the project root to the path so `src` is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from src.config import Settings
from src.infrastructure.database.connection import init_database
from src.main import build_auth_service
from src.modules.auth.schemas import RegisterUserRequest


async def create_user(email: str, password: str, username: str, profile: dict[str, str]) -> None:
    """Register a user and print its id.

    Args:
        email: User's email address.
        password: User's password (will be hashed).
        username: User's username.
        profile: Extra profile fields.
    """
    settings = Settings()

    if settings.jwt_secret_key is None:
        print("✗ Error: JWT_SECRET_KEY not set in .env", file=sys.stderr)
        sys.exit(1)

    try:
        data = RegisterUserRequest(email=email, password=password, username=username, **profile)
    except ValidationError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    db = await init_database(settings.database_path)

    try:
        auth_service = build_auth_service(db, settings)
        if auth_service is None:
            print("✗ Error: authentication is disabled (AUTH_ENABLED=false)", file=sys.stderr)
            sys.exit(1)

        result = await auth_service.register_user(
            data.email, data.password, username=data.username, **data.profile_fields()
        )
        if result.error is not None:
            print(f"✗ Error: {result.error.message}", file=sys.stderr)
            sys.exit(1)

        session = result.unwrap()
        print(f"✓ {session.message}: {session.user['email']}")
        print(f"  User ID: {session.user['id']}")
        print(f"  Token: {session.token}")
    finally:
        await db.disconnect()


def _parse_field(value: str) -> tuple[str, str]:
    key, sep, field_value = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {value!r}")
    return key, field_value


def main() -> None:
    """Parse arguments and create the user."""
    parser = argparse.ArgumentParser(description="Register a user")
    parser.add_argument("email", help="User's email address")
    parser.add_argument("password", help="Strong password (8+ chars, upper, lower, digit, symbol)")
    parser.add_argument("--username", required=True, help="User's username")
    parser.add_argument(
        "--field",
        action="append",
        type=_parse_field,
        default=[],
        metavar="KEY=VALUE",
        help="Extra profile field (repeatable)",
    )

    args = parser.parse_args()
    asyncio.run(create_user(args.email, args.password, args.username, dict(args.field)))


if __name__ == "__main__":
    main()
