"""Shared fixtures for auth tests."""

import tempfile
from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from src.infrastructure.database import Database
from src.modules.auth import (
    AuthService,
    BcryptPasswordHasher,
    InMemoryUserStore,
    JwtTokenSigner,
    SqliteUserStore,
)

TEST_SECRET = "test-secret-key-for-testing-only"

# The global tracer provider can only be set once per process, so it is
# configured here before any test module imports the application.
_exporter = InMemorySpanExporter()
_provider = TracerProvider()
_provider.add_span_processor(SimpleSpanProcessor(_exporter))
trace.set_tracer_provider(_provider)


@pytest.fixture
def span_exporter() -> Iterator[InMemorySpanExporter]:
    """In-memory exporter holding the spans finished during the test."""
    _exporter.clear()
    yield _exporter
    _exporter.clear()


@pytest.fixture
async def database() -> AsyncGenerator[Database]:
    """Create a temporary test database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db = Database(Path(tmpdir) / "test.db")
        await db.connect()
        yield db
        await db.disconnect()


@pytest.fixture
def signer() -> JwtTokenSigner:
    return JwtTokenSigner(TEST_SECRET, expire_hours=24)


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """Bcrypt hasher with the minimum work factor to keep tests fast."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def memory_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def auth_service(
    memory_store: InMemoryUserStore,
    signer: JwtTokenSigner,
    hasher: BcryptPasswordHasher,
) -> AuthService:
    """Auth service over the in-memory store."""
    return AuthService(memory_store, signer, hasher)


@pytest.fixture
async def sqlite_store(database: Database) -> SqliteUserStore:
    return SqliteUserStore(database)
