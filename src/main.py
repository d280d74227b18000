"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded

from src.api.health import router as health_router
from src.api.rate_limit import limiter, rate_limit_exceeded_handler
from src.config import Settings, get_settings
from src.infrastructure.database import Database, init_database
from src.infrastructure.observability import (
    configure_logging,
    init_observability,
    shutdown_observability,
)
from src.modules.auth.password import BcryptPasswordHasher
from src.modules.auth.repository import SqliteUserStore
from src.modules.auth.routes import router as auth_router
from src.modules.auth.routes import set_auth_service, validation_exception_handler
from src.modules.auth.service import AuthService
from src.modules.auth.tokens import JwtTokenSigner

logger = structlog.get_logger()
settings = get_settings()


def build_auth_service(database: Database, settings: Settings) -> AuthService | None:
    """Wire the auth service from settings, or return None if auth is off."""
    if not settings.auth_enabled or settings.jwt_secret_key is None:
        return None
    return AuthService(
        SqliteUserStore(database),
        JwtTokenSigner(
            settings.jwt_secret_key.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            expire_hours=settings.jwt_expire_hours,
        ),
        BcryptPasswordHasher(rounds=settings.bcrypt_rounds),
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler for startup/shutdown."""
    db_path = Path(settings.database_path)
    database = await init_database(db_path)

    auth_service = build_auth_service(database, settings)
    set_auth_service(auth_service)
    if auth_service is not None:
        logger.info("auth_service_initialized")
    else:
        logger.warning(
            "auth_disabled", reason="auth_enabled=False or jwt_secret_key not set"
        )

    yield

    set_auth_service(None)
    await database.disconnect()
    shutdown_observability()


configure_logging(debug=settings.debug)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

init_observability(
    settings.app_name,
    settings.app_version,
    otlp_endpoint=settings.otel_exporter_endpoint,
    console_export=settings.otel_console_export,
    enabled=settings.otel_enabled,
    sample_rate=settings.otel_sample_rate,
    app=app,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    rate_limit_exceeded_handler,  # type: ignore[arg-type]
)

# Validation errors share the auth error shape
app.add_exception_handler(
    RequestValidationError,
    validation_exception_handler,  # type: ignore[arg-type]
)

app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(auth_router)
