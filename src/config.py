"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "auth-service"
    app_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_path: str = "./data/users.db"

    # Authentication
    auth_enabled: bool = True
    jwt_secret_key: SecretStr | None = None  # Secret for JWT signing
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24  # Token expiration in hours
    bcrypt_rounds: int = 10  # Work factor for password hashing

    # Rate limiting (register and login)
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 10
    rate_limit_window: str = "minute"

    # Tracing
    otel_enabled: bool = False
    otel_exporter_endpoint: str | None = None  # e.g. http://localhost:4318
    otel_console_export: bool = False
    otel_sample_rate: float = 1.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
