"""
Application Configuration

Centralized configuration management using Pydantic settings.
Loads from environment variables with fallback to .env file.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Note: get_settings() is cached, so tests that change the environment
    must call get_settings.cache_clear() before the app modules are imported.
    """

    # Database settings
    DATABASE_URL: str = "postgresql://localhost/fencemark_dev"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Startup connection retry (schema creation waits for the database)
    DATABASE_CONNECT_RETRIES: int = 10
    DATABASE_CONNECT_RETRY_DELAY: float = 5.0

    # Row-level security: which server-side session variable to set
    # for the resolved organization on every transaction.
    # none: application-level filtering only
    # sqlserver: sp_set_session_context N'OrganizationId'
    # postgresql: set_config('app.organization_id', ...)
    SESSION_CONTEXT_MODE: Literal["none", "sqlserver", "postgresql"] = "none"

    # Security settings
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 8
    BCRYPT_ROUNDS: int = 12

    # Cookie auth for browser clients (bearer header is also accepted)
    AUTH_COOKIE_NAME: str = "fencemark_auth"
    AUTH_COOKIE_SECURE: bool = False

    # Redis for token revocation and rate limiting
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = True

    # Application settings
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_BURST: int = 30

    # Quoting
    QUOTE_VALIDITY_DAYS: int = 30

    # New organizations start with a sample catalog
    SEED_SAMPLE_DATA_ON_REGISTER: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only instantiate settings once.
    """
    return Settings()
