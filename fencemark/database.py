"""
Database Configuration and Session Management

This module handles SQLAlchemy setup with connection pooling.
Connection pooling is critical for multi-tenant apps to avoid
creating too many database connections.

NOTE: Sessions handed to tenant-scoped endpoints are bound to the caller's
organization by fencemark.core.tenancy, which also pushes the organization
id into the database session context when row-level security is enabled.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool
from fencemark.config import get_settings
import logging
import time

logger = logging.getLogger(__name__)

settings = get_settings()


class DatabaseUnavailableError(RuntimeError):
    """Raised when the database cannot be reached during startup."""


def _engine_options(database_url: str) -> dict:
    """
    Pool options for the configured backend.

    SQLite (used by the test suite) cannot share a QueuePool across threads,
    and an in-memory database only exists for a single connection.
    """
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "poolclass": QueuePool,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Verify connections before using (handles stale connections)
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,  # Log SQL in debug mode
    **_engine_options(settings.DATABASE_URL),
)

# expire_on_commit=False so response models can be built from ORM rows
# after the request's single commit without reloading them.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)

# Base class for all models
Base = declarative_base()


@event.listens_for(engine, "connect")
def configure_connection(dbapi_connection, connection_record):
    """Set connection-level configuration on new connections."""
    cursor = dbapi_connection.cursor()
    if settings.DATABASE_URL.startswith("postgresql"):
        cursor.execute("SET TIME ZONE 'UTC'")
    elif settings.DATABASE_URL.startswith("sqlite"):
        # Membership and child rows rely on ON DELETE CASCADE
        cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    logger.debug("New database connection established")


def get_db() -> Session:
    """
    Dependency function that provides a database session.

    This is used with FastAPI's dependency injection system.
    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Create all tables.

    Models must be imported first so they are registered on Base.metadata.
    """
    import fencemark.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def init_db_with_retry(attempts: int = None, delay: float = None, sleep=time.sleep):
    """
    Create the schema, waiting for the database to come up.

    Retries a bounded number of times with a fixed delay. When every attempt
    fails, DatabaseUnavailableError is raised and startup must abort.
    """
    attempts = attempts or settings.DATABASE_CONNECT_RETRIES
    delay = settings.DATABASE_CONNECT_RETRY_DELAY if delay is None else delay

    for attempt in range(1, attempts + 1):
        try:
            init_db()
            logger.info(f"Database schema ready (attempt {attempt}/{attempts})")
            return
        except DBAPIError as e:
            logger.warning(
                f"Database not ready (attempt {attempt}/{attempts}): {e.orig!r}"
            )
            if attempt < attempts:
                sleep(delay)

    raise DatabaseUnavailableError(
        f"Could not initialize database after {attempts} attempts"
    )
