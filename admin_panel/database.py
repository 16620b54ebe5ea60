"""
Database Configuration and Session Management

SQLAlchemy engine, session factory and declarative base.

Server databases get a QueuePool and a fixed transaction isolation level
(REPEATABLE READ by default) so that every request transaction reads from
a single snapshot. SQLite is only used for local development and tests.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool
from typing import Any, Dict, Iterator
from admin_panel.config import get_settings
import logging

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Build create_engine() keyword arguments for the configured backend."""
    options: Dict[str, Any] = {
        "pool_pre_ping": True,  # Handles stale connections
        "echo": settings.DEBUG,  # Log SQL in debug mode
    }
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        return options

    options.update(
        poolclass=QueuePool,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
    )
    if database_url.startswith("postgresql"):
        options["isolation_level"] = settings.DATABASE_ISOLATION_LEVEL
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# expire_on_commit=False lets handlers serialize a user right after the
# role update commits without another round trip.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)

# Base class for all models
Base = declarative_base()


@event.listens_for(engine, "connect")
def set_connection_timezone(dbapi_connection, connection_record):
    """Set connection-level configuration on new connections."""
    # SQLite doesn't support SET TIME ZONE
    if settings.DATABASE_URL.startswith("postgresql"):
        cursor = dbapi_connection.cursor()
        cursor.execute("SET TIME ZONE 'UTC'")
        cursor.close()
    logger.debug("New database connection established")


def get_db() -> Iterator[Session]:
    """
    Dependency function that provides a database session.

    One session per request. Closing it rolls back whatever the request
    left uncommitted, which also releases row locks taken by a failed
    role update.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Create tables for local development.

    The users table belongs to the identity subsystem in production and is
    migrated there.
    """
    logger.warning("init_db() called - creating tables (development only)")
    Base.metadata.create_all(bind=engine)
