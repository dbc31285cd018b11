"""
Database configuration and session management
Handles connection pooling, timestamp stamping, retry logic, and monitoring
"""

import functools
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator

import sentry_sdk
from fastapi import Depends
from sqlalchemy import DateTime, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from leaderboard_backend.core.clock import Clock, get_clock, system_clock
from leaderboard_backend.core.config import settings

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"


class UTCDateTime(TypeDecorator):
    """
    Timestamp column that always hands back timezone-aware UTC datetimes.

    SQLite drops the offset on the way in, so values are normalised to UTC
    before binding and re-tagged with UTC when loaded.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def create_db_engine(url: str) -> Engine:
    """Create an engine; pooling options only apply to server databases"""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False)

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        echo=settings.DEBUG,
        connect_args={"options": "-c statement_timeout=60000"},  # 60 seconds
    )


# Create engine with optimized settings
engine = create_db_engine(settings.get_database_url())

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@event.listens_for(Session, "before_flush")
def stamp_timestamps(session: Session, flush_context, instances) -> None:
    """Fill created_at on insert and updated_at on modification"""
    now = session_now(session)

    for obj in session.new:
        if hasattr(obj, "created_at") and obj.created_at is None:
            obj.created_at = now

    for obj in session.dirty:
        if hasattr(obj, "updated_at") and session.is_modified(obj, include_collections=False):
            obj.updated_at = now


def session_now(session: Session) -> datetime:
    """Current time according to the clock bound to the session"""
    clock: Clock = session.info.get("clock", system_clock)
    return clock.now()


def is_unique_violation(exc: IntegrityError) -> bool:
    """Check whether an IntegrityError was raised by a unique index"""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


# Retry decorator for database operations
def with_db_retry(max_attempts: int = 3, delay: float = 1.0):
    """
    Decorator to retry database operations on failure

    Args:
        max_attempts: Maximum number of retry attempts
        delay: Delay between retries in seconds
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except (OperationalError, DisconnectionError) as e:
                    if attempt == max_attempts - 1:
                        logger.error(f"Database operation failed after {max_attempts} attempts: {e}")
                        raise
                    logger.warning(
                        f"Database operation failed (attempt {attempt + 1}/{max_attempts}): {e}"
                    )
                    time.sleep(delay * (attempt + 1))

        return wrapper

    return decorator


@with_db_retry()
def init_db(bind: Engine = engine) -> None:
    """Initialize database, create tables if they don't exist"""
    # Import all models here to ensure they're registered
    import leaderboard_backend.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created successfully")

        with bind.connect() as conn:
            if conn.execute(text("SELECT 1")).scalar() == 1:
                logger.info("Database connection successful")
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database: {e}")
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise


def get_db(clock: Clock = Depends(get_clock)) -> Generator[Session, None, None]:
    """
    Dependency to get database session
    Ensures proper cleanup after request
    """
    db = SessionLocal()
    db.info["clock"] = clock
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Database error occurred: {e}")
        db.rollback()
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database session
    Use this for scripts or non-request contexts
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()


class DatabaseHealthCheck:
    """Database health check utility"""

    @staticmethod
    def check_connection(db: Session) -> dict:
        """Check database connection health"""
        start_time = time.time()
        try:
            db.execute(text("SELECT 1"))
            return {"status": "healthy", "response_time": time.time() - start_time}
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e),
                "response_time": time.time() - start_time,
            }

