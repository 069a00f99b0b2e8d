"""
Synchronous Database Connection Module

This module manages database connections using SQLModel and SQLAlchemy. It
provides utilities for engine construction, session management, health checks
and table creation. Token issuance is synchronous and blocking, so there is
no asynchronous engine.

PostgreSQL engines are configured with connection pooling, timeouts and SSL
mode from settings. SQLite URLs are accepted for local runs and tests.

**Security Note**: Avoid logging the connection URL; it embeds the database
password.

Key Components:
    - build_engine: Creates an engine for a URL (defaults to settings.DATABASE_URL).
    - get_engine: Process-wide cached engine.
    - get_db_session: A context manager for creating database sessions with logging.
    - check_database_health: Function to verify database connectivity.
    - create_db_and_tables: Function to create the token tables, with retry logic.
"""

import time
from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql import text
from sqlmodel import Session, SQLModel, create_engine
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from lkp.core.config.settings import settings
from lkp.core.logging import logger

# Table models must be imported so they register with SQLModel.metadata.
from lkp.domain.entities import registration  # noqa: F401


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Creates a SQLAlchemy engine for the given URL.

    Args:
        database_url: Connection URL; defaults to settings.DATABASE_URL.
        echo: Log emitted SQL; defaults to settings.DEBUG.

    Returns:
        Engine: A configured engine. No connection is opened yet.
    """
    url = make_url(database_url or settings.DATABASE_URL)
    echo = settings.DEBUG if echo is None else echo

    if url.get_backend_name() == "sqlite":
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        echo=echo,
        pool_size=settings.POSTGRES_POOL_SIZE,
        max_overflow=settings.POSTGRES_MAX_OVERFLOW,
        pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
        pool_pre_ping=True,  # Check connection health before use
        connect_args={"sslmode": settings.POSTGRES_SSL_MODE},
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Returns the engine shared by the whole process."""
    return build_engine()


@contextmanager
def get_db_session(engine: Optional[Engine] = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions with logging.

    Args:
        engine: Engine to bind; defaults to the process engine.

    Yields:
        Session: A database session
    """
    engine = engine or get_engine()
    session = None
    start_time = time.time()
    try:
        session = Session(engine)
        logger.debug("database_session_created")
        yield session
    finally:
        if session:
            session.close()
            logger.debug("database_session_closed", execution_time=time.time() - start_time)


def check_database_health(engine: Optional[Engine] = None) -> bool:
    """
    Performs a health check on the database connection.

    Returns:
        bool: True if database is healthy and responsive, False otherwise.
    """
    start_time = time.time()
    try:
        with get_db_session(engine) as session:
            session.exec(text("SELECT 1"))
        logger.info("database_health_check_success", execution_time=time.time() - start_time)
        return True
    except Exception as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            execution_time=time.time() - start_time,
        )
        return False


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    retry=retry_if_exception_type(OperationalError),
    reraise=True,
)
def create_db_and_tables(engine: Optional[Engine] = None) -> None:
    """
    Creates the token tables with retry logic.

    Temporary connection failures (OperationalError) are retried with
    exponential backoff; other errors propagate immediately.
    """
    engine = engine or get_engine()
    start_time = time.time()
    try:
        SQLModel.metadata.create_all(engine)
    except OperationalError as e:
        logger.warning("database_tables_creation_retry", error=str(e))
        raise
    logger.info(
        "database_tables_created",
        execution_time=time.time() - start_time,
        tables=list(SQLModel.metadata.tables.keys()),
    )
