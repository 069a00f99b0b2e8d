"""Database infrastructure."""

from .database import build_engine, check_database_health, create_db_and_tables, get_db_session, get_engine

__all__ = ["build_engine", "check_database_health", "create_db_and_tables", "get_db_session", "get_engine"]
