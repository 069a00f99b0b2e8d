import pytest
from sqlmodel import Session, func, select

from lkp.domain.entities.registration import REGISTRATION_MODELS
from lkp.domain.services.token_generation import LegacyTokenGenerator
from lkp.domain.services.token_manager import TokenManager
from lkp.infrastructure.database.database import build_engine, create_db_and_tables
from lkp.infrastructure.repositories import InMemoryTokenRepository, SQLModelTokenRepository


@pytest.fixture(scope="function")
def sqlite_engine(tmp_path):
    """A file-backed SQLite database with both token tables created."""
    engine = build_engine(f"sqlite:///{tmp_path / 'lkp.db'}", echo=False)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_repository(sqlite_engine):
    return SQLModelTokenRepository(sqlite_engine)


@pytest.fixture
def memory_repository():
    return InMemoryTokenRepository()


@pytest.fixture
def manager_factory():
    """Build managers without backoff so retry paths run instantly."""

    def _create(repository, generator=None, **kwargs):
        kwargs.setdefault("backoff_seconds", 0)
        kwargs.setdefault("backoff_max_seconds", 0)
        return TokenManager(repository, generator or LegacyTokenGenerator(), **kwargs)

    return _create


@pytest.fixture
def count_rows(sqlite_engine):
    """Return the number of registrations stored in a namespace."""

    def _count(namespace):
        model = REGISTRATION_MODELS[namespace]
        with Session(sqlite_engine) as session:
            return session.exec(select(func.count()).select_from(model)).one()

    return _count
