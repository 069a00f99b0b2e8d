"""Token Repository implementation using SQLModel.

Each call opens its own short-lived session on the injected engine, so a
repository instance can be shared freely between threads. Inserts translate
driver errors into the domain's two failure kinds: `UniqueConflictError` for
violations of the token or entity-name uniqueness constraints, and
`StorageError` for everything else.
"""

from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select
from structlog import get_logger

from lkp.core.exceptions import StorageError, UniqueConflictError
from lkp.domain.entities.registration import REGISTRATION_MODELS
from lkp.domain.interfaces.repositories import ITokenRepository
from lkp.domain.value_objects.access_token import AccessToken
from lkp.domain.value_objects.namespace import Namespace

logger = get_logger(__name__)

PG_UNIQUE_VIOLATION = "23505"
_SQLITE_UNIQUE_ERRORS = {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}


def is_unique_violation(error: IntegrityError) -> bool:
    """Tells whether an integrity error comes from a uniqueness constraint.

    Recognizes PostgreSQL SQLSTATE 23505 (psycopg2 ``pgcode`` and psycopg 3
    ``sqlstate``) and SQLite unique/primary-key constraint failures.
    """
    orig = error.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate is not None:
        return sqlstate == PG_UNIQUE_VIOLATION
    if getattr(orig, "sqlite_errorname", None) in _SQLITE_UNIQUE_ERRORS:
        return True
    return "UNIQUE constraint failed" in str(orig)


class SQLModelTokenRepository(ITokenRepository):
    """SQLModel implementation of ITokenRepository.

    Responsibilities:
    - Registration lookups by exact entity name
    - Append-only inserts of new registrations
    - Mapping of driver errors onto domain exceptions
    """

    def __init__(self, engine: Engine):
        """Initialize repository with a database engine.

        Args:
            engine: SQLAlchemy engine that owns the connection pool.
        """
        self._engine = engine

    def lookup(self, namespace: Namespace, entity_name: str) -> Optional[AccessToken]:
        model = REGISTRATION_MODELS[namespace]
        name_column = getattr(model, model.entity_name_field)
        try:
            with Session(self._engine) as session:
                record = session.exec(select(model).where(name_column == entity_name)).first()
        except SQLAlchemyError as e:
            logger.error(
                "registration_lookup_failed",
                namespace=namespace.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError(f"Failed to look up {namespace.value} token") from e

        logger.debug("registration_lookup_completed", namespace=namespace.value, found=record is not None)
        if record is None:
            return None
        return AccessToken.from_existing(record.token)

    def insert(self, namespace: Namespace, entity_name: str, token: AccessToken) -> None:
        model = REGISTRATION_MODELS[namespace]
        record = model(token=token.value, **{model.entity_name_field: entity_name})
        try:
            with Session(self._engine) as session:
                session.add(record)
                session.commit()
        except IntegrityError as e:
            if is_unique_violation(e):
                logger.debug("registration_unique_conflict", namespace=namespace.value)
                raise UniqueConflictError(f"{namespace.value} name or token already registered") from e
            logger.error(
                "registration_insert_failed",
                namespace=namespace.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError(f"Failed to store {namespace.value} token") from e
        except SQLAlchemyError as e:
            logger.error(
                "registration_insert_failed",
                namespace=namespace.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError(f"Failed to store {namespace.value} token") from e
