"""Composition root for token issuance.

Wires settings, the database engine, the repository and the generator into a
`TokenManager`, and exposes `issue_access_key`, which composes the final
``lkp-<service token>-<user token>`` key.

Errors are raised as `LkpError` subclasses; deciding whether a failure is
fatal is left to the caller.
"""

from functools import lru_cache
from typing import Optional

from sqlalchemy.engine import Engine

from lkp.core.config.settings import Settings, settings
from lkp.core.constants import KEY_PREFIX, KEY_SEPARATOR
from lkp.core.logging import logger
from lkp.domain.interfaces.repositories import ITokenRepository
from lkp.domain.services.token_generation import create_token_generator
from lkp.domain.services.token_manager import TokenManager
from lkp.domain.value_objects.access_token import AccessToken
from lkp.infrastructure.database import get_engine
from lkp.infrastructure.repositories import SQLModelTokenRepository


def create_token_manager(
    engine: Optional[Engine] = None,
    repository: Optional[ITokenRepository] = None,
    config: Optional[Settings] = None,
) -> TokenManager:
    """Create a token manager from settings.

    Args:
        engine: Engine for the SQL repository; defaults to the process engine.
        repository: Use this store instead of the SQL repository.
        config: Settings to read; defaults to the package settings.

    Returns:
        TokenManager: A manager owning a fresh lock.
    """
    config = config or settings
    if repository is None:
        repository = SQLModelTokenRepository(engine or get_engine())
    return TokenManager(
        repository,
        create_token_generator(config.TOKEN_GENERATOR),
        max_attempts=config.TOKEN_MAX_ATTEMPTS,
        backoff_seconds=config.TOKEN_RETRY_BACKOFF_SECONDS,
        backoff_max_seconds=config.TOKEN_RETRY_BACKOFF_MAX_SECONDS,
    )


@lru_cache(maxsize=1)
def get_token_manager() -> TokenManager:
    """Returns the manager shared by the whole process."""
    return create_token_manager()


def compose_access_key(service_token: AccessToken, user_token: AccessToken) -> str:
    """Joins the prefix and both tokens into an access key."""
    return KEY_SEPARATOR.join((KEY_PREFIX, service_token.value, user_token.value))


def issue_access_key(service_name: str, user_name: str, *, manager: Optional[TokenManager] = None) -> str:
    """Get or create both tokens and return the composed access key.

    Args:
        service_name: Name registered in the service namespace.
        user_name: Name registered in the user namespace.
        manager: Manager to use; defaults to the process manager.

    Returns:
        str: ``"lkp-<service token>-<user token>"``.

    Raises:
        LkpError: Any validation, generation or storage failure.
    """
    manager = manager or get_token_manager()
    service_token = manager.get_or_create_service_token(service_name)
    user_token = manager.get_or_create_user_token(user_name)
    logger.info(
        "access_key_issued",
        service_token=service_token.mask_for_logging(),
        user_token=user_token.mask_for_logging(),
    )
    return compose_access_key(service_token, user_token)
