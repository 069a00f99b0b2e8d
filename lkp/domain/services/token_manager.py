"""Get-or-create orchestration for service and user tokens.

The manager serializes every get-or-create call made through it with one
lock shared by both namespaces. The storage uniqueness constraints remain the
final arbiter between separate process instances: a writer that loses an
insert race sees `UniqueConflictError`, re-checks the name and retries with a
fresh token, up to a bounded number of attempts.
"""

import threading
import time
from typing import Callable, Optional

import structlog
from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from lkp.core.constants import (
    DEFAULT_BACKOFF_MAX_SECONDS,
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    TOKEN_LENGTH,
)
from lkp.core.exceptions import InvalidEntityNameError, RetriesExhaustedError, UniqueConflictError
from lkp.domain.interfaces.repositories import ITokenRepository
from lkp.domain.interfaces.services import ITokenGenerator
from lkp.domain.value_objects.access_token import AccessToken
from lkp.domain.value_objects.namespace import Namespace

logger = structlog.get_logger(__name__)


class TokenManager:
    """Returns the token bound to a name, creating it on first request.

    Registrations are never cached: every call re-queries the repository.

    Attributes:
        max_attempts: Insert attempts allowed before giving up.
    """

    def __init__(
        self,
        repository: ITokenRepository,
        generator: ITokenGenerator,
        *,
        lock: Optional[threading.Lock] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        backoff_max_seconds: float = DEFAULT_BACKOFF_MAX_SECONDS,
        token_length: int = TOKEN_LENGTH,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the manager.

        Args:
            repository: Store used for lookups and inserts.
            generator: Source of fresh tokens.
            lock: Mutual exclusion shared by all calls on this manager; a new
                lock is created when omitted.
            max_attempts: Upper bound on insert attempts per call.
            backoff_seconds: Multiplier of the exponential wait between attempts.
            backoff_max_seconds: Ceiling of a single wait.
            token_length: Length of generated tokens.
            sleep: Called with each backoff wait, in seconds.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._repository = repository
        self._generator = generator
        self._lock = lock if lock is not None else threading.Lock()
        self.max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._backoff_max_seconds = backoff_max_seconds
        self._token_length = token_length
        self._sleep = sleep

    def get_or_create(self, namespace: Namespace, entity_name: str) -> AccessToken:
        """Returns the token for `entity_name`, registering one if needed.

        Args:
            namespace: The namespace the name belongs to.
            entity_name: The exact service or user name.

        Returns:
            AccessToken: The registered token.

        Raises:
            InvalidEntityNameError: If the name is empty or whitespace only.
            RetriesExhaustedError: If every insert attempt conflicted.
            StorageError: Passed through from the repository.
            EntropyUnavailableError: Passed through from the generator.
        """
        if not entity_name or not entity_name.strip():
            raise InvalidEntityNameError()

        with self._lock:
            existing = self._repository.lookup(namespace, entity_name)
            if existing is not None:
                logger.debug(
                    "registration_found",
                    namespace=namespace.value,
                    token=existing.mask_for_logging(),
                )
                return existing
            return self._create(namespace, entity_name)

    def get_or_create_service_token(self, service_name: str) -> AccessToken:
        return self.get_or_create(Namespace.SERVICE, service_name)

    def get_or_create_user_token(self, user_name: str) -> AccessToken:
        return self.get_or_create(Namespace.USER, user_name)

    def _create(self, namespace: Namespace, entity_name: str) -> AccessToken:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self._backoff_seconds, max=self._backoff_max_seconds),
            retry=retry_if_exception_type(UniqueConflictError),
            sleep=self._sleep,
            before_sleep=lambda state: logger.info(
                "registration_conflict_retry",
                namespace=namespace.value,
                attempt=state.attempt_number,
                max_attempts=self.max_attempts,
            ),
        )
        try:
            for attempt in retrying:
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        # Another instance may have registered the name meanwhile.
                        existing = self._repository.lookup(namespace, entity_name)
                        if existing is not None:
                            logger.info(
                                "registration_won_elsewhere",
                                namespace=namespace.value,
                                token=existing.mask_for_logging(),
                            )
                            return existing

                    token = self._generator.generate(self._token_length)
                    self._repository.insert(namespace, entity_name, token)
                    logger.info(
                        "registration_created",
                        namespace=namespace.value,
                        token=token.mask_for_logging(),
                        attempts=attempt.retry_state.attempt_number,
                    )
                    return token
        except RetryError as e:
            logger.error(
                "registration_retries_exhausted",
                namespace=namespace.value,
                attempts=self.max_attempts,
            )
            raise RetriesExhaustedError(
                f"Could not register {namespace.value} token after {self.max_attempts} attempts",
                attempts=self.max_attempts,
            ) from e.last_attempt.exception()
        # Unreachable: Retrying either returns through the loop or raises.
        raise RetriesExhaustedError("Registration loop ended without a result", attempts=self.max_attempts)
