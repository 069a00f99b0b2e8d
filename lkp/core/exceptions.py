"""Centralized, structured exception hierarchy for lkp.

Every error raised by the token issuance subsystem derives from `LkpError`
and carries a machine-readable `code` for programmatic handling next to a
human-readable `message` for logging.

Propagation policy:
- `UniqueConflictError` is retryable and never escapes get-or-create unless
  the bounded retry loop gives up, in which case `RetriesExhaustedError` is
  raised instead.
- Every other error reaches the immediate caller unchanged.
"""

from __future__ import annotations

from typing import Final

__all__: Final = [
    "LkpError",
    "ConfigurationError",
    "ValidationError",
    "InvalidEntityNameError",
    "EntropyUnavailableError",
    "StorageError",
    "UniqueConflictError",
    "RetriesExhaustedError",
]


class LkpError(Exception):
    """Base exception class for all custom errors in the lkp package.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration and input errors
# ---------------------------------------------------------------------------


class ConfigurationError(LkpError):
    """Raised when settings are missing, malformed or inconsistent."""

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(message, code)


class ValidationError(LkpError):
    """Raised for general input validation failures."""

    def __init__(self, message: str, code: str = "validation_error"):
        super().__init__(message, code)


class InvalidEntityNameError(ValidationError):
    """Raised when a service or user name cannot be registered.

    Names must be non-empty and must not consist of whitespace only.
    """

    def __init__(self, message: str = "Entity name cannot be empty", code: str = "invalid_entity_name"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Token generation errors
# ---------------------------------------------------------------------------


class EntropyUnavailableError(LkpError):
    """Raised when the secure random source cannot supply bytes.

    This is treated as fatal for the current call and is never retried.
    """

    def __init__(
        self,
        message: str = "Secure random source is unavailable",
        code: str = "entropy_unavailable",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Persistence errors
# ---------------------------------------------------------------------------


class StorageError(LkpError):
    """Raised for persistence failures other than uniqueness conflicts.

    Wraps connection and query errors from the underlying driver. Not retried.
    """

    def __init__(self, message: str, code: str = "storage_error"):
        super().__init__(message, code)


class UniqueConflictError(LkpError):
    """Raised when an insert violates the entity-name or token uniqueness constraint.

    The store does not report which column conflicted; the get-or-create
    loop answers both cases the same way, with a freshly generated token.
    """

    def __init__(self, message: str, code: str = "unique_conflict"):
        super().__init__(message, code)


class RetriesExhaustedError(LkpError):
    """Raised when every allowed insert attempt ended in a uniqueness conflict."""

    def __init__(self, message: str, attempts: int = 0, code: str = "retries_exhausted"):
        self.attempts = attempts
        super().__init__(message, code)
