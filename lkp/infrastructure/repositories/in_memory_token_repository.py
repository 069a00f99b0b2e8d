"""In-memory implementation of the token repository port."""

from __future__ import annotations

from threading import Lock

from lkp.core.exceptions import UniqueConflictError
from lkp.domain.interfaces.repositories import ITokenRepository
from lkp.domain.value_objects.access_token import AccessToken
from lkp.domain.value_objects.namespace import Namespace


class InMemoryTokenRepository(ITokenRepository):
    """Stores registrations in memory for the lifetime of the process.

    Enforces the same per-namespace uniqueness of names and tokens as the
    database schema.
    """

    def __init__(self) -> None:
        self._by_name: dict[Namespace, dict[str, AccessToken]] = {ns: {} for ns in Namespace}
        self._tokens: dict[Namespace, set[str]] = {ns: set() for ns in Namespace}
        self._lock = Lock()

    def lookup(self, namespace: Namespace, entity_name: str) -> AccessToken | None:
        with self._lock:
            return self._by_name[namespace].get(entity_name)

    def insert(self, namespace: Namespace, entity_name: str, token: AccessToken) -> None:
        with self._lock:
            if entity_name in self._by_name[namespace] or token.value in self._tokens[namespace]:
                raise UniqueConflictError(f"{namespace.value} name or token already registered")
            self._by_name[namespace][entity_name] = token
            self._tokens[namespace].add(token.value)

    def count(self, namespace: Namespace) -> int:
        """Return the number of registrations in ``namespace``."""
        with self._lock:
            return len(self._by_name[namespace])


__all__ = ["InMemoryTokenRepository"]
