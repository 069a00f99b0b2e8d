"""Repository interfaces for abstracting token persistence in the domain layer.

The domain layer talks to storage only through these ports; the concrete
adapters live in `lkp.infrastructure.repositories`.
"""

from abc import ABC, abstractmethod
from typing import Optional

from lkp.domain.value_objects.access_token import AccessToken
from lkp.domain.value_objects.namespace import Namespace


class ITokenRepository(ABC):
    """An interface defining the contract for registration persistence.

    The store is append-only: it exposes lookups and inserts per namespace
    and nothing that updates or deletes a registration.
    """

    @abstractmethod
    def lookup(self, namespace: Namespace, entity_name: str) -> Optional[AccessToken]:
        """Retrieves the token registered for a name.

        Args:
            namespace: The namespace to search.
            entity_name: The exact service or user name.

        Returns:
            The registered token, or `None` if the name is not registered.

        Raises:
            StorageError: If the store cannot be queried.
        """
        raise NotImplementedError

    @abstractmethod
    def insert(self, namespace: Namespace, entity_name: str, token: AccessToken) -> None:
        """Persists a new name/token pair.

        Args:
            namespace: The namespace to insert into.
            entity_name: The service or user name.
            token: The freshly generated token.

        Raises:
            UniqueConflictError: If the name or the token already exists in
                the namespace.
            StorageError: For any other persistence failure.
        """
        raise NotImplementedError
