"""Service interfaces used by the token manager."""

from abc import ABC, abstractmethod

from lkp.domain.value_objects.access_token import AccessToken


class ITokenGenerator(ABC):
    """Produces random base62 tokens from a secure entropy source."""

    @abstractmethod
    def generate(self, length: int) -> AccessToken:
        """Generates a token of exactly `length` characters.

        Raises:
            ValueError: If `length` is not a positive integer.
            EntropyUnavailableError: If the random source fails.
        """
        raise NotImplementedError
