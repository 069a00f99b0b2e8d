"""Access Token value object.

Encapsulates the format rules of an issued token: a non-empty string drawn
entirely from the base62 alphabet. Tokens are opaque and immutable.
"""

from dataclasses import dataclass
from typing import ClassVar

from lkp.core.constants import BASE62_ALPHABET


@dataclass(frozen=True)
class AccessToken:
    """Opaque base62 token bound to one service or user name.

    Attributes:
        value: The token string.
    """

    value: str

    ALPHABET: ClassVar[str] = BASE62_ALPHABET

    def __post_init__(self) -> None:
        """Validate token format on construction."""
        if not self.value:
            raise ValueError("Token cannot be empty")
        invalid = set(self.value) - set(self.ALPHABET)
        if invalid:
            raise ValueError("Token must contain only base62 characters")

    @classmethod
    def from_existing(cls, token_value: str) -> "AccessToken":
        """Create token from a stored value (e.g., from database)."""
        return cls(value=token_value)

    def mask_for_logging(self) -> str:
        """Get masked token for safe logging.

        Returns:
            str: Token with only the first 3 characters visible
        """
        return f"{self.value[:3]}..."

    def __str__(self) -> str:
        return self.value
