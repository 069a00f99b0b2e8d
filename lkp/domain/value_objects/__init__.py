"""Domain value objects for token issuance."""

from .access_token import AccessToken
from .namespace import Namespace

__all__ = [
    "AccessToken",
    "Namespace",
]
