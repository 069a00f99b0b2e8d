"""Domain ports."""

from .repositories import ITokenRepository
from .services import ITokenGenerator

__all__ = ["ITokenRepository", "ITokenGenerator"]
