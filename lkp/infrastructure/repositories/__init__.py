"""Repository implementations for the infrastructure layer."""

from .in_memory_token_repository import InMemoryTokenRepository
from .token_repository import SQLModelTokenRepository, is_unique_violation
from lkp.domain.interfaces.repositories import ITokenRepository

__all__ = ["InMemoryTokenRepository", "SQLModelTokenRepository", "ITokenRepository", "is_unique_violation"]
