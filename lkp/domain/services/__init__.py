"""Domain services for token issuance."""

from .token_generation import LegacyTokenGenerator, UniformTokenGenerator, create_token_generator
from .token_manager import TokenManager

__all__ = ["LegacyTokenGenerator", "UniformTokenGenerator", "create_token_generator", "TokenManager"]
