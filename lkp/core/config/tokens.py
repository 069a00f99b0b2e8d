"""
Token issuance settings.

Alphabet, token length and key prefix are fixed constants (see
`lkp.core.constants`); only the generation strategy and the conflict retry
policy are configurable.
"""
from pydantic import Field
from pydantic_settings import BaseSettings

from lkp.core.constants import (
    DEFAULT_BACKOFF_MAX_SECONDS,
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
)


class TokenSettings(BaseSettings):
    """
    Defines how tokens are generated and how insert conflicts are retried.

    Compatibility Note:
        - TOKEN_GENERATOR "legacy" reproduces the historical 48-bit generator
          bit for bit. "uniform" draws one rejection-sampled byte per
          character; it changes the output distribution of newly issued
          tokens but never touches existing registrations.
    Performance Note:
        - The manager lock is held across all retry attempts and backoff
          sleeps, so keep TOKEN_RETRY_BACKOFF_MAX_SECONDS small.
    """
    TOKEN_GENERATOR: str = Field(pattern="^(legacy|uniform)$", default="legacy")
    TOKEN_MAX_ATTEMPTS: int = Field(ge=1, default=DEFAULT_MAX_ATTEMPTS)
    TOKEN_RETRY_BACKOFF_SECONDS: float = Field(ge=0.0, default=DEFAULT_BACKOFF_SECONDS)
    TOKEN_RETRY_BACKOFF_MAX_SECONDS: float = Field(ge=0.0, default=DEFAULT_BACKOFF_MAX_SECONDS)
