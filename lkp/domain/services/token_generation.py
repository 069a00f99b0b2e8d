"""Random base62 token generation.

Two strategies are available behind `ITokenGenerator`:

- `LegacyTokenGenerator` draws one 48-bit value per token and renders it as
  base62 digits, most significant first. It reproduces every token issued so
  far, but only carries 48 bits of entropy: for lengths above 8 the leading
  characters are heavily biased toward "0" and at most 2**48 distinct tokens
  exist regardless of length.
- `UniformTokenGenerator` draws one rejection-sampled byte per character,
  giving every position a uniform distribution over the alphabet. Switching
  to it changes the distribution of newly issued tokens.
"""

import secrets
from typing import Callable, List, Optional

import structlog

from lkp.core.constants import BASE62_ALPHABET, LEGACY_ENTROPY_BYTES, UNIFORM_REJECTION_THRESHOLD
from lkp.core.exceptions import ConfigurationError, EntropyUnavailableError
from lkp.domain.interfaces.services import ITokenGenerator
from lkp.domain.value_objects.access_token import AccessToken

logger = structlog.get_logger(__name__)

EntropySource = Callable[[int], bytes]

_BASE = len(BASE62_ALPHABET)


def _validate_length(length: int) -> None:
    if not isinstance(length, int) or isinstance(length, bool) or length <= 0:
        raise ValueError("Token length must be a positive integer")


class _EntropyMixin:
    """Reads bytes from the configured source and checks for short reads."""

    def __init__(self, entropy_source: Optional[EntropySource] = None):
        self._entropy_source = entropy_source or secrets.token_bytes

    def _read_entropy(self, count: int) -> bytes:
        try:
            data = self._entropy_source(count)
        except (OSError, NotImplementedError) as e:
            logger.error("entropy_source_failed", requested=count, error=str(e))
            raise EntropyUnavailableError() from e
        if len(data) != count:
            logger.error("entropy_source_short_read", requested=count, received=len(data))
            raise EntropyUnavailableError(
                f"Secure random source returned {len(data)} of {count} bytes"
            )
        return data


class LegacyTokenGenerator(_EntropyMixin, ITokenGenerator):
    """Renders a single 48-bit random value as a fixed-length base62 string."""

    def generate(self, length: int) -> AccessToken:
        _validate_length(length)
        number = int.from_bytes(self._read_entropy(LEGACY_ENTROPY_BYTES), "big")

        digits: List[str] = []
        for _ in range(length):
            number, remainder = divmod(number, _BASE)
            digits.append(BASE62_ALPHABET[remainder])
        return AccessToken("".join(reversed(digits)))


class UniformTokenGenerator(_EntropyMixin, ITokenGenerator):
    """Draws one unbiased base62 character per rejection-sampled byte."""

    def generate(self, length: int) -> AccessToken:
        _validate_length(length)

        chars: List[str] = []
        while len(chars) < length:
            for byte in self._read_entropy(length - len(chars)):
                if byte < UNIFORM_REJECTION_THRESHOLD:
                    chars.append(BASE62_ALPHABET[byte % _BASE])
        return AccessToken("".join(chars))


_STRATEGIES = {
    "legacy": LegacyTokenGenerator,
    "uniform": UniformTokenGenerator,
}


def create_token_generator(
    strategy: str = "legacy", entropy_source: Optional[EntropySource] = None
) -> ITokenGenerator:
    """Builds the generator for a configured strategy name.

    Args:
        strategy: "legacy" or "uniform".
        entropy_source: Optional replacement for `secrets.token_bytes`.

    Raises:
        ConfigurationError: If the strategy is unknown.
    """
    try:
        generator_cls = _STRATEGIES[strategy]
    except KeyError:
        raise ConfigurationError(f"Unknown token generator strategy: {strategy!r}") from None
    return generator_cls(entropy_source)
