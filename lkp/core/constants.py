"""Fixed constants for token issuance and key composition.

These values are part of the on-disk and on-the-wire format of issued keys
and are intentionally not exposed as runtime settings.
"""

import string
from typing import Final

KEY_PREFIX: Final = "lkp"
KEY_SEPARATOR: Final = "-"

TOKEN_LENGTH: Final = 10
BASE62_ALPHABET: Final = string.digits + string.ascii_uppercase + string.ascii_lowercase

# Legacy generator draws a single 48-bit value per token.
LEGACY_ENTROPY_BYTES: Final = 6

# Largest multiple of 62 not above 256; bytes at or above it are redrawn.
UNIFORM_REJECTION_THRESHOLD: Final = 256 - (256 % len(BASE62_ALPHABET))

# Conflict retry defaults, overridable through TokenSettings.
DEFAULT_MAX_ATTEMPTS: Final = 5
DEFAULT_BACKOFF_SECONDS: Final = 0.05
DEFAULT_BACKOFF_MAX_SECONDS: Final = 1.0
