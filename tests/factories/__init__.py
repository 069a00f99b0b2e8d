from __future__ import annotations

"""Re-export factory functions for generating fake test data."""

# flake8: noqa: F401 – re-export

from .token import (
    SequenceTokenGenerator,
    create_fake_service_name,
    create_fake_token,
    create_fake_user_name,
)

__all__ = [
    "SequenceTokenGenerator",
    "create_fake_service_name",
    "create_fake_token",
    "create_fake_user_name",
]
