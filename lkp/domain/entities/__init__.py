"""Domain entities."""

from .registration import REGISTRATION_MODELS, ServiceTokenRegistration, UserTokenRegistration

__all__ = ["REGISTRATION_MODELS", "ServiceTokenRegistration", "UserTokenRegistration"]
