"""Main application settings and configuration management.

This module composes all the settings from the different modules (app,
database, tokens) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the package.

Environment Support:
- Development: Uses .env, missing database credentials only warn
- Test: Uses .env.test, missing database credentials only warn
- Staging: Uses .env.staging, database credentials required
- Production: Uses .env.production, database credentials required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from lkp.core.exceptions import ConfigurationError

from .app import AppSettings
from .database import DatabaseSettings
from .tokens import TokenSettings

logger = logging.getLogger(__name__)

ENV_FILES = {
    "development": ".env",
    "test": ".env.test",
    "staging": ".env.staging",
    "production": ".env.production",
}


class Settings(AppSettings, DatabaseSettings, TokenSettings):
    """The main settings class that aggregates all configurations.

    Usage:
        - Access settings via the singleton instance `settings`.
        - Build isolated instances with `Settings(...)` in tests.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def validate_required_fields(self) -> None:
        """Validates that the database credentials are configured.

        Raises:
            ConfigurationError: If required fields are missing outside
                development and test environments.
        """
        missing_fields = []
        if not self.DATABASE_URL.startswith("sqlite"):
            if not self.POSTGRES_PASSWORD.get_secret_value():
                missing_fields.append("POSTGRES_PASSWORD")
            for field in ("POSTGRES_HOST", "POSTGRES_DB", "POSTGRES_USER"):
                if not getattr(self, field, None):
                    missing_fields.append(field)

        if not missing_fields:
            logger.info("All required settings are set.")
            return

        error_msg = f"Missing required settings: {', '.join(missing_fields)}"
        if self.APP_ENV in ("development", "test"):
            logger.warning(f"{self.APP_ENV} environment: {error_msg}")
        else:
            logger.error(error_msg)
            raise ConfigurationError(error_msg)


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")
    env_file = ENV_FILES.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
    else:
        logger.info(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


# Singleton used across the package.
settings = create_settings()
