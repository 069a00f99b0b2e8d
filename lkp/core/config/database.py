"""
Database connection settings.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import Field, SecretStr, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL

from lkp.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Keys of the JSON connection file used by earlier deployments.
_JSON_CONFIG_KEYS = {
    "db_host": "POSTGRES_HOST",
    "db_port": "POSTGRES_PORT",
    "db_user": "POSTGRES_USER",
    "db_password": "POSTGRES_PASSWORD",
    "db_name": "POSTGRES_DB",
}


def load_json_database_config(path: str) -> Dict[str, Any]:
    """
    Reads a JSON connection file and maps it onto settings field names.

    The file holds a single object with `db_host`, `db_port`, `db_user`,
    `db_password` and `db_name`; unknown keys are ignored.

    Args:
        path: Location of the JSON file.

    Returns:
        Settings overrides keyed by field name.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Database config file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Database config file is not valid JSON: {path}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Database config file must contain a JSON object: {path}")

    overrides = {field: raw[key] for key, field in _JSON_CONFIG_KEYS.items() if key in raw}
    logger.info("Loaded database settings from %s (%d keys)", path, len(overrides))
    return overrides


class DatabaseSettings(BaseSettings):
    """
    Defines settings for connecting to the PostgreSQL database.

    Security Note:
        - POSTGRES_PASSWORD must be securely stored and never logged or
          committed to version control.
        - POSTGRES_SSL_MODE defaults to 'disable' to match existing
          deployments; use 'verify-full' wherever the database is reached
          over an untrusted network.
    Performance Note:
        - Every get-or-create call opens one short-lived session per store
          operation; POSTGRES_POOL_SIZE rarely needs to exceed a handful.
    """
    DATABASE_CONFIG_FILE: str = ""
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("")
    POSTGRES_DB: str = "lkp"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = Field(ge=1, le=65535, default=5432)
    POSTGRES_SSL_MODE: str = Field(pattern="^(disable|allow|prefer|require|verify-ca|verify-full)$", default="disable")
    POSTGRES_POOL_SIZE: int = Field(ge=1, default=5)
    POSTGRES_MAX_OVERFLOW: int = Field(ge=0, default=10)
    POSTGRES_POOL_TIMEOUT: float = Field(ge=1.0, default=30.0)
    DATABASE_URL: str = Field(default="", validate_default=True)

    @model_validator(mode="before")
    @classmethod
    def apply_json_config_file(cls, data: Any) -> Any:
        """
        Merges the JSON connection file, when configured, over the raw values.
        """
        if isinstance(data, dict) and data.get("DATABASE_CONFIG_FILE"):
            data = {**data, **load_json_database_config(data["DATABASE_CONFIG_FILE"])}
        return data

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_url(cls, v: str | None, info: ValidationInfo) -> str:
        """
        Assembles the database connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or None.
            info: Validation context with other field values.

        Returns:
            Assembled or provided database URL.
        """
        if v:
            return v

        values = info.data
        password = values.get("POSTGRES_PASSWORD")
        if not password or not password.get_secret_value():
            logger.warning("POSTGRES_PASSWORD not set during DATABASE_URL assembly.")

        url = URL.create(
            "postgresql+psycopg2",
            username=values.get("POSTGRES_USER"),
            password=password.get_secret_value() if password else None,
            host=values.get("POSTGRES_HOST"),
            port=values.get("POSTGRES_PORT"),
            database=values.get("POSTGRES_DB"),
        )
        logger.debug("Assembled DATABASE_URL (password masked for security).")
        return url.render_as_string(hide_password=False)
