"""Process initialization.

Configures logging and validates settings before any command touches the
database. Environment files are read by pydantic-settings when the settings
singleton is created.
"""

from lkp.core.config.settings import settings
from lkp.core.logging import configure_logging


def initialize_application() -> None:
    """Initialize the process with all necessary setup tasks.

    Raises:
        ConfigurationError: If required settings are missing outside
            development and test environments.
    """
    configure_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    settings.validate_required_fields()
