"""
Application-specific settings.
"""
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and logging.

    Security Note:
        - Keep DEBUG disabled in production; SQL echo would print bound
          parameters, including issued tokens, to the log stream.
    """
    PROJECT_NAME: str = "lkp"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
