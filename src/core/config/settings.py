"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, database, redis, auth, oauth) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, relaxed cookie attributes for plain-http frontends
- Test: Uses .env.test
- Staging: Uses .env.staging
- Production: Uses .env.production, Secure + SameSite=Strict refresh cookie
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .oauth import OAuthSettings
from .redis import RedisSettings

logger = logging.getLogger(__name__)


class Settings(AppSettings, DatabaseSettings, RedisSettings, AuthSettings, OAuthSettings):
    """The main settings class that aggregates all application configurations.

    Usage:
        - Access settings via the singleton instance `settings` at process
          start. Request-handling code receives the values it needs through
          dependency injection instead of reading this object directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Explicitly configured values always win over these defaults.

        Args:
            env: Environment name
        """
        explicit = self.model_fields_set
        if env in ("development", "test"):
            if "REFRESH_COOKIE_SECURE" not in explicit:
                self.REFRESH_COOKIE_SECURE = False
            if "REFRESH_COOKIE_SAMESITE" not in explicit:
                self.REFRESH_COOKIE_SAMESITE = "lax"

        if env == "development" and "DEBUG" not in explicit:
            self.DEBUG = True

        logger.info(f"Application running in {env} environment")

    def validate_required_fields(self) -> None:
        """Validates that all required environment variables are set.

        Raises:
            ValueError: If required fields are missing outside development/test.
        """
        required_fields = ["PROJECT_NAME", "DATABASE_URL", "REDIS_URL", "JWT_PUBLIC_KEY"]

        missing_fields = [field for field in required_fields if not getattr(self, field, None)]
        if missing_fields:
            error_msg = f"Missing required environment variables: {', '.join(missing_fields)}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        if self.APP_ENV in ("staging", "production"):
            if not self.REDIS_PASSWORD.get_secret_value():
                raise ValueError(f"REDIS_PASSWORD must be set in {self.APP_ENV} environment")
            if not self.REFRESH_COOKIE_SECURE:
                raise ValueError(f"REFRESH_COOKIE_SECURE must be enabled in {self.APP_ENV}")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }

    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        settings_instance = Settings(_env_file=env_file)
    elif Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
        settings_instance = Settings()
    else:
        logger.warning(f"No .env file found, using environment variables only (environment: {env})")
        settings_instance = Settings()

    return settings_instance


# Create a singleton instance of the settings to be used across the application.
settings = create_settings()
settings.validate_required_fields()
