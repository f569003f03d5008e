"""Authentication settings: JWT signing keys and the refresh-token cookie.
"""

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Defines settings for the credentials the service issues after a login.

    Access tokens are RS256 JWTs. Refresh tokens are opaque values stored
    hashed in the database and handed to the browser only through a cookie.
    JWT keys are read from ``private.pem``/``public.pem`` in the working
    directory when present, otherwise from the environment.

    Security Note:
        - Ensure PEM files are readable only by the application user (chmod 600).
        - REFRESH_COOKIE_SECURE must stay enabled outside local development,
          the refresh token is a long lived bearer credential.
    """

    # JWT settings
    JWT_PRIVATE_KEY: SecretStr = SecretStr("")
    JWT_PUBLIC_KEY: str = ""
    JWT_ISSUER: str = "https://api.masterhub.local"
    JWT_AUDIENCE: str = "masterhub:api:v1"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(ge=1, default=15)

    # Refresh token settings
    REFRESH_TOKEN_TTL_SECONDS: int = Field(ge=60, default=1296000)  # 15 days
    REFRESH_COOKIE_NAME: str = "refresh_token"
    REFRESH_COOKIE_PATH: str = "/api/v1/auth/token/refresh"
    REFRESH_COOKIE_DOMAIN: Optional[str] = None
    REFRESH_COOKIE_SECURE: bool = True
    REFRESH_COOKIE_SAMESITE: Literal["strict", "lax", "none"] = "strict"

    @model_validator(mode="after")
    def _load_and_validate_jwt_keys(self) -> "AuthSettings":
        """Loads JWT keys, prioritizing .pem files over environment variables.
        Raises ValueError if keys are not found.

        Returns:
            Self instance with loaded keys.

        """
        self._load_keys_from_pem_files()

        if not self.JWT_PRIVATE_KEY.get_secret_value() or not self.JWT_PUBLIC_KEY:
            error_msg = (
                "JWT keys not found. Please provide JWT_PRIVATE_KEY and JWT_PUBLIC_KEY "
                "either via .env variables or through private.pem/public.pem files."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        if self.REFRESH_COOKIE_SAMESITE == "none" and not self.REFRESH_COOKIE_SECURE:
            raise ValueError("REFRESH_COOKIE_SAMESITE=none requires REFRESH_COOKIE_SECURE=true")

        return self

    def _load_keys_from_pem_files(self) -> None:
        """Loads JWT keys from private.pem and public.pem if they exist.
        These files override any existing environment variables.
        """
        private_key_path = Path("private.pem").resolve()
        public_key_path = Path("public.pem").resolve()

        if private_key_path.is_file():
            private_key = private_key_path.read_text().strip()
            if private_key:
                self.JWT_PRIVATE_KEY = SecretStr(private_key)
                logger.info("Loaded JWT private key from private.pem, overriding env var if set.")

        if public_key_path.is_file():
            public_key = public_key_path.read_text().strip()
            if public_key:
                self.JWT_PUBLIC_KEY = public_key
                logger.info("Loaded JWT public key from public.pem, overriding env var if set.")
