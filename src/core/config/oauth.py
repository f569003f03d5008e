"""External identity provider settings.
"""

from urllib.parse import urlparse

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class OAuthSettings(BaseSettings):
    """Client registrations and endpoints of the supported identity providers.

    A provider whose client id is empty is treated as not configured and its
    routes answer 404. Endpoint URLs are overridable so that staging can point
    at provider sandboxes.
    """

    FRONTEND_URL: str = "http://localhost:3000"
    # Domain of the synthetic email given to accounts whose provider asserts none.
    # Derived from FRONTEND_URL when empty.
    APP_DOMAIN: str = ""

    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: SecretStr = SecretStr("")
    GOOGLE_REDIRECT_URI: str = ""
    GOOGLE_AUTHORIZE_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_CERTS_URL: str = "https://www.googleapis.com/oauth2/v3/certs"
    GOOGLE_PEOPLE_URL: str = "https://people.googleapis.com/v1/people/me"

    FACEBOOK_CLIENT_ID: str = ""
    FACEBOOK_CLIENT_SECRET: SecretStr = SecretStr("")
    FACEBOOK_REDIRECT_URI: str = ""
    FACEBOOK_AUTHORIZE_URL: str = "https://www.facebook.com/v19.0/dialog/oauth"
    FACEBOOK_TOKEN_URL: str = "https://graph.facebook.com/v19.0/oauth/access_token"
    FACEBOOK_PROFILE_URL: str = "https://graph.facebook.com/v19.0/me"

    INSTAGRAM_CLIENT_ID: str = ""
    INSTAGRAM_CLIENT_SECRET: SecretStr = SecretStr("")
    INSTAGRAM_REDIRECT_URI: str = ""
    INSTAGRAM_AUTHORIZE_URL: str = "https://www.instagram.com/oauth/authorize"
    INSTAGRAM_TOKEN_URL: str = "https://api.instagram.com/oauth/access_token"
    INSTAGRAM_PROFILE_URL: str = "https://graph.instagram.com/me"

    TELEGRAM_BOT_TOKEN: SecretStr = SecretStr("")
    TELEGRAM_API_URL: str = "https://api.telegram.org"

    PROVIDER_HTTP_TIMEOUT: float = 10.0

    @property
    def synthetic_email_domain(self) -> str:
        """Domain used for placeholder addresses, without scheme or port."""
        if self.APP_DOMAIN:
            return self.APP_DOMAIN
        return urlparse(self.FRONTEND_URL).hostname or "localhost"
