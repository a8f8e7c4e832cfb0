import logging
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "admin_session"
ADMIN_TOKEN_HEADER = "x-admin-token"
MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Storefront Admin API"
    debug: bool = False
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("environment", "node_env"),
    )

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:5173"])

    # Google OAuth
    google_client_id: str = Field(default="")
    google_client_secret: str = Field(default="")
    google_redirect_uri: str = Field(default="")
    oauth_timeout_seconds: float = Field(default=10.0)

    # Admin session
    admin_jwt_secret: str = Field(default="")  # HMAC key for the admin_session cookie
    admin_api_token: str = Field(default="")  # Static token accepted in x-admin-token
    session_ttl_seconds: int = Field(default=7 * 24 * 60 * 60)
    admin_landing_path: str = Field(default="/admin")

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def google_oauth_configured(self) -> bool:
        return bool(
            self.google_client_id and self.google_client_secret and self.google_redirect_uri
        )

    def get_auth_modes(self) -> list[str]:
        modes = []
        if self.google_oauth_configured and self.admin_jwt_secret:
            modes.append("google")
        if self.admin_api_token:
            modes.append("token")
        return modes

    def validate_security(self) -> list[str]:
        warnings = []

        oauth_values = (
            self.google_client_id,
            self.google_client_secret,
            self.google_redirect_uri,
        )
        if any(oauth_values) and not all(oauth_values):
            warnings.append(
                "Google OAuth is partially configured: GOOGLE_CLIENT_ID, "
                "GOOGLE_CLIENT_SECRET and GOOGLE_REDIRECT_URI must be set together."
            )

        if self.google_oauth_configured and not self.admin_jwt_secret:
            warnings.append(
                "ADMIN_JWT_SECRET is not set; Google logins cannot mint admin sessions."
            )
        elif self.admin_jwt_secret and len(self.admin_jwt_secret) < MIN_SECRET_LENGTH:
            warnings.append(
                f"ADMIN_JWT_SECRET is shorter than {MIN_SECRET_LENGTH} characters."
            )

        if self.debug and self.is_production:
            warnings.append("DEBUG is enabled in production; disable it.")

        if not self.get_auth_modes():
            warnings.append(
                "No admin authentication method configured. "
                "Set GOOGLE_* + ADMIN_JWT_SECRET, or ADMIN_API_TOKEN."
            )

        return warnings


@lru_cache
def get_settings() -> Settings:
    return Settings()
