"""Application configuration loaded from environment variables.

Settings for the central database, per-user stores, token signing, cookies,
email delivery and rate limiting. Uses pydantic-settings for validation and
.env file support.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Minimum length for JWT signing secrets (256 bits = 32 bytes)
MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False

    # Central database (identities, one-time codes, sessions)
    database_url: str = "sqlite+aiosqlite:///./data/auth.db"

    # Per-user SQLite stores live in this directory as <user_id>.db
    database_dir: str = "./data/users"
    # Upper bound for materializing a new per-user store, in seconds
    user_store_create_timeout: float = 30.0

    # Token signing. Access and refresh tokens use independent secrets.
    jwt_secret: SecretStr = SecretStr("")
    jwt_refresh_secret: SecretStr = SecretStr("")
    jwt_issuer: str = "time-report"
    jwt_audience: str = "time-report"

    # Cookies. None derives the Secure flag from the environment.
    access_cookie_name: str = "access_token"
    refresh_cookie_name: str = "refresh_token"
    auth_cookie_secure: bool | None = None
    auth_cookie_samesite: Literal["lax", "strict", "none"] = "strict"

    # CORS
    # CRITICAL: Never set to ["*"] when allow_credentials=True
    allowed_origins: list[str] = ["http://localhost:5173"]
    frontend_url: str = "http://localhost:5173"

    # Email delivery via Resend. Without a key, non-production environments
    # print login codes to the log instead.
    email_from: str = "noreply@example.com"
    resend_api_key: SecretStr = SecretStr("")

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_request_otp: str = "5/minute"
    rate_limit_verify_otp: str = "10/minute"

    @property
    def is_production(self) -> bool:
        """Whether the app runs in the production environment."""
        return self.environment == "production"

    @property
    def cookie_secure(self) -> bool:
        """Effective Secure flag for auth cookies."""
        if self.auth_cookie_secure is None:
            return self.is_production
        return self.auth_cookie_secure

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate security requirements.

        Checks:
        - CORS must not use wildcard origin (incompatible with credentials)
        - SameSite=None requires Secure flag (browser requirement)
        - In production, both JWT secrets must be set, >= 32 chars, and distinct
        """
        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "This application uses credentials (cookies) which are "
                "incompatible with wildcard CORS origins."
            )
            raise ValueError(msg)

        if self.auth_cookie_samesite == "none" and not self.cookie_secure:
            msg = (
                "AUTH_COOKIE_SECURE must be true when AUTH_COOKIE_SAMESITE=none. "
                "Browsers reject SameSite=None cookies without the Secure flag."
            )
            raise ValueError(msg)

        if self.is_production:
            access = self.jwt_secret.get_secret_value()
            refresh = self.jwt_refresh_secret.get_secret_value()
            for name, value in (
                ("JWT_SECRET", access),
                ("JWT_REFRESH_SECRET", refresh),
            ):
                if len(value) < MIN_JWT_SECRET_LENGTH:
                    msg = (
                        f"{name} must be at least {MIN_JWT_SECRET_LENGTH} "
                        "characters in production. Generate with: "
                        'python -c "import secrets; print(secrets.token_hex(32))"'
                    )
                    raise ValueError(msg)
            if access == refresh:
                msg = "JWT_SECRET and JWT_REFRESH_SECRET must be different."
                raise ValueError(msg)

        return self


settings = Settings()
