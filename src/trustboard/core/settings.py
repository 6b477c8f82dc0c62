"""Application settings and configuration.

This module defines all configuration options for the Trustboard application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the Trustboard application.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Trustboard", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    port: int = Field(default=5000, alias="PORT")

    # Database configuration
    database_url: str = Field(default="sqlite:///./trustboard.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # AI moderation (Google Gemini). No credential means rule-based only.
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
    )
    moderation_timeout_ms: int = Field(default=5000, ge=1, alias="MODERATION_TIMEOUT_MS")

    # SMTP transport for notification emails
    email_host: str | None = Field(default=None, alias="EMAIL_HOST")
    email_port: int = Field(default=587, alias="EMAIL_PORT")
    email_secure: bool = Field(default=False, alias="EMAIL_SECURE")
    email_user: str | None = Field(default=None, alias="EMAIL_USER")
    email_pass: str | None = Field(default=None, alias="EMAIL_PASS")
    email_from_name: str = Field(default="Trustboard", alias="EMAIL_FROM_NAME")
    email_connection_timeout_seconds: float = Field(
        default=10.0,
        alias="EMAIL_CONNECTION_TIMEOUT_SECONDS",
    )

    # Feedback handling
    feedback_notify_email: str | None = Field(default=None, alias="FEEDBACK_NOTIFY_EMAIL")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def is_test(self) -> bool:
        """Return True when running under the test environment.

        The application bootstrap skips opening real network connections
        (database table creation, SMTP verification) in this mode.
        """
        return self.environment.lower() == "test"

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in test mode, otherwise production)
        """
        if self.is_test and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def moderation_timeout_seconds(self) -> float:
        """Return the AI moderation request timeout in seconds."""
        return self.moderation_timeout_ms / 1000.0

    @property
    def gemini_configured(self) -> bool:
        """Return True if an AI moderation credential is available."""
        return bool(self.gemini_api_key)

    @property
    def email_configured(self) -> bool:
        """Return True if an SMTP host is configured."""
        return bool(self.email_host)


settings = Settings()
