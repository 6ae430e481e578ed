"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here; no scattered magic strings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_write: Rate limit for endpoints that move money or change state.
        rate_limit_enabled: Turn slowapi limiting on or off.
        database_url: SQLAlchemy URL of the back-office database.
        database_echo: Log every SQL statement.
        db_pool_size: Connection pool size (non-SQLite only).
        db_max_overflow: Extra pooled connections (non-SQLite only).
        notification_webhook_urls: Comma-separated webhook URLs for notifications.
        notification_timeout_seconds: HTTP timeout for each webhook call.
        audit_log_enabled: Write audit entries after committed changes.
        user_header: Header carrying the authenticated user id.
        admin_header: Header carrying the authenticated admin id.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Copytrade Back-Office"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_write: str = "20/minute"
    rate_limit_enabled: bool = True

    database_url: str = "sqlite:///./copytrade.db"
    database_echo: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 20

    notification_webhook_urls: str = ""
    notification_timeout_seconds: float = 5.0
    audit_log_enabled: bool = True

    # Identity is resolved by the upstream auth gateway and forwarded as headers
    user_header: str = "X-User-Id"
    admin_header: str = "X-Admin-Id"

    def get_webhook_urls(self) -> list[str]:
        """Return the configured webhook URLs as a list."""
        return [u.strip() for u in self.notification_webhook_urls.split(",") if u.strip()]


settings = Settings()
