"""Global app configuration."""

from functools import lru_cache
from typing import Any, Optional
from urllib.parse import quote_plus

from pydantic import PostgresDsn, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global app settings."""

    # Connection parameters for the Redshift warehouse that holds the
    # analytical tables, the portal users and the page connections.
    db_host: str  # e.g. "my-cluster.abc123.eu-west-2.redshift.amazonaws.com"
    db_port: int = 5439
    db_user: str
    db_password: str
    db_name: Optional[str] = None  # e.g. "analytics" or empty for the user's default db
    ssl_required: bool = True  # TLS without certificate verification

    # Timeouts, in seconds
    db_connect_timeout: float = 10.0
    db_query_timeout: float = 30.0  # Data explorer statements
    submission_query_timeout: float = 15.0  # Page connection statements

    # Email settings
    sendgrid_api_key: Optional[str] = None  # An API key with which to send emails
    sendgrid_sender_email: Optional[str] = None  # Defaults to notification_email
    sendgrid_data_residency: Optional[str] = None  # e.g. "eu"
    notification_email: Optional[str] = None  # Operator who hears about new connections

    # Org name, for emails
    organisation: str = "Artemis AI"

    # See validate_log_level()
    log_level: str = "WARNING"

    # To copy log messages to a central app insights
    central_logging_connection_string: Optional[str] = None

    # Whether we are running unit tests
    testing: bool = False  # A True value stops any email from being sent

    # warehouse_dsn is calculated so do not provide it explicitly
    warehouse_dsn: Optional[PostgresDsn] = None

    # Settings for the settings class itself.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Note that mode="before" means that we get (and return)
    # a dict and not a Settings object.
    @model_validator(mode="before")
    def validate_warehouse_dsn(  # type: ignore
        self: dict[str, Any],
    ) -> dict[str, Any]:
        """Build a DSN string from the host, db name, port, username and password."""
        # We want to build the Data Source Name ourselves so none should be provided
        if self.get("warehouse_dsn") is not None:
            raise ValueError("warehouse_dsn should not be provided")

        # Missing fields are reported by field validation
        if not all(self.get(key) for key in ("db_user", "db_password", "db_host")):
            return self

        self["warehouse_dsn"] = (
            f'postgresql+asyncpg://{self["db_user"]}:{quote_plus(str(self["db_password"]))}'
            f'@{self["db_host"]}:{self.get("db_port", 5439)}/{self.get("db_name") or ""}'
        )

        return self

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, log_level: str) -> str:
        """Check that the log level has a valid value."""
        # See https://docs.python.org/3/library/logging.html#logging-levels
        allowed_levels = (
            "CRITICAL",
            "FATAL",
            "ERROR",
            "WARNING",
            "WARN",
            "INFO",
            "DEBUG",
            "NOTSET",
        )
        if log_level not in allowed_levels:
            raise ValueError(f"{log_level} not in {allowed_levels}")
        return log_level

    @property
    def sender_email(self) -> Optional[str]:
        """The "from:" address for notification emails."""
        return self.sendgrid_sender_email or self.notification_email


@lru_cache()
def get_settings() -> Settings:
    """Cache Settings as they should not change after startup."""
    return Settings()
