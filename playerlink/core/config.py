"""Player link configuration loaded from environment variables.

Uses pydantic-settings for validation and .env file support. The database
host may embed a port ("db.example.com:3307"); an unparseable embedded port
falls back to the MySQL default.
"""

import logging
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL

logger = logging.getLogger(__name__)

# Known insecure default password that must not be used in production
_INSECURE_DEFAULT_PASSWORD = "playerlink_dev_password"  # nosec B105

DEFAULT_DATABASE_PORT = 3306

# Storage column width for link codes (VARCHAR(16))
_MIN_LINK_CODE_LENGTH = 4
_MAX_LINK_CODE_LENGTH = 16


class Settings(BaseSettings):
    """Player link settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_driver: str = "mysql+aiomysql"
    database_host: str = "localhost"
    database_port: int = DEFAULT_DATABASE_PORT
    database_name: str = "playerlink"
    database_user: str = "playerlink"
    database_password: str = _INSECURE_DEFAULT_PASSWORD
    database_echo: bool = False

    # Link requests
    link_request_timeout_seconds: int = 300
    cleanup_interval_seconds: int = 180
    link_code_length: int = 6

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("link_code_length")
    @classmethod
    def check_link_code_length(cls, value: int) -> int:
        """Link codes must fit the VARCHAR(16) column and stay guessable-resistant."""
        if not _MIN_LINK_CODE_LENGTH <= value <= _MAX_LINK_CODE_LENGTH:
            msg = (
                f"LINK_CODE_LENGTH must be between {_MIN_LINK_CODE_LENGTH} and "
                f"{_MAX_LINK_CODE_LENGTH}. Got: {value}"
            )
            raise ValueError(msg)
        return value

    @field_validator("link_request_timeout_seconds", "cleanup_interval_seconds")
    @classmethod
    def check_positive_seconds(cls, value: int) -> int:
        if value <= 0:
            msg = f"Interval must be positive. Got: {value}"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Refuse the known insecure default password in production."""
        if (
            self.environment == "production"
            and self.database_password == _INSECURE_DEFAULT_PASSWORD
        ):
            msg = (
                "Cannot use default database password in production. "
                "Set DATABASE_PASSWORD environment variable to a secure value."
            )
            raise ValueError(msg)
        return self

    def resolve_host_port(self) -> tuple[str, int]:
        """Split an embedded port out of database_host.

        Returns:
            (host, port). The embedded port wins over database_port; an
            embedded port that is not a number falls back to the default port.
        """
        if ":" not in self.database_host:
            return self.database_host, self.database_port

        host, _, raw_port = self.database_host.partition(":")
        try:
            port = int(raw_port)
        except ValueError:
            logger.info(
                "%s is not a valid port! Will use the default port", raw_port
            )
            port = DEFAULT_DATABASE_PORT
        return host, port

    @property
    def database_url(self) -> URL:
        """Async database URL for SQLAlchemy."""
        host, port = self.resolve_host_port()
        return URL.create(
            self.database_driver,
            username=self.database_user,
            password=self.database_password,
            host=host,
            port=port,
            database=self.database_name,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()
