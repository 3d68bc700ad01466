"""Service configuration, read from the environment (and ``.env``)."""

from enum import Enum
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMATS = ("json", "text")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Settings that are valid on their own but unsafe for the environment."""


class Settings(BaseSettings):
    """
    Settings for the document history service.

    Field validation rejects values that are wrong anywhere (a negative
    coalescing window, an unknown log level). ``validate_production_config``
    adds the checks that only matter once deployed.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="development or production"
    )

    # Storage
    database_url: str = Field(
        default="sqlite:///./dochistory.db",
        description="SQLAlchemy URL; SQLite for development, PostgreSQL in production"
    )
    db_pool_size: int = Field(default=5, ge=1, description="PostgreSQL persistent connections")
    db_max_overflow: int = Field(default=10, ge=0, description="PostgreSQL burst connections")
    db_pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a pooled connection")
    db_pool_recycle: int = Field(default=1800, description="Seconds before a pooled connection is replaced")

    # History
    history_min_interval_ms: int = Field(
        default=10_000,
        description="Saves closer than this to the latest history entry are merged into it"
    )
    history_timezone: str = Field(
        default="America/Toronto",
        description="IANA zone the history timeline groups entries by"
    )

    # HTTP
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated origins allowed to call the API from a browser"
    )

    # Logging
    log_level: str = Field(default="INFO", description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL")
    log_format: str = Field(default="json", description="json or text")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_cors_origins(self) -> List[str]:
        """Parsed CORS origins. A wildcard is refused: the API serves student work."""
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]
        if "*" in origins:
            raise ValueError("Wildcard CORS (*) is not allowed; list origins in CORS_ALLOWED_ORIGINS")
        return origins

    @field_validator("history_min_interval_ms")
    @classmethod
    def validate_history_interval(cls, v: int) -> int:
        if v < 0:
            raise ValueError("HISTORY_MIN_INTERVAL_MS must be >= 0")
        return v

    @field_validator("history_timezone")
    @classmethod
    def validate_history_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"HISTORY_TIMEZONE is not a known IANA zone: {v!r}") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {', '.join(_LOG_FORMATS)}")
        return fmt

    def validate_production_config(self) -> None:
        """Refuse to start a production deployment on development resources.

        Raises:
            ConfigurationError: Listing every problem found.
        """
        if self.environment != Environment.PRODUCTION:
            return

        problems = []
        if self.is_sqlite:
            problems.append("DATABASE_URL points at SQLite; history needs PostgreSQL in production")

        local = [o for o in self.get_cors_origins() if "localhost" in o or "127.0.0.1" in o]
        if local:
            problems.append(f"CORS_ALLOWED_ORIGINS includes local origins: {local}")

        if problems:
            raise ConfigurationError("Invalid production configuration:\n  - " + "\n  - ".join(problems))


settings = Settings()
