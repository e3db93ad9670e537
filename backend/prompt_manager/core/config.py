"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class StorageBackendKind(str, Enum):
    """Where the forest lives. Chosen once, when the app is composed."""
    MEMORY = "memory"
    JSON = "json"
    SQL = "sql"
    REMOTE = "remote"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common mistakes like wildcard CORS or a remote backend without a URL.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Storage backend selection
    storage_backend: StorageBackendKind = Field(
        default=StorageBackendKind.MEMORY,
        description="memory (volatile), json (file), sql (database) or remote (HTTP)"
    )
    data_file: str = Field(
        default="./prompt_manager_data.json",
        description="JSON document holding the forest (json backend)"
    )

    # Database Configuration (sql backend)
    database_url: str = Field(
        default="sqlite:///./prompt_manager.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled (prevents stale connections)"
    )

    # Remote backend
    remote_api_url: str = Field(
        default="",
        description="Base URL of another prompt manager service (remote backend)"
    )
    remote_api_token: str = Field(
        default="",
        description="Optional Bearer token sent to the remote service"
    )
    remote_api_timeout: float = Field(
        default=30.0,
        description="Request timeout in seconds for the remote service"
    )
    remote_max_retries: int = Field(
        default=3,
        description="Attempts per request on connection errors and 5xx responses"
    )

    # First-run sample data
    seed_sample_data: bool = Field(
        default=True,
        description="Add a few sample prompts when the store starts empty"
    )

    # Rate Limiting
    # RATE_LIMIT_PER_MINUTE: max requests per client per minute (0 = unlimited).
    rate_limit_per_minute: int = Field(
        default=300,
        description="Maximum requests per client per minute"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    def validate_backend_config(self) -> None:
        """Check that the selected storage backend has what it needs.

        Raises:
            ConfigurationError: If the backend cannot be built from these settings.
        """
        if self.storage_backend == StorageBackendKind.REMOTE and not self.remote_api_url:
            raise ConfigurationError(
                "STORAGE_BACKEND=remote requires REMOTE_API_URL "
                "(e.g. http://localhost:8000)"
            )
        if self.storage_backend == StorageBackendKind.JSON and not self.data_file:
            raise ConfigurationError("STORAGE_BACKEND=json requires DATA_FILE")
        if self.storage_backend == StorageBackendKind.SQL and not self.database_url:
            raise ConfigurationError("STORAGE_BACKEND=sql requires DATABASE_URL")

        if self.environment == Environment.PRODUCTION and self.storage_backend == StorageBackendKind.MEMORY:
            raise ConfigurationError(
                "STORAGE_BACKEND=memory loses all data on restart. "
                "Choose json, sql or remote for production."
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow reading from environment variables with different case
        case_sensitive = False


# Global settings instance
settings = Settings()
