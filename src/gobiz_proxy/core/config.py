"""Configuration management for the GoBiz proxy."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Server configuration
    HOST: str = Field(default="127.0.0.1", description="Server host")
    PORT: int = Field(default=3000, description="Server port")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Logging format: json or text")

    # Upstream merchant API
    UPSTREAM_BASE: str = Field(
        default="https://api.gobiz.co.id",
        description="Base URL of the upstream merchant API"
    )
    UPSTREAM_TIMEOUT_MS: int = Field(
        default=30000, ge=1, description="Upstream request timeout in milliseconds"
    )

    # Security settings
    ALLOWED_HOSTS: list[str] = Field(default_factory=lambda: ["*"], description="Allowed hosts for TrustedHostMiddleware")
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"], description="CORS allowed origins")
    TRUST_PROXY_HOPS: int = Field(default=1, ge=0, description="Number of trusted reverse proxies in front of the app")
    MAX_BODY_BYTES: int = Field(default=300 * 1024, ge=1, description="Maximum accepted request body size")

    # Rate limiting configuration
    ENABLE_RATE_LIMITING: bool = Field(default=True, description="Enable rate limiting")
    RATE_LIMIT_PER_MIN: int = Field(default=60, ge=1, le=100000, description="Requests allowed per client per window")
    RATE_LIMIT_WINDOW: int = Field(default=60, ge=1, le=3600, description="Rate limit window in seconds")

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('LOG_FORMAT')
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format"""
        valid_formats = ['json', 'text']
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}")
        return v.lower()

    @field_validator('UPSTREAM_BASE')
    @classmethod
    def strip_trailing_slash(cls, v):
        """Endpoints are appended verbatim, so the base must not end with '/'"""
        return v.rstrip('/')

    @property
    def upstream_timeout(self) -> float:
        """Upstream timeout in seconds, as httpx expects it."""
        return self.UPSTREAM_TIMEOUT_MS / 1000.0

    @property
    def allowed_hosts(self) -> list[str]:
        """Get allowed hosts for TrustedHostMiddleware."""
        return self.ALLOWED_HOSTS

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS allowed origins."""
        return self.CORS_ORIGINS


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings (for dependency injection)"""
    return settings
