"""
Centralized configuration management.

All service configuration is loaded and validated here. The chart engine
itself reads no settings; these only govern the HTTP layer.
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Application settings with validation."""

    # Request size
    max_records_per_request: int = Field(default=50000, ge=1, le=1000000, description="Maximum event records per chart request")

    # Rate limiting
    rate_limit_per_minute: int = Field(default=100, ge=1, le=10000, description="Rate limit per minute per IP")
    rate_limit_enabled: bool = Field(default=True, description="Whether rate limiting is applied")

    # Request timeout
    request_timeout_seconds: int = Field(default=30, ge=1, le=3600, description="Request timeout in seconds")

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Comma-separated list of allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def rate_limit(self) -> str:
        """Rate limit in slowapi notation."""
        return f"{self.rate_limit_per_minute}/minute"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            max_records_per_request=int(os.getenv("MAX_RECORDS_PER_REQUEST", "50000")),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "100")),
            rate_limit_enabled=_env_flag("RATE_LIMIT_ENABLED", "true"),
            request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT_SECONDS", "30")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:3001"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
