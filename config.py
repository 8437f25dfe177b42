"""Configuration management for the QR scan tracker."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration."""

    # Database settings
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection URL; the in-memory store is used when unset"
    )

    database_create_tables: str = Field(
        default="0",
        description="Set to '1' to create the qr_codes and scans tables on startup"
    )

    # Redis settings (optional)
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for caching geolocation results"
    )

    # Geolocation settings
    ipstack_api_key: Optional[str] = Field(
        default=None,
        description="ipstack access key; geo enrichment is disabled without it"
    )

    geo_api_base_url: str = Field(
        default="http://api.ipstack.com",
        description="Geolocation provider base URL"
    )

    geo_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Maximum time to wait for one geolocation call"
    )

    geo_cache_ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="How long geolocation results stay cached"
    )

    # Redirect settings
    scan_write_policy: str = Field(
        default="fail_closed",
        description="'fail_closed' refuses to redirect when a scan cannot be stored; 'fail_open' redirects anyway"
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=9200,
        description="Port to listen on"
    )

    workers: int = Field(
        default=1,
        ge=1,
        description="Number of uvicorn worker processes"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("scan_write_policy")
    @classmethod
    def validate_scan_write_policy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("fail_closed", "fail_open"):
            raise ValueError("scan_write_policy must be 'fail_closed' or 'fail_open'")
        return v

    def safe_dump(self) -> dict:
        """Settings with secrets masked, for logging."""
        data = self.model_dump()
        if data.get("ipstack_api_key"):
            data["ipstack_api_key"] = "***"
        return data


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
