"""Application settings and configuration management."""
from decimal import Decimal
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Hosted backend (auth + REST store) configuration."""

    url: str = "http://localhost:54321"
    anon_key: str = "test-anon-key-default"  # Default for testing, should be overridden in production
    request_timeout: int = 30
    max_attempts: int = 1  # 1 = no automatic retry, the user retries manually
    retry_backoff_base: int = 2

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    @property
    def rest_url(self) -> str:
        """PostgREST base URL."""
        return f"{self.url.rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        """GoTrue base URL."""
        return f"{self.url.rstrip('/')}/auth/v1"

    @property
    def storage_url(self) -> str:
        """Storage base URL (public object links)."""
        return f"{self.url.rstrip('/')}/storage/v1"


class StorageSettings(BaseSettings):
    """S3-compatible object storage for owner branding assets."""

    region: str = "ap-south-1"
    endpoint_url: str = ""  # Empty uses <SUPABASE_URL>/storage/v1/s3
    logo_bucket: str = "business-logos"
    max_logo_bytes: int = 5 * 1024 * 1024

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class RedisSettings(BaseSettings):
    """Redis configuration for owner session caching."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    decode_responses: bool = True
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    session_key: str = "backoffice:owner:session"
    session_expiry_buffer: int = 60  # Seconds shaved off the token lifetime

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class FinanceSettings(BaseSettings):
    """Reporting constants used by the finance and dashboard reports."""

    commission_rate: Decimal = Decimal("0.10")
    pending_payout_share: Decimal = Decimal("0.4")
    room_revenue_share: Decimal = Decimal("0.75")
    food_beverage_share: Decimal = Decimal("0.15")
    extras_share: Decimal = Decimal("0.10")
    occupancy_period_days: int = 30
    growth_window_days: int = 30
    currency: str = "INR"
    locale: str = "en_IN"

    model_config = SettingsConfigDict(env_prefix="FINANCE_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Used by the command-line entry point when no cached session exists
    owner_email: str = ""
    owner_password: str = ""

    # Sub-settings
    supabase: SupabaseSettings = SupabaseSettings()
    storage: StorageSettings = StorageSettings()
    redis: RedisSettings = RedisSettings()
    finance: FinanceSettings = FinanceSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def storage_endpoint_url(self) -> str:
        """S3 endpoint, falling back to the project's storage gateway."""
        return self.storage.endpoint_url or f"{self.supabase.storage_url}/s3"


# Global settings instance
settings = Settings()
