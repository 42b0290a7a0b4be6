"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Managed Postgres backend reached through its PostgREST interface."""

    url: str = "http://localhost:54321"
    api_key: str = "test-anon-key-default"  # Default for testing, should be overridden in production
    schema_name: str = "public"
    request_timeout: int = 30
    max_retries: int = 3

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")


class DatabaseSettings(BaseSettings):
    """Direct PostgreSQL connection (used by the postgres store backend)."""

    url: str = ""  # Full DSN (DB_URL); takes precedence over the individual fields
    host: str = "localhost"
    port: int = 5432
    name: str = "hotel_pms"
    user: str = "postgres"
    password: str = ""

    model_config = SettingsConfigDict(env_prefix="DB_")

    def dsn(self) -> str:
        """Connection string for psycopg2."""
        if self.url:
            return self.url
        return (
            f"host={self.host} port={self.port} dbname={self.name} "
            f"user={self.user} password={self.password}"
        )


class RedisSettings(BaseSettings):
    """Redis configuration for the read-through query cache."""

    enabled: bool = False
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    cache_ttl: int = 60  # Seconds a cached read stays valid
    key_prefix: str = "pms"

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class BookingSettings(BaseSettings):
    """Reservation creation settings."""

    confirmation_prefix: str = "RES"
    confirmation_suffix_length: int = 6
    confirmation_max_attempts: int = 5
    default_currency: str = "EUR"

    model_config = SettingsConfigDict(env_prefix="BOOKING_")


class AnalyticsSettings(BaseSettings):
    """Dashboard analytics settings.

    The uplift factors drive the placeholder "future sales" figures; they are
    not a forecast.
    """

    future_bookings_uplift: float = 1.15
    future_revenue_uplift: float = 1.08
    future_adr_uplift: float = 1.05
    booking_window_days: int = 45

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    store_backend: Literal["supabase", "postgres"] = "supabase"

    # Sub-settings
    supabase: SupabaseSettings = SupabaseSettings()
    database: DatabaseSettings = DatabaseSettings()
    redis: RedisSettings = RedisSettings()
    booking: BookingSettings = BookingSettings()
    analytics: AnalyticsSettings = AnalyticsSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_backend(self) -> list[str]:
        """Validate required vars for the selected store backend. Returns list of missing var names."""
        missing = []
        if self.store_backend == "supabase":
            if not self.supabase.url.strip():
                missing.append("SUPABASE_URL")
            if not self.supabase.api_key.strip():
                missing.append("SUPABASE_API_KEY")
        elif not (self.database.url or self.database.name):
            missing.append("DB_URL")
        return missing


# Global settings instance
settings = Settings()
