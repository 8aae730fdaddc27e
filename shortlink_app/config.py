from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Application
    app_name: str = "Expiring URL Shortener"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Database
    database_url: str = "sqlite:///./url_shortener.db"
    store_backend: str = "sqlalchemy"  # Options: "sqlalchemy", "memory"

    # URL Shortener specific
    base_url: str = "http://127.0.0.1:8000"
    short_id_length: int = 6

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 86400  # Default cache TTL in seconds (24 hours)

    # Expiry sweeper
    sweeper_enabled: bool = True
    sweeper_interval_seconds: int = 3600  # Aligned to wall clock, hourly by default

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
