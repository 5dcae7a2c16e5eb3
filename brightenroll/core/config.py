from pydantic_settings import BaseSettings
from pydantic import validator


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "BrightEnroll Sync Service"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Database settings (local offline store and cloud store share one schema)
    LOCAL_DATABASE_URL: str = "sqlite+aiosqlite:///./brightenroll_local.db"
    CLOUD_DATABASE_URL: str = "sqlite+aiosqlite:///./brightenroll_cloud.db"
    DATABASE_ECHO: bool = False

    # Connectivity monitor
    CONNECTIVITY_PROBE_URL: str = "https://www.google.com/generate_204"
    CONNECTIVITY_TIMEOUT_SECONDS: float = 5.0
    CONNECTIVITY_POLL_INTERVAL_SECONDS: int = 30

    # Sync settings
    AUTO_SYNC_ENABLED: bool = True
    AUTO_SYNC_INTERVAL_MINUTES: int = 5
    INCREMENTAL_SYNC_DEFAULT_DAYS: int = 7
    SYNC_STATUS_MAX_ERRORS: int = 10

    @validator("LOCAL_DATABASE_URL", "CLOUD_DATABASE_URL")
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("database URL is required")
        return v

    @validator(
        "CONNECTIVITY_POLL_INTERVAL_SECONDS",
        "AUTO_SYNC_INTERVAL_MINUTES",
        "INCREMENTAL_SYNC_DEFAULT_DAYS",
        "SYNC_STATUS_MAX_ERRORS",
    )
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @validator("LOG_LEVEL")
    def normalize_log_level(cls, v):
        return v.upper()

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
