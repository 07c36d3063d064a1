"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./hydraulic_scenarios.db"

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Editor
    map_sync_threshold: int = 500


settings = Settings()
