from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "rolekeeper"

    # Database
    database_url: str = "sqlite:///./rolekeeper.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False

    # Catalog seeding
    seed_on_startup: bool = True
    catalog_path: Optional[str] = None  # YAML catalog; built-in presets when unset

    model_config = SettingsConfigDict(
        env_prefix="ROLEKEEPER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
