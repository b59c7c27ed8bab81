from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_url: str = "sqlite:///./equipmaint.db"
    app_name: str = "equipmaint"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]
    # identity recorded as reporter on generated PM work orders
    pm_reporter: str = "System Scheduler"
    pm_default_priority: str = "Medium"

    model_config = {"env_prefix": "EQUIPMAINT_", "env_file": ".env"}

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
