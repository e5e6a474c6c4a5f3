"""Configuration settings for the cash-flow simulator."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Generation
    starting_balance: int = Field(
        default=250_000, ge=0, validation_alias="STARTING_BALANCE"
    )
    history_days: int = Field(default=90, ge=0, validation_alias="HISTORY_DAYS")
    forecast_days: int = Field(default=90, ge=1, validation_alias="FORECAST_DAYS")
    default_industry: str = Field(
        default="manufacturing", validation_alias="DEFAULT_INDUSTRY"
    )
    random_seed: int | None = Field(default=None, validation_alias="RANDOM_SEED")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
