"""Application settings loaded from the environment."""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    """Runtime configuration for the pricing service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field("development", alias="ENVIRONMENT")

    reference_data_dir: Path = Field(DEFAULT_DATA_DIR, alias="REFERENCE_DATA_DIR")

    default_radius_miles: int = Field(100, ge=1, le=500, alias="DEFAULT_RADIUS_MILES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: str = Field("json", alias="LOG_FORMAT")
    log_file: Optional[str] = Field(None, alias="LOG_FILE")
    log_dir: str = Field("logs", alias="LOG_DIR")

    cors_origins: str = Field("http://localhost:3000", alias="CORS_ORIGINS")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return value

    def get_cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings()
