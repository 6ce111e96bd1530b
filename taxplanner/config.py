"""
config.py — runtime settings for the taxplanner API.

Values come from unprefixed environment variables or a local .env file
(DEBUG=false, LOG_LEVEL=WARNING, CORS_ORIGINS=...). Tax rules are
not configurable; they live as constants in taxplanner.engine.tax_engine.
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Browser front-ends allowed to call the API, comma-separated
    cors_origins: str = "http://localhost:5173,http://localhost:8080"

    # Exposes exception text in 500 responses and forces DEBUG logging
    debug: bool = True
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
