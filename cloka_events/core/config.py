# cloka_events/core/config.py

from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Database URLs ---
    DATABASE_URL_LOCAL: str = "sqlite:///./cloka_events.db"
    DATABASE_URL_PROD: Optional[str] = None

    # Shared with the identity service that issues the bearer tokens
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # Check-in tokens older than this are rejected (milliseconds)
    CHECK_IN_TOKEN_TTL_MS: int = 5 * 60 * 1000

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    @model_validator(mode="after")
    def check_prod_database(self):
        if self.ENV != "local" and not self.DATABASE_URL_PROD:
            raise ValueError("DATABASE_URL_PROD is required outside local mode")
        return self

    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )


# Create a single instance of the settings
settings = Settings()
