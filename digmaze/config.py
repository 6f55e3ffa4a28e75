"""Application configuration using Pydantic settings."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Smallest board the API hands out
MIN_DIMENSION = 5


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Dig Maze"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:8080,http://127.0.0.1:5500"

    # Boards
    default_width: int = 15
    default_height: int = 15
    max_dimension: int = 99

    # Auto-solve: each replay draws one step delay in [0, max) milliseconds
    autosolve_max_delay_ms: int = 100

    # In-memory games; the oldest is evicted past this count (0 = no limit)
    max_active_games: int = 1000

    # Rate limiting
    rate_limit_games: int = 60  # new games per minute

    @field_validator("max_dimension")
    @classmethod
    def validate_max_dimension(cls, v: int) -> int:
        if v < MIN_DIMENSION:
            raise ValueError(f"MAX_DIMENSION must be at least {MIN_DIMENSION}")
        return v

    @field_validator("autosolve_max_delay_ms", "max_active_games", "rate_limit_games")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @model_validator(mode="after")
    def validate_default_size(self) -> "Settings":
        """Default board size must itself be a valid API size."""
        for name in ("default_width", "default_height"):
            value = getattr(self, name)
            if not MIN_DIMENSION <= value <= self.max_dimension:
                raise ValueError(
                    f"{name.upper()} must be between {MIN_DIMENSION} and {self.max_dimension}"
                )
        return self

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.debug:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def autosolve_max_delay(self) -> float:
        """Replay delay bound in seconds."""
        return self.autosolve_max_delay_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
