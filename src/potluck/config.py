"""Application configuration using pydantic-settings."""

import os
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from POTLUCK_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="POTLUCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Recipe repository
    dir: str = "."
    index_filename: str = ".potluck"
    images_dirname: str = ".images"

    # Grocery / cook defaults
    default_persons: int = 2

    # External tools
    editor: str = Field(default_factory=lambda: os.getenv("EDITOR") or "vim")
    git_binary: str = "git"

    # Logging
    log_level: str = "WARNING"
    log_format: str = "text"  # "text" or "json"

    # Gallery server
    serve_host: str = "127.0.0.1"
    serve_port: int = 8080

    @property
    def json_logs(self) -> bool:
        """Check if structured JSON logging is requested."""
        return self.log_format.lower() == "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
