"""Configuration management for the Innovation Sandbox engine."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    SANDBOX_ENV: str = Field(default="dev", description="Environment: dev, test, prod")

    # Simulation persistence
    SIMULATION_PERSISTENCE: Literal["memory", "file"] = Field(
        default="memory", description="Where session simulations are saved: memory or file"
    )
    SIMULATION_STORE_DIR: Path = Field(
        default=Path(".simulations"),
        description="Directory for per-session JSON documents (file persistence)",
    )
    SIMULATION_MAX_SESSIONS: int = Field(
        default=1000,
        ge=1,
        description="Sessions kept in memory; the least recently used are reloaded on demand",
    )

    # Coach suggestion parsing
    SUGGESTION_MAX_CHARS: int = Field(
        default=20_000, description="Max characters of coach text accepted by the parser"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If an environment variable has an invalid value
    """
    return Settings()
