"""
Configuration Management for the Breath Analysis Service

Environment-based configuration using Pydantic Settings.  Variables are
read with the ``ODOURSENSE_`` prefix, from the process environment or a
local ``.env`` file.
"""
from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ODOURSENSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = "OdourSense Breath Analysis API"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable debug mode")

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Storage (unset -> in-memory)
    history_path: Optional[str] = Field(default=None, description="JSON file for report history")
    thresholds_path: Optional[str] = Field(default=None, description="JSON file for channel thresholds")

    # Analysis
    analysis_latency_seconds: float = Field(
        default=0.0, ge=0.0, description="Artificial delay before answering an analysis request"
    )

    # Sensor simulation
    simulation_seed: Optional[int] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
