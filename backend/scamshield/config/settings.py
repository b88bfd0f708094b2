"""
ScamShield Application Configuration

Configuration management using pydantic-settings.
Values are loaded from SCAMSHIELD_* environment variables or a local .env file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Values can be set via:
    1. Environment variables (SCAMSHIELD_ prefix)
    2. .env file (local development)
    3. Default values defined here
    """

    model_config = SettingsConfigDict(
        env_prefix="SCAMSHIELD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = "ScamShield"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # =========================================================================
    # Server
    # =========================================================================
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # =========================================================================
    # External judgment (LLM via OpenRouter)
    # =========================================================================
    ai_enabled: bool = True
    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API key")
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    ai_model: str = "meta-llama/llama-3.1-8b-instruct"
    external_judge_timeout: float = Field(default=8.0, gt=0, description="Seconds before the judge is treated as unavailable")

    # =========================================================================
    # Time context
    # =========================================================================
    timezone: str = "Asia/Bangkok"

    # =========================================================================
    # Learning policy
    # =========================================================================
    enable_feedback_learning: bool = True
    weight_clip: float = Field(default=5.0, gt=0)
    batch_size: int = Field(default=50, ge=1)
    learning_rate: float = Field(default=0.01, gt=0)
    immediate_learning_rate: float = Field(default=0.05, gt=0)
    immediate_confidence_threshold: float = Field(default=0.7, ge=0, le=1)
    training_buffer_size: int = Field(default=1000, ge=1)
    training_window: int = Field(default=50, ge=1)
    max_feedback_storage: int = Field(default=10000, ge=1)
    max_patterns: int = Field(default=5000, ge=1)
    pattern_blend_rate: float = Field(default=0.2, gt=0, le=1)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Use get_settings.cache_clear() to reload settings.
    """
    return Settings()
