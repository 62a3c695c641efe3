"""
Application Configuration - Environment settings and constants.

Loads configuration from environment variables with sensible defaults.
Uses Pydantic Settings for validation and type safety.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Usage:
        from chimera.core.config import get_settings
        settings = get_settings()
    """

    # Application
    app_name: str = "ChimeraGPT"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # HTTP Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    api_prefix: str = "/api/v1"
    allowed_origins: List[str] = ["*"]

    # Database
    database_url: str = "sqlite:///./data/chimera.db"

    # GitHub
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    github_timeout_seconds: float = 30.0
    repo_cache_ttl_hours: int = 1

    # LLM (Google GenAI)
    gemini_api_key: Optional[str] = None
    llm_model: str = "gemini-2.5-flash"
    video_model: str = "veo-2.0-generate-001"
    video_poll_interval_seconds: float = 5.0
    video_max_polls: int = 60

    # Agents
    agent_max_steps: int = 10
    delegate_max_steps: int = 5
    web_fetch_max_chars: int = 20000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
