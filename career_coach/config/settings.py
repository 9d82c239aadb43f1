"""
Application configuration and settings.
Centralized configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Allow extra fields from .env files that aren't defined here
    # (Supabase CLI and Vite variables live in the same files)
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=[".env", ".env.local"],  # .env.local overrides .env
    )

    # Application settings
    app_name: str = "Career Coach Gateway"
    environment: str = "local"
    debug: bool = False

    # Supabase (identity provider and profile store)
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""

    # AI gateway settings
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    ai_gateway_api_key: str = ""
    ai_gateway_model: str = "google/gemini-3-flash-preview"
    ai_gateway_timeout_seconds: float = 120.0

    # CORS settings
    allowed_origins: List[str] = [
        "https://tullycoach.app",
        "https://www.tullycoach.app",
    ]
    default_origin: str = "https://tullycoach.app"

    # Rate limiting
    ip_rate_limit: int = 60
    ip_rate_window_seconds: float = 60.0
    user_rate_limit: int = 30
    user_rate_window_seconds: float = 60.0
    rate_limit_sweep_probability: float = 0.01

    # Request limits
    max_body_bytes: int = 1024 * 1024

    # Logging settings
    log_level: str = "INFO"
    enable_request_logging: bool = True

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == "local"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


class GatewayCredential(BaseSettings):
    """The AI gateway credential alone, re-read from the environment on demand."""

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=[".env", ".env.local"],
    )

    ai_gateway_api_key: str = ""


def current_gateway_api_key(settings: Settings) -> str:
    """
    Read the AI gateway credential now, bypassing the cached settings.

    The environment (and .env files) take precedence; the value the settings
    object was built with is the fallback.
    """
    return GatewayCredential().ai_gateway_api_key or settings.ai_gateway_api_key
