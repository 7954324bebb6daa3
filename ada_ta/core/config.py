"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "ADA Live AI Analyst"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Tracked asset
    coin_id: str = "cardano"
    coin_name: str = "Cardano"
    coin_symbol: str = "ADA"
    vs_currency: str = "usd"

    # LLM Providers
    groq_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    llm_primary_provider: str = "groq"  # Options: groq, openai, anthropic
    llm_model: str = "llama-3.1-8b-instant"
    llm_temperature: float = 0.3
    llm_max_tokens: int = 200
    groq_base_url: str = "https://api.groq.com/openai/v1"
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-haiku-20240307"

    # Analysis pipeline
    analysis_cache_ttl_seconds: float = 300.0
    analysis_timeout_seconds: float = 30.0

    # Market data providers
    coingecko_api_key: Optional[str] = None
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    fear_greed_url: str = "https://api.alternative.me/fng/"
    http_timeout_seconds: float = 10.0

    # Live polling (server-side dashboard refresh)
    enable_live_polling: bool = False
    live_refresh_interval_seconds: float = 600.0
    live_min_analysis_interval_seconds: float = 119.0
    live_short_days: int = 1
    live_long_days: int = 365

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
