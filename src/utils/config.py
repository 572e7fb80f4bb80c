"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Ahrefs (keyword data)
    AHREFS_API_KEY: Optional[str] = None

    # Claude API (AI-assisted analysis)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"
    CLAUDE_FAST_MODEL: str = "claude-3-5-haiku-20241022"

    # Prompt visibility (optional - key gated)
    PROMPT_VISIBILITY_API_KEY: Optional[str] = None
    PROMPT_VISIBILITY_API_URL: str = "https://api.ahrefs.com/v3/brand-radar"

    # Vendor whose own ranking is checked
    VENDOR_NAME: str = "Sage"
    VENDOR_DOMAIN: str = "sage.com"
    DEFAULT_PRODUCT: str = "sage_accounting"

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Pipeline pacing
    RANK_CHECK_DELAY_SECONDS: float = 0.6

    # Timeouts (per external call)
    API_TIMEOUT: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
