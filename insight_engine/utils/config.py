"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Claude API (optional - a reply can also be supplied by the caller)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-sonnet-4-20250514"
    MAX_OUTPUT_TOKENS: int = 4000
    TEMPERATURE: float = 0.3

    # Application Settings
    LOG_LEVEL: str = "INFO"

    # Report context
    SITE_URL: str = ""
    BRAND_TERMS: str = ""  # Comma-separated, e.g. "acme,acme shop"

    # Timeouts
    NORMALIZE_TIMEOUT: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase

    @property
    def brand_terms(self) -> List[str]:
        """Brand terms as a cleaned, lower-cased list."""
        return [t.strip().lower() for t in self.BRAND_TERMS.split(",") if t.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
