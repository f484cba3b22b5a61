"""Configuration management for the auto-apply drafting engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Anthropic configuration (optional: without a key, model fallbacks are skipped)
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")

    # Environment
    AUTOAPPLY_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    LOG_LEVEL: str | None = Field(
        default=None, description="Overrides the environment-derived log level"
    )

    # Models
    GENERATION_MODEL: str = Field(
        default="claude-sonnet-4-20250514", description="Model for section drafting"
    )
    CLASSIFIER_MODEL: str = Field(
        default="claude-haiku-4-5-20251001",
        description="Model for question classification and option selection",
    )
    GENERATION_TEMPERATURE: float = Field(default=0.4, description="Drafting temperature")

    # Generation limits
    GENERATION_TIMEOUT_SECONDS: float = Field(
        default=60.0, description="Upper bound for a single generation call"
    )
    GENERATION_CONCURRENCY: int = Field(
        default=3, description="Max sections drafted concurrently"
    )
    MAX_OUTPUT_TOKENS: int = Field(
        default=4000, description="Ceiling for the output budget of one generation call"
    )

    # Classification
    PATTERN_CONFIDENCE_THRESHOLD: float = Field(
        default=0.8, description="Pattern confidence at which the model classifier is skipped"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance loaded from environment
    """
    return Settings()
