from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Gemini (primary) - same keys the web frontend uses
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("gemini_api_key", "GEMINI_KEY", "NEXT_PUBLIC_GEMINI_KEY", "GEMINI_API_KEY"),
    )

    # Grok via xAI (backup)
    grok_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("grok_api_key", "GROK_KEY", "NEXT_PUBLIC_GROK_KEY", "XAI_API_KEY"),
    )

    # OpenRouter (optional - any hosted model behind one key)
    openrouter_api_key: str | None = None

    # OpenAI (optional)
    openai_api_key: str | None = None

    # Models
    gemini_model: str = "gemini-2.5-flash"  # stable, separate free-tier quota from 2.0-flash
    grok_model: str = "grok-3-fast"
    openrouter_model: str = "google/gemini-2.0-flash-001"
    openai_model: str = "gpt-4o-mini"

    # Generation
    llm_temperature: float = 0.7
    llm_max_output_tokens: int = 2048
    llm_timeout_seconds: float = 60.0

    # Fallback chain, highest priority first (comma separated)
    provider_priority: str = "gemini,grok,openrouter,openai"

    # Move on to the next provider when a model returns unusable JSON
    fallback_on_parse_error: bool = True

    # Sentry error monitoring
    sentry_dsn: str | None = None

    # Environment
    environment: str = "development"

    # API Settings
    api_title: str = "Quick Recipe Generator API"
    api_version: str = "1.0.0"

    @property
    def provider_order(self) -> list[str]:
        """Provider names in fallback order."""
        return [
            name.strip().lower()
            for name in self.provider_priority.split(",")
            if name.strip()
        ]

    @property
    def is_development(self) -> bool:
        """Error details are only exposed in development."""
        return self.environment.lower() == "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
