"""Configuration management for the decision research service."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Tavily (web search provider)
    TAVILY_API_KEY: str | None = Field(default=None, description="Tavily API key")
    TAVILY_BASE_URL: str = Field(
        default="https://api.tavily.com", description="Tavily API base URL"
    )
    TAVILY_SEARCH_DEPTH: Literal["basic", "advanced"] = Field(
        default="advanced", description="Tavily search depth"
    )
    TAVILY_MAX_RESULTS: int = Field(
        default=8, ge=1, le=20, description="Maximum results requested per query"
    )
    TAVILY_INCLUDE_RAW_CONTENT: bool = Field(
        default=False, description="Ask Tavily for the extracted page text (rawContent)"
    )
    TAVILY_TIMEOUT: float = Field(
        default=30.0, ge=1.0, le=300.0, description="Tavily request timeout (seconds)"
    )

    # Search resilience
    SEARCH_MAX_RETRIES: int = Field(
        default=2, ge=0, le=5, description="Retries per search call before the error propagates"
    )
    SEARCH_CIRCUIT_BREAKER_THRESHOLD: int = Field(
        default=5, ge=1, le=20, description="Failures before circuit breaker opens"
    )
    SEARCH_CIRCUIT_BREAKER_TIMEOUT: int = Field(
        default=300, ge=10, le=3600, description="Seconds before circuit breaker retry"
    )

    # Research pipeline
    RESEARCH_QUERY_MAX_LENGTH: int = Field(
        default=400, ge=20, le=2000, description="Hard ceiling for a single search query"
    )
    RESEARCH_GATE_STRATEGY: Literal["breadth", "scored"] = Field(
        default="breadth",
        description="Evidence gate: 'breadth' (count + domains) or 'scored' (quality metrics)",
    )
    RESEARCH_LOGS: bool = Field(
        default=True, description="Emit per-query and per-pass telemetry events"
    )
    RESEARCH_TIMEOUT_SECONDS: int = Field(
        default=300, ge=10, le=3600, description="Deadline for one research request (seconds)"
    )
    DEFAULT_OUTPUT_LANGUAGE: Literal["nl", "en"] = Field(
        default="nl", description="Language of generated prose when the caller does not choose"
    )

    # Decision LLM (OpenAI-compatible endpoint)
    OPENROUTER_API_KEY: str | None = Field(default=None, description="OpenRouter API key")
    OPENROUTER_BASE_URL: str = Field(
        default="https://openrouter.ai/api/v1", description="OpenRouter API base URL"
    )
    DECISION_LLM_MODEL: str = Field(
        default="openai/gpt-4.1-mini", description="Model used to draft the decision"
    )
    DECISION_LLM_TIMEOUT: float = Field(
        default=60.0, ge=5.0, le=600.0, description="Decision LLM timeout (seconds)"
    )

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8001, description="API port")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "text"] = Field(default="json", description="Log format (json/text)")

    # Development
    DEBUG: bool = Field(default=False, description="Debug mode")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @property
    def decision_llm_enabled(self) -> bool:
        """Whether the decision LLM has credentials configured."""
        return bool((self.OPENROUTER_API_KEY or "").strip())


# Global settings instance
settings = Settings()
