"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """LifeLens server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; there is no auth layer in front of the tools.
    lifelens_host: str = "127.0.0.1"
    lifelens_port: int = 8001
    lifelens_log_level: str = "info"
    lifelens_allow_insecure_bind: bool = False
    lifelens_transport: Literal["streamable-http", "stdio"] = "streamable-http"

    # Card refiner / time machine LLM
    llm_provider: Literal["anthropic", "openai", "mock"] = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    anthropic_fallback_model: str = "claude-3-5-haiku-latest"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_fallback_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 4096
    llm_temperature: float = 1.0

    # Retry policy (primary model, then fallback model)
    llm_primary_attempts: int = 3
    llm_primary_base_ms: float = 600.0
    llm_fallback_attempts: int = 2
    llm_fallback_base_ms: float = 800.0

    # To-do store; empty path disables it
    todo_db_path: str = "~/.lifelens/todos.db"

    # Presentation
    card_palette: str = "soft_pastel"


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
