"""TextCraft-mcp settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """TextCraft MCP server settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Language model endpoint (any OpenAI-compatible chat completions API)
    groq_api_key: str | None = None
    groq_api_url: str = "https://api.groq.com/openai/v1/chat/completions"
    groq_model: str = "llama-3.3-70b-versatile"
    llm_timeout_seconds: float = 30.0

    # Input guard for AI tools
    max_input_chars: int = 8000

    # Per-user request limits (requests per window)
    format_rate_limit: int = 15
    shorten_rate_limit: int = 10
    rate_limit_window_seconds: float = 60.0
