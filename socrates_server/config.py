"""Configuration management using Pydantic Settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Provider credentials
    openai_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    # Child generation (OpenAI, JSON mode)
    generate_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"
    generate_temperature: float = 0.7
    generate_timeout: float = 60.0
    children_per_page: int = Field(default=5, ge=1, le=20)

    # Chat (Gemini, streamed)
    chat_model: str = "gemini-2.5-flash-lite"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    chat_timeout: Optional[float] = None

    # Graph store
    max_pages_per_node: int = Field(
        default=10,
        ge=1,
        description="Upper bound on 'generate more' pages kept per node",
    )
    taxonomy_path: Optional[str] = None

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_debug: bool = False
    api_base_url: str = "http://127.0.0.1:8000"
    log_level: str = "INFO"


settings = Settings()
