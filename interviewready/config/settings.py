"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "InterviewReady"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Which question/evaluation backend to construct
    ai_backend: Literal["ollama", "hosted"] = "ollama"
    ai_timeout_seconds: float = 60.0

    # Local Ollama server (OpenAI-compatible API)
    ollama_base_url: str = "http://localhost:11434/v1"
    ollama_model: str = "llama3:latest"
    ollama_api_key: str = "ollama"  # Ollama ignores it but the API wants one

    # Hosted model serving endpoint
    hosted_base_url: str = ""
    hosted_token: str = ""
    hosted_endpoint: str = "/serving-endpoints/databricks-gemini-flash/invocations"

    # Sampling
    question_temperature: float = 0.8
    question_max_tokens: int = 150
    evaluation_temperature: float = 0.5
    evaluation_max_tokens: int = 500

    # Langfuse tracing
    langfuse_enabled: bool = False
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    # TTS configuration (server-side synthesis for relayed speech)
    tts_enabled: bool = False
    tts_voice: str = "en-US-JennyNeural"

    # Turn pacing
    listen_delay_seconds: float = 2.0  # Pause between prompt playback and capture
    timer_tick_seconds: float = 1.0
    playback_timeout_seconds: float = 60.0

    # Persistence
    storage_backend: Literal["memory", "file"] = "memory"
    storage_path: str = "data"

    # Live sessions with no client attached are dropped after this long
    session_idle_timeout_seconds: float = 1800.0

    # CORS - stored as comma-separated string in env
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
