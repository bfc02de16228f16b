"""Application settings loaded from environment variables."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration. Values come from .env or environment variables."""

    # Ollama
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llava"
    temperature: float = 0.2
    request_timeout: float = 120.0

    # Pipeline
    parallel_stages: bool = True
    summary_flow: Literal["summarize", "generate"] = "summarize"

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
