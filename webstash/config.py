"""WebStash configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

STORAGE_KEY = "webstash_items_v1"
TOP_K_CAP = 3  # seeded top-K never exceeds this, whatever the model advertises


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Ollama
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "qwen3:1.7b"
    ollama_timeout: float = 180.0

    # Storage
    storage_path: Path = Path.home() / ".webstash" / "items.json"
    storage_key: str = STORAGE_KEY

    # Grounded questions
    dataset_max_items: int = 200
    dataset_max_content_chars: int = 400

    # Sampling
    top_k_cap: int = TOP_K_CAP
    max_top_k: int = 40
    default_temperature: float = 0.8
    output_language: str = "en"

    log_level: str = "INFO"


settings = Settings()
