from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from planyt.errors import ConfigurationError

EMBEDDING_BACKENDS = ("openai", "ollama")


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    embedding_backend: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    ollama_url: str = "http://localhost:11434"
    forecast_schema: str = "lakehouse.datalake.raw"
    store_dir: str = "artifacts/store"


def load_settings() -> Settings:
    """Read settings from the environment (and a local .env file when present)."""
    load_dotenv()

    backend = os.getenv("EMBEDDING_BACKEND", "openai").strip().lower()
    if backend not in EMBEDDING_BACKENDS:
        raise ConfigurationError(
            f"Invalid EMBEDDING_BACKEND '{backend}', expected one of {', '.join(EMBEDDING_BACKENDS)}"
        )

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        embedding_backend=backend,
        embedding_model=os.getenv("EMBEDDING_MODEL", "text-embedding-3-small"),
        ollama_url=os.getenv("OLLAMA_URL", "http://localhost:11434").rstrip("/"),
        forecast_schema=os.getenv("FORECAST_SCHEMA", "lakehouse.datalake.raw"),
        store_dir=os.getenv("PLANYT_STORE_DIR", "artifacts/store"),
    )
