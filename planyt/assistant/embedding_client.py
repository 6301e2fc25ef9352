from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import requests

from planyt.errors import ConfigurationError, EmbeddingError
from planyt.utils.config import Settings, load_settings
from planyt.utils.logger import logger


class OpenAIEmbeddingClient:
    """
    Client for the OpenAI embeddings endpoint.

    Safe to share between callers: it holds only configuration and a
    `requests.Session`.
    """

    def __init__(self, api_key: str, base_url: str = "https://api.openai.com/v1", timeout: float = 30):
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is required to use embedding features.")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def embed(self, model: str, inputs: Sequence[str]) -> List[List[float]]:
        try:
            response = self.session.post(
                f"{self.base_url}/embeddings",
                json={"model": model, "input": list(inputs)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise EmbeddingError(f"OpenAI embedding request failed: {e}") from e

        data = body.get("data")
        if not isinstance(data, list):
            raise EmbeddingError("OpenAI embedding response has no 'data' list")
        # The API tags each item with its input position
        ordered = sorted(data, key=lambda item: item.get("index", 0))
        return [list(item["embedding"]) for item in ordered]


class OllamaEmbeddingClient:
    """
    Client for a local Ollama instance (`/api/embed`).
    """

    def __init__(self, base_url: str = "http://localhost:11434", timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def embed(self, model: str, inputs: Sequence[str]) -> List[List[float]]:
        try:
            response = self.session.post(
                f"{self.base_url}/api/embed",
                json={"model": model, "input": list(inputs)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body: Dict[str, Any] = response.json()
        except requests.RequestException as e:
            raise EmbeddingError(f"Ollama embedding request failed: {e}") from e

        embeddings = body.get("embeddings")
        if not isinstance(embeddings, list):
            raise EmbeddingError("Ollama embedding response has no 'embeddings' list")
        return [list(v) for v in embeddings]


_client: Optional[Any] = None


def get_embedding_client(settings: Optional[Settings] = None):
    """Return the process-wide embedding client, constructing it on first use."""
    global _client
    if _client is None:
        settings = settings or load_settings()
        if settings.embedding_backend == "ollama":
            _client = OllamaEmbeddingClient(base_url=settings.ollama_url)
        else:
            _client = OpenAIEmbeddingClient(api_key=settings.openai_api_key or "", base_url=settings.openai_base_url)
        logger.info(f"Initialized {settings.embedding_backend} embedding client")
    return _client


def reset_embedding_client() -> None:
    global _client
    _client = None
