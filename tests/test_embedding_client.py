from unittest.mock import MagicMock, patch

import pytest
import requests

from planyt.assistant.embedding_client import (
    OllamaEmbeddingClient,
    OpenAIEmbeddingClient,
    get_embedding_client,
)
from planyt.errors import ConfigurationError, EmbeddingError
from planyt.utils.config import Settings


def _response(body):
    resp = MagicMock()
    resp.json.return_value = body
    resp.raise_for_status.return_value = None
    return resp


def test_openai_client_orders_by_index():
    client = OpenAIEmbeddingClient(api_key="sk-test")
    body = {"data": [{"index": 1, "embedding": [0.0, 1.0]}, {"index": 0, "embedding": [1.0, 0.0]}]}

    with patch.object(client.session, "post", return_value=_response(body)) as mock_post:
        vectors = client.embed("text-embedding-3-small", ["first", "second"])

    assert vectors == [[1.0, 0.0], [0.0, 1.0]]
    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args[0] == "https://api.openai.com/v1/embeddings"
    assert kwargs["json"] == {"model": "text-embedding-3-small", "input": ["first", "second"]}
    assert client.session.headers["Authorization"] == "Bearer sk-test"


def test_openai_client_wraps_http_errors():
    client = OpenAIEmbeddingClient(api_key="sk-test")
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.HTTPError("429 Too Many Requests")

    with patch.object(client.session, "post", return_value=resp):
        with pytest.raises(EmbeddingError) as excinfo:
            client.embed("m", ["x"])

    assert isinstance(excinfo.value.__cause__, requests.HTTPError)


def test_openai_client_rejects_malformed_body():
    client = OpenAIEmbeddingClient(api_key="sk-test")
    with patch.object(client.session, "post", return_value=_response({"error": "nope"})):
        with pytest.raises(EmbeddingError):
            client.embed("m", ["x"])


def test_openai_client_requires_key():
    with pytest.raises(ConfigurationError):
        OpenAIEmbeddingClient(api_key="")


def test_ollama_client():
    client = OllamaEmbeddingClient(base_url="http://ollama:11434/")
    with patch.object(client.session, "post", return_value=_response({"embeddings": [[0.1, 0.2]]})) as mock_post:
        assert client.embed("nomic-embed-text", ["x"]) == [[0.1, 0.2]]
    assert mock_post.call_args[0][0] == "http://ollama:11434/api/embed"


def test_ollama_client_connection_error():
    client = OllamaEmbeddingClient()
    with patch.object(client.session, "post", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(EmbeddingError):
            client.embed("m", ["x"])


def test_shared_client_is_constructed_once():
    settings = Settings(embedding_backend="ollama")

    first = get_embedding_client(settings)
    second = get_embedding_client(settings)

    assert first is second
    assert isinstance(first, OllamaEmbeddingClient)


def test_shared_openai_client_without_key():
    with pytest.raises(ConfigurationError):
        get_embedding_client(Settings(embedding_backend="openai", openai_api_key=None))
