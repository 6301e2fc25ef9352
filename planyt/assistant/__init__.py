from .conversation import (
    ActionResponse,
    ConversationHandler,
    ConversationalAction,
    classify_action,
    render_prompt,
    simulate_adjustment,
)
from .embedding_client import OllamaEmbeddingClient, OpenAIEmbeddingClient, get_embedding_client
from .timeframe import Timeframe, parse_product, parse_timeframe

__all__ = [
    "ActionResponse",
    "ConversationHandler",
    "ConversationalAction",
    "OllamaEmbeddingClient",
    "OpenAIEmbeddingClient",
    "Timeframe",
    "classify_action",
    "get_embedding_client",
    "parse_product",
    "parse_timeframe",
    "render_prompt",
    "simulate_adjustment",
]
