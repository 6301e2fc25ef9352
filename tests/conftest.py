import math
import threading

import pytest

from planyt.assistant import embedding_client
from planyt.semantic_field_mapping import Candidate


class StubEmbedder:
    """Returns a fixed vector per context, keyed by the context's first line."""

    def __init__(self, vectors, default=None, error=None):
        self.vectors = dict(vectors)
        self.default = default
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def embed(self, model, inputs):
        with self._lock:
            self.calls.append((model, list(inputs)))
        if self.error is not None:
            raise self.error
        out = []
        for text in inputs:
            key = text.split("\n", 1)[0]
            if key in self.vectors:
                out.append(list(self.vectors[key]))
            elif self.default is not None:
                out.append(list(self.default))
            else:
                raise KeyError(f"No stub vector for {key!r}")
        return out


def _unit(*components):
    """Vector with the given leading components, padded to unit length on the last axis."""
    head = list(components)
    rest = 1.0 - sum(c * c for c in head)
    return head + [math.sqrt(max(rest, 0.0))]


@pytest.fixture
def unit():
    return _unit


@pytest.fixture
def make_embedder():
    return StubEmbedder


@pytest.fixture
def sales_candidates():
    return [
        Candidate(id="sale_date", description="Transaction date", synonyms=("date", "order_date"), required=True),
        Candidate(id="quantity", description="Number of units sold", synonyms=("qty", "units", "count")),
        Candidate(id="revenue", description="Net revenue", synonyms=("sales_amount", "amount")),
    ]


@pytest.fixture(autouse=True)
def reset_shared_embedding_client():
    embedding_client.reset_embedding_client()
    yield
    embedding_client.reset_embedding_client()
