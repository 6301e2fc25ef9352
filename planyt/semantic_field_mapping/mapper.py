from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Protocol, Sequence

from planyt.errors import EmbeddingError, InvalidInputError
from planyt.utils.logger import logger

from .context import build_candidate_context, build_column_context
from .fallback import CONFIDENCE_THRESHOLD, resolve_best_match
from .models import Candidate, ColumnMapping, Row
from .similarity import cosine_similarity_matrix, rank_candidates

DEFAULT_MODEL = "text-embedding-3-small"


class Embedder(Protocol):
    def embed(self, model: str, inputs: Sequence[str]) -> List[List[float]]:  # pragma: no cover - interface
        ...


class AutoMapper:
    """
    Map dataset columns to candidate target fields.

    Each column and each candidate is described as text, embedded in two
    batched requests, and ranked by cosine similarity. When the best score is
    below `threshold` a lexical match on the normalized column name (against
    candidate ids and synonyms) overrides the embedding choice.

    Parameters
    ----------
    embedder: object with `embed(model, inputs) -> vectors`, order-preserving.
    model: embedding model name passed through to the embedder.
    threshold: confidence below which the lexical fallback is tried.
    sample_size: number of non-null values sampled per column.
    """

    def __init__(
        self,
        embedder: Embedder,
        model: str = DEFAULT_MODEL,
        threshold: float = CONFIDENCE_THRESHOLD,
        sample_size: int = 5,
    ) -> None:
        self.embedder = embedder
        self.model = model
        self.threshold = float(threshold)
        self.sample_size = int(sample_size)

    def _embed(self, inputs: List[str]) -> List[List[float]]:
        if not inputs:
            return []
        vectors = list(self.embedder.embed(self.model, inputs))
        if len(vectors) != len(inputs):
            raise EmbeddingError(f"Embedding backend returned {len(vectors)} vectors for {len(inputs)} inputs")
        return vectors

    def map_columns(self, rows: Sequence[Row], candidates: Sequence[Candidate]) -> List[ColumnMapping]:
        if not rows:
            raise InvalidInputError("Cannot auto-map columns without sample rows.")

        # Only the first row defines the column set
        columns = [str(c) for c in rows[0].keys()]
        column_contexts = [build_column_context(c, rows, self.sample_size) for c in columns]
        candidate_contexts = [build_candidate_context(c) for c in candidates]

        log_data = {
            "column_count": len(columns),
            "candidate_count": len(candidate_contexts),
            "model": self.model,
        }
        logger.info(f"Requesting embeddings for columns and candidates: {log_data}")

        with ThreadPoolExecutor(max_workers=2) as pool:
            column_future = pool.submit(self._embed, column_contexts)
            candidate_future = pool.submit(self._embed, candidate_contexts)
            column_vectors = column_future.result()
            candidate_vectors = candidate_future.result()

        scores = cosine_similarity_matrix(column_vectors, candidate_vectors)

        mappings: List[ColumnMapping] = []
        for idx, column in enumerate(columns):
            ranked = rank_candidates(scores[idx], candidates)
            best, score = resolve_best_match(column, ranked, self.threshold)
            mappings.append(ColumnMapping(column=column, best_match=best, score=score, candidates_ranked=ranked))
        return mappings


def auto_map_columns(
    rows: Sequence[Row],
    candidates: Sequence[Candidate],
    embedder: Embedder,
    model: Optional[str] = None,
    top_k: Optional[int] = None,
) -> List[ColumnMapping]:
    """Convenience wrapper around AutoMapper.map_columns.

    `top_k` is reserved; every mapping carries the full ranking.
    """
    mapper = AutoMapper(embedder=embedder, model=model or DEFAULT_MODEL)
    return mapper.map_columns(rows, candidates)
