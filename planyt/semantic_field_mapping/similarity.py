from __future__ import annotations

import math
from typing import List, Sequence

import numpy as np

from .models import Candidate, ScoredCandidate


def _as_matrix(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    matrix = np.asarray(vectors, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError("Embedding vectors must all have the same length")
    return matrix


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; NaN when either has zero norm."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector length mismatch: {va.shape[0]} vs {vb.shape[0]}")
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return float("nan")
    return float(np.dot(va, vb) / denom)


def cosine_similarity_matrix(
    column_vectors: Sequence[Sequence[float]],
    candidate_vectors: Sequence[Sequence[float]],
) -> np.ndarray:
    """
    Pairwise cosine similarity, shape (n_columns, n_candidates).

    Pairs involving a zero-norm vector get NaN instead of raising.
    """
    if len(column_vectors) == 0 or len(candidate_vectors) == 0:
        return np.zeros((len(column_vectors), len(candidate_vectors)))

    cols = _as_matrix(column_vectors)
    cands = _as_matrix(candidate_vectors)
    if cols.shape[1] != cands.shape[1]:
        raise ValueError(f"Vector length mismatch: {cols.shape[1]} vs {cands.shape[1]}")

    dots = cols @ cands.T
    norms = np.outer(np.linalg.norm(cols, axis=1), np.linalg.norm(cands, axis=1))
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = dots / norms
    scores[norms == 0.0] = np.nan
    return scores


def _sort_key(scored: ScoredCandidate):
    # NaN last; equal scores keep input order (sorted() is stable)
    if math.isnan(scored.score):
        return (1, 0.0)
    return (0, -scored.score)


def rank_candidates(scores: Sequence[float], candidates: Sequence[Candidate]) -> List[ScoredCandidate]:
    """Pair each candidate with its score and sort descending."""
    if len(scores) != len(candidates):
        raise ValueError(f"Got {len(scores)} scores for {len(candidates)} candidates")
    scored = [ScoredCandidate(candidate=c, score=float(s)) for c, s in zip(candidates, scores)]
    return sorted(scored, key=_sort_key)


def rank(
    column_vector: Sequence[float],
    candidate_vectors: Sequence[Sequence[float]],
    candidates: Sequence[Candidate],
) -> List[ScoredCandidate]:
    scores = [cosine_similarity(column_vector, v) for v in candidate_vectors]
    return rank_candidates(scores, candidates)
