from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from .models import Candidate, ScoredCandidate
from .normalize import normalize_identifier

CONFIDENCE_THRESHOLD = 0.6


def is_lexical_match(normalized_column: str, candidate: Candidate) -> bool:
    if normalize_identifier(candidate.id) == normalized_column:
        return True
    return any(normalize_identifier(s) == normalized_column for s in candidate.synonyms)


def find_lexical_match(column: str, ranked: Sequence[ScoredCandidate]) -> Optional[ScoredCandidate]:
    """
    First candidate in `ranked` whose id or synonym equals the column name
    after normalization. Scanning the ranked list means that among several
    lexical matches the one with the higher embedding score wins.
    """
    normalized_column = normalize_identifier(column)
    for scored in ranked:
        if is_lexical_match(normalized_column, scored.candidate):
            return scored
    return None


def resolve_best_match(
    column: str,
    ranked: Sequence[ScoredCandidate],
    threshold: float = CONFIDENCE_THRESHOLD,
) -> Tuple[Optional[Candidate], float]:
    """
    Pick the best candidate for `column` from its embedding ranking.

    When the top score is below `threshold` (or NaN) and a lexical match
    exists, the lexical match wins and the reported score is floored at
    `threshold`. The floor marks a lexical decision; it is not that
    candidate's similarity.
    """
    if not ranked:
        return None, 0.0

    top = ranked[0]
    if top.score >= threshold:
        return top.candidate, top.score

    fallback = find_lexical_match(column, ranked)
    if fallback is None:
        return top.candidate, top.score

    if math.isnan(top.score):
        return fallback.candidate, threshold
    return fallback.candidate, max(top.score, threshold)
