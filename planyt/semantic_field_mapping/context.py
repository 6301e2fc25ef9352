from __future__ import annotations

from typing import List, Sequence

from .models import Candidate, Row

DEFAULT_SAMPLE_SIZE = 5


def sample_values(column: str, rows: Sequence[Row], sample_size: int = DEFAULT_SAMPLE_SIZE) -> List[str]:
    """Return up to `sample_size` non-null values of `column`, in row order, as strings."""
    values: List[str] = []
    for row in rows:
        if len(values) >= sample_size:
            break
        value = row.get(column)
        if value is None:
            continue
        values.append(str(value))
    return values


def build_column_context(column: str, rows: Sequence[Row], sample_size: int = DEFAULT_SAMPLE_SIZE) -> str:
    values = sample_values(column, rows, sample_size)
    return f"Column: {column}\nSample Values: {', '.join(values)}"


def build_candidate_context(candidate: Candidate) -> str:
    context = f"Field: {candidate.id}\nDescription: {candidate.description}"
    if candidate.synonyms:
        context += f"\nSynonyms: {', '.join(candidate.synonyms)}"
    return context
