from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

# A dataset row: column name -> scalar value (str / number / None)
Row = Mapping[str, Any]


def _json_score(score: float) -> Optional[float]:
    # NaN has no JSON representation
    return None if math.isnan(score) else score


def _synonyms(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(s, str) for s in value):
        return tuple(value)
    raise ValueError(f"synonyms must be a string or a list of strings, got {value!r}")


@dataclass(frozen=True)
class Candidate:
    """A target field a source column may be mapped to."""

    id: str
    description: str
    synonyms: Tuple[str, ...] = field(default_factory=tuple)
    required: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Candidate":
        return cls(
            id=str(data["id"]),
            description=str(data.get("description", "")),
            synonyms=_synonyms(data.get("synonyms")),
            required=bool(data.get("required", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "synonyms": list(self.synonyms),
            "required": self.required,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: Candidate
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"candidate": self.candidate.to_dict(), "score": _json_score(self.score)}


@dataclass(frozen=True)
class ColumnMapping:
    """
    Final mapping decision for one source column.

    `candidates_ranked` is always the embedding ranking, even when `best_match`
    was chosen by the lexical fallback.
    """

    column: str
    best_match: Optional[Candidate]
    score: float
    candidates_ranked: List[ScoredCandidate]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.column,
            "best_match": self.best_match.to_dict() if self.best_match else None,
            "score": _json_score(self.score),
            "candidates_ranked": [sc.to_dict() for sc in self.candidates_ranked],
        }
