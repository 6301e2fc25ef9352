from __future__ import annotations
from typing import Annotated, Any, Dict, List, Optional
from pydantic import BaseModel, Field

from planyt.semantic_field_mapping import Candidate


class CandidateModel(BaseModel):
    id: Annotated[str, Field(min_length=1)]
    description: str = ""
    synonyms: List[str] = Field(default_factory=list)
    required: bool = False

    def to_candidate(self) -> Candidate:
        return Candidate(id=self.id, description=self.description, synonyms=tuple(self.synonyms), required=self.required)


class AutoMapRequest(BaseModel):
    rows: List[Dict[str, Any]]
    candidates: List[CandidateModel] = Field(default_factory=list)
    model: Optional[str] = None
    top_k: Optional[int] = None
    tenant_id: Optional[str] = None
    dataset_id: Optional[str] = None


class ScoredCandidateModel(BaseModel):
    candidate: CandidateModel
    score: Optional[float]


class ColumnMappingModel(BaseModel):
    column: str
    best_match: Optional[CandidateModel]
    score: Optional[float]
    candidates_ranked: List[ScoredCandidateModel]


class AutoMapResponse(BaseModel):
    mappings: List[ColumnMappingModel]
    persisted: int = 0


class ForecastRequest(BaseModel):
    start_date: Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$")]
    end_date: Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$")]
    product: Optional[str] = None
    table: str = "sample_sales"
    job_timeout_seconds: Optional[Annotated[int, Field(gt=0, le=120)]] = None
    user_id: Optional[str] = None


class ForecastResponse(BaseModel):
    job_id: str
    started_at: str
    ended_at: str
    duration_ms: float
    rows: List[Dict[str, Any]]


class ConverseRequest(BaseModel):
    text: Annotated[str, Field(min_length=1)]
    user_id: str = "demo-user"


class ConverseResponse(BaseModel):
    action: str
    status: str
    payload: Any = None
    human_message: str
