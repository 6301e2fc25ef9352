from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from planyt.semantic_field_mapping.models import ColumnMapping
from planyt.utils.logger import logger

from .json_store import JsonFileStore

FIELD_MAPPINGS_TABLE = "field_mappings"
FORECAST_RUNS_TABLE = "forecast_runs"


@dataclass
class ForecastRunRecord:
    job_id: str
    query: str
    requested_at: str
    status: str  # 'success' | 'error'
    params: Dict[str, Any] = field(default_factory=dict)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    completed_at: Optional[str] = None
    duration_ms: Optional[float] = None
    error: Optional[str] = None
    requested_by: Optional[str] = None


def persist_mappings(store: JsonFileStore, tenant_id: str, dataset_id: str, mappings: Sequence[ColumnMapping]) -> int:
    payload = []
    for m in mappings:
        data = m.to_dict()
        payload.append({
            "tenant_id": tenant_id,
            "dataset_id": dataset_id,
            "source_column": m.column,
            "target_field": m.best_match.id if m.best_match else None,
            "score": data["score"],
            "candidates_ranked": [{"id": r["candidate"]["id"], "score": r["score"]} for r in data["candidates_ranked"]],
        })

    try:
        store.upsert(FIELD_MAPPINGS_TABLE, payload, on_conflict=("tenant_id", "dataset_id", "source_column"))
    except Exception as e:
        logger.error(f"Failed to persist auto-mapping results: {e}")
        raise

    logger.info(f"Persisted auto-mapping results: {len(payload)} columns")
    return len(payload)


def save_forecast_run(store: JsonFileStore, record: ForecastRunRecord) -> None:
    try:
        store.insert(FORECAST_RUNS_TABLE, asdict(record))
    except Exception as e:
        logger.error(f"Failed to persist forecast run: {e}")
        raise
    logger.info(f"Persisted forecast run: {record.job_id}")


def recent_forecast_runs(store: JsonFileStore, requested_by: str, limit: int = 5) -> List[Dict[str, Any]]:
    return store.select(
        FORECAST_RUNS_TABLE,
        where={"requested_by": requested_by},
        order_by="requested_at",
        descending=True,
        limit=limit,
    )
