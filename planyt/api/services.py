from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from planyt.assistant.conversation import ActionResponse, ConversationHandler
from planyt.assistant.embedding_client import get_embedding_client
from planyt.connection.query_engine import FlightSQLQueryEngine, QueryEngine
from planyt.forecast.query_builder import build_forecast_query
from planyt.forecast.service import run_forecast_job
from planyt.semantic_field_mapping import AutoMapper, Candidate, ColumnMapping, DEFAULT_MODEL
from planyt.storage.json_store import JsonFileStore
from planyt.storage.repository import ForecastRunRecord, persist_mappings, save_forecast_run
from planyt.utils.config import load_settings
from planyt.utils.logger import logger

_store: Optional[JsonFileStore] = None
_engine: Optional[QueryEngine] = None


def get_store() -> JsonFileStore:
    global _store
    if _store is None:
        _store = JsonFileStore(load_settings().store_dir)
    return _store


def get_query_engine() -> QueryEngine:
    global _engine
    if _engine is None:
        _engine = FlightSQLQueryEngine()
    return _engine


def run_auto_mapping(
    rows: List[Dict[str, Any]],
    candidates: List[Candidate],
    model: Optional[str] = None,
    tenant_id: Optional[str] = None,
    dataset_id: Optional[str] = None,
) -> tuple[List[ColumnMapping], int]:
    mapper = AutoMapper(embedder=get_embedding_client(), model=model or DEFAULT_MODEL)
    mappings = mapper.map_columns(rows, candidates)
    persisted = 0
    if tenant_id and dataset_id:
        persisted = persist_mappings(get_store(), tenant_id, dataset_id, mappings)
    return mappings, persisted


def run_forecast(
    start_date: str,
    end_date: str,
    product: Optional[str] = None,
    table: str = "sample_sales",
    timeout_seconds: Optional[int] = None,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Run a forecast job and record the run, successful or not."""
    sql = build_forecast_query(start_date, end_date, product=product, table=table)
    params: Dict[str, Any] = {"start_date": start_date, "end_date": end_date}
    if product:
        params["product"] = product

    started_at = datetime.now(timezone.utc)
    record = ForecastRunRecord(
        job_id=str(uuid.uuid4()),
        query=sql,
        requested_at=started_at.isoformat(),
        status="success",
        params={"product": product, "start_date": start_date, "end_date": end_date, "job_timeout_seconds": timeout_seconds},
        requested_by=user_id,
    )
    try:
        result = run_forecast_job(
            get_query_engine(),
            sql,
            params=params,
            labels={"application": "planyt", "feature": "forecast"},
            timeout_seconds=timeout_seconds,
        )
    except Exception as e:
        ended_at = datetime.now(timezone.utc)
        record.status = "error"
        record.error = str(e)
        record.completed_at = ended_at.isoformat()
        record.duration_ms = round((ended_at - started_at).total_seconds() * 1000, 2)
        _record_run(record)
        raise

    ended_at = datetime.now(timezone.utc)
    record.job_id = result.job_id
    record.rows = result.rows
    record.completed_at = ended_at.isoformat()
    record.duration_ms = round((ended_at - started_at).total_seconds() * 1000, 2)
    _record_run(record)

    return {
        "job_id": result.job_id,
        "started_at": started_at.isoformat(),
        "ended_at": record.completed_at,
        "duration_ms": record.duration_ms,
        "rows": result.rows,
    }


def _record_run(record: ForecastRunRecord) -> None:
    try:
        save_forecast_run(get_store(), record)
    except Exception as e:
        logger.error(f"Failed to persist forecast run: {e}")


def converse(text: str, user_id: str) -> ActionResponse:
    handler = ConversationHandler(engine=get_query_engine(), store=get_store())
    return handler.handle(text, user_id)
