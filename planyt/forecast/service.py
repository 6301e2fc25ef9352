from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from planyt.connection.query_engine import QueryEngine
from planyt.utils.logger import logger


@dataclass
class ForecastJobResult:
    job_id: str
    rows: List[Dict[str, Any]]
    statistics: Dict[str, Any] = field(default_factory=dict)


def run_forecast_job(
    engine: QueryEngine,
    query: str,
    params: Optional[Mapping[str, Any]] = None,
    labels: Optional[Mapping[str, str]] = None,
    timeout_seconds: Optional[int] = None,
) -> ForecastJobResult:
    """Run a forecast query on `engine`. Prefer named parameters over inlined values."""
    logger.info(f"Running forecast job: {dict(labels or {})}")
    started = time.time()

    result = engine.run(query, params=params, labels=labels, timeout_seconds=timeout_seconds)

    duration_ms = round((time.time() - started) * 1000, 2)
    log_data = {"job_id": result.job_id, "duration_ms": duration_ms}
    logger.info(f"Forecast job finished: {log_data}")

    return ForecastJobResult(job_id=result.job_id or "unknown", rows=result.rows, statistics=result.statistics)
