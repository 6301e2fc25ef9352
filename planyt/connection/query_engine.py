from __future__ import annotations

import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import polars as pl

from planyt.connection.connection import ConnectionSettings, get_connection
from planyt.utils.logger import logger

MAX_TIMEOUT_SECONDS = 120

_PARAM_RE = re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)")


@dataclass
class QueryResult:
    job_id: str
    rows: List[Dict[str, Any]]
    statistics: Dict[str, Any] = field(default_factory=dict)


class QueryEngine(Protocol):
    def run(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        labels: Optional[Mapping[str, str]] = None,
        timeout_seconds: Optional[int] = None,
    ) -> QueryResult:  # pragma: no cover - interface
        ...


def enforce_timeout(timeout_seconds: Optional[int]) -> Optional[int]:
    if not timeout_seconds:
        return None
    if timeout_seconds > MAX_TIMEOUT_SECONDS:
        raise ValueError(f"Job timeout cannot exceed {MAX_TIMEOUT_SECONDS} seconds")
    return int(timeout_seconds)


def bind_named_parameters(query: str, params: Optional[Mapping[str, Any]] = None) -> Tuple[str, List[Any]]:
    """
    Rewrite `@name` placeholders to positional `?` and collect their values.

        >>> bind_named_parameters("WHERE a = @x AND b = @y OR c = @x", {"x": 1, "y": 2})
        ('WHERE a = ? AND b = ? OR c = ?', [1, 2, 1])
    """
    params = params or {}
    values: List[Any] = []

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in params:
            raise KeyError(f"Missing query parameter: {name}")
        values.append(params[name])
        return "?"

    return _PARAM_RE.sub(_replace, query), values


class FlightSQLQueryEngine:
    """
    Runs aggregation queries against the lakehouse over ADBC Flight SQL and
    returns plain row dicts.
    """

    def __init__(self, connection: Optional[ConnectionSettings] = None) -> None:
        self.connection = connection or get_connection()

    def _connect(self):
        import adbc_driver_flightsql.dbapi as flight_sql

        return flight_sql.connect(self.connection.uri, db_kwargs=self.connection.db_kwargs())

    def run(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        labels: Optional[Mapping[str, str]] = None,
        timeout_seconds: Optional[int] = None,
    ) -> QueryResult:
        timeout = enforce_timeout(timeout_seconds)
        sql, values = bind_named_parameters(query, params)
        job_id = str(uuid.uuid4())

        log_data = {"job_id": job_id, "labels": dict(labels or {}), "timeout_s": timeout}
        logger.info(f"Starting query job: {log_data}")
        started = time.time()
        with self._connect() as conn:
            execute_options = {"parameters": values} if values else None
            df = pl.read_database(query=sql, connection=conn, execute_options=execute_options)
        duration_ms = round((time.time() - started) * 1000, 2)

        rows = df.to_dicts()
        log_data = {"job_id": job_id, "row_count": len(rows), "duration_ms": duration_ms}
        logger.info(f"Query job completed: {log_data}")
        return QueryResult(job_id=job_id, rows=rows, statistics={"duration_ms": duration_ms, "row_count": len(rows)})
