#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from planyt.connection.query_engine import FlightSQLQueryEngine, enforce_timeout
from planyt.forecast.query_builder import render_sql_template
from planyt.forecast.service import run_forecast_job
from planyt.utils.config import load_settings
from planyt.utils.logger import logger

PREVIEW_ROWS = 10


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Run a parameterized forecast query against the lakehouse.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("--start-date", required=True, help="ISO date for forecast range start")
    ap.add_argument("--end-date", required=True, help="ISO date for forecast range end")
    ap.add_argument("--product", default=None, help="Optional product filter")
    ap.add_argument("--template", default="./sql/forecast_template.sql", help="Path to the SQL template file")
    ap.add_argument("--schema", default=None, help="Override the lakehouse schema (FORECAST_SCHEMA)")
    ap.add_argument("--table", default="sample_sales", help="Sales table name")
    ap.add_argument("--timeout", type=int, default=None, help="Job timeout in seconds (max 120)")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None, engine=None) -> int:
    args = parse_args(argv)
    try:
        timeout = enforce_timeout(args.timeout)
        template = Path(args.template).read_text(encoding="utf-8")
        schema = args.schema or load_settings().forecast_schema
        query = render_sql_template(template, {"schema": schema, "table": args.table})

        params = {"start_date": args.start_date, "end_date": args.end_date, "product": args.product}
        log_data = {"schema": schema, "table": args.table, "timeout": timeout}
        logger.info(f"Submitting forecast job: {log_data}")

        result = run_forecast_job(
            engine or FlightSQLQueryEngine(),
            query,
            params=params,
            labels={"application": "planyt", "feature": "forecast"},
            timeout_seconds=timeout,
        )
    except Exception as e:
        logger.error(f"Forecast job failed: {e}")
        return 1

    summary = {
        "job_id": result.job_id,
        "statistics": result.statistics,
        "rows_preview": result.rows[:PREVIEW_ROWS],
    }
    print(json.dumps(summary, indent=2, default=str))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
