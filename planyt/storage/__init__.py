from .json_store import JsonFileStore
from .repository import (
    FIELD_MAPPINGS_TABLE,
    FORECAST_RUNS_TABLE,
    ForecastRunRecord,
    persist_mappings,
    recent_forecast_runs,
    save_forecast_run,
)

__all__ = [
    "FIELD_MAPPINGS_TABLE",
    "FORECAST_RUNS_TABLE",
    "ForecastRunRecord",
    "JsonFileStore",
    "persist_mappings",
    "recent_forecast_runs",
    "save_forecast_run",
]
