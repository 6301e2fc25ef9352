from .query_builder import build_forecast_query, render_sql_template
from .service import ForecastJobResult, run_forecast_job

__all__ = ["ForecastJobResult", "build_forecast_query", "render_sql_template", "run_forecast_job"]
