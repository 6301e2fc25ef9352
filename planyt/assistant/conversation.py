from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Pattern, Tuple

from planyt.connection.query_engine import QueryEngine
from planyt.errors import StoreError
from planyt.forecast.query_builder import build_forecast_query
from planyt.forecast.service import run_forecast_job
from planyt.storage.json_store import JsonFileStore
from planyt.storage.repository import ForecastRunRecord, recent_forecast_runs, save_forecast_run
from planyt.utils.logger import logger

from .timeframe import parse_product, parse_timeframe


class ConversationalAction(str, Enum):
    FORECAST = "forecast"
    SIMULATE = "simulate"
    RECALL = "recall"
    UNKNOWN = "unknown"


# First match wins
ACTION_RULES: List[Tuple[Pattern[str], ConversationalAction]] = [
    (re.compile(r"(forecast|predict|projection|estimate)", re.IGNORECASE), ConversationalAction.FORECAST),
    (re.compile(r"(simulate|what if|scenario|impact|adjust)", re.IGNORECASE), ConversationalAction.SIMULATE),
    (re.compile(r"(recall|past|previous|history|show)", re.IGNORECASE), ConversationalAction.RECALL),
]

PROMPT_TEMPLATES: Dict[ConversationalAction, str] = {
    ConversationalAction.FORECAST: (
        "You are preparing parameters for a demand forecast. Extract product name, timeframe "
        '(start & end dates), and any filters from: "{user_text}".'
    ),
    ConversationalAction.SIMULATE: (
        "You are preparing a simulation scenario. Identify the direction (increase/decrease) "
        'and the percentage change from: "{user_text}".'
    ),
    ConversationalAction.RECALL: (
        "You are preparing a recall request. Determine what historical results the user is "
        'seeking from: "{user_text}".'
    ),
}

_ADJUSTMENT_RE = re.compile(r"(increase|decrease)[^\d]*(\d+(?:\.\d+)?)%", re.IGNORECASE)
DEFAULT_ADJUSTMENT_PERCENT = 10.0
BASE_VALUE_KEYS = ("forecast_sum", "forecast_revenue", "total_revenue", "revenue")
RECALL_LIMIT = 5


@dataclass
class ActionResponse:
    action: ConversationalAction
    status: str  # 'ok' | 'error'
    payload: Any
    human_message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "status": self.status,
            "payload": self.payload,
            "human_message": self.human_message,
        }


def classify_action(text: str) -> ConversationalAction:
    for pattern, action in ACTION_RULES:
        if pattern.search(text):
            return action
    return ConversationalAction.UNKNOWN


def render_prompt(action: ConversationalAction, user_text: str) -> str:
    if action not in PROMPT_TEMPLATES:
        raise KeyError(f"No prompt template for action '{action.value}'")
    return PROMPT_TEMPLATES[action].format(user_text=user_text)


def simulate_adjustment(value: float, change_percent: float, direction: str) -> float:
    if math.isnan(value):
        return value
    factor = change_percent / 100
    return value * (1 + factor) if direction == "increase" else value * (1 - factor)


def _base_value(row: Dict[str, Any]) -> Optional[float]:
    raw: Any = 0
    for key in BASE_VALUE_KEYS:
        if row.get(key) is not None:
            raw = row[key]
            break
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


class ConversationHandler:
    """
    Routes a free-text request to a forecast, simulation or recall action.

    `store` may be None; actions that need history then answer with an error
    response instead of raising.
    """

    def __init__(self, engine: QueryEngine, store: Optional[JsonFileStore] = None, table: str = "sample_sales") -> None:
        self.engine = engine
        self.store = store
        self.table = table

    def handle(self, user_text: str, user_id: str) -> ActionResponse:
        action = classify_action(user_text)
        try:
            if action is ConversationalAction.FORECAST:
                return self._handle_forecast(user_text, user_id)
            if action is ConversationalAction.SIMULATE:
                return self._handle_simulation(user_text, user_id)
            if action is ConversationalAction.RECALL:
                return self._handle_recall(user_id)
            return ActionResponse(
                action=ConversationalAction.UNKNOWN,
                status="error",
                payload=None,
                human_message=(
                    "I couldn't match that request to a known action. Try asking for a forecast, "
                    "simulation, or your previous runs."
                ),
            )
        except Exception as e:
            logger.error(f"Conversational action handler failed ({action.value}): {e}", exc_info=True)
            return ActionResponse(
                action=action,
                status="error",
                payload=None,
                human_message="Something went wrong while processing your request. Please try again.",
            )

    def _handle_forecast(self, user_text: str, user_id: str) -> ActionResponse:
        timeframe = parse_timeframe(user_text)
        product = parse_product(user_text)
        sql = build_forecast_query(timeframe.start_date, timeframe.end_date, product=product, table=self.table)

        log_data = {
            "user_id": user_id,
            "start_date": timeframe.start_date,
            "end_date": timeframe.end_date,
            "product": product,
        }
        logger.info(f"Running conversational forecast: {log_data}")

        started_at = datetime.now(timezone.utc)
        params: Dict[str, Any] = {"start_date": timeframe.start_date, "end_date": timeframe.end_date}
        if product:
            params["product"] = product
        result = run_forecast_job(
            self.engine,
            sql,
            params=params,
            labels={"action": "forecast", "requested_by": user_id},
        )
        completed_at = datetime.now(timezone.utc)

        if self.store is None:
            logger.warning("No store configured; forecast run not persisted")
        else:
            try:
                save_forecast_run(self.store, ForecastRunRecord(
                    job_id=result.job_id,
                    query=sql,
                    requested_at=started_at.isoformat(),
                    completed_at=completed_at.isoformat(),
                    duration_ms=round((completed_at - started_at).total_seconds() * 1000, 2),
                    status="success",
                    params={"product": product, **timeframe.to_dict()},
                    rows=result.rows,
                    requested_by=user_id,
                ))
            except Exception as e:
                logger.warning(f"Failed to persist forecast run from conversational handler: {e}")

        return ActionResponse(
            action=ConversationalAction.FORECAST,
            status="ok",
            payload={"rows": result.rows, "job_id": result.job_id, "timeframe": timeframe.to_dict()},
            human_message=(
                f"Forecast ready for {product or 'all products'} between "
                f"{timeframe.start_date} and {timeframe.end_date}."
            ),
        )

    def _handle_simulation(self, user_text: str, user_id: str) -> ActionResponse:
        match = _ADJUSTMENT_RE.search(user_text)
        direction = "decrease" if match and match.group(1).lower() == "decrease" else "increase"
        percentage = float(match.group(2)) if match else DEFAULT_ADJUSTMENT_PERCENT
        signed_percent = percentage if direction == "increase" else -percentage

        if self.store is None:
            return ActionResponse(
                action=ConversationalAction.SIMULATE,
                status="error",
                payload=None,
                human_message="Simulation requires a configured store to fetch the last forecast run.",
            )

        try:
            latest = recent_forecast_runs(self.store, user_id, limit=1)
        except StoreError as e:
            logger.error(f"Failed to load latest forecast run: {e}")
            latest = []
        if not latest:
            return ActionResponse(
                action=ConversationalAction.SIMULATE,
                status="error",
                payload=None,
                human_message="No recent forecast available to simulate. Run a forecast first.",
            )

        simulated_rows = []
        for row in latest[0].get("rows") or []:
            base = _base_value(row)
            simulated = None if base is None else round(simulate_adjustment(base, percentage, direction), 2)
            simulated_rows.append({**row, "simulated_revenue": simulated, "adjustment_percent": signed_percent})

        return ActionResponse(
            action=ConversationalAction.SIMULATE,
            status="ok",
            payload={"simulated_rows": simulated_rows, "change_percent": signed_percent},
            human_message=f"Applied a {direction} of {percentage:g}% to the most recent forecast results.",
        )

    def _handle_recall(self, user_id: str) -> ActionResponse:
        if self.store is None:
            return ActionResponse(
                action=ConversationalAction.RECALL,
                status="error",
                payload=None,
                human_message="Unable to access forecast history because no store is configured.",
            )

        try:
            runs = recent_forecast_runs(self.store, user_id, limit=RECALL_LIMIT)
        except StoreError as e:
            logger.error(f"Failed to recall forecast history: {e}")
            return ActionResponse(
                action=ConversationalAction.RECALL,
                status="error",
                payload=None,
                human_message="Could not retrieve your past forecasts right now.",
            )

        payload = [
            {k: r.get(k) for k in ("job_id", "requested_at", "status", "rows")}
            for r in runs
        ]
        return ActionResponse(
            action=ConversationalAction.RECALL,
            status="ok",
            payload=payload,
            human_message=f"Found {len(payload)} recent forecasts for your account.",
        )
