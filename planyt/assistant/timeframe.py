from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Optional

DEFAULT_LOOKBACK_DAYS = 90

_QUARTER_RE = re.compile(r"q([1-4])\s*(20\d{2})")
_YEAR_RE = re.compile(r"(20\d{2})")
_PRODUCT_RE = re.compile(r"for ([\w\s-]+)", re.IGNORECASE)


@dataclass(frozen=True)
class Timeframe:
    start_date: str
    end_date: str  # exclusive
    granularity: str  # 'day' | 'month'

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def add_months(d: date, months: int) -> date:
    """Shift a first-of-month date by `months`."""
    total = d.year * 12 + (d.month - 1) + months
    return date(total // 12, total % 12 + 1, 1)


def start_of_quarter(d: date) -> date:
    return date(d.year, (d.month - 1) // 3 * 3 + 1, 1)


def parse_timeframe(text: str, today: Optional[date] = None) -> Timeframe:
    """
    Resolve a date range from free text. Recognized, in order: "next quarter",
    "next month", "q3 2025", a bare year; otherwise the trailing 90 days.
    """
    lower = text.lower()
    today = today or datetime.now(timezone.utc).date()

    if "next quarter" in lower:
        start = add_months(start_of_quarter(today), 3)
        return Timeframe(start.isoformat(), add_months(start, 3).isoformat(), "month")

    if "next month" in lower:
        start = add_months(date(today.year, today.month, 1), 1)
        return Timeframe(start.isoformat(), add_months(start, 1).isoformat(), "day")

    quarter_match = _QUARTER_RE.search(lower)
    if quarter_match:
        quarter, year = int(quarter_match.group(1)), int(quarter_match.group(2))
        start = date(year, (quarter - 1) * 3 + 1, 1)
        return Timeframe(start.isoformat(), add_months(start, 3).isoformat(), "month")

    year_match = _YEAR_RE.search(lower)
    if year_match:
        year = int(year_match.group(1))
        return Timeframe(date(year, 1, 1).isoformat(), date(year + 1, 1, 1).isoformat(), "month")

    start = today - timedelta(days=DEFAULT_LOOKBACK_DAYS)
    return Timeframe(start.isoformat(), today.isoformat(), "day")


def parse_product(text: str) -> Optional[str]:
    match = _PRODUCT_RE.search(text)
    if match:
        return match.group(1).strip() or None
    return None
