from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Dict, NamedTuple, Optional, Tuple

from services.errors import ValidationError


class RangeSpec(NamedTuple):
    lookback_days: Optional[int]  # None means calendar years, see ALL_YEARS
    interval: str


DEFAULT_RANGE = "1m"
ALL_YEARS = 20

# range token -> (lookback, yfinance sampling interval)
RANGES: Dict[str, RangeSpec] = {
    "1d": RangeSpec(1, "1m"),
    "1w": RangeSpec(7, "30m"),
    "1m": RangeSpec(30, "1h"),
    "3m": RangeSpec(90, "1d"),
    "6m": RangeSpec(180, "1d"),
    "1y": RangeSpec(365, "1wk"),
    "all": RangeSpec(None, "1mo"),
}


def normalize_range(range_: Optional[str]) -> str:
    token = (range_ or "").strip().lower() or DEFAULT_RANGE
    if token not in RANGES:
        raise ValidationError(
            f"Unsupported range '{range_}'. Expected one of: {', '.join(RANGES)}"
        )
    return token


def _years_back(now: datetime, years: int) -> datetime:
    try:
        return now.replace(year=now.year - years)
    except ValueError:
        # 29 Feb in a non-leap target year
        return now.replace(year=now.year - years, day=28)


def compute_period(range_: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return the ``(start, end)`` window for a range token, ending at ``now``."""
    spec = RANGES[normalize_range(range_)]
    end = now or datetime.now(timezone.utc)
    if spec.lookback_days is None:
        return _years_back(end, ALL_YEARS), end
    return end - timedelta(days=spec.lookback_days), end


def pick_interval(range_: str) -> str:
    return RANGES[normalize_range(range_)].interval
