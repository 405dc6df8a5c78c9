"""
Turn raw Yahoo Finance payloads into the response shapes served by the API.

Yahoo omits fields freely, so every optional field falls back to a sentinel:
"N/A" (or a fixed placeholder) for text and ``None`` for numbers. A payload
without the data a response cannot do without raises ``DataUnavailableError``.
"""
from __future__ import annotations
import math
import re
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from services.errors import DataUnavailableError

NA = "N/A"
NO_DESCRIPTION = "No description available"
LOGO_URL = "https://logo.clearbit.com/{domain}"


def _raw(value: Any) -> Any:
    """Unwrap Yahoo's ``{"raw": 1.5, "fmt": "1.50"}`` number objects."""
    if isinstance(value, dict):
        return value.get("raw")
    return value


def _first(*values: Any) -> Any:
    """First value that is not None (numbers: 0 is a real value)."""
    for v in values:
        v = _raw(v)
        if v is not None:
            return v
    return None


def _first_text(*values: Any, default: Optional[str] = NA) -> Optional[str]:
    """First non-empty string."""
    for v in values:
        if v:
            return v
    return default


def _percent(value: Any) -> Optional[str]:
    value = _raw(value)
    if value is None:
        return None
    try:
        return f"{float(value) * 100:.2f}%"
    except (TypeError, ValueError):
        return None


def _module(summary: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = summary.get(name) or {}
    if not isinstance(value, dict):
        raise DataUnavailableError(f"Malformed {name} module")
    return value


def _profile(summary: Dict[str, Any]) -> Dict[str, Any]:
    return _module(summary, "assetProfile") or _module(summary, "summaryProfile")


def normalize_overview(ticker: str, summary: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(summary, dict) or not summary.get("price"):
        raise DataUnavailableError("Stock symbol not found or Yahoo returned empty data")

    price = _module(summary, "price")
    profile = _profile(summary)
    stats = _module(summary, "defaultKeyStatistics")

    dividend_yield = _percent(stats.get("dividendYield"))
    if dividend_yield is None:
        dividend_yield = _percent(price.get("dividendYield"))

    return {
        "symbol": price.get("symbol") or ticker,
        "name": _first_text(price.get("shortName"), price.get("longName")),
        "description": _first_text(profile.get("longBusinessSummary"), default=NO_DESCRIPTION),
        "exchange": _first_text(price.get("exchangeName"), price.get("fullExchangeName")),
        "sector": _first_text(profile.get("sector")),
        "industry": _first_text(profile.get("industry")),
        "marketCap": _first(price.get("marketCap"), stats.get("marketCap")),
        "peRatio": _first(stats.get("forwardPE"), stats.get("trailingPE")),
        "dividendYield": dividend_yield,
        "week52High": _first(price.get("fiftyTwoWeekHigh")),
        "week52Low": _first(price.get("fiftyTwoWeekLow")),
        "beta": _first(stats.get("beta"), price.get("beta")),
        "eps": _first(stats.get("trailingEps")),
        "currentPrice": _first(price.get("regularMarketPrice"), price.get("currentPrice")),
    }


def _iso_utc(value: Any) -> str:
    ts = pd.Timestamp(value)
    ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def _number(value: Any, cast=float):
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return cast(value)


def normalize_time_series(ticker: str, range_: str, df: pd.DataFrame) -> Dict[str, Any]:
    """``df`` is the frame returned by ``YahooFinanceClient.chart``."""
    if df is None or df.empty or "date" not in df.columns:
        raise DataUnavailableError("No chart data available for this symbol")

    try:
        dates = pd.to_datetime(df["date"], errors="coerce", utc=True)
    except (TypeError, ValueError) as exc:
        raise DataUnavailableError(f"Malformed timestamps in chart data: {exc}") from exc
    if (dates.isna() & df["date"].notna()).any():
        raise DataUnavailableError("Malformed timestamps in chart data")
    df = df.assign(date=dates).dropna(subset=["date"]).sort_values("date")
    data = []
    for row in df.to_dict("records"):
        data.append({
            "time": _iso_utc(row["date"]),
            "price": _number(row.get("Close")),
            "open": _number(row.get("Open")),
            "high": _number(row.get("High")),
            "low": _number(row.get("Low")),
            "volume": _number(row.get("Volume"), int),
        })

    if not data:
        raise DataUnavailableError("No chart data available for this symbol")
    return {"symbol": ticker, "range": range_, "data": data}


def normalize_movers(quotes: Iterable[Dict[str, Any]], limit: int = 10) -> List[Dict[str, Any]]:
    movers = []
    for stock in quotes:
        if not isinstance(stock, dict) or not stock.get("symbol"):
            continue
        movers.append({
            "symbol": stock["symbol"],
            "name": _first_text(stock.get("shortName"), stock.get("longName"), default=stock["symbol"]),
            "price": _raw(stock.get("regularMarketPrice")) or 0,
            "change": _raw(stock.get("regularMarketChange")) or 0,
            "changePercent": _raw(stock.get("regularMarketChangePercent")) or 0,
            "volume": _raw(stock.get("regularMarketVolume")) or 0,
        })
        if len(movers) >= limit:
            break

    if not movers:
        raise DataUnavailableError("Screener returned no quotes")
    return movers


def website_domain(website: Optional[str]) -> Optional[str]:
    if not website:
        return None
    domain = re.sub(r"^https?://", "", website.strip())
    domain = re.sub(r"^www\.", "", domain)
    return domain.split("/")[0] or None


def normalize_logo(ticker: str, summary: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(summary, dict) or not summary:
        raise DataUnavailableError("Yahoo returned no profile data")

    profile = _profile(summary)
    price = _module(summary, "price")
    website = profile.get("website") or None
    if website is not None and not isinstance(website, str):
        raise DataUnavailableError("Malformed website in profile data")
    domain = website_domain(website)

    return {
        "logoUrl": LOGO_URL.format(domain=domain) if domain else None,
        "domain": domain,
        "symbol": ticker,
        "companyName": _first_text(price.get("shortName"), price.get("longName"),
                                   profile.get("longName"), default=ticker),
        "website": website,
    }
