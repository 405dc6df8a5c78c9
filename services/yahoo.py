"""
Thin Yahoo Finance client.

Everything goes through yfinance: price history through ``Ticker.history`` and
the raw quoteSummary / screener endpoints through yfinance's shared session,
which takes care of Yahoo's cookie + crumb handshake. Any failure is re-raised
as ``UpstreamError`` so callers only ever deal with one exception type.
"""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List

import pandas as pd
import yfinance as yf
from yfinance.data import YfData

from services.errors import UpstreamError

logger = logging.getLogger(__name__)

QUOTE_SUMMARY_URL = "https://query2.finance.yahoo.com/v10/finance/quoteSummary"
SCREENER_URL = "https://query1.finance.yahoo.com/v1/finance/screener/predefined/saved"

OVERVIEW_MODULES = ("price", "assetProfile", "summaryProfile", "defaultKeyStatistics")
LOGO_MODULES = ("assetProfile", "summaryProfile", "price")


def _object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise UpstreamError(f"{what} is not an object: {type(value).__name__}")
    return value


def _list(value: Any, what: str) -> List[Any]:
    if not isinstance(value, list):
        raise UpstreamError(f"{what} is not a list: {type(value).__name__}")
    return value


class YahooFinanceClient:
    def __init__(self, timeout: float = 5, region: str = "US", lang: str = "en-US"):
        self.timeout = timeout
        self.region = region
        self.lang = lang
        self._data = None

    @property
    def data(self) -> YfData:
        if self._data is None:
            self._data = YfData()
        return self._data

    def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            body = self.data.get_raw_json(url, params=params, timeout=self.timeout)
        except Exception as exc:
            raise UpstreamError(f"GET {url} failed: {exc}") from exc
        if not isinstance(body, dict):
            raise UpstreamError(f"GET {url} returned a non-object body")
        return body

    def quote_summary(self, symbol: str, modules: Iterable[str] = OVERVIEW_MODULES) -> Dict[str, Any]:
        """Return the quoteSummary result for ``symbol`` keyed by module name."""
        params = {
            "modules": ",".join(modules),
            "corsDomain": "finance.yahoo.com",
            "formatted": "false",
            "symbol": symbol,
        }
        body = self._get_json(f"{QUOTE_SUMMARY_URL}/{symbol}", params)
        summary = _object(body.get("quoteSummary") or {}, "quoteSummary")
        if summary.get("error"):
            raise UpstreamError(f"quoteSummary error for {symbol}: {summary['error']}")
        result = _list(summary.get("result") or [], "quoteSummary.result")
        if not result:
            return {}
        return _object(result[0], "quoteSummary.result[0]")

    def chart(self, symbol: str, start: datetime, end: datetime, interval: str) -> pd.DataFrame:
        """Price history for ``symbol`` between ``start`` and ``end``.

        Returns a frame with a ``date`` column followed by Open/High/Low/Close/Volume,
        or an empty frame when Yahoo has nothing for the window.
        """
        try:
            t = yf.Ticker(symbol)
            df = t.history(start=start, end=end, interval=interval, actions=False,
                           raise_errors=True, timeout=self.timeout)
        except Exception as exc:
            raise UpstreamError(f"history for {symbol} ({interval}) failed: {exc}") from exc
        if df is None or df.empty:
            return pd.DataFrame()
        df = df.rename(columns={c: c.title() for c in df.columns})
        df = df.reset_index()
        return df.rename(columns={df.columns[0]: "date"})

    def screener(self, scr_id: str, count: int = 10) -> List[Dict[str, Any]]:
        """Quotes of a predefined Yahoo screener such as ``day_gainers``."""
        params = {
            "formatted": "true",
            "scrIds": scr_id,
            "count": count,
            "region": self.region,
            "lang": self.lang,
        }
        body = self._get_json(SCREENER_URL, params)
        finance = body.get("finance")
        if not finance:
            raise UpstreamError(f"screener {scr_id} returned no finance block")
        finance = _object(finance, "finance")
        result = _list(finance.get("result") or [{}], "finance.result")
        first = _object(result[0] or {}, "finance.result[0]")
        return _list(first.get("quotes") or [], "finance.result[0].quotes")
