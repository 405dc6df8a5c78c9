from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from services import keys
from services.errors import DataUnavailableError, UpstreamError
from services.normalize import (
    normalize_logo,
    normalize_movers,
    normalize_overview,
    normalize_time_series,
)
from services.ranges import compute_period, normalize_range, pick_interval
from services.yahoo import LOGO_MODULES, OVERVIEW_MODULES, YahooFinanceClient
from utils.cache import TTLCache

logger = logging.getLogger(__name__)


class MarketDataService:
    """
    Read-through access to Yahoo Finance data.

    Each operation computes its cache key, returns the cached payload on a hit
    and otherwise fetches, normalizes and stores it. Failures are never cached,
    so the next request goes back to Yahoo.
    """

    def __init__(self, cache: TTLCache, client: YahooFinanceClient,
                 ttl: Optional[int] = None, screener_count: int = 10,
                 now: Optional[Callable[[], datetime]] = None):
        self.cache = cache
        self.client = client
        self.ttl = ttl
        self.screener_count = screener_count
        self._now = now

    def _cached(self, key: str):
        value = self.cache.get(key)
        logger.debug("cache %s for %s", "hit" if value is not None else "miss", key)
        return value

    def _populate(self, key: str, fetch: Callable[[], Any], failure: str):
        try:
            value = fetch()
        except (UpstreamError, DataUnavailableError) as exc:
            logger.warning("%s (%s): %s", failure, key, exc)
            raise DataUnavailableError(failure) from exc
        except (TypeError, ValueError, AttributeError, KeyError) as exc:
            # payload shape nobody anticipated
            logger.warning("%s (%s): malformed upstream payload: %r", failure, key, exc)
            raise DataUnavailableError(failure) from exc
        self.cache.set(key, value, self.ttl)
        return value

    def overview(self, symbol: str) -> Dict[str, Any]:
        ticker = keys.normalize_symbol(symbol)
        key = keys.overview_key(ticker)
        cached = self._cached(key)
        if cached is not None:
            return cached

        def fetch():
            summary = self.client.quote_summary(ticker, OVERVIEW_MODULES)
            return normalize_overview(ticker, summary)

        return self._populate(key, fetch, "Failed to fetch stock data from Yahoo Finance")

    def time_series(self, symbol: str, range_: Optional[str] = None) -> Dict[str, Any]:
        ticker = keys.normalize_symbol(symbol)
        token = normalize_range(range_)
        key = keys.time_series_key(ticker, token)
        cached = self._cached(key)
        if cached is not None:
            return cached

        def fetch():
            now = self._now() if self._now else None
            start, end = compute_period(token, now)
            df = self.client.chart(ticker, start, end, pick_interval(token))
            return normalize_time_series(ticker, token, df)

        return self._populate(key, fetch, "Failed to fetch time series data from Yahoo Finance")

    def _movers(self, key: str, scr_id: str, failure: str) -> List[Dict[str, Any]]:
        cached = self._cached(key)
        if cached is not None:
            return cached

        def fetch():
            quotes = self.client.screener(scr_id, self.screener_count)
            return normalize_movers(quotes, self.screener_count)

        return self._populate(key, fetch, failure)

    def top_gainers(self) -> List[Dict[str, Any]]:
        return self._movers(keys.TOP_GAINERS_KEY, "day_gainers",
                            "Unable to fetch top gainers from Yahoo Finance")

    def top_losers(self) -> List[Dict[str, Any]]:
        return self._movers(keys.TOP_LOSERS_KEY, "day_losers",
                            "Unable to fetch top losers from Yahoo Finance")

    def company_logo(self, symbol: str) -> Dict[str, Any]:
        ticker = keys.normalize_symbol(symbol)
        key = keys.logo_key(ticker)
        cached = self._cached(key)
        if cached is not None:
            return cached

        def fetch():
            summary = self.client.quote_summary(ticker, LOGO_MODULES)
            return normalize_logo(ticker, summary)

        return self._populate(key, fetch, "Failed to fetch company logo from Yahoo Finance")
