from datetime import datetime, timezone

import pandas as pd
import pytest

from app import create_app
from config import Settings
from services.errors import UpstreamError
from services.market import MarketDataService
from utils.cache import TTLCache

FIXED_NOW = datetime(2024, 3, 15, 16, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float):
        self.t += seconds


class FakeYfData:
    """Replaces yfinance's shared session; serves one canned body."""

    def __init__(self, body=None, exc=None):
        self.body = body
        self.exc = exc
        self.requests = []

    def get_raw_json(self, url, params=None, timeout=30):
        self.requests.append((url, params, timeout))
        if self.exc:
            raise self.exc
        return self.body


class FakeYahooClient:
    """Stands in for YahooFinanceClient and records every upstream call."""

    def __init__(self):
        self.summaries = {}
        self.charts = {}
        self.screens = {}
        self.fail = False
        self.calls = []

    def _maybe_fail(self):
        if self.fail:
            raise UpstreamError("simulated timeout")

    def quote_summary(self, symbol, modules=()):
        self.calls.append(("quote_summary", symbol))
        self._maybe_fail()
        return self.summaries.get(symbol, {})

    def chart(self, symbol, start, end, interval):
        self.calls.append(("chart", symbol, start, end, interval))
        self._maybe_fail()
        return self.charts.get(symbol, pd.DataFrame())

    def screener(self, scr_id, count=10):
        self.calls.append(("screener", scr_id, count))
        self._maybe_fail()
        return self.screens.get(scr_id, [])


def price_frame(closes, start="2024-03-14 14:30", freq="h"):
    dates = pd.date_range(start, periods=len(closes), freq=freq, tz="UTC")
    return pd.DataFrame({
        "date": dates,
        "Open": closes,
        "High": [c + 1 for c in closes],
        "Low": [c - 1 for c in closes],
        "Close": closes,
        "Volume": [1000 * (i + 1) for i in range(len(closes))],
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream():
    client = FakeYahooClient()
    client.summaries["AAPL"] = {
        "price": {"symbol": "AAPL", "regularMarketPrice": 150.0, "shortName": "Apple Inc."},
    }
    client.charts["AAPL"] = price_frame([150.0, 151.5, 149.25])
    client.charts["MSFT"] = price_frame([400.0, 401.0])
    return client


@pytest.fixture
def cache(clock):
    return TTLCache(ttl_seconds=600, clock=clock)


@pytest.fixture
def service(cache, upstream):
    return MarketDataService(cache, upstream, ttl=600, now=lambda: FIXED_NOW)


@pytest.fixture
def app(upstream, clock):
    settings = Settings(CACHE_TTL_SECONDS=600, LOG_LEVEL="WARNING")
    app = create_app(settings, client=upstream, clock=clock, now=lambda: FIXED_NOW)
    app.testing = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
