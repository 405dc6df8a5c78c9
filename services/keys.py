from services.errors import ValidationError

TOP_GAINERS_KEY = "top_gainers"
TOP_LOSERS_KEY = "top_losers"


def normalize_symbol(symbol: str) -> str:
    ticker = (symbol or '').strip().upper()
    if not ticker:
        raise ValidationError("symbol is required")
    return ticker


def overview_key(symbol: str) -> str:
    return f"overview_{normalize_symbol(symbol)}"


def time_series_key(symbol: str, range_: str) -> str:
    return f"timeseries_{normalize_symbol(symbol)}_{range_.lower()}"


def logo_key(symbol: str) -> str:
    return f"logo_{normalize_symbol(symbol)}"
