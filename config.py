import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # Server
    HOST: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    PORT: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))
    DEBUG: bool = field(default_factory=lambda: _env_bool("DEBUG"))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Cache
    CACHE_TTL_SECONDS: int = field(default_factory=lambda: int(os.getenv("CACHE_TTL_SECONDS", "600")))
    CACHE_MAXSIZE: int = field(default_factory=lambda: int(os.getenv("CACHE_MAXSIZE", "1024")))
    CACHE_SWEEP_SECONDS: int = field(default_factory=lambda: int(os.getenv("CACHE_SWEEP_SECONDS", "60")))

    # Yahoo Finance
    UPSTREAM_TIMEOUT_SECS: float = field(default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT_SECS", "5")))
    SCREENER_COUNT: int = field(default_factory=lambda: int(os.getenv("SCREENER_COUNT", "10")))
    SCREENER_REGION: str = field(default_factory=lambda: os.getenv("SCREENER_REGION", "US"))
