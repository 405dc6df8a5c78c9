import logging
import threading
from time import monotonic
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLCache:
    """Thread-safe TTL cache shared by every market data request.

    Entries hold an absolute expiry; a read past it is a miss. Expired entries
    are dropped when read and swept from ``set`` every ``sweep_interval``
    seconds.
    """
    def __init__(self, ttl_seconds: int = 600, maxsize: Optional[int] = 1024,
                 sweep_interval: float = 60.0, clock: Callable[[], float] = monotonic):
        self.ttl = ttl_seconds
        self.maxsize = maxsize
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._store: Dict[str, Tuple[float, Any]] = {}
        self._last_sweep = clock()

    def get(self, key: str):
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            expires_at, val = item
            if self._clock() >= expires_at:
                self._store.pop(key, None)
                return None
            return val

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        ttl = self.ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.sweep_interval:
                self._evict_expired(now)
            if self.maxsize and key not in self._store and len(self._store) >= self.maxsize:
                # stale entries go first, then whichever would expire soonest
                self._evict_expired(now)
                if len(self._store) >= self.maxsize:
                    soonest = min(self._store.items(), key=lambda kv: kv[1][0])[0]
                    self._store.pop(soonest, None)
            self._store[key] = (now + ttl, value)

    def evict_expired(self) -> int:
        with self._lock:
            return self._evict_expired(self._clock())

    def _evict_expired(self, now: float) -> int:
        expired = [k for k, (expires_at, _) in self._store.items() if now >= expires_at]
        for k in expired:
            del self._store[k]
        self._last_sweep = now
        if expired:
            logger.debug("Evicted %d expired cache entries", len(expired))
        return len(expired)

    def clear(self):
        with self._lock:
            self._store.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        """Live entries only; expired ones are swept first."""
        with self._lock:
            self._evict_expired(self._clock())
            return len(self._store)
