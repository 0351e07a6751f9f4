import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


@dataclass(frozen=True)
class CACHE_KEYS:
    AUTH_TOKEN = "auth_token"
    ALL_STOCKS = "all_stocks"


def series_key(ticker: str, minutes: int) -> Tuple[str, int]:
    return (ticker, minutes)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """
    Cache en memoria con expiración perezosa.

    Cada instancia es un namespace independiente (token, series, ...).
    Una entrada vencida nunca se devuelve: se descarta al leerla, y cada
    set barre las vencidas para que el mapa no crezca sin límite.
    """

    def __init__(self, default_ttl: float, clock: Callable[[], float] = time.time):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        now = self._clock()
        self._sweep(now)
        self._entries[key] = CacheEntry(value=value, expires_at=now + ttl)

    def get(self, key: Hashable) -> Optional[Any]:
        item = self._entries.get(key)
        if item is None:
            return None
        if self._clock() >= item.expires_at:
            self._entries.pop(key, None)
            return None
        return item.value

    def _sweep(self, now: float) -> None:
        expired = [k for k, item in self._entries.items() if now >= item.expires_at]
        for k in expired:
            del self._entries[k]

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
