#  Latam Site - Key/Value Store
#
#  Minimal get/set/evict store interface for per-process request state
#  (CSRF tokens). MemoryStore is the single-process implementation; a shared
#  store (e.g. Redis) can implement the same protocol for multi-worker
#  deployments without touching the gate.
#
#  Depends on: (none)
#  Used by:    container.py, services/csrf.py

import threading
import time
from typing import Any, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: float | None = None) -> None: ...

    def evict(self, key: str) -> None: ...


class MemoryStore:
    """Lock-guarded dict with optional per-entry expiry.

    Expired entries are dropped lazily on read and swept in bulk every
    ``sweep_interval`` seconds on write, so idle keys don't accumulate.
    """

    def __init__(self, sweep_interval: float = 60.0, clock=time.monotonic):
        self._data: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and expires_at <= self._clock():
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        with self._lock:
            now = self._clock()
            expires_at = now + ttl if ttl is not None else None
            self._data[key] = (value, expires_at)
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

    def evict(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _sweep(self, now: float) -> None:
        expired = [
            key for key, (_, expires_at) in self._data.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._data[key]
        self._last_sweep = now
