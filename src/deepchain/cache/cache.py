"""Result caching with per-entry TTL.

Stores serialized tool and chain results so identical requests never hit the
completion provider twice. Expiry is lazy (checked on access) with an optional
eager cleanup() sweep; there is no size bound or LRU eviction.

Keys:
    step:  "<tool_name>:<serialized params>"
    chain: step keys joined by "|" in step order
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

import orjson

if TYPE_CHECKING:
    from deepchain.foundation.errors import JsonDict

DEFAULT_TTL: float = 3600.0  # 1 hour
KEY_SEPARATOR = "|"

Clock = Callable[[], float]


class StepLike(Protocol):
    tool_name: str
    params: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached payload with its write time and TTL. Replaced wholesale on re-set."""
    value: str
    timestamp: float
    ttl: float
    metadata: JsonDict | None = None

    def expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class ChainCache:
    """In-memory key/value cache with per-entry TTL.

    get/set run under an RLock so the read-check-then-delete on expiry is a
    critical section when the host shares one cache between threads.

    Args:
        clock: Time source in seconds (defaults to time.time)

    Example:
        >>> cache = ChainCache()
        >>> cache.set("generate_code:{}", '{"success":true}', ttl=60)
        >>> cache.get("generate_code:{}")
        '{"success":true}'
    """

    __slots__ = ("_store", "_clock", "_lock")

    def __init__(self, clock: Clock = time.time) -> None:
        self._store: dict[str, CacheEntry] = {}
        self._clock = clock
        self._lock = threading.RLock()

    def get(self, key: str) -> str | None:
        """Return the payload if present and unexpired. Expired entries are dropped on access."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                del self._store[key]
                return None
            return entry.value

    def set(self, key: str, value: str, ttl: float = DEFAULT_TTL, metadata: JsonDict | None = None) -> None:
        with self._lock:
            self._store[key] = CacheEntry(value=value, timestamp=self._clock(), ttl=ttl, metadata=metadata)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def get_metadata(self, key: str) -> JsonDict | None:
        """Side-channel metadata for key. Does not check expiry."""
        with self._lock:
            entry = self._store.get(key)
            return entry.metadata if entry is not None else None

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def cleanup(self) -> int:
        """Eagerly remove every expired entry. Returns count removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, v in self._store.items() if v.expired(now)]
            for key in expired:
                del self._store[key]
            return len(expired)

    @property
    def size(self) -> int:
        """Raw entry count, expired entries included until accessed or swept."""
        with self._lock:
            return len(self._store)

    def stats(self) -> dict[str, object]:
        with self._lock:
            now = self._clock()
            expired = sum(1 for v in self._store.values() if v.expired(now))
            return {
                "total_entries": len(self._store),
                "expired_entries": expired,
                "active_entries": len(self._store) - expired,
            }

    # ─────────────────────────────────────────────────────────────────
    # Key generation
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def step_key(tool_name: str, params: Mapping[str, object]) -> str:
        """Key for a single step. Params serialize in insertion order, so key order matters."""
        return f"{tool_name}:{orjson.dumps(dict(params), default=str).decode()}"

    @staticmethod
    def generate_chain_key(steps: Iterable[StepLike]) -> str:
        """Deterministic key for a whole chain: step keys joined in step order."""
        return KEY_SEPARATOR.join(ChainCache.step_key(s.tool_name, s.params) for s in steps)
