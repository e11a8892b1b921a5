"""
Short-lived in-process cache for aggregated quote results.

Entries absorb bursts of identical requests (a UI re-rendering, double
clicks). Validity is checked lazily on read; when full, the entry with the
oldest ``stored_at`` is evicted before a new key is inserted.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterable, Optional, Tuple

from .types import AdapterResult, QuoteRequest

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5
DEFAULT_MAX_ENTRIES = 100


@dataclass(frozen=True)
class CacheEntry:
    results: Tuple[AdapterResult, ...]
    stored_at: float
    slippage_tolerance_bps: Optional[int] = None
    user_address: Optional[str] = None

    def produced_for(self, request: QuoteRequest) -> bool:
        """True when the entry was produced with the same slippage and user."""
        return (
            self.slippage_tolerance_bps == request.slippage_tolerance_bps
            and self.user_address == request.user_address
        )


class QuoteResultCache:
    """
    Bounded, TTL-aware cache keyed by ``QuoteRequest.cache_key()``.

    Safe for concurrent use: every read and mutation of the map happens under
    a single lock. Concurrent misses for the same key are not de-duplicated.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self.ttl_seconds:
                del self._entries[key]
                logger.debug(f"Expired cache entry for {key}")
                return None
            return entry

    def put(
        self,
        key: Hashable,
        results: Iterable[AdapterResult],
        request: Optional[QuoteRequest] = None,
    ) -> CacheEntry:
        entry = CacheEntry(
            results=tuple(results),
            stored_at=self._clock(),
            slippage_tolerance_bps=request.slippage_tolerance_bps if request else None,
            user_address=request.user_address if request else None,
        )
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest_key = min(self._entries, key=lambda k: self._entries[k].stored_at)
                del self._entries[oldest_key]
                logger.debug(f"Evicted oldest cache entry {oldest_key}")
            self._entries[key] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries
