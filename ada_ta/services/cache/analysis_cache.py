"""
In-memory cache for generated narratives.

Entries are keyed by a coarse fingerprint of price and a few indicator
fields. Different market states can share a fingerprint; that is accepted,
the key is lossy on purpose.

Expiry is lazy: ``get_fresh`` ignores entries older than the TTL and
``sweep`` removes them. An expired entry may still be read through
``get_stale`` until a sweep drops it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ada_ta.schemas.analysis import AnalysisResponse
from ada_ta.schemas.indicators import IndicatorSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass
class CacheEntry:
    """A cached set of narratives."""

    data: AnalysisResponse
    timestamp: float


def build_fingerprint(
    price: float,
    very_short: Optional[IndicatorSnapshot],
    short: Optional[IndicatorSnapshot],
    long: Optional[IndicatorSnapshot],
) -> str:
    """
    Cache key: price rounded to 3 decimals, very-short RSI, short MACD trend
    and long confluence score. Missing snapshots contribute empty fields.
    """
    rsi_part = very_short.rsi if very_short and very_short.rsi is not None else ""
    trend_part = short.macd_trend.value if short else ""
    confluence_part = long.confluence_score if long else ""
    return f"{price:.3f}_{rsi_part}_{trend_part}_{confluence_part}"


class AnalysisCache:
    """
    Fingerprint → narratives, with a fixed TTL.

    At most one entry per fingerprint; ``set`` overwrites.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def age(self, entry: CacheEntry) -> float:
        return self._clock() - entry.timestamp

    def get_fresh(self, key: str) -> Optional[CacheEntry]:
        """Entry for ``key`` if it is younger than the TTL."""
        entry = self._entries.get(key)
        if entry is not None and self.age(entry) < self.ttl_seconds:
            logger.info(f"[CACHE HIT] Returning cached analysis ({int(self.age(entry))}s old)")
            return entry
        return None

    def get_stale(self, key: str) -> Optional[CacheEntry]:
        """Entry for ``key`` regardless of age."""
        return self._entries.get(key)

    def set(self, key: str, data: AnalysisResponse) -> CacheEntry:
        entry = CacheEntry(data=data, timestamp=self._clock())
        self._entries[key] = entry
        logger.info("[CACHED] Stored analysis for future requests")
        return entry

    def sweep(self, keep: Optional[str] = None) -> int:
        """
        Evict every entry older than the TTL, except ``keep``.

        Returns the number of evicted entries.
        """
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if key != keep and now - entry.timestamp > self.ttl_seconds
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Evicted {len(expired)} expired analysis entries")
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
