import copy
import threading
import time
from typing import Dict, Optional, Any

from agentvista.config import Config
from agentvista.logger import get_logger

logger = get_logger(__name__)


class MockCacheService:
    """In-memory listing cache (no Redis required)"""

    def __init__(self, ttl_seconds: Optional[int] = None, clock=time.time):
        self._listing_cache: Dict[str, tuple] = {}
        self._stats = {
            "cache_hits": 0,
            "cache_misses": 0
        }
        self._clock = clock
        # sync endpoints share this instance across the threadpool
        self._lock = threading.Lock()

        self.LISTING_TTL = ttl_seconds if ttl_seconds is not None else Config.CACHE_LISTING_TTL

        logger.info("[MOCK CACHE] Using in-memory cache (Redis not required)")

    def _key(self, mls_number: str) -> str:
        return mls_number.strip().upper()

    def _is_fresh(self, stored_at: float, now: float) -> bool:
        return now - stored_at < self.LISTING_TTL

    def _purge_expired(self, now: float) -> int:
        expired = [k for k, (stored_at, _) in self._listing_cache.items() if not self._is_fresh(stored_at, now)]
        for key in expired:
            self._listing_cache.pop(key, None)
        return len(expired)

    def get_listing(self, mls_number: str) -> Optional[Dict[str, Any]]:
        key = self._key(mls_number)
        with self._lock:
            entry = self._listing_cache.get(key)

            if entry:
                stored_at, result = entry
                if self._is_fresh(stored_at, self._clock()):
                    self._stats["cache_hits"] += 1
                    return copy.deepcopy(result)
                self._listing_cache.pop(key, None)

            self._stats["cache_misses"] += 1
            return None

    def set_listing(self, mls_number: str, result: Dict[str, Any]):
        now = self._clock()
        with self._lock:
            purged = self._purge_expired(now)
            if purged:
                logger.debug(f"[MOCK CACHE] Purged {purged} expired listings")
            self._listing_cache[self._key(mls_number)] = (now, copy.deepcopy(result))

    def get_cache_stats(self) -> Dict:
        with self._lock:
            self._purge_expired(self._clock())
            entries = len(self._listing_cache)
            hits = self._stats["cache_hits"]
            misses = self._stats["cache_misses"]
        total_requests = hits + misses
        hit_rate = (hits / total_requests * 100) if total_requests > 0 else 0

        return {
            "backend": "memory",
            "total_entries": entries,
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hit_rate, 2),
            "ttl_seconds": self.LISTING_TTL
        }

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._listing_cache)
            self._listing_cache.clear()
        return count

    def health_check(self) -> Dict:
        return {"status": "healthy", "connected": False, "backend": "memory"}


# Singleton instance
_cache_service = None


def get_cache_service() -> MockCacheService:
    """Get cache service singleton"""
    global _cache_service
    if _cache_service is None:
        _cache_service = MockCacheService()
    return _cache_service
