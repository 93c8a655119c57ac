"""
Redis-backed cache for MLS listing lookups.

Lookups against the listing service are slow and rate limited, so resolved
listings are kept for CACHE_LISTING_TTL seconds keyed by MLS number. Cache
errors never fail a lookup; they are logged and treated as a miss.
"""
import redis
import json
import time
from typing import Dict, Optional, Any

from agentvista.config import Config
from agentvista.logger import get_logger

logger = get_logger(__name__)

STATS_TTL = 86400  # counters roll over daily


class RedisCacheService:
    """Listing lookup cache stored in Redis"""

    def __init__(self, client: Optional[redis.Redis] = None):
        self.redis_client = client or redis.Redis(
            host=Config.REDIS_HOST,
            port=Config.REDIS_PORT,
            password=Config.REDIS_PASSWORD,
            db=Config.REDIS_DB,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30
        )

        self.LISTING_TTL = Config.CACHE_LISTING_TTL

        # listing:<MLS> -> JSON lookup result, listing-stats -> hash of hit/miss counters
        self.PREFIX_LISTING = "listing:"
        self.STATS_KEY = "listing-stats"

    def _listing_key(self, mls_number: str) -> str:
        return f"{self.PREFIX_LISTING}{mls_number.strip().upper()}"

    # ============================================================
    # LISTING CACHING
    # ============================================================

    def get_listing(self, mls_number: str) -> Optional[Dict[str, Any]]:
        """Cached lookup result, or None on a miss"""
        try:
            payload = self.redis_client.get(self._listing_key(mls_number))
        except redis.RedisError as e:
            logger.error(f"[CACHE ERROR] Failed to read listing {mls_number}: {e}")
            return None

        self._record("hits" if payload else "misses")
        return json.loads(payload) if payload else None

    def set_listing(self, mls_number: str, result: Dict[str, Any]):
        try:
            self.redis_client.setex(self._listing_key(mls_number), self.LISTING_TTL, json.dumps(result))
        except (redis.RedisError, TypeError) as e:
            logger.error(f"[CACHE ERROR] Failed to store listing {mls_number}: {e}")

    # ============================================================
    # STATISTICS
    # ============================================================

    def _record(self, outcome: str):
        try:
            self.redis_client.hincrby(self.STATS_KEY, outcome, 1)
            self.redis_client.expire(self.STATS_KEY, STATS_TTL)
        except redis.RedisError as e:
            logger.warning(f"[CACHE ERROR] Failed to record {outcome}: {e}")

    def _listing_keys(self):
        return list(self.redis_client.scan_iter(match=f"{self.PREFIX_LISTING}*"))

    def get_cache_stats(self) -> Dict:
        try:
            entries = len(self._listing_keys())
            counters = self.redis_client.hgetall(self.STATS_KEY) or {}
        except redis.RedisError as e:
            logger.error(f"[CACHE ERROR] Failed to get stats: {e}")
            return {"backend": "redis", "error": str(e)}

        hits = int(counters.get("hits", 0))
        misses = int(counters.get("misses", 0))
        lookups = hits + misses

        return {
            "backend": "redis",
            "total_entries": entries,
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / lookups * 100, 2) if lookups else 0,
            "ttl_seconds": self.LISTING_TTL
        }

    # ============================================================
    # CACHE MANAGEMENT
    # ============================================================

    def clear_all(self) -> int:
        """Drop every cached listing; counters are kept"""
        try:
            keys = self._listing_keys()
            return self.redis_client.delete(*keys) if keys else 0
        except redis.RedisError as e:
            logger.error(f"[CACHE ERROR] Failed to clear cache: {e}")
            return 0

    def health_check(self) -> Dict:
        started = time.perf_counter()
        try:
            self.redis_client.ping()
        except redis.RedisError as e:
            return {"status": "unhealthy", "connected": False, "backend": "redis", "error": str(e)}

        return {
            "status": "healthy",
            "connected": True,
            "backend": "redis",
            "response_time_ms": round((time.perf_counter() - started) * 1000, 2)
        }


# Singleton instance
_cache_service = None


def get_cache_service() -> RedisCacheService:
    """Get cache service singleton"""
    global _cache_service
    if _cache_service is None:
        _cache_service = RedisCacheService()
    return _cache_service
