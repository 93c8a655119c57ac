from typing import Any, Dict, Optional

from agentvista.config import Config
from agentvista.ddf_client import DDFAPIClient, require_listing_number
from agentvista.logger import get_logger
from agentvista.settings.cache_factory import get_cache_service

logger = get_logger(__name__)


class ListingService:
    """
    MLS number -> listing address and details.

    Results come from the DDF API and are cached per MLS number; "not found"
    answers are cached too so repeated misses do not hit the API.
    """

    def __init__(self, client: Optional[DDFAPIClient] = None, cache=None):
        self.client = client or DDFAPIClient()
        self.cache = cache

    def _cache(self):
        if self.cache is None and Config.ENABLE_LISTING_CACHE:
            self.cache = get_cache_service()
        return self.cache

    def search_listing(self, listing_number: str) -> Dict[str, Any]:
        mls_number = require_listing_number(listing_number)
        cache = self._cache()

        if cache is not None:
            cached = cache.get_listing(mls_number)
            if cached is not None:
                logger.info(f"[CACHE HIT] {mls_number}")
                return {**cached, "from_cache": True}

        result = self.client.search_property_by_mls(mls_number)

        if cache is not None:
            cache.set_listing(mls_number, result)

        return {**result, "from_cache": False}

    def get_listing_details(self, listing_number: str) -> Dict[str, Any]:
        """Every DDF field for a listing; not cached"""
        return self.client.get_property_details(require_listing_number(listing_number))

    def get_cache_stats(self) -> Dict[str, Any]:
        cache = self._cache()
        if cache is None:
            return {"backend": "disabled", "total_entries": 0, "ttl_seconds": 0}
        return cache.get_cache_stats()

    def clear_cache(self) -> int:
        cache = self._cache()
        return cache.clear_all() if cache is not None else 0

    def cache_health(self) -> Dict[str, Any]:
        cache = self._cache()
        if cache is None:
            return {"status": "disabled", "connected": False, "backend": "disabled"}
        return cache.health_check()
