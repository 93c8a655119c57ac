"""
Cache Factory - picks the Redis listing cache when a server answers,
otherwise the in-memory one. The choice is made once per process.
"""
import redis

from agentvista.config import Config
from agentvista.logger import get_logger
from agentvista.service.redis_cache_service import get_cache_service as get_redis_cache
from agentvista.service.mock_cache_service import get_cache_service as get_mock_cache

logger = get_logger(__name__)

PING_TIMEOUT = 2

_selected_cache = None


def redis_reachable() -> bool:
    client = redis.Redis(
        host=Config.REDIS_HOST,
        port=Config.REDIS_PORT,
        password=Config.REDIS_PASSWORD,
        db=Config.REDIS_DB,
        socket_connect_timeout=PING_TIMEOUT
    )
    try:
        client.ping()
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning(f"Redis not available at {Config.REDIS_HOST}:{Config.REDIS_PORT}: {e}")
        return False
    finally:
        client.close()
    return True


def get_cache_service():
    """
    Listing cache for this process

    Returns:
        RedisCacheService if Redis answered the first ping
        MockCacheService otherwise
    """
    global _selected_cache
    if _selected_cache is None:
        if redis_reachable():
            logger.info(f"Redis available at {Config.REDIS_HOST}:{Config.REDIS_PORT}")
            _selected_cache = get_redis_cache()
        else:
            logger.info("Using in-memory listing cache")
            _selected_cache = get_mock_cache()
    return _selected_cache
