import json
import logging
from typing import Any, Optional

import redis

from alumni.core.config import settings

logger = logging.getLogger(__name__)

_redis_client = None


def get_redis_client():
    global _redis_client
    if _redis_client is None:
        # Use simple redis client (synchronous) for lightweight operations
        _redis_client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_client


def cache_enabled() -> bool:
    return settings.cache_driver == "redis"


def cache_get(key: str) -> Optional[Any]:
    if not cache_enabled():
        return None
    raw = get_redis_client().get(key)
    return json.loads(raw) if raw else None


def cache_set(key: str, value: Any, ttl: Optional[int] = None) -> None:
    if not cache_enabled():
        return
    get_redis_client().setex(key, ttl or settings.cache_ttl_seconds, json.dumps(value))


def cache_delete(*keys: str) -> None:
    if not cache_enabled() or not keys:
        return
    get_redis_client().delete(*keys)
