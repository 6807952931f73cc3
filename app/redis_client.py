"""
Shared redis.asyncio client backing the SchemeRecord snapshot cache.
"""

import redis.asyncio as aioredis

from app.config import settings

redis = aioredis.from_url(
    settings.REDIS_URL,
    decode_responses=True,
    ssl=settings.REDIS_SSL,
)


async def get_redis() -> aioredis.Redis:
    """Dependency returning the shared client (overridden in tests)."""
    return redis
