import logging

import redis.asyncio as redis

from .config import Settings

logger = logging.getLogger(__name__)


def get_redis_client(settings: Settings):
    if not settings.REDIS_URL:
        logger.info("REDIS_URL not set; rate limiting disabled")
        return None
    return redis.from_url(settings.REDIS_URL, decode_responses=True)
