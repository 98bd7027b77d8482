import logging
import redis.asyncio as redis
from .config import settings
from typing import Optional

logger = logging.getLogger(__name__)

class RedisClient:
    def __init__(self, url: str):
        self.url = url
        self.client: Optional[redis.Redis] = None

    async def connect(self):
        client = redis.from_url(
            self.url,
            encoding="utf-8",
            decode_responses=True
        )
        try:
            await client.ping()
        except redis.RedisError as e:
            # Rate limiting degrades open without Redis
            logger.warning(f"Redis unavailable, rate limiting disabled: {e}")
            await client.aclose()
            return
        self.client = client

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None

redis_client = RedisClient(settings.REDIS_URL)
