from fastapi import Request, HTTPException
from ..redis import RedisClient
from ..observability import RATE_LIMITED_TOTAL
import time
import logging

logger = logging.getLogger(__name__)

class RateLimiter:
    """Fixed window limit per user and route, keyed on the X-User-Id header."""

    def __init__(self, redis_client: RedisClient, requests: int, window: int):
        self.redis_client = redis_client
        self.requests = requests
        self.window = window

    async def __call__(self, request: Request):
        if not self.redis_client.client:
            # Graceful degradation: Allow if Redis is down
            return

        user_id = request.headers.get("X-User-Id")
        if not user_id:
            # Requests without identity are rejected by the route itself
            return

        current_window = int(time.time() / self.window)
        redis_key = f"rate:{user_id}:{request.url.path}:{request.method}:{current_window}"

        try:
            count = await self.redis_client.client.incr(redis_key)
            if count == 1:
                await self.redis_client.client.expire(redis_key, self.window)
        except Exception as e:
            logger.error(f"Rate limiter error: {e}")
            return

        if count > self.requests:
            RATE_LIMITED_TOTAL.inc()
            raise HTTPException(status_code=429, detail="Rate limit exceeded")
