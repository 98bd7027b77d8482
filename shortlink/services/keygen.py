import asyncio
import logging
from typing import List, Optional, Protocol

import httpx

from ..errors import KeyGenerationError
from ..utils import generate_random_code

logger = logging.getLogger(__name__)


class KeyGenerator(Protocol):
    async def new_key(self) -> str: ...


class RandomKeyGenerator:
    def __init__(self, length: int = 7):
        self.length = length

    async def new_key(self) -> str:
        return generate_random_code(self.length)


class RemoteKeyGenerator:
    """Hands out keys allocated in batches by a remote key generation service.

    Keys are buffered locally; the buffer is refilled with one request of
    `buffer_size` keys whenever it runs dry. A refill that fails or comes
    back empty is reported as KeyGenerationError and is not retried.
    """

    def __init__(self, client: httpx.AsyncClient, buffer_size: int = 50):
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive")
        self.client = client
        self.buffer_size = buffer_size
        self._buffer: List[str] = []
        self._lock = asyncio.Lock()

    async def new_key(self) -> str:
        async with self._lock:
            if not self._buffer:
                self._buffer = await self._fetch_keys()
            return self._buffer.pop()

    async def _fetch_keys(self) -> List[str]:
        try:
            response = await self.client.post("/keys", json={"count": self.buffer_size})
            response.raise_for_status()
            keys = response.json().get("keys") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Key generation service error: {e}")
            raise KeyGenerationError(f"failed to fetch keys: {e}") from e

        if not keys:
            raise KeyGenerationError("key generation service is exhausted")

        logger.info(f"Fetched {len(keys)} keys from key generation service")
        # pop() takes from the end; keep the service's order
        return list(reversed(keys))

    async def aclose(self):
        await self.client.aclose()


def build_key_generator(
    url: str,
    key_length: int = 7,
    buffer_size: int = 50,
    timeout: float = 5.0,
    client: Optional[httpx.AsyncClient] = None,
) -> KeyGenerator:
    if not url:
        return RandomKeyGenerator(key_length)
    client = client or httpx.AsyncClient(base_url=url, timeout=timeout)
    return RemoteKeyGenerator(client, buffer_size)
