from types import TracebackType
from typing import Self

import redis.asyncio as redis
import structlog

from payment_session.config import settings


logger = structlog.get_logger()


class RedisClient:
    """Async Redis connection shared by the session store."""

    def __init__(self, url: str | None = None) -> None:
        self._url = url or settings.redis_url
        self._client: redis.Redis | None = None

    @property
    def client(self) -> "redis.Redis":
        """Get the Redis client. Raises if not connected."""
        if self._client is None:
            raise RuntimeError("Redis client not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        # Session hashes hold short text fields only.
        self._client = redis.from_url(self._url, decode_responses=True)
        await self._client.ping()
        logger.info("redis_connected", url=self._url.rsplit("@", 1)[-1])

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("redis_disconnected")

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.ping()
        except redis.RedisError as e:
            logger.warning("redis_health_check_failed", error=str(e))
            return False
        return True

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
