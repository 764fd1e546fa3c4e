# eato/infra/redis_client.py
"""
Redis client.
Holds short-lived keys such as the processed-webhook ledger.
"""

from __future__ import annotations

import redis.asyncio as redis

from eato.common.logger import log_error, log_info
from eato.common.constants import TypeMsg, WEBHOOK_LEDGER_PREFIX


class RedisClient:
    """
    Async Redis client.
    Every key is prefixed with the configured namespace.
    """

    _instance: RedisClient | None = None
    _client: redis.Redis | None = None

    def __new__(cls) -> RedisClient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._client = None
        self._namespace = "eato"

    @property
    def client(self) -> redis.Redis:
        """Returns the underlying client."""
        if self._client is None:
            raise RuntimeError("Redis client is not initialized. Call connect() first.")
        return self._client

    def _make_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def connect(
        self,
        url: str | None = None,
        max_connections: int = 50,
        namespace: str | None = None,
    ) -> None:
        """
        Connects to Redis.

        Args:
            url: Redis URL (taken from config when None)
            max_connections: Pool size
            namespace: Key prefix
        """
        if self._client is not None:
            return

        if url is None:
            from eato.config import settings
            url = settings.redis.url
            max_connections = settings.redis.REDIS_MAX_CONNECTIONS
            namespace = settings.redis.REDIS_NAMESPACE

        if namespace:
            self._namespace = namespace

        await log_info("Connecting to Redis...", type_msg=TypeMsg.INFO)

        self._client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
        )
        await self._client.ping()

        await log_info("Redis connection established", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Closes the connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Redis connection closed", type_msg=TypeMsg.INFO)

    # =========================================================================
    # BASIC OPERATIONS
    # =========================================================================

    async def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
    ) -> bool:
        """
        Sets a value.

        Args:
            key: Key without namespace
            value: Value
            ttl: Time to live in seconds
        """
        return await self.client.set(self._make_key(key), value, ex=ttl)

    async def exists(self, key: str) -> bool:
        return await self.client.exists(self._make_key(key)) > 0

    # =========================================================================
    # WEBHOOK LEDGER
    # =========================================================================

    async def is_event_processed(self, source: str, event_id: str) -> bool:
        """Checks whether a provider event was already handled."""
        return await self.exists(f"{WEBHOOK_LEDGER_PREFIX}:{source}:{event_id}")

    async def mark_event_processed(self, source: str, event_id: str, ttl: int) -> bool:
        """Records a handled provider event."""
        return await self.set(f"{WEBHOOK_LEDGER_PREFIX}:{source}:{event_id}", "1", ttl)

    async def health_check(self) -> bool:
        """Returns True when Redis answers PING."""
        try:
            return await self.client.ping()
        except Exception as e:
            await log_error(f"Redis health check failed: {e}")
            return False


def get_redis() -> RedisClient:
    """Returns the process-wide RedisClient."""
    return RedisClient()


async def init_redis() -> None:
    """Connects to Redis using configuration settings."""
    from eato.config import settings

    redis_client = get_redis()
    await redis_client.connect(
        url=settings.redis.url,
        max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
        namespace=settings.redis.REDIS_NAMESPACE,
    )
    await log_info(
        f"Redis connected: {settings.redis.REDIS_HOST}:{settings.redis.REDIS_PORT}/{settings.redis.REDIS_DB}",
        type_msg=TypeMsg.INFO,
    )


async def close_redis() -> None:
    """Closes the Redis connection."""
    redis_client = get_redis()
    await redis_client.disconnect()
