# tests/infra/test_redis_client.py
"""
Tests for the Redis client and the webhook ledger.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from eato.infra.redis_client import RedisClient


@pytest.fixture
def redis_client():
    client = RedisClient()
    saved_client, saved_namespace = client._client, client._namespace
    client._client = AsyncMock()
    client._namespace = "eato-test"
    yield client
    client._client = saved_client
    client._namespace = saved_namespace


class TestRedisClient:
    def test_singleton(self) -> None:
        assert RedisClient() is RedisClient()

    def test_client_requires_connect(self) -> None:
        client = RedisClient()
        saved = client._client
        client._client = None
        try:
            with pytest.raises(RuntimeError):
                _ = client.client
        finally:
            client._client = saved

    @pytest.mark.asyncio
    async def test_keys_are_namespaced(self, redis_client: RedisClient) -> None:
        await redis_client.set("foo", "bar", ttl=10)
        redis_client._client.set.assert_awaited_once_with("eato-test:foo", "bar", ex=10)


class TestWebhookLedger:
    @pytest.mark.asyncio
    async def test_mark_event_processed(self, redis_client: RedisClient) -> None:
        await redis_client.mark_event_processed("payments", "evt_1", 604800)

        redis_client._client.set.assert_awaited_once_with(
            "eato-test:webhook:processed:payments:evt_1", "1", ex=604800
        )

    @pytest.mark.asyncio
    async def test_is_event_processed(self, redis_client: RedisClient) -> None:
        redis_client._client.exists.return_value = 1
        assert await redis_client.is_event_processed("subscriptions", "evt_2") is True
        redis_client._client.exists.assert_awaited_once_with(
            "eato-test:webhook:processed:subscriptions:evt_2"
        )

    @pytest.mark.asyncio
    async def test_sources_are_separate(self, redis_client: RedisClient) -> None:
        redis_client._client.exists.return_value = 0
        assert await redis_client.is_event_processed("payments", "evt_2") is False

    @pytest.mark.asyncio
    async def test_health_check_false_on_error(self, redis_client: RedisClient) -> None:
        redis_client._client.ping.side_effect = ConnectionError("down")
        assert await redis_client.health_check() is False
