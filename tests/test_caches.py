"""Tests for the cache-aside config caches and the webhook handle cache."""

from unittest.mock import AsyncMock

import pytest

from conftest import FakeConfigSource, FakePlatform
from linguabridge.cache import (
    CacheAside,
    ChannelTopologyCache,
    ChannelTranslationConfigCache,
    WebhookHandleCache,
)


@pytest.mark.asyncio
async def test_hit_does_not_reload():
    loader = AsyncMock(return_value="value")
    cache = CacheAside(loader, name="test")

    assert await cache.get(1) == "value"
    assert await cache.get(1) == "value"

    loader.assert_awaited_once_with(1)
    assert 1 in cache
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_absence_is_cached():
    loader = AsyncMock(return_value=None)
    cache = CacheAside(loader)

    assert await cache.get(5) is None
    assert await cache.get(5) is None

    loader.assert_awaited_once_with(5)
    assert 5 in cache


@pytest.mark.asyncio
async def test_invalidate_forces_reload():
    loader = AsyncMock(side_effect=[None, "configured"])
    cache = CacheAside(loader)

    assert await cache.get(5) is None
    cache.invalidate(5)
    assert 5 not in cache
    assert await cache.get(5) == "configured"
    assert loader.await_count == 2


@pytest.mark.asyncio
async def test_invalidate_unknown_key_is_noop():
    cache = CacheAside(AsyncMock(return_value=None))
    cache.invalidate(404)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_clear_empties_cache():
    cache = CacheAside(AsyncMock(return_value="v"))
    await cache.get(1)
    await cache.get(2)
    cache.clear()
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_loader_errors_are_not_cached():
    loader = AsyncMock(side_effect=[ConnectionError("down"), "ok"])
    cache = CacheAside(loader)

    with pytest.raises(ConnectionError):
        await cache.get(1)
    assert 1 not in cache
    assert await cache.get(1) == "ok"


@pytest.mark.asyncio
async def test_config_and_topology_caches_read_source_once():
    source = FakeConfigSource()
    source.add_channel(1, "EN")
    source.add_channel(2, "DE")
    source.link(1, 2)
    configs = ChannelTranslationConfigCache(source)
    topology = ChannelTopologyCache(source)

    for _ in range(3):
        assert (await configs.get(1)).source_lang == "EN"
        assert (await topology.get(1)).linked_channel_ids == (2,)
        assert await configs.get(3) is None

    assert source.config_reads == 2
    assert source.topology_reads == 1


@pytest.mark.asyncio
async def test_webhook_created_when_none_owned():
    platform = FakePlatform()
    cache = WebhookHandleCache(platform)

    handle = await cache.get(100)

    assert platform.created == [100]
    assert handle.channel_id == 100
    assert cache.owns(handle.webhook_id)
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_existing_webhook_reused_not_created():
    platform = FakePlatform()
    existing = platform.webhook(100)
    cache = WebhookHandleCache(platform)

    assert await cache.get(100) is existing
    assert platform.created == []


@pytest.mark.asyncio
async def test_webhook_lookup_happens_once_per_channel():
    platform = FakePlatform()
    platform.find_owned_webhook = AsyncMock(return_value=None)
    cache = WebhookHandleCache(platform)

    first = await cache.get(100)
    second = await cache.get(100)

    assert first is second
    platform.find_owned_webhook.assert_awaited_once_with(100)
    assert platform.created == [100]


@pytest.mark.asyncio
async def test_owns_only_cached_handles():
    platform = FakePlatform()
    foreign = platform.webhook(300)
    cache = WebhookHandleCache(platform)
    await cache.get(100)

    assert not cache.owns(foreign.webhook_id)
