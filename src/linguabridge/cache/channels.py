"""Cache-aside lookups of channel configuration.

Every relayed message needs the source channel's language, its linked
channels, and each target's language.  Those rarely change, so they are
read from storage once per process and then served from memory until a
configuration command invalidates the key.

Absence is cached too: a channel with no configuration costs one storage
query, not one per message.

Usage::

    configs = ChannelTranslationConfigCache(store)
    config = await configs.get(channel_id)   # None if not configured
    configs.invalidate(channel_id)           # after set-language
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Final, Generic, TypeVar

from linguabridge.relay.models import ChannelTopologyEdge, ChannelTranslationConfig
from linguabridge.relay.ports import ChannelConfigSource

log = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

_ABSENT: Final = object()


class CacheAside(Generic[K, V]):
    """In-memory cache in front of an async *loader*.

    Concurrent misses on the same key may each call the loader; the loaders
    are plain reads, so the duplicate is harmless.

    Args:
        loader: Coroutine function returning the value for a key, or
            ``None`` when the key has no value.
        name: Label used in log lines.
    """

    def __init__(self, loader: Callable[[K], Awaitable[V | None]], name: str = "cache") -> None:
        self._loader = loader
        self._name = name
        self._entries: dict[K, object] = {}

    async def get(self, key: K) -> V | None:
        cached = self._entries.get(key)
        if cached is not None:
            return None if cached is _ABSENT else cached  # type: ignore[return-value]

        value = await self._loader(key)
        self._entries[key] = _ABSENT if value is None else value
        log.debug("%s miss for %s (%s)", self._name, key, "absent" if value is None else "loaded")
        return value

    def invalidate(self, key: K) -> None:
        """Forget *key* so the next :meth:`get` reads storage again."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ChannelTranslationConfigCache(CacheAside[int, ChannelTranslationConfig]):
    """``channel_id -> ChannelTranslationConfig``."""

    def __init__(self, source: ChannelConfigSource) -> None:
        super().__init__(source.get_translation_config, name="translation-config")


class ChannelTopologyCache(CacheAside[int, ChannelTopologyEdge]):
    """``channel_id -> ChannelTopologyEdge``."""

    def __init__(self, source: ChannelConfigSource) -> None:
        super().__init__(source.get_topology, name="topology")
