"""Process-wide lookup caches for the relay.

Public API:
    :class:`ChannelTranslationConfigCache` -- channel language settings.
    :class:`ChannelTopologyCache` -- linked channels per channel.
    :class:`WebhookHandleCache` -- per-channel posting identities.
"""

from linguabridge.cache.channels import (
    CacheAside,
    ChannelTopologyCache,
    ChannelTranslationConfigCache,
)
from linguabridge.cache.webhooks import WebhookHandleCache

__all__ = [
    "CacheAside",
    "ChannelTopologyCache",
    "ChannelTranslationConfigCache",
    "WebhookHandleCache",
]
