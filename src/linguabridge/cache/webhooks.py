"""Per-channel webhook handles, created lazily and kept for the process.

Copies are posted through a webhook so they can carry the original
author's name and avatar.  One webhook per channel is enough; this cache
finds the one this bot already owns, or creates it on first use.
"""

from __future__ import annotations

import logging

from linguabridge.relay.ports import MessagingPlatform, WebhookHandle

log = logging.getLogger(__name__)


class WebhookHandleCache:
    """``channel_id -> WebhookHandle`` with find-before-create semantics.

    Two near-simultaneous misses for the same channel can still both create
    a webhook; looking for an existing one first keeps that window small,
    and the first handle stored wins.
    """

    def __init__(self, platform: MessagingPlatform) -> None:
        self._platform = platform
        self._handles: dict[int, WebhookHandle] = {}

    async def get(self, channel_id: int) -> WebhookHandle:
        handle = self._handles.get(channel_id)
        if handle is not None:
            return handle

        handle = await self._platform.find_owned_webhook(channel_id)
        if handle is None:
            handle = await self._platform.create_webhook(channel_id)
            log.info("Created webhook %s in channel %s", handle.webhook_id, channel_id)
        else:
            log.debug("Reusing webhook %s in channel %s", handle.webhook_id, channel_id)

        return self._handles.setdefault(channel_id, handle)

    def owns(self, webhook_id: int) -> bool:
        """Return ``True`` if *webhook_id* is one of the cached handles."""
        return any(h.webhook_id == webhook_id for h in self._handles.values())

    def __len__(self) -> int:
        return len(self._handles)
