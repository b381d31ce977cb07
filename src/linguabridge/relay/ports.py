"""Ports (interfaces) used by the relay core.

The orchestrator and caches depend only on these protocols.  Concrete
implementations live in :mod:`linguabridge.platform`,
:mod:`linguabridge.translation` and :mod:`linguabridge.storage`; the test
suite provides in-memory ones.
"""

from __future__ import annotations

from typing import Protocol

from linguabridge.relay.models import (
    ChannelTopologyEdge,
    ChannelTranslationConfig,
    FetchedMessage,
    MessageCopy,
    MessageLinkRecord,
    OutgoingPayload,
)


class Translator(Protocol):
    """Translation provider."""

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        ...


class ChannelConfigSource(Protocol):
    """Read side of the channel configuration storage."""

    async def get_translation_config(self, channel_id: int) -> ChannelTranslationConfig | None:
        ...

    async def get_topology(self, channel_id: int) -> ChannelTopologyEdge | None:
        ...


class LinkStorage(Protocol):
    """Persisted message link records."""

    async def create(self, record: MessageLinkRecord) -> None:
        ...

    async def find_by_copy_or_origin(
        self, message_id: int, channel_id: int
    ) -> MessageLinkRecord | None:
        ...

    async def find_by_origin_id(self, message_id: int) -> MessageLinkRecord | None:
        ...


class WebhookHandle(Protocol):
    """A per-channel output identity able to impersonate authors."""

    channel_id: int
    webhook_id: int

    async def send(self, payload: OutgoingPayload) -> MessageCopy:
        ...

    async def edit_message(self, message_id: int, content: str) -> None:
        ...


class MessagingPlatform(Protocol):
    """Capabilities the relay needs from the chat platform."""

    @property
    def own_user_id(self) -> int | None:
        ...

    async def find_owned_webhook(self, channel_id: int) -> WebhookHandle | None:
        ...

    async def create_webhook(self, channel_id: int) -> WebhookHandle:
        ...

    async def is_own_webhook(self, webhook_id: int) -> bool:
        ...

    async def fetch_message(self, channel_id: int, message_id: int) -> FetchedMessage:
        ...
