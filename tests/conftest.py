"""Shared fixtures and in-memory port implementations for the test suite."""

from __future__ import annotations

import itertools
from types import SimpleNamespace

import pytest

from linguabridge.cache import (
    ChannelTopologyCache,
    ChannelTranslationConfigCache,
    WebhookHandleCache,
)
from linguabridge.relay.errors import ProviderFailure, ReferenceNotFound
from linguabridge.relay.models import (
    Author,
    ChannelTopologyEdge,
    ChannelTranslationConfig,
    FetchedMessage,
    InboundMessage,
    MessageCopy,
    MessageLinkRecord,
    OutgoingPayload,
)
from linguabridge.relay.orchestrator import RelayOrchestrator

GUILD_ID = 1
BOT_USER_ID = 999

_message_ids = itertools.count(10_000)


class FakeTranslator:
    """Prefixes text with the target language; fails for chosen targets."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self.failing_targets: set[str] = set()

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        self.calls.append((text, source_lang, target_lang))
        if target_lang in self.failing_targets:
            raise ProviderFailure(f"cannot translate into {target_lang}", status_code=500)
        return f"[{target_lang}] {text}"


class FakeConfigSource:
    def __init__(self) -> None:
        self.configs: dict[int, ChannelTranslationConfig] = {}
        self.links: dict[int, list[int]] = {}
        self.config_reads = 0
        self.topology_reads = 0

    def add_channel(self, channel_id: int, lang: str, target_lang: str = "") -> None:
        self.configs[channel_id] = ChannelTranslationConfig(
            channel_id=channel_id, guild_id=GUILD_ID, source_lang=lang, target_lang=target_lang
        )

    def link(self, first: int, second: int) -> None:
        self.links.setdefault(first, []).append(second)
        self.links.setdefault(second, []).append(first)

    async def get_translation_config(self, channel_id: int) -> ChannelTranslationConfig | None:
        self.config_reads += 1
        return self.configs.get(channel_id)

    async def get_topology(self, channel_id: int) -> ChannelTopologyEdge | None:
        self.topology_reads += 1
        linked = self.links.get(channel_id)
        if not linked:
            return None
        return ChannelTopologyEdge(channel_id, GUILD_ID, tuple(linked))


class InMemoryLinkStore:
    def __init__(self) -> None:
        self.records: list[MessageLinkRecord] = []
        self.fail_create = False

    async def create(self, record: MessageLinkRecord) -> None:
        if self.fail_create:
            raise ConnectionError("database unreachable")
        self.records.append(record)

    async def find_by_copy_or_origin(self, message_id: int, channel_id: int) -> MessageLinkRecord | None:
        return next((r for r in self.records if r.contains(message_id, channel_id)), None)

    async def find_by_origin_id(self, message_id: int) -> MessageLinkRecord | None:
        return next((r for r in self.records if r.origin_message_id == message_id), None)


class FakeWebhook:
    def __init__(self, channel_id: int, webhook_id: int) -> None:
        self.channel_id = channel_id
        self.webhook_id = webhook_id
        self.sent: list[tuple[int, OutgoingPayload]] = []
        self.edits: list[tuple[int, str]] = []
        self.fail_send = False
        self.deleted: set[int] = set()

    async def send(self, payload: OutgoingPayload) -> MessageCopy:
        if self.fail_send:
            raise ProviderFailure("webhook send rejected", status_code=403)
        message_id = next(_message_ids)
        self.sent.append((message_id, payload))
        return MessageCopy(channel_id=self.channel_id, message_id=message_id)

    async def edit_message(self, message_id: int, content: str) -> None:
        if message_id in self.deleted:
            raise ReferenceNotFound(f"edit message {message_id}: Unknown Message")
        self.edits.append((message_id, content))


class FakePlatform:
    def __init__(self) -> None:
        self.own_user_id: int | None = BOT_USER_ID
        self.existing: dict[int, FakeWebhook] = {}
        self.created: list[int] = []
        self.own_webhook_ids: set[int] = set()
        self.webhook_checks: list[int] = []
        self.messages: dict[tuple[int, int], FetchedMessage] = {}
        self._webhook_ids = itertools.count(500)

    def webhook(self, channel_id: int) -> FakeWebhook:
        """The webhook that exists (or will be created) in *channel_id*."""
        if channel_id not in self.existing:
            hook = FakeWebhook(channel_id, next(self._webhook_ids))
            self.existing[channel_id] = hook
            self.own_webhook_ids.add(hook.webhook_id)
        return self.existing[channel_id]

    async def find_owned_webhook(self, channel_id: int) -> FakeWebhook | None:
        return self.existing.get(channel_id)

    async def create_webhook(self, channel_id: int) -> FakeWebhook:
        self.created.append(channel_id)
        return self.webhook(channel_id)

    async def is_own_webhook(self, webhook_id: int) -> bool:
        self.webhook_checks.append(webhook_id)
        return webhook_id in self.own_webhook_ids

    async def fetch_message(self, channel_id: int, message_id: int) -> FetchedMessage:
        try:
            return self.messages[(channel_id, message_id)]
        except KeyError:
            raise ReferenceNotFound(f"fetch message {message_id}: Unknown Message") from None

    def add_message(self, message: FetchedMessage) -> None:
        self.messages[(message.channel_id, message.id)] = message


def make_author(user_id: int = 42, name: str = "alice", bot: bool = False) -> Author:
    return Author(id=user_id, display_name=name, avatar_url=f"https://cdn.example/{user_id}.png", bot=bot)


def make_message(
    channel_id: int,
    content: str = "hello",
    *,
    message_id: int | None = None,
    author: Author | None = None,
    **kwargs,
) -> InboundMessage:
    return InboundMessage(
        id=message_id if message_id is not None else next(_message_ids),
        channel_id=channel_id,
        guild_id=kwargs.pop("guild_id", GUILD_ID),
        author=author or make_author(),
        content=content,
        **kwargs,
    )


@pytest.fixture
def relay_env():
    """A fully wired orchestrator over in-memory ports.

    Channels: 100 (EN) linked to 200 (DE) and 300 (FR).
    """
    platform = FakePlatform()
    translator = FakeTranslator()
    source = FakeConfigSource()
    links = InMemoryLinkStore()

    source.add_channel(100, "EN", "EN-US")
    source.add_channel(200, "DE")
    source.add_channel(300, "FR")
    source.link(100, 200)
    source.link(100, 300)

    webhooks = WebhookHandleCache(platform)
    relay = RelayOrchestrator(
        platform=platform,
        translator=translator,
        links=links,
        configs=ChannelTranslationConfigCache(source),
        topology=ChannelTopologyCache(source),
        webhooks=webhooks,
    )
    return SimpleNamespace(
        platform=platform,
        translator=translator,
        source=source,
        links=links,
        webhooks=webhooks,
        relay=relay,
    )
