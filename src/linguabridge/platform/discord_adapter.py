"""discord.py implementation of the relay's messaging ports.

The relay core never touches ``discord`` objects.  This module converts
gateway messages into :class:`~linguabridge.relay.models.InboundMessage`,
wraps :class:`discord.Webhook` as a
:class:`~linguabridge.relay.ports.WebhookHandle`, and maps discord.py
exceptions onto the relay's failure categories.

Usage::

    platform = DiscordPlatform(bot, webhook_name="LinguaBridge")
    webhooks = WebhookHandleCache(platform)
    handle = await webhooks.get(channel_id)
    copy = await handle.send(payload)
"""

from __future__ import annotations

import logging
from typing import Any, Final

import discord

from linguabridge.relay.errors import ProviderFailure, ReferenceNotFound
from linguabridge.relay.models import (
    Author,
    FetchedMessage,
    InboundMessage,
    MessageCopy,
    OutgoingPayload,
    ReplyPreview,
)

log: Final = logging.getLogger(__name__)

REPLY_EMBED_COLOR: Final[int] = 0x0099FF


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def author_from(message: discord.Message) -> Author:
    """Describe the author as shown in the guild (nickname, guild avatar)."""
    user = message.author
    return Author(
        id=user.id,
        display_name=user.display_name,
        avatar_url=user.display_avatar.url,
        bot=user.bot,
    )


def inbound_from(message: discord.Message) -> InboundMessage:
    reference_id = message.reference.message_id if message.reference else None
    return InboundMessage(
        id=message.id,
        channel_id=message.channel.id,
        guild_id=message.guild.id if message.guild else None,
        author=author_from(message),
        content=message.content or "",
        webhook_id=message.webhook_id,
        attachments=tuple(message.attachments),
        sticker_ids=tuple(s.id for s in message.stickers),
        reference_id=reference_id,
    )


def fetched_from(message: discord.Message) -> FetchedMessage:
    return FetchedMessage(
        id=message.id,
        channel_id=message.channel.id,
        author=author_from(message),
        content=message.content or "",
        jump_url=message.jump_url,
        has_attachments=bool(message.attachments),
        has_stickers=bool(message.stickers),
    )


def render_reply_preview(preview: ReplyPreview) -> discord.Embed:
    embed = discord.Embed(description=preview.description, color=REPLY_EMBED_COLOR)
    embed.set_author(name=preview.author_name, icon_url=preview.author_avatar_url)
    return embed


def _translate_http_error(action: str, e: discord.HTTPException) -> Exception:
    if isinstance(e, discord.NotFound):
        return ReferenceNotFound(f"{action}: {e.text or 'not found'}")
    return ProviderFailure(f"{action}: {e.text or e}", status_code=e.status)


# ---------------------------------------------------------------------------
# Webhook handle
# ---------------------------------------------------------------------------


class DiscordWebhookHandle:
    """One channel's webhook, used to post and edit copies."""

    def __init__(self, webhook: discord.Webhook) -> None:
        self._webhook = webhook
        self.channel_id: int = webhook.channel_id or 0
        self.webhook_id: int = webhook.id

    @staticmethod
    async def build_send_kwargs(payload: OutgoingPayload) -> dict[str, Any]:
        """Translate *payload* into ``Webhook.send`` keyword arguments.

        Attachments are downloaded again for every send, since a
        :class:`discord.File` can only be uploaded once.
        """
        kwargs: dict[str, Any] = {"username": payload.username, "wait": True}
        if payload.avatar_url:
            kwargs["avatar_url"] = payload.avatar_url
        if payload.content:
            kwargs["content"] = payload.content
        if payload.attachments:
            kwargs["files"] = [await a.to_file() for a in payload.attachments]
        if payload.reply_preview is not None:
            kwargs["embeds"] = [render_reply_preview(payload.reply_preview)]
        return kwargs

    async def send(self, payload: OutgoingPayload) -> MessageCopy:
        try:
            kwargs = await self.build_send_kwargs(payload)
            sent = await self._webhook.send(**kwargs)
        except discord.HTTPException as e:
            raise _translate_http_error(f"send via webhook {self.webhook_id}", e) from e
        return MessageCopy(channel_id=sent.channel.id, message_id=sent.id)

    async def edit_message(self, message_id: int, content: str) -> None:
        try:
            await self._webhook.edit_message(message_id, content=content)
        except discord.HTTPException as e:
            raise _translate_http_error(f"edit message {message_id}", e) from e


# ---------------------------------------------------------------------------
# Platform
# ---------------------------------------------------------------------------


class DiscordPlatform:
    """Messaging capabilities backed by a connected :class:`discord.Client`.

    Args:
        client: The bot client.  Must be logged in before any coroutine here
            is awaited.
        webhook_name: Name given to webhooks this bot creates.
    """

    def __init__(self, client: discord.Client, webhook_name: str = "LinguaBridge") -> None:
        self._client = client
        self._webhook_name = webhook_name

    @property
    def own_user_id(self) -> int | None:
        user = self._client.user
        return user.id if user is not None else None

    async def _text_channel(self, channel_id: int) -> discord.TextChannel:
        channel = self._client.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self._client.fetch_channel(channel_id)
            except discord.HTTPException as e:
                raise _translate_http_error(f"fetch channel {channel_id}", e) from e
        if not isinstance(channel, discord.TextChannel):
            raise ReferenceNotFound(f"channel {channel_id} is not a guild text channel")
        return channel

    async def find_owned_webhook(self, channel_id: int) -> DiscordWebhookHandle | None:
        channel = await self._text_channel(channel_id)
        try:
            hooks = await channel.webhooks()
        except discord.HTTPException as e:
            raise _translate_http_error(f"list webhooks of {channel_id}", e) from e

        own_id = self.own_user_id
        for hook in hooks:
            # A token is only present on webhooks this application may execute.
            if hook.user is not None and hook.user.id == own_id and hook.token:
                return DiscordWebhookHandle(hook)
        return None

    async def create_webhook(self, channel_id: int) -> DiscordWebhookHandle:
        channel = await self._text_channel(channel_id)
        try:
            hook = await channel.create_webhook(
                name=self._webhook_name, reason="LinguaBridge translation relay"
            )
        except discord.HTTPException as e:
            raise _translate_http_error(f"create webhook in {channel_id}", e) from e
        return DiscordWebhookHandle(hook)

    async def is_own_webhook(self, webhook_id: int) -> bool:
        try:
            hook = await self._client.fetch_webhook(webhook_id)
        except discord.NotFound:
            log.debug("Webhook %s no longer exists", webhook_id)
            return False
        except discord.HTTPException as e:
            raise _translate_http_error(f"fetch webhook {webhook_id}", e) from e
        return hook.user is not None and hook.user.id == self.own_user_id

    async def fetch_message(self, channel_id: int, message_id: int) -> FetchedMessage:
        channel = await self._text_channel(channel_id)
        try:
            message = await channel.fetch_message(message_id)
        except discord.HTTPException as e:
            raise _translate_http_error(f"fetch message {message_id}", e) from e
        return fetched_from(message)
