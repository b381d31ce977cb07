"""Messaging platform adapters.

Public API:
    :class:`DiscordPlatform` -- messaging port over a discord.py client.
    :class:`DiscordWebhookHandle` -- webhook handle over ``discord.Webhook``.
    :func:`inbound_from` -- gateway message to relay message.
"""

from linguabridge.platform.discord_adapter import (
    DiscordPlatform,
    DiscordWebhookHandle,
    inbound_from,
)

__all__ = [
    "DiscordPlatform",
    "DiscordWebhookHandle",
    "inbound_from",
]
