"""LinguaBridgeBot: the Discord bot that relays messages between languages."""

from __future__ import annotations

import logging

import discord
from discord.ext import commands

from linguabridge.cache import (
    ChannelTopologyCache,
    ChannelTranslationConfigCache,
    WebhookHandleCache,
)
from linguabridge.commands import COMMAND_EXTENSIONS
from linguabridge.config import LinguaSettings, get_settings
from linguabridge.platform.discord_adapter import DiscordPlatform, inbound_from
from linguabridge.relay.orchestrator import RelayOrchestrator
from linguabridge.storage import ChannelConfigStore, MessageLinkStore, PostgresDatabase
from linguabridge.translation.deepl import DeepLClient

log = logging.getLogger(__name__)


class LinguaBridgeBot(commands.Bot):
    """Relays messages between linked channels, translated per channel.

    Wires together all subsystems as explicit objects:
    - DeepL translation client
    - PostgreSQL connection, channel config store and link store
    - Config, topology and webhook caches (process lifetime)
    - Discord platform adapter
    - Relay orchestrator
    """

    def __init__(self, settings: LinguaSettings | None = None) -> None:
        settings = settings or get_settings()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.guild_messages = True

        super().__init__(
            command_prefix=settings.COMMAND_PREFIX,
            intents=intents,
        )

        # --- Config ---
        self.settings = settings

        # --- Translation ---
        self.translator = DeepLClient(
            api_key=settings.DEEPL_API_KEY,
            base_url=settings.DEEPL_API_URL,
            timeout=settings.TRANSLATION_TIMEOUT,
        )

        # --- Storage ---
        self.database = PostgresDatabase(settings.POSTGRES_URL)
        self.config_store = ChannelConfigStore(self.database)
        self.link_store = MessageLinkStore(self.database)

        # --- Caches ---
        self.platform = DiscordPlatform(self, webhook_name=settings.WEBHOOK_NAME)
        self.translation_configs = ChannelTranslationConfigCache(self.config_store)
        self.topology = ChannelTopologyCache(self.config_store)
        self.webhooks = WebhookHandleCache(self.platform)

        # --- Relay ---
        self.relay = RelayOrchestrator(
            platform=self.platform,
            translator=self.translator,
            links=self.link_store,
            configs=self.translation_configs,
            topology=self.topology,
            webhooks=self.webhooks,
            reply_preview_chars=settings.REPLY_PREVIEW_CHARS,
        )

    async def setup_hook(self) -> None:
        """Called after login, before the bot starts processing events."""
        await self.database.connect()
        for ext in COMMAND_EXTENSIONS:
            await self.load_extension(ext)
        log.info("Command cogs loaded")

    async def on_ready(self) -> None:
        log.info("Logged in as %s (ID: %s) in %d guild(s)", self.user, self.user.id, len(self.guilds))

    async def on_message(self, message: discord.Message) -> None:
        """Relay guild text messages, or run them as a command.

        Command invocations are never relayed into linked channels.
        """
        ctx = await self.get_context(message)
        if ctx.valid:
            if not message.author.bot:
                await self.invoke(ctx)
            return

        if isinstance(message.channel, discord.TextChannel) and message.guild is not None:
            try:
                await self.relay.handle_message(inbound_from(message))
            except Exception:
                log.exception("Relay of message %s failed", message.id)

    async def on_message_edit(self, before: discord.Message, after: discord.Message) -> None:
        """Propagate content edits of origin messages to their copies."""
        if before.content == after.content:
            return
        if not isinstance(after.channel, discord.TextChannel) or after.guild is None:
            return
        try:
            await self.relay.handle_edit(inbound_from(after))
        except Exception:
            log.exception("Edit propagation of message %s failed", after.id)

    async def close(self) -> None:
        """Clean shutdown."""
        log.info(
            "Shutting down LinguaBridge (%d characters sent to DeepL)...",
            self.translator.characters_translated,
        )
        await self.translator.close()
        await self.database.close()
        await super().close()
