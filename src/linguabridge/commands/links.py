"""Channel link and language configuration commands.

Provides the commands that build the relay topology: per-channel language
settings (``!set-language``, ``!remove-language``), channel links
(``!link``, ``!unlink``) and a listing (``!show-links``).

Every command that changes storage invalidates the matching cache keys so
the relay picks the change up on the next message.

Usage::

    # In bot startup:
    await bot.load_extension("linguabridge.commands.links")
"""

from __future__ import annotations

import logging

import discord
from discord.ext import commands

from linguabridge.relay.errors import ProviderFailure
from linguabridge.relay.models import ChannelTopologyEdge, ChannelTranslationConfig

log = logging.getLogger(__name__)


def format_links(
    edge: ChannelTopologyEdge,
    source: ChannelTranslationConfig,
    linked: dict[int, ChannelTranslationConfig | None],
) -> str:
    """Render one channel and the channels it relays into."""
    lines = [f"Showing links of <#{edge.channel_id}> **({source.source_lang})**"]
    for channel_id in edge.linked_channel_ids:
        config = linked.get(channel_id)
        lang = config.source_lang if config else "not configured"
        lines.append(f"- <#{channel_id}> **({lang})**")
    return "\n".join(lines)


class LinkCommands(commands.Cog):
    """Manage which channels are translated and linked.

    All commands require the Manage Server permission and only work inside
    a guild.

    Attributes:
        bot: The parent bot owning the config store and caches.
    """

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    async def cog_check(self, ctx: commands.Context) -> bool:
        if ctx.guild is None:
            raise commands.NoPrivateMessage()
        if not ctx.author.guild_permissions.manage_guild:
            raise commands.MissingPermissions(["manage_guild"])
        return True

    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.NoPrivateMessage):
            await ctx.send("This command is only available on servers.")
        elif isinstance(error, commands.MissingPermissions):
            await ctx.send("You need the Manage Server permission to change translation links.")
        elif isinstance(error, commands.BadArgument):
            await ctx.send(f"Invalid argument: {error}")
        elif isinstance(error, commands.MissingRequiredArgument):
            await ctx.send(f"Missing argument `{error.param.name}`. See `{ctx.prefix}help {ctx.command}`.")
        else:
            log.error("Command %s failed: %s", ctx.command, error, exc_info=error)
            await ctx.send("Something went wrong. Check bot logs for details.")

    # ------------------------------------------------------------------
    # Cache invalidation
    # ------------------------------------------------------------------

    def _forget_config(self, channel_id: int) -> None:
        self.bot.translation_configs.invalidate(channel_id)

    def _forget_topology(self, *channel_ids: int) -> None:
        for channel_id in channel_ids:
            self.bot.topology.invalidate(channel_id)

    async def _validate_language(self, code: str, kind: str) -> bool:
        """Check *code* against DeepL.  Unknown when DeepL is unreachable."""
        try:
            supported = await self.bot.translator.supported_languages(kind)
        except ProviderFailure as e:
            log.warning("Could not fetch DeepL %s languages: %s", kind, e)
            return True
        return not supported or code.upper() in supported

    # ------------------------------------------------------------------
    # !set-language -- configure a channel's language
    # ------------------------------------------------------------------

    @commands.command(name="set-language")
    async def set_language(
        self,
        ctx: commands.Context,
        channel: discord.TextChannel,
        source_lang: str,
        target_lang: str = "",
    ) -> None:
        """Set the language of a channel.

        Usage: !set-language #channel SOURCE [TARGET]
        e.g. !set-language #english EN EN-US
        """
        source_lang = source_lang.upper()
        target_lang = (target_lang or source_lang).upper()

        if not await self._validate_language(source_lang, "source"):
            await ctx.send(f"`{source_lang}` is not a DeepL source language.")
            return
        if not await self._validate_language(target_lang, "target"):
            await ctx.send(
                f"`{target_lang}` is not a DeepL target language. "
                f"Some languages need a variant, e.g. `EN-US` or `PT-BR`."
            )
            return

        await self.bot.config_store.set_translation_config(
            ChannelTranslationConfig(
                channel_id=channel.id,
                guild_id=ctx.guild.id,
                source_lang=source_lang,
                target_lang=target_lang,
            )
        )
        self._forget_config(channel.id)
        log.info("Channel %s set to %s/%s", channel.id, source_lang, target_lang)
        await ctx.send(f"<#{channel.id}> is now a translate channel **({source_lang})**.")

    # ------------------------------------------------------------------
    # !remove-language -- stop translating a channel
    # ------------------------------------------------------------------

    @commands.command(name="remove-language")
    async def remove_language(self, ctx: commands.Context, channel: discord.TextChannel) -> None:
        """Stop translating a channel and remove all of its links.

        Usage: !remove-language #channel
        """
        affected = await self.bot.config_store.remove_translation_config(channel.id)
        self._forget_config(channel.id)
        self._forget_topology(channel.id, *affected)
        await ctx.send(f"<#{channel.id}> is no longer a translate channel.")

    # ------------------------------------------------------------------
    # !link / !unlink -- connect two translate channels
    # ------------------------------------------------------------------

    @commands.command(name="link")
    async def link(
        self, ctx: commands.Context, first: discord.TextChannel, second: discord.TextChannel
    ) -> None:
        """Relay messages between two translate channels, both ways.

        Usage: !link #english #german
        """
        if first.id == second.id:
            await ctx.send("A channel cannot be linked to itself.")
            return

        configs = [await self.bot.translation_configs.get(ch.id) for ch in (first, second)]
        missing = [ch for ch, cfg in zip((first, second), configs) if cfg is None]
        if missing:
            names = ", ".join(f"<#{ch.id}>" for ch in missing)
            await ctx.send(
                f"Cannot link, {names} is not a translate channel. "
                f"Use `{ctx.prefix}set-language` first."
            )
            return

        await self.bot.config_store.link_channels(ctx.guild.id, first.id, second.id)
        self._forget_topology(first.id, second.id)
        await ctx.send(f"Linked <#{first.id}> and <#{second.id}>.")

    @commands.command(name="unlink")
    async def unlink(
        self, ctx: commands.Context, first: discord.TextChannel, second: discord.TextChannel
    ) -> None:
        """Stop relaying between two channels.

        Usage: !unlink #english #german
        """
        removed = await self.bot.config_store.unlink_channels(first.id, second.id)
        self._forget_topology(first.id, second.id)
        if removed:
            await ctx.send(f"Unlinked <#{first.id}> and <#{second.id}>.")
        else:
            await ctx.send(f"<#{first.id}> and <#{second.id}> were not linked.")

    # ------------------------------------------------------------------
    # !show-links -- list links
    # ------------------------------------------------------------------

    @commands.command(name="show-links")
    async def show_links(
        self, ctx: commands.Context, channel: discord.TextChannel | None = None
    ) -> None:
        """Show the links of a channel, or of every channel in the server.

        Usage: !show-links [#channel]
        """
        if channel is not None:
            edge = await self.bot.topology.get(channel.id)
            source = await self.bot.translation_configs.get(channel.id)
            if edge is None or source is None:
                await ctx.send(f"Cannot show links, <#{channel.id}> is not a translate channel.")
                return
            await ctx.send(await self._render(edge, source))
            return

        edges = await self.bot.config_store.list_topologies(ctx.guild.id)
        sections = []
        for edge in edges:
            source = await self.bot.translation_configs.get(edge.channel_id)
            if source is not None:
                sections.append(await self._render(edge, source))
        if not sections:
            await ctx.send("Cannot show links, no channels are linked yet.")
            return

        await ctx.send("**Showing all translate channels links**\n\n" + "\n\n".join(sections))

    async def _render(self, edge: ChannelTopologyEdge, source: ChannelTranslationConfig) -> str:
        linked = {cid: await self.bot.translation_configs.get(cid) for cid in edge.linked_channel_ids}
        return format_links(edge, source, linked)


async def setup(bot: commands.Bot) -> None:
    """Load the LinkCommands cog into the bot."""
    await bot.add_cog(LinkCommands(bot))
