"""Fan-out of new and edited messages to every linked channel.

Create path, per incoming message::

    filter own output -> resolve source config + topology
      -> per target (concurrently): target config -> reply preview
         -> encode / translate / decode (or sticker link) -> webhook send
      -> join -> persist one MessageLinkRecord

Edit path, per edited origin message::

    find record by origin id -> resolve source config
      -> per copy (concurrently): target config -> re-translate
         -> webhook edit

Every branch is independent.  A failing branch is logged and contributes
nothing; it never cancels its siblings and never reaches the chat.  The only
failure that escapes :meth:`RelayOrchestrator.handle_message` is storage
refusing the final record.

Usage::

    relay = RelayOrchestrator(
        platform=platform,
        translator=deepl,
        links=link_store,
        configs=ChannelTranslationConfigCache(config_store),
        topology=ChannelTopologyCache(config_store),
        webhooks=WebhookHandleCache(platform),
    )
    record = await relay.handle_message(inbound)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from linguabridge.relay.errors import (
    ConfigurationMissing,
    ProviderFailure,
    ReferenceNotFound,
)
from linguabridge.relay.models import (
    ChannelTranslationConfig,
    InboundMessage,
    MessageCopy,
    MessageLinkRecord,
    OutgoingPayload,
    ReplyPreview,
)
from linguabridge.relay.ports import LinkStorage, MessagingPlatform, Translator
from linguabridge.relay.preview import (
    DEFAULT_PREVIEW_CHARS,
    add_reply_ping,
    build_reply_preview,
    sticker_link,
)
from linguabridge.relay.tags import TagTranscoder

if TYPE_CHECKING:
    from linguabridge.cache import (
        ChannelTopologyCache,
        ChannelTranslationConfigCache,
        WebhookHandleCache,
    )

log = logging.getLogger(__name__)


class RelayOrchestrator:
    """Relays messages between linked channels and keeps copies in sync.

    All process-wide state (the three caches) is injected, so one
    orchestrator per bot is enough and tests can build their own.

    Args:
        platform: Messaging platform adapter.
        translator: Translation provider.
        links: Message link record storage.
        configs: Channel translation config cache.
        topology: Channel topology cache.
        webhooks: Per-channel webhook handle cache.
        reply_preview_chars: Characters of the replied-to message quoted in
            a reply preview.
    """

    def __init__(
        self,
        *,
        platform: MessagingPlatform,
        translator: Translator,
        links: LinkStorage,
        configs: ChannelTranslationConfigCache,
        topology: ChannelTopologyCache,
        webhooks: WebhookHandleCache,
        reply_preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ) -> None:
        self._platform = platform
        self._translator = translator
        self._links = links
        self._configs = configs
        self._topology = topology
        self._webhooks = webhooks
        self._preview_chars = reply_preview_chars

    # ------------------------------------------------------------------
    # Create path
    # ------------------------------------------------------------------

    async def handle_message(self, message: InboundMessage) -> MessageLinkRecord | None:
        """Relay a newly created message to every linked channel.

        Returns:
            The persisted record, or ``None`` when nothing was relayed.

        Raises:
            Exception: Whatever the link storage raises while persisting
                the record.  Every other failure is contained.
        """
        if message.guild_id is None:
            return None
        if await self._is_own_output(message):
            return None

        source = await self._configs.get(message.channel_id)
        topology = await self._topology.get(message.channel_id)
        if source is None or topology is None or not topology.linked_channel_ids:
            return None

        targets = topology.linked_channel_ids
        reply_record = await self._find_reply_record(message)

        results = await asyncio.gather(
            *(self._relay_to(message, target, source, reply_record) for target in targets),
            return_exceptions=True,
        )

        copies: list[MessageCopy] = []
        failed = 0
        for target, result in zip(targets, results):
            if isinstance(result, MessageCopy):
                copies.append(result)
            elif isinstance(result, BaseException):
                if self._log_branch_failure(
                    result, f"relay of message {message.id} to channel {target}"
                ):
                    failed += 1

        if failed:
            log.warning(
                "Partial relay of message %s: %d of %d copies posted",
                message.id, len(copies), len(copies) + failed,
            )
        if not copies:
            return None

        record = MessageLinkRecord(
            author_id=message.author.id,
            origin_channel_id=message.channel_id,
            origin_message_id=message.id,
            copies=tuple(copies),
        )
        await self._links.create(record)
        log.info(
            "Relayed message %s from channel %s to %d channel(s)",
            message.id, message.channel_id, len(copies),
        )
        return record

    async def _relay_to(
        self,
        message: InboundMessage,
        target_id: int,
        source: ChannelTranslationConfig,
        reply_record: MessageLinkRecord | None,
    ) -> MessageCopy | None:
        """Post one copy of *message* into *target_id*."""
        target = await self._configs.get(target_id)
        if target is None:
            raise ConfigurationMissing(f"channel {target_id} has no translation config")

        preview, ping_id = await self._reply_context(reply_record, target_id)

        if message.sticker_ids:
            content: str | None = sticker_link(message.sticker_ids[0])
            attachments: tuple[Any, ...] = ()
        else:
            content = await self.translate(
                message.content, source.source_lang, target.target_lang
            )
            attachments = message.attachments

        payload = OutgoingPayload(
            username=message.author.display_name,
            avatar_url=message.author.avatar_url,
            content=add_reply_ping(content, ping_id),
            attachments=attachments,
            reply_preview=preview,
        )
        if payload.is_empty:
            log.debug("Nothing to relay for message %s into %s", message.id, target_id)
            return None

        webhook = await self._webhooks.get(target_id)
        return await webhook.send(payload)

    async def _is_own_output(self, message: InboundMessage) -> bool:
        own_id = self._platform.own_user_id
        if own_id is not None and message.author.id == own_id:
            return True
        if message.webhook_id is None:
            return False
        if self._webhooks.owns(message.webhook_id):
            return True
        try:
            return await self._platform.is_own_webhook(message.webhook_id)
        except ProviderFailure as e:
            # Relaying a message we may have posted ourselves risks a loop.
            log.warning(
                "Could not check webhook %s of message %s, not relaying: %s",
                message.webhook_id, message.id, e,
            )
            return True

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------

    async def _find_reply_record(self, message: InboundMessage) -> MessageLinkRecord | None:
        if message.reference_id is None:
            return None
        try:
            return await self._links.find_by_copy_or_origin(
                message.reference_id, message.channel_id
            )
        except Exception as e:
            log.warning("Reply lookup for message %s failed: %s", message.id, e)
            return None

    async def _reply_context(
        self, record: MessageLinkRecord | None, target_id: int
    ) -> tuple[ReplyPreview | None, int | None]:
        """Return ``(preview, author_id_to_mention)`` for one target channel."""
        if record is None:
            return None, None
        entry = record.entry_for(target_id)
        if entry is None:
            return None, None

        try:
            replied = await self._platform.fetch_message(entry.channel_id, entry.message_id)
        except ReferenceNotFound:
            log.debug("Replied-to copy %s in %s is gone", entry.message_id, target_id)
            return None, None
        except ProviderFailure as e:
            log.warning("Could not fetch replied-to copy %s: %s", entry.message_id, e)
            return None, None

        preview = build_reply_preview(replied, self._preview_chars)
        ping_id = None if replied.author.bot else replied.author.id
        return preview, ping_id

    # ------------------------------------------------------------------
    # Edit path
    # ------------------------------------------------------------------

    async def handle_edit(self, message: InboundMessage) -> int:
        """Propagate an edit of an origin message to all of its copies.

        The link record is only read; its copies list never changes here.

        Returns:
            Number of copies that were updated.
        """
        if message.guild_id is None or message.author.bot or message.webhook_id is not None:
            return 0
        if not message.content:
            return 0

        record = await self._links.find_by_origin_id(message.id)
        if record is None:
            return 0
        source = await self._configs.get(record.origin_channel_id)
        if source is None:
            return 0

        results = await asyncio.gather(
            *(self._edit_copy(message.content, copy, source) for copy in record.copies),
            return_exceptions=True,
        )

        updated = 0
        for copy, result in zip(record.copies, results):
            if isinstance(result, BaseException):
                self._log_branch_failure(
                    result,
                    f"edit of copy {copy.message_id} in channel {copy.channel_id}",
                )
            elif result:
                updated += 1

        log.info(
            "Propagated edit of message %s to %d of %d copies",
            message.id, updated, len(record.copies),
        )
        return updated

    async def _edit_copy(
        self, content: str, copy: MessageCopy, source: ChannelTranslationConfig
    ) -> bool:
        target = await self._configs.get(copy.channel_id)
        if target is None:
            raise ConfigurationMissing(f"channel {copy.channel_id} has no translation config")

        translated = await self.translate(content, source.source_lang, target.target_lang)
        if translated is None:
            return False

        webhook = await self._webhooks.get(copy.channel_id)
        await webhook.edit_message(copy.message_id, translated)
        return True

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    async def translate(self, content: str, source_lang: str, target_lang: str) -> str | None:
        """Translate *content* with its inline tags protected.

        Blank content is not sent to the provider and yields ``None``.
        """
        if not content.strip():
            return None

        encoded, table = TagTranscoder.encode(content)
        translated = await self._translator.translate(encoded, source_lang, target_lang)
        return TagTranscoder.decode(translated, table)

    @staticmethod
    def _log_branch_failure(exc: BaseException, what: str) -> bool:
        """Log a branch outcome.  Returns ``True`` if it counts as a failure."""
        if not isinstance(exc, Exception):
            raise exc
        if isinstance(exc, ConfigurationMissing):
            log.debug("Skipped %s: %s", what, exc)
            return False
        if isinstance(exc, (ReferenceNotFound, ProviderFailure)):
            log.warning("Failed %s: %s", what, exc)
        else:
            log.error("Failed %s: %s", what, exc, exc_info=exc)
        return True
