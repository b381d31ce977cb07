"""Relay domain models.

These dataclasses are shared by the orchestrator, the caches, the storage
layer and the Discord adapter.  None of them reference ``discord`` types so
the relay core can be exercised without a gateway connection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


# ---------------------------------------------------------------------------
# Channel configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChannelTranslationConfig:
    """Language settings of one translation-enabled channel.

    Attributes:
        channel_id: The configured channel.
        guild_id: Guild the channel belongs to.
        source_lang: Language code messages in this channel are written in
            (e.g. ``"EN"``).
        target_lang: Language code used when this channel *receives* a
            relay.  DeepL distinguishes some target variants (``"EN-US"``)
            from their source code, so this may differ from
            ``source_lang``.  Defaults to ``source_lang``.
    """

    channel_id: int
    guild_id: int
    source_lang: str
    target_lang: str = ""

    def __post_init__(self) -> None:
        if not self.target_lang:
            object.__setattr__(self, "target_lang", self.source_lang)


@dataclass(frozen=True, slots=True)
class ChannelTopologyEdge:
    """The set of channels a channel relays into."""

    channel_id: int
    guild_id: int
    linked_channel_ids: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        # Distinct, ordered, and never pointing back at itself.
        seen: dict[int, None] = {}
        for cid in self.linked_channel_ids:
            if cid != self.channel_id:
                seen.setdefault(cid, None)
        object.__setattr__(self, "linked_channel_ids", tuple(seen))


# ---------------------------------------------------------------------------
# Link records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MessageCopy:
    """A concrete rendered message: one ``(channel_id, message_id)`` pair."""

    channel_id: int
    message_id: int

    def to_dict(self) -> dict[str, int]:
        return {"channel_id": self.channel_id, "message_id": self.message_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MessageCopy:
        return cls(channel_id=int(data["channel_id"]), message_id=int(data["message_id"]))


@dataclass(frozen=True, slots=True)
class MessageLinkRecord:
    """Ties an originating message to every copy relayed from it.

    A record is written once, after the initial fan-out, and never changed.
    Edits alter the remote copies, not this record.
    """

    author_id: int
    origin_channel_id: int
    origin_message_id: int
    copies: tuple[MessageCopy, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "copies", tuple(self.copies))
        channels = [c.channel_id for c in self.copies]
        if len(set(channels)) != len(channels):
            raise ValueError("MessageLinkRecord copies must target distinct channels")
        if self.origin_channel_id in channels:
            raise ValueError("MessageLinkRecord copies cannot live in the origin channel")

    @property
    def origin(self) -> MessageCopy:
        return MessageCopy(self.origin_channel_id, self.origin_message_id)

    def entries(self) -> Iterator[MessageCopy]:
        """Yield the origin pair followed by every copy."""
        yield self.origin
        yield from self.copies

    def entry_for(self, channel_id: int) -> MessageCopy | None:
        """Return the rendering of this message in *channel_id*, if any."""
        for entry in self.entries():
            if entry.channel_id == channel_id:
                return entry
        return None

    def contains(self, message_id: int, channel_id: int) -> bool:
        return MessageCopy(channel_id, message_id) in set(self.entries())


# ---------------------------------------------------------------------------
# Platform-neutral messages
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Author:
    id: int
    display_name: str
    avatar_url: str | None = None
    bot: bool = False


@dataclass(frozen=True, slots=True)
class InboundMessage:
    """A message-created or message-updated event as seen by the relay.

    ``attachments`` are opaque platform objects; the relay only forwards
    them to the adapter that produced them.
    """

    id: int
    channel_id: int
    guild_id: int | None
    author: Author
    content: str = ""
    webhook_id: int | None = None
    attachments: tuple[Any, ...] = ()
    sticker_ids: tuple[int, ...] = ()
    reference_id: int | None = None


@dataclass(frozen=True, slots=True)
class FetchedMessage:
    """An existing message fetched back from the platform."""

    id: int
    channel_id: int
    author: Author
    content: str = ""
    jump_url: str = ""
    has_attachments: bool = False
    has_stickers: bool = False


@dataclass(frozen=True, slots=True)
class ReplyPreview:
    """Quote of the message being replied to, rendered above a copy."""

    author_name: str
    author_avatar_url: str | None
    description: str
    jump_url: str


@dataclass(frozen=True, slots=True)
class OutgoingPayload:
    """Everything a webhook needs to post one copy."""

    username: str
    avatar_url: str | None = None
    content: str | None = None
    attachments: tuple[Any, ...] = field(default_factory=tuple)
    reply_preview: ReplyPreview | None = None

    @property
    def is_empty(self) -> bool:
        return not self.content and not self.attachments and self.reply_preview is None
