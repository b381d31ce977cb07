"""Reply previews and reply mentions for relayed copies."""

from __future__ import annotations

from typing import Final

from linguabridge.relay.models import FetchedMessage, ReplyPreview

DEFAULT_PREVIEW_CHARS: Final[int] = 77

STICKER_URL: Final[str] = "https://media.discordapp.net/stickers/{sticker_id}.webp"


def truncate_preview(text: str, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text


def build_reply_preview(
    replied: FetchedMessage, limit: int = DEFAULT_PREVIEW_CHARS
) -> ReplyPreview:
    """Quote *replied* (the copy living in the target channel).

    Text is clipped to *limit* characters.  Messages without text are
    described as an attachment or a sticker instead.
    """
    excerpt = truncate_preview(replied.content, limit)
    url = replied.jump_url
    if excerpt:
        description = f"**[Replying to:]({url})** {excerpt}"
    elif replied.has_stickers and not replied.has_attachments:
        description = f"**[Replying to a sticker]({url})**"
    else:
        description = f"**[Replying to an attachment]({url})**"

    return ReplyPreview(
        author_name=replied.author.display_name,
        author_avatar_url=replied.author.avatar_url,
        description=description,
        jump_url=url,
    )


def add_reply_ping(content: str | None, author_id: int | None) -> str | None:
    """Append a mention of *author_id* unless it is already in *content*.

    ``author_id`` is ``None`` when the replied-to author is a bot or one of
    our own webhook copies, in which case nothing is added.
    """
    if author_id is None:
        return content

    mention = f"<@{author_id}>"
    if not content:
        return mention
    if mention in content or f"<@!{author_id}>" in content:
        return content
    return f"{content} {mention}"


def sticker_link(sticker_id: int) -> str:
    return STICKER_URL.format(sticker_id=sticker_id)
