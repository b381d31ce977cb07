"""Tests for relay domain model invariants."""

import pytest

from linguabridge.relay.models import (
    Author,
    ChannelTopologyEdge,
    ChannelTranslationConfig,
    MessageCopy,
    MessageLinkRecord,
    OutgoingPayload,
    ReplyPreview,
)


def test_target_lang_defaults_to_source():
    config = ChannelTranslationConfig(channel_id=1, guild_id=2, source_lang="DE")
    assert config.target_lang == "DE"


def test_explicit_target_lang_kept():
    config = ChannelTranslationConfig(channel_id=1, guild_id=2, source_lang="EN", target_lang="EN-GB")
    assert config.target_lang == "EN-GB"


def test_topology_drops_duplicates_and_self():
    edge = ChannelTopologyEdge(channel_id=1, guild_id=9, linked_channel_ids=(3, 1, 2, 3))
    assert edge.linked_channel_ids == (3, 2)


def test_record_rejects_two_copies_in_one_channel():
    with pytest.raises(ValueError, match="distinct"):
        MessageLinkRecord(
            author_id=1,
            origin_channel_id=10,
            origin_message_id=100,
            copies=(MessageCopy(20, 200), MessageCopy(20, 201)),
        )


def test_record_rejects_copy_in_origin_channel():
    with pytest.raises(ValueError, match="origin channel"):
        MessageLinkRecord(
            author_id=1,
            origin_channel_id=10,
            origin_message_id=100,
            copies=(MessageCopy(10, 200),),
        )


def test_record_entries_and_lookup():
    record = MessageLinkRecord(
        author_id=1,
        origin_channel_id=10,
        origin_message_id=100,
        copies=[MessageCopy(20, 200), MessageCopy(30, 300)],
    )
    assert isinstance(record.copies, tuple)
    assert list(record.entries()) == [MessageCopy(10, 100), MessageCopy(20, 200), MessageCopy(30, 300)]
    assert record.entry_for(30) == MessageCopy(30, 300)
    assert record.entry_for(10) == record.origin
    assert record.entry_for(40) is None
    assert record.contains(200, 20)
    assert record.contains(100, 10)
    assert not record.contains(200, 30)


def test_message_copy_dict_form():
    copy = MessageCopy.from_dict({"channel_id": "20", "message_id": 200})
    assert copy == MessageCopy(20, 200)
    assert copy.to_dict() == {"channel_id": 20, "message_id": 200}


def test_payload_is_empty():
    assert OutgoingPayload(username="a").is_empty
    assert OutgoingPayload(username="a", content="", attachments=()).is_empty
    assert not OutgoingPayload(username="a", content="hi").is_empty
    assert not OutgoingPayload(username="a", attachments=(object(),)).is_empty
    preview = ReplyPreview("b", None, "quote", "https://x")
    assert not OutgoingPayload(username="a", reply_preview=preview).is_empty


def test_author_defaults():
    author = Author(id=1, display_name="alice")
    assert author.avatar_url is None
    assert author.bot is False
