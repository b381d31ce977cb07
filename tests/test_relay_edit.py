"""Tests for propagating edits of origin messages to their copies."""

import logging

import pytest

from conftest import make_author, make_message

ORCHESTRATOR_LOGGER = "linguabridge.relay.orchestrator"


async def _relayed(env, content="hello"):
    origin = make_message(100, content)
    record = await env.relay.handle_message(origin)
    return origin, record


def _edit_of(origin, content):
    return make_message(origin.channel_id, content, message_id=origin.id, author=origin.author)


@pytest.mark.asyncio
async def test_edit_updates_every_copy(relay_env):
    origin, record = await _relayed(relay_env)

    updated = await relay_env.relay.handle_edit(_edit_of(origin, "goodbye"))

    assert updated == 2
    de = relay_env.platform.webhook(200)
    fr = relay_env.platform.webhook(300)
    assert de.edits == [(record.entry_for(200).message_id, "[DE] goodbye")]
    assert fr.edits == [(record.entry_for(300).message_id, "[FR] goodbye")]


@pytest.mark.asyncio
async def test_edit_leaves_record_unchanged(relay_env):
    origin, record = await _relayed(relay_env)

    await relay_env.relay.handle_edit(_edit_of(origin, "goodbye"))

    assert relay_env.links.records == [record]
    # No new copies are posted on edit.
    assert len(relay_env.platform.webhook(200).sent) == 1


@pytest.mark.asyncio
async def test_edit_keeps_tags(relay_env):
    origin, _ = await _relayed(relay_env)

    await relay_env.relay.handle_edit(_edit_of(origin, "ask <@9> in <#300>"))

    ((_, content),) = relay_env.platform.webhook(200).edits
    assert content == "[DE] ask <@9> in <#300>"
    assert relay_env.translator.calls[-1][0] == "ask <:0> in <:1>"


@pytest.mark.asyncio
async def test_deleted_copy_is_logged_and_siblings_updated(relay_env, caplog):
    origin, record = await _relayed(relay_env)
    relay_env.platform.webhook(200).deleted.add(record.entry_for(200).message_id)

    with caplog.at_level(logging.WARNING, logger=ORCHESTRATOR_LOGGER):
        updated = await relay_env.relay.handle_edit(_edit_of(origin, "goodbye"))

    assert updated == 1
    assert relay_env.platform.webhook(200).edits == []
    assert len(relay_env.platform.webhook(300).edits) == 1
    assert "edit of copy" in caplog.text


@pytest.mark.asyncio
async def test_failed_translation_skips_that_copy(relay_env):
    origin, _ = await _relayed(relay_env)
    relay_env.translator.failing_targets.add("DE")

    assert await relay_env.relay.handle_edit(_edit_of(origin, "goodbye")) == 1
    assert relay_env.platform.webhook(200).edits == []


@pytest.mark.asyncio
async def test_copy_whose_channel_lost_its_config_is_skipped(relay_env):
    origin, _ = await _relayed(relay_env)
    del relay_env.source.configs[300]
    relay_env.relay._configs.invalidate(300)

    assert await relay_env.relay.handle_edit(_edit_of(origin, "goodbye")) == 1


@pytest.mark.asyncio
async def test_edit_of_unrelayed_message_is_noop(relay_env):
    assert await relay_env.relay.handle_edit(make_message(100, "changed", message_id=4242)) == 0
    assert relay_env.translator.calls == []


@pytest.mark.asyncio
async def test_edit_by_bot_is_ignored(relay_env):
    origin, _ = await _relayed(relay_env)
    edit = make_message(100, "bot text", message_id=origin.id, author=make_author(42, "alice", bot=True))

    assert await relay_env.relay.handle_edit(edit) == 0
    assert relay_env.platform.webhook(200).edits == []


@pytest.mark.asyncio
async def test_edit_of_webhook_message_is_ignored(relay_env):
    origin, _ = await _relayed(relay_env)
    edit = make_message(100, "changed", message_id=origin.id, author=origin.author, webhook_id=1)

    assert await relay_env.relay.handle_edit(edit) == 0


@pytest.mark.asyncio
async def test_edit_to_empty_content_is_ignored(relay_env):
    origin, _ = await _relayed(relay_env)

    assert await relay_env.relay.handle_edit(_edit_of(origin, "")) == 0
    assert await relay_env.relay.handle_edit(_edit_of(origin, "   ")) == 0
    assert relay_env.platform.webhook(200).edits == []


@pytest.mark.asyncio
async def test_edit_of_copy_id_is_not_propagated(relay_env):
    _, record = await _relayed(relay_env)
    copy = record.entry_for(200)
    edit = make_message(200, "changed", message_id=copy.message_id)

    assert await relay_env.relay.handle_edit(edit) == 0
