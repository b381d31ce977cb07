"""Persisted message link records."""

from __future__ import annotations

import logging

from psycopg.types.json import Jsonb

from linguabridge.relay.models import MessageCopy, MessageLinkRecord
from linguabridge.storage.postgres import PostgresDatabase

log = logging.getLogger(__name__)

_SELECT = """
    SELECT author_id, origin_channel_id, origin_message_id, copies
    FROM message_links
"""


class MessageLinkStore:
    """Append-only store of :class:`MessageLinkRecord` rows.

    Records are inserted once and never updated.  Storage errors from
    :meth:`create` propagate to the caller.
    """

    def __init__(self, db: PostgresDatabase) -> None:
        self._db = db

    async def create(self, record: MessageLinkRecord) -> None:
        async with self._db.connection.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO message_links (author_id, origin_channel_id, origin_message_id, copies)
                VALUES (%s, %s, %s, %s)
                """,
                (
                    record.author_id,
                    record.origin_channel_id,
                    record.origin_message_id,
                    Jsonb([c.to_dict() for c in record.copies]),
                ),
            )
        log.debug("Stored link record for message %s", record.origin_message_id)

    async def find_by_copy_or_origin(
        self, message_id: int, channel_id: int
    ) -> MessageLinkRecord | None:
        """Find the record in which ``(message_id, channel_id)`` is the origin or a copy."""
        async with self._db.connection.cursor() as cur:
            await cur.execute(
                _SELECT
                + """
                WHERE (origin_message_id = %s AND origin_channel_id = %s)
                   OR copies @> %s
                LIMIT 1
                """,
                (
                    message_id,
                    channel_id,
                    Jsonb([MessageCopy(channel_id, message_id).to_dict()]),
                ),
            )
            row = await cur.fetchone()
        return self._row_to_record(row) if row else None

    async def find_by_origin_id(self, message_id: int) -> MessageLinkRecord | None:
        async with self._db.connection.cursor() as cur:
            await cur.execute(_SELECT + " WHERE origin_message_id = %s", (message_id,))
            row = await cur.fetchone()
        return self._row_to_record(row) if row else None

    @staticmethod
    def _row_to_record(row: dict) -> MessageLinkRecord:
        return MessageLinkRecord(
            author_id=int(row["author_id"]),
            origin_channel_id=int(row["origin_channel_id"]),
            origin_message_id=int(row["origin_message_id"]),
            copies=tuple(MessageCopy.from_dict(c) for c in row.get("copies") or []),
        )
