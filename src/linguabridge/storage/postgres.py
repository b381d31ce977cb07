"""PostgreSQL connection and schema for LinguaBridge.

Three tables back the relay:

- ``translate_channels`` -- one language config per translation channel.
- ``channel_links`` -- directed adjacency rows; linking two channels writes
  both directions.
- ``message_links`` -- one row per relayed origin message.  ``copies`` is a
  JSONB array of ``{"channel_id", "message_id"}`` objects with a GIN index,
  so "which record contains this copy" is a single containment query.
"""

from __future__ import annotations

import logging

import psycopg
from psycopg.rows import dict_row

log = logging.getLogger(__name__)

_SCHEMA: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS translate_channels (
        channel_id BIGINT PRIMARY KEY,
        guild_id BIGINT NOT NULL,
        source_lang TEXT NOT NULL,
        target_lang TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS channel_links (
        channel_id BIGINT NOT NULL,
        linked_channel_id BIGINT NOT NULL,
        guild_id BIGINT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (channel_id, linked_channel_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_channel_links_guild ON channel_links (guild_id)",
    """
    CREATE TABLE IF NOT EXISTS message_links (
        id BIGSERIAL PRIMARY KEY,
        author_id BIGINT NOT NULL,
        origin_channel_id BIGINT NOT NULL,
        origin_message_id BIGINT NOT NULL UNIQUE,
        copies JSONB NOT NULL DEFAULT '[]'::jsonb,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_message_links_copies ON message_links USING GIN (copies jsonb_path_ops)",
)


class PostgresDatabase:
    """Owns the single async connection shared by the stores.

    The connection runs in autocommit mode; every store call is one
    statement.  psycopg serialises concurrent use of one connection.
    """

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._conn: psycopg.AsyncConnection | None = None

    async def connect(self) -> None:
        """Open the connection and create the schema if needed."""
        self._conn = await psycopg.AsyncConnection.connect(
            self._dsn, row_factory=dict_row, autocommit=True, connect_timeout=5
        )
        async with self._conn.cursor() as cur:
            for statement in _SCHEMA:
                await cur.execute(statement)
        log.info("PostgreSQL schema ready")

    @property
    def connection(self) -> psycopg.AsyncConnection:
        if self._conn is None:
            raise RuntimeError("PostgresDatabase not initialized. Call connect() first.")
        return self._conn

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and not self._conn.closed

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
