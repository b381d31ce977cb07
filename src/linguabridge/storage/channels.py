"""Channel language configs and channel links."""

from __future__ import annotations

from linguabridge.relay.models import ChannelTopologyEdge, ChannelTranslationConfig
from linguabridge.storage.postgres import PostgresDatabase


class ChannelConfigStore:
    """Reads and writes ``translate_channels`` and ``channel_links``.

    The relay only reads through the caches; the write methods are used by
    the configuration commands, which invalidate the caches afterwards.
    """

    def __init__(self, db: PostgresDatabase) -> None:
        self._db = db

    # -- Read side ----------------------------------------------------------

    async def get_translation_config(self, channel_id: int) -> ChannelTranslationConfig | None:
        async with self._db.connection.cursor() as cur:
            await cur.execute(
                """
                SELECT channel_id, guild_id, source_lang, target_lang
                FROM translate_channels
                WHERE channel_id = %s
                """,
                (channel_id,),
            )
            row = await cur.fetchone()
        return self._row_to_config(row) if row else None

    async def get_topology(self, channel_id: int) -> ChannelTopologyEdge | None:
        async with self._db.connection.cursor() as cur:
            await cur.execute(
                """
                SELECT guild_id, linked_channel_id
                FROM channel_links
                WHERE channel_id = %s
                ORDER BY created_at, linked_channel_id
                """,
                (channel_id,),
            )
            rows = await cur.fetchall()
        if not rows:
            return None
        return ChannelTopologyEdge(
            channel_id=channel_id,
            guild_id=int(rows[0]["guild_id"]),
            linked_channel_ids=tuple(int(r["linked_channel_id"]) for r in rows),
        )

    async def list_topologies(self, guild_id: int) -> list[ChannelTopologyEdge]:
        """Return every channel of *guild_id* that has at least one link."""
        async with self._db.connection.cursor() as cur:
            await cur.execute(
                """
                SELECT channel_id, linked_channel_id
                FROM channel_links
                WHERE guild_id = %s
                ORDER BY channel_id, created_at, linked_channel_id
                """,
                (guild_id,),
            )
            rows = await cur.fetchall()

        grouped: dict[int, list[int]] = {}
        for row in rows:
            grouped.setdefault(int(row["channel_id"]), []).append(int(row["linked_channel_id"]))
        return [
            ChannelTopologyEdge(channel_id=cid, guild_id=guild_id, linked_channel_ids=tuple(linked))
            for cid, linked in grouped.items()
        ]

    # -- Write side ---------------------------------------------------------

    async def set_translation_config(self, config: ChannelTranslationConfig) -> None:
        async with self._db.connection.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO translate_channels (channel_id, guild_id, source_lang, target_lang)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (channel_id) DO UPDATE
                SET source_lang = excluded.source_lang, target_lang = excluded.target_lang
                """,
                (config.channel_id, config.guild_id, config.source_lang, config.target_lang),
            )

    async def remove_translation_config(self, channel_id: int) -> list[int]:
        """Delete a channel's config and every link touching it.

        Returns:
            The channels that were linked to it (their topology changed too).
        """
        conn = self._db.connection
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    "DELETE FROM translate_channels WHERE channel_id = %s", (channel_id,)
                )
                await cur.execute(
                    """
                    DELETE FROM channel_links
                    WHERE channel_id = %s OR linked_channel_id = %s
                    RETURNING channel_id, linked_channel_id
                    """,
                    (channel_id, channel_id),
                )
                rows = await cur.fetchall()
        affected = {int(r["channel_id"]) for r in rows} | {int(r["linked_channel_id"]) for r in rows}
        affected.discard(channel_id)
        return sorted(affected)

    async def link_channels(self, guild_id: int, first_id: int, second_id: int) -> None:
        """Link two channels in both directions.  Linking twice is a no-op."""
        if first_id == second_id:
            raise ValueError("A channel cannot be linked to itself")
        async with self._db.connection.cursor() as cur:
            await cur.executemany(
                """
                INSERT INTO channel_links (channel_id, linked_channel_id, guild_id)
                VALUES (%s, %s, %s)
                ON CONFLICT DO NOTHING
                """,
                [(first_id, second_id, guild_id), (second_id, first_id, guild_id)],
            )

    async def unlink_channels(self, first_id: int, second_id: int) -> bool:
        """Remove the link between two channels.  Returns ``True`` if one existed."""
        async with self._db.connection.cursor() as cur:
            await cur.execute(
                """
                DELETE FROM channel_links
                WHERE (channel_id = %s AND linked_channel_id = %s)
                   OR (channel_id = %s AND linked_channel_id = %s)
                """,
                (first_id, second_id, second_id, first_id),
            )
            return cur.rowcount > 0

    @staticmethod
    def _row_to_config(row: dict) -> ChannelTranslationConfig:
        return ChannelTranslationConfig(
            channel_id=int(row["channel_id"]),
            guild_id=int(row["guild_id"]),
            source_lang=row["source_lang"],
            target_lang=row["target_lang"],
        )
