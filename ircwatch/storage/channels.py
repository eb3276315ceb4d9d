"""
Persistence for IRC channels, always scoped to their owning network.
"""

import logging
import sqlite3

from ircwatch.exceptions import NotFoundError, StorageError
from ircwatch.models.network import Channel

from .database import Database

log = logging.getLogger(__name__)

_SELECT_CHANNELS = (
    "SELECT id, network_id, enabled, detached, name, password"
    " FROM channel WHERE network_id = ? ORDER BY id"
)


def to_null(value: str | None) -> str | None:
    """Encodes an optional value for a nullable column; empty and absent both become NULL."""
    return value or None


def select_channels(conn: sqlite3.Connection, network_id: int) -> list[Channel]:
    """Reads every channel of a network in insertion order."""
    rows = conn.execute(_SELECT_CHANNELS, (network_id,)).fetchall()
    return [
        Channel(
            id=row["id"],
            network_id=row["network_id"],
            enabled=bool(row["enabled"]),
            detached=bool(row["detached"]),
            name=row["name"],
            password=row["password"],
        )
        for row in rows
    ]


class ChannelStore:
    """Reads and writes channels under an existing network identity."""

    def __init__(self, db: Database):
        self._db = db

    def _list_by_network_sync(
        self, conn: sqlite3.Connection, network_id: int
    ) -> list[Channel]:
        try:
            return select_channels(conn, network_id)
        except sqlite3.Error as e:
            log.error(f"Failed to list channels for network {network_id}: {e}")
            raise StorageError(
                f"Failed to list channels: {e}", operation="list_channels"
            ) from e

    async def list_by_network(self, network_id: int) -> list[Channel]:
        """Returns all channels belonging to a network, oldest first."""
        return await self._db.run(self._list_by_network_sync, network_id)

    def _insert_sync(
        self, conn: sqlite3.Connection, network_id: int, channel: Channel
    ) -> int:
        try:
            with conn:
                exists = conn.execute(
                    "SELECT 1 FROM network WHERE id = ?", (network_id,)
                ).fetchone()
                if exists is None:
                    raise NotFoundError("network", network_id, operation="store_channel")

                # New channels always start detached until the client joins them.
                cursor = conn.execute(
                    "INSERT INTO channel (enabled, detached, name, password, network_id)"
                    " VALUES (?, ?, ?, ?, ?)",
                    (
                        channel.enabled,
                        True,
                        channel.name,
                        to_null(channel.password),
                        network_id,
                    ),
                )
                return cursor.lastrowid
        except sqlite3.Error as e:
            log.error(f"Failed to insert channel '{channel.name}': {e}")
            raise StorageError(
                f"Failed to insert channel: {e}", operation="store_channel"
            ) from e

    def _update_sync(self, conn: sqlite3.Connection, channel: Channel) -> None:
        try:
            with conn:
                cursor = conn.execute(
                    "UPDATE channel SET enabled = ?, detached = ?, name = ?,"
                    " password = ? WHERE id = ?",
                    (
                        channel.enabled,
                        channel.detached,
                        channel.name,
                        to_null(channel.password),
                        channel.id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("channel", channel.id, operation="store_channel")
        except sqlite3.Error as e:
            log.error(f"Failed to update channel {channel.id}: {e}")
            raise StorageError(
                f"Failed to update channel: {e}", operation="store_channel"
            ) from e

    async def upsert(self, network_id: int, channel: Channel) -> None:
        """
        Inserts a new channel (id 0) under ``network_id`` or overwrites an existing one.

        On insert the generated id is written back into ``channel`` and the stored
        channel is always detached. On update only enabled, detached, name and
        password are rewritten; the owning network never changes.

        Raises:
            NotFoundError: If the owning network (insert) or the channel (update)
            does not exist.
            StorageError: For any other storage failure.
        """
        if channel.id != 0:
            await self._db.run(self._update_sync, channel)
            return

        new_id = await self._db.run(self._insert_sync, network_id, channel)
        channel.id = new_id
        channel.network_id = network_id
        channel.detached = True
        log.debug(f"Stored channel '{channel.name}' ({new_id}) for network {network_id}")
