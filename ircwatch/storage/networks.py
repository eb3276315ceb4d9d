"""
Persistence for IRC networks, including the cascading delete of their channels.
"""

import logging
import sqlite3
from datetime import datetime

from ircwatch.exceptions import NotFoundError, StorageError
from ircwatch.models.network import Channel, Network, NickServ

from .channels import ChannelStore, select_channels, to_null
from .database import Database

log = logging.getLogger(__name__)

_NETWORK_COLUMNS = (
    "id, enabled, name, server, port, tls, pass, invite_command,"
    " nickserv_account, nickserv_password, updated_at"
)


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


def _row_to_network(row: sqlite3.Row) -> Network:
    return Network(
        id=row["id"],
        enabled=bool(row["enabled"]),
        name=row["name"],
        server=row["server"],
        port=row["port"],
        tls=bool(row["tls"]),
        pass_=row["pass"],
        invite_command=row["invite_command"],
        nickserv=NickServ(
            account=row["nickserv_account"], password=row["nickserv_password"]
        ),
        updated_at=_parse_timestamp(row["updated_at"]),
    )


def _network_params(network: Network) -> tuple:
    return (
        network.enabled,
        network.name,
        network.server,
        network.port,
        network.tls,
        to_null(network.pass_),
        to_null(network.invite_command),
        to_null(network.nickserv.account),
        to_null(network.nickserv.password),
    )


class NetworkStore:
    """
    Reads and writes IRC networks.

    The store is built once at startup around a shared ``Database`` and passed to
    whatever needs it. Channels of a network are reachable through
    ``list_channels`` and are removed together with the network by ``delete``.
    """

    def __init__(self, db: Database, channels: ChannelStore | None = None):
        self._db = db
        self._channels = channels or ChannelStore(db)

    @property
    def channels(self) -> ChannelStore:
        """The channel store sharing this store's database."""
        return self._channels

    def _get_sync(self, conn: sqlite3.Connection, network_id: int) -> Network:
        try:
            row = conn.execute(
                f"SELECT {_NETWORK_COLUMNS} FROM network WHERE id = ?",  # noqa: S608
                (network_id,),
            ).fetchone()
        except sqlite3.Error as e:
            log.error(f"Failed to read network {network_id}: {e}")
            raise StorageError(
                f"Failed to read network: {e}", operation="get_network"
            ) from e
        if row is None:
            raise NotFoundError("network", network_id, operation="get_network")
        return _row_to_network(row)

    async def get_by_id(self, network_id: int) -> Network:
        """
        Loads a single network.

        Raises:
            NotFoundError: If no network has this id.
            StorageError: For any other storage failure.
        """
        return await self._db.run(self._get_sync, network_id)

    def _get_with_channels_sync(
        self, conn: sqlite3.Connection, network_id: int
    ) -> Network:
        network = self._get_sync(conn, network_id)
        try:
            network.channels = select_channels(conn, network_id)
        except sqlite3.Error as e:
            log.error(f"Failed to read channels of network {network_id}: {e}")
            raise StorageError(
                f"Failed to read channels: {e}", operation="get_network"
            ) from e
        return network

    async def get_with_channels(self, network_id: int) -> Network:
        """Loads a network together with its channels."""
        return await self._db.run(self._get_with_channels_sync, network_id)

    def _list_sync(self, conn: sqlite3.Connection) -> list[Network]:
        try:
            rows = conn.execute(
                f"SELECT {_NETWORK_COLUMNS} FROM network ORDER BY id"  # noqa: S608
            ).fetchall()
        except sqlite3.Error as e:
            log.error(f"Failed to list networks: {e}")
            raise StorageError(
                f"Failed to list networks: {e}", operation="list_networks"
            ) from e
        return [_row_to_network(row) for row in rows]

    async def list_all(self) -> list[Network]:
        """Returns every stored network in insertion order."""
        return await self._db.run(self._list_sync)

    async def list_channels(self, network_id: int) -> list[Channel]:
        """Returns the channels of a network, see ``ChannelStore.list_by_network``."""
        return await self._channels.list_by_network(network_id)

    def _insert_sync(self, conn: sqlite3.Connection, network: Network) -> int:
        try:
            with conn:
                cursor = conn.execute(
                    """
                    INSERT INTO network (
                        enabled, name, server, port, tls, pass, invite_command,
                        nickserv_account, nickserv_password
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    _network_params(network),
                )
                return cursor.lastrowid
        except sqlite3.Error as e:
            log.error(f"Failed to insert network '{network.name}': {e}")
            raise StorageError(
                f"Failed to insert network: {e}", operation="store_network"
            ) from e

    def _update_sync(self, conn: sqlite3.Connection, network: Network) -> None:
        try:
            with conn:
                cursor = conn.execute(
                    """
                    UPDATE network
                    SET enabled = ?,
                        name = ?,
                        server = ?,
                        port = ?,
                        tls = ?,
                        pass = ?,
                        invite_command = ?,
                        nickserv_account = ?,
                        nickserv_password = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (*_network_params(network), network.id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError("network", network.id, operation="store_network")
        except sqlite3.Error as e:
            log.error(f"Failed to update network {network.id}: {e}")
            raise StorageError(
                f"Failed to update network: {e}", operation="store_network"
            ) from e

    async def upsert(self, network: Network) -> None:
        """
        Inserts a new network (id 0) or overwrites every column of an existing one.

        On insert the generated id is written back into ``network``. Updates carry
        no version check: the last write wins over the whole row.

        Raises:
            NotFoundError: If ``network.id`` is non-zero and no such row exists.
            StorageError: For any other storage failure.
        """
        if network.id != 0:
            await self._db.run(self._update_sync, network)
            return

        network.id = await self._db.run(self._insert_sync, network)
        log.debug(f"Stored network '{network.name}' with id {network.id}")

    def _delete_sync(self, conn: sqlite3.Connection, network_id: int) -> None:
        try:
            with conn:
                conn.execute("DELETE FROM network WHERE id = ?", (network_id,))
                conn.execute("DELETE FROM channel WHERE network_id = ?", (network_id,))
        except sqlite3.Error as e:
            log.error(f"Failed to delete network {network_id} and its channels: {e}")
            raise StorageError(
                f"Failed to delete network: {e}", operation="delete_network"
            ) from e

    async def delete(self, network_id: int) -> None:
        """
        Deletes a network and all of its channels in a single transaction.

        Either both deletions are committed or neither is; an error means nothing
        was removed. Deleting an unknown id is a no-op.
        """
        await self._db.run(self._delete_sync, network_id)
        log.info(f"Deleted network {network_id} and its channels.")
