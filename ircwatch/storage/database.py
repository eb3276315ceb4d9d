"""
Manages the SQLite database that holds the IRC network and channel configuration.
"""

import asyncio
import logging
import sqlite3
import threading
from collections.abc import Callable
from contextlib import closing
from pathlib import Path
from typing import Any, TypeVar

from ircwatch.exceptions import StorageError
from ircwatch.models.config import StoreConfig

log = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS network (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        enabled BOOLEAN NOT NULL DEFAULT 1,
        name TEXT NOT NULL,
        server TEXT NOT NULL,
        port INTEGER NOT NULL,
        tls BOOLEAN NOT NULL DEFAULT 0,
        pass TEXT,
        invite_command TEXT,
        nickserv_account TEXT,
        nickserv_password TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS channel (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        network_id INTEGER NOT NULL
            REFERENCES network(id) DEFERRABLE INITIALLY DEFERRED,
        enabled BOOLEAN NOT NULL DEFAULT 1,
        detached BOOLEAN NOT NULL DEFAULT 1,
        name TEXT NOT NULL,
        password TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_channel_network_id ON channel(network_id);",
)


class Database:
    """
    A SQLite handle with a bounded connection pool.

    Every operation borrows one connection, runs a blocking function against it
    in a worker thread and closes it afterwards. Cancelling the awaiting task
    interrupts the running statement so that any open transaction rolls back.
    """

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: float = 30):
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self._pool_size = pool_size
        self._connection_semaphore = asyncio.Semaphore(pool_size)
        self._initialize_db()

    @classmethod
    def from_config(cls, config: StoreConfig) -> "Database":
        return cls(
            Path(config.database_path),
            pool_size=config.pool_size,
            busy_timeout=config.busy_timeout,
        )

    def _get_connection(self) -> sqlite3.Connection:
        """Gets a new database connection with the PRAGMA settings the stores rely on."""
        try:
            conn = sqlite3.connect(
                self.db_path, timeout=self.busy_timeout, check_same_thread=False
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON;")
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            return conn
        except sqlite3.Error as e:
            log.error(f"Failed to connect to database '{self.db_path}': {e}")
            raise StorageError(
                f"Failed to connect to database: {e}", operation="connect"
            ) from e

    def _initialize_db(self) -> None:
        """Creates the database file, tables and indexes if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._get_connection()) as conn:
            try:
                with conn:
                    for statement in SCHEMA:
                        conn.execute(statement)
            except sqlite3.Error as e:
                log.error(f"Failed to initialize database at '{self.db_path}': {e}")
                raise StorageError(
                    f"Failed to initialize database: {e}", operation="initialize"
                ) from e

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """
        Runs a synchronous database function within the connection pool semaphore.

        ``func`` receives a fresh connection as its first argument. The
        connection is opened and closed in the worker thread, so it never
        outlives the call. If the caller is cancelled after ``func`` already
        committed, the committed result is returned instead of the cancellation.
        """
        async with self._connection_semaphore:
            operation = _Operation(self._get_connection)
            worker = asyncio.ensure_future(
                asyncio.to_thread(operation.execute, func, *args)
            )
            try:
                return await asyncio.shield(worker)
            except asyncio.CancelledError:
                operation.cancel()
                await asyncio.wait({worker})
                if not worker.cancelled() and worker.exception() is None:
                    log.debug("Operation finished before cancellation took effect.")
                    return worker.result()
                if not worker.cancelled():
                    log.debug(f"Operation interrupted by cancellation: {worker.exception()}")
                raise


class _Operation:
    """One borrowed connection, owned by the worker thread that runs against it."""

    def __init__(self, connect: Callable[[], sqlite3.Connection]):
        self._connect = connect
        self._lock = threading.Lock()
        self._cancelled = False
        self._conn: sqlite3.Connection | None = None

    def execute(self, func: Callable[..., T], *args: Any) -> T:
        conn = self._connect()
        try:
            with self._lock:
                if self._cancelled:
                    raise StorageError("Operation cancelled before it started.")
                self._conn = conn
            return func(conn, *args)
        finally:
            with self._lock:
                self._conn = None
                conn.close()

    def cancel(self) -> None:
        """Interrupts the running statement; an open transaction rolls back."""
        with self._lock:
            self._cancelled = True
            if self._conn is not None:
                self._conn.interrupt()
