"""
Shared fixtures for the store tests.
"""

from pathlib import Path

import pytest

from ircwatch.storage.channels import ChannelStore
from ircwatch.storage.database import Database
from ircwatch.storage.networks import NetworkStore


@pytest.fixture()
def db(tmp_path: Path) -> Database:
    return Database(tmp_path / "ircwatch.db", pool_size=2)


@pytest.fixture()
def channel_store(db: Database) -> ChannelStore:
    return ChannelStore(db)


@pytest.fixture()
def network_store(db: Database, channel_store: ChannelStore) -> NetworkStore:
    return NetworkStore(db, channels=channel_store)
