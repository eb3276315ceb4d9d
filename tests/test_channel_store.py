"""
Tests for the channel store.
"""

import pytest

from ircwatch.exceptions import NotFoundError
from ircwatch.models.network import Channel, Network
from ircwatch.storage.channels import ChannelStore
from ircwatch.storage.networks import NetworkStore


@pytest.mark.asyncio
async def test_insert_always_stores_detached(
    channel_store: ChannelStore, network_store: NetworkStore
) -> None:
    network = Network(name="OFTC", server="irc.oftc.net")
    await network_store.upsert(network)
    channel = Channel(name="#announce", enabled=True, detached=False)

    await channel_store.upsert(network.id, channel)

    assert channel.id > 0
    assert channel.network_id == network.id
    [stored] = await channel_store.list_by_network(network.id)
    assert stored.detached is True
    assert stored.enabled is True
    assert stored.name == "#announce"


@pytest.mark.asyncio
async def test_insert_under_unknown_network_raises_not_found(
    channel_store: ChannelStore,
) -> None:
    channel = Channel(name="#orphan")

    with pytest.raises(NotFoundError) as exc_info:
        await channel_store.upsert(7, channel)

    assert exc_info.value.entity == "network"
    assert channel.id == 0
    assert await channel_store.list_by_network(7) == []


@pytest.mark.asyncio
async def test_update_rewrites_mutable_columns(
    channel_store: ChannelStore, network_store: NetworkStore
) -> None:
    network = Network(name="OFTC", server="irc.oftc.net")
    await network_store.upsert(network)
    channel = Channel(name="#test", password="key")
    await channel_store.upsert(network.id, channel)

    update = Channel(id=channel.id, name="#renamed", enabled=False, detached=False)
    await channel_store.upsert(network.id, update)

    [stored] = await channel_store.list_by_network(network.id)
    assert stored.id == channel.id
    assert stored.name == "#renamed"
    assert stored.enabled is False
    assert stored.detached is False
    assert stored.password is None


@pytest.mark.asyncio
async def test_update_keeps_owning_network(
    channel_store: ChannelStore, network_store: NetworkStore
) -> None:
    first = Network(name="One", server="irc.one.net")
    second = Network(name="Two", server="irc.two.net")
    await network_store.upsert(first)
    await network_store.upsert(second)
    channel = Channel(name="#test")
    await channel_store.upsert(first.id, channel)

    await channel_store.upsert(second.id, channel)

    assert [c.id for c in await channel_store.list_by_network(first.id)] == [channel.id]
    assert await channel_store.list_by_network(second.id) == []


@pytest.mark.asyncio
async def test_update_unknown_channel_raises_not_found(
    channel_store: ChannelStore, network_store: NetworkStore
) -> None:
    network = Network(name="OFTC", server="irc.oftc.net")
    await network_store.upsert(network)

    with pytest.raises(NotFoundError) as exc_info:
        await channel_store.upsert(network.id, Channel(id=55, name="#ghost"))

    assert exc_info.value.entity == "channel"


@pytest.mark.asyncio
async def test_list_by_network_is_scoped_and_ordered(
    channel_store: ChannelStore, network_store: NetworkStore
) -> None:
    first = Network(name="One", server="irc.one.net")
    second = Network(name="Two", server="irc.two.net")
    await network_store.upsert(first)
    await network_store.upsert(second)
    for name in ("#c", "#a", "#b"):
        await channel_store.upsert(first.id, Channel(name=name))
    await channel_store.upsert(second.id, Channel(name="#other"))

    listed = await channel_store.list_by_network(first.id)

    assert [c.name for c in listed] == ["#c", "#a", "#b"]
    assert [c.name for c in await network_store.list_channels(second.id)] == ["#other"]


@pytest.mark.asyncio
async def test_empty_password_reads_back_absent(
    channel_store: ChannelStore, network_store: NetworkStore
) -> None:
    network = Network(name="OFTC", server="irc.oftc.net")
    await network_store.upsert(network)
    await channel_store.upsert(network.id, Channel(name="#empty", password=""))

    [stored] = await channel_store.list_by_network(network.id)

    assert stored.password is None
