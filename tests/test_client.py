"""Tests for the PimalinkClient facade."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from pypimalink import (
    AlarmState,
    MemorySettingsStore,
    PairedEntity,
    PimalinkClient,
    PimalinkNotInitialized,
)
from pypimalink.constants import SETTING_WEB_USER_ID, WEBUSER_UNPAIR

from .common import posted_paths, response


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("PIMALINK_HTTP_LOG_FILE", raising=False)
    client = PimalinkClient(MagicMock(), MemorySettingsStore())
    client.transport.post = AsyncMock()
    return client


def test_bootstrap_generates_id_once(client):
    first = client.bootstrap()
    second = client.bootstrap()

    assert first == second
    assert client.store.get(SETTING_WEB_USER_ID) == first
    assert client.pairing.web_user_id == first


def test_bootstrap_keeps_existing_id():
    store = MemorySettingsStore({SETTING_WEB_USER_ID: "00000000deadbeef"})
    client = PimalinkClient(MagicMock(), store)

    assert client.bootstrap() == "00000000deadbeef"


def test_pairing_requires_bootstrap(client):
    with pytest.raises(PimalinkNotInitialized):
        client.get_web_user_details()


@pytest.mark.asyncio
async def test_pair_and_list(client):
    client.bootstrap()
    client.transport.post.side_effect = [
        response(204),
        response(200, [{"name": "Home", "pairId": "p1"}]),
    ]

    assert await client.pair("Home", "123456")
    assert await client.list_devices() == [PairedEntity("p1", "Home")]


@pytest.mark.asyncio
async def test_create_device_shares_identity(client):
    web_user_id = client.bootstrap()
    client.transport.post.side_effect = [
        response(200, {"sessionToken": "tok"}),
        response(200, ""),
        response(200, ""),
    ]

    device = await client.create_device(PairedEntity("p1", "Home"), "1234", poll_interval=60)
    result = await device.async_set_state(AlarmState.ARMED)

    assert client.devices == {"p1": device}
    assert result.success
    header = client.transport.post.call_args_list[0].args[1]["header"]
    assert header["webUserId"] == web_user_id
    assert header["pairEntityId"] == "p1"


@pytest.mark.asyncio
async def test_remove_device_named_unpair(client):
    client.bootstrap()
    await client.create_device(PairedEntity("p1", "unpair"), "1234")
    client.transport.post.return_value = response(204)

    assert await client.remove_device("p1")
    assert posted_paths(client.transport) == [WEBUSER_UNPAIR]
    assert client.devices == {}
    assert not await client.remove_device("p1")


@pytest.mark.asyncio
async def test_close_stops_all_pollers(client):
    client.bootstrap()
    client.transport.post.return_value = response(200, [])
    devices = [
        await client.create_device(PairedEntity(f"p{i}", f"Panel {i}"), "1234", poll_interval=60)
        for i in range(2)
    ]
    for device in devices:
        await device.async_start()

    await client.close()

    assert not any(d.poller.is_running for d in devices)


@pytest.mark.asyncio
async def test_unpair_passthrough(client):
    client.bootstrap()
    client.transport.post.return_value = response(204)

    assert await client.unpair("p9")
    assert client.transport.post.call_args.args[1]["data"] == "p9"


@pytest.mark.asyncio
async def test_create_device_again_stops_previous(client):
    client.bootstrap()
    client.transport.post.return_value = response(200, [])
    entity = PairedEntity("p1", "Home")

    old = await client.create_device(entity, "1234", poll_interval=60)
    await old.async_start()
    new = await client.create_device(entity, "5678", poll_interval=60)
    await new.async_start()

    assert not old.poller.is_running
    assert client.devices == {"p1": new}

    await client.close()

    assert not new.poller.is_running
