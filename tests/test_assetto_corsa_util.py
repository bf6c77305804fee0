import asyncio
import struct

import pytest

from simetry.assetto_corsa.layout import PageFileGraphics, PageFilePhysics, PageFileStatic
from simetry.assetto_corsa.util import (
    ASSETTO_CORSA_VERSION,
    ApiVersion,
    SharedMemoryClient,
    SimState,
    check_version,
)


def make_static(version="1.7", max_rpm=8000):
    buf = bytearray(PageFileStatic.SIZE)
    set_version(buf, version)
    struct.pack_into("<i", buf, PageFileStatic.OFFSETS["max_rpm"], max_rpm)
    return buf


def set_version(buf, version):
    buf[0:30] = bytes(30)
    encoded = version.encode("utf-16-le")
    buf[0 : len(encoded)] = encoded


def make_graphics(packet_id=1, status=2):
    buf = bytearray(PageFileGraphics.SIZE)
    struct.pack_into("<i", buf, 0, packet_id)
    struct.pack_into("<i", buf, PageFileGraphics.OFFSETS["status"], status)
    return buf


def make_physics(packet_id=1, rpm=3000):
    buf = bytearray(PageFilePhysics.SIZE)
    struct.pack_into("<i", buf, 0, packet_id)
    struct.pack_into("<i", buf, PageFilePhysics.OFFSETS["rpm"], rpm)
    return buf


def test_check_version_accepts_supported():
    assert check_version(make_static("1.7"), ASSETTO_CORSA_VERSION) == (1, 7)
    assert check_version(make_static("1.0"), ASSETTO_CORSA_VERSION) == (1, 0)


def test_check_version_out_of_range():
    with pytest.raises(ValueError, match="range"):
        check_version(make_static("1.8"), ASSETTO_CORSA_VERSION)
    with pytest.raises(ValueError, match="range"):
        check_version(make_static("2.0"), ASSETTO_CORSA_VERSION)


def test_check_version_invalid_text():
    with pytest.raises(ValueError, match="Invalid shared memory version"):
        check_version(make_static("abc"), ASSETTO_CORSA_VERSION)
    with pytest.raises(ValueError, match="Invalid shared memory version"):
        check_version(make_static(""), ASSETTO_CORSA_VERSION)


def test_check_version_missing_minor():
    with pytest.raises(ValueError, match="missing minor"):
        check_version(make_static("1"), ASSETTO_CORSA_VERSION)


def test_check_version_open_range():
    version = ApiVersion(
        1,
        1,
        8,
        0xFFFF,
        ASSETTO_CORSA_VERSION.decode_static,
        ASSETTO_CORSA_VERSION.decode_physics,
        ASSETTO_CORSA_VERSION.decode_graphics,
    )
    assert check_version(make_static("1.9"), version) == (1, 9)
    with pytest.raises(ValueError):
        check_version(make_static("1.7"), version)


@pytest.mark.asyncio
async def test_try_connect_reads_pages():
    client = await SharedMemoryClient.try_connect(make_static(), make_physics(), make_graphics())
    assert client.static_data().max_rpm == 8000
    assert client.static_data().sm_version == "1.7"
    assert client.is_connected() is True


@pytest.mark.asyncio
async def test_try_connect_rejects_version():
    with pytest.raises(ValueError):
        await SharedMemoryClient.try_connect(make_static("9.9"), make_physics(), make_graphics())


@pytest.mark.asyncio
async def test_try_connect_waits_for_live_status():
    graphics = make_graphics(status=0)
    task = asyncio.create_task(
        SharedMemoryClient.try_connect(make_static(), make_physics(), graphics)
    )
    await asyncio.sleep(0.05)
    assert not task.done()
    struct.pack_into("<i", graphics, PageFileGraphics.OFFSETS["status"], 2)
    client = await asyncio.wait_for(task, 1.0)
    assert client.is_connected() is True


@pytest.mark.asyncio
async def test_next_sim_state_on_physics_change():
    physics = make_physics(packet_id=1)
    client = await SharedMemoryClient.try_connect(make_static(), physics, make_graphics())
    struct.pack_into("<i", physics, 0, 2)
    struct.pack_into("<i", physics, PageFilePhysics.OFFSETS["rpm"], 6000)
    state = await asyncio.wait_for(client.next_sim_state(), 1.0)
    assert isinstance(state, SimState)
    assert state.physics.packet_id == 2
    assert state.physics.rpm == 6000
    assert state.static_data is client.static_data()


@pytest.mark.asyncio
async def test_next_sim_state_waits_without_change():
    client = await SharedMemoryClient.try_connect(make_static(), make_physics(), make_graphics())
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(client.next_sim_state(), 0.05)


@pytest.mark.asyncio
async def test_next_sim_state_none_when_off():
    graphics = make_graphics()
    client = await SharedMemoryClient.try_connect(make_static(), make_physics(), graphics)
    struct.pack_into("<i", graphics, PageFileGraphics.OFFSETS["status"], 0)
    assert await client.next_sim_state() is None
    assert client.is_connected() is False


@pytest.mark.asyncio
async def test_connect_retries_until_version_fits():
    static = make_static("5.0")

    async def fix_later():
        await asyncio.sleep(0.03)
        set_version(static, "1.4")

    fixer = asyncio.create_task(fix_later())
    client = await asyncio.wait_for(
        SharedMemoryClient.connect(static, make_physics(), make_graphics(), 0.01), 1.0
    )
    await fixer
    assert client.static_data().sm_version == "1.4"