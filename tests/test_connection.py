import asyncio
import socket

import pytest

from simetry.connection import (
    DEFAULT_RETRY_DELAY,
    DIRT_RALLY_2_DEFAULT_URI,
    SimetryConnectionBuilder,
)


def test_defaults():
    builder = SimetryConnectionBuilder()
    assert builder.dirt_rally_2_uri == DIRT_RALLY_2_DEFAULT_URI == "127.0.0.1:20777"
    assert builder.generic_http_uri is None
    assert builder.retry_delay == DEFAULT_RETRY_DELAY


def test_with_methods_return_new_builders():
    original = SimetryConnectionBuilder()
    changed = (
        original.with_dirt_rally_2_uri("127.0.0.1:1234")
        .with_generic_http_uri("http://localhost:8080/")
        .with_retry_delay(0.5)
    )
    assert changed.dirt_rally_2_uri == "127.0.0.1:1234"
    assert changed.generic_http_uri == "http://localhost:8080/"
    assert changed.retry_delay == 0.5
    assert original == SimetryConnectionBuilder()


def test_builders_compare_by_value():
    first = SimetryConnectionBuilder().with_retry_delay(1.0)
    second = SimetryConnectionBuilder(retry_delay=1.0)
    assert first == second


def _free_udp_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


@pytest.mark.asyncio
async def test_connect_picks_dirt_rally_2_when_packets_arrive():
    port = _free_udp_port()
    builder = (
        SimetryConnectionBuilder()
        .with_dirt_rally_2_uri(f"127.0.0.1:{port}")
        .with_retry_delay(0.05)
    )
    sender = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    stop = asyncio.Event()

    async def send_packets():
        while not stop.is_set():
            try:
                sender.sendto(bytes(264), ("127.0.0.1", port))
            except OSError:
                pass
            await asyncio.sleep(0.02)

    feeder = asyncio.ensure_future(send_packets())
    try:
        client = await asyncio.wait_for(builder.connect(), timeout=10)
        try:
            assert client.name() == "DirtRally2"
        finally:
            client.close()
    finally:
        stop.set()
        await feeder
        sender.close()