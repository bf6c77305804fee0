import asyncio
import contextlib
import json
import socket

import httpx
import pytest

from simetry.generic_http import DEFAULT_URI, GenericHttpClient, SimState
from simetry.moment import AngularVelocity, Pedals, Velocity
from simetry.racing_flags import RacingFlags


@pytest.mark.asyncio
async def test_default_uri():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, content=b"{}")

    client = GenericHttpClient(
        DEFAULT_URI, httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    try:
        state = await client.query()
        assert state.name == ""
        assert seen == ["http://localhost:25055/"]
    finally:
        await client.aclose()


def test_empty_object_is_all_unknown():
    state = SimState.from_dict({})
    assert state.name == ""
    assert state.vehicle_gear() is None
    assert state.vehicle_velocity() is None
    assert state.flags() is None
    assert state.pedals() is None


def test_from_dict_reads_values():
    state = SimState.from_dict(
        {
            "name": "TestSim",
            "gear": 3,
            "speed": 40.5,
            "engine_rotation_speed": 600.0,
            "pit_limiter_engaged": True,
            "vehicle_brand_id": "Lemon",
            "pedals": {"throttle": 0.5, "brake": 0.0, "clutch": 1.0},
            "unknown_field": 1,
        }
    )
    assert state.name == "TestSim"
    assert state.vehicle_gear() == 3
    assert state.vehicle_velocity() == Velocity(40.5)
    assert state.vehicle_engine_rotation_speed() == AngularVelocity(600.0)
    assert state.is_pit_limiter_engaged() is True
    assert state.vehicle_brand_id() == "Lemon"
    assert state.pedals() == Pedals(throttle=0.5, brake=0.0, clutch=1.0)


def test_unique_id_and_hazard_come_from_fields():
    state = SimState.from_dict(
        {
            "vehicle_brand_id": "Lemon",
            "vehicle_model_id": "Zest",
            "vehicle_unique_id": "custom",
            "left_turn_indicator_on": True,
            "right_turn_indicator_on": True,
            "hazard_indicator_on": False,
        }
    )
    assert state.vehicle_unique_id() == "custom"
    assert state.is_hazard_indicator_on() is False


def test_pedals_raw_not_defaulted_to_pedals():
    state = SimState.from_dict({"pedals": {"throttle": 1.0, "brake": 0.0, "clutch": 0.0}})
    assert state.pedals_raw() is None


def test_round_trip():
    state = SimState(
        name="TestSim",
        vehicle_left=True,
        gear=-1,
        speed=Velocity(12.0),
        shift_point_speed=AngularVelocity(700.0),
        racing_flags=RacingFlags(yellow=True),
        model_id="Zest",
        starter_on=False,
        pedal_input_raw=Pedals(throttle=0.25, brake=0.5, clutch=0.0),
    )
    assert SimState.from_dict(json.loads(json.dumps(state.to_dict()))) == state


@pytest.mark.parametrize(
    "data",
    [
        {"gear": 200},
        {"gear": "third"},
        {"speed": "fast"},
        {"ignition_on": 1},
        {"name": 5},
        {"flags": {"green": True}},
    ],
)
def test_invalid_fields_raise(data):
    with pytest.raises(ValueError):
        SimState.from_dict(data)


def test_non_object_raises():
    with pytest.raises(ValueError):
        SimState.from_dict([1, 2, 3])


def _mock_client(payload):
    def handler(request):
        return httpx.Response(200, content=payload)

    return GenericHttpClient(
        "http://sim.example.com/", httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


@pytest.mark.asyncio
async def test_query_decodes_response():
    client = _mock_client(json.dumps({"name": "TestSim", "gear": 2}).encode())
    try:
        state = await client.query()
        assert state.name == "TestSim"
        assert state.vehicle_gear() == 2
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_next_moment_with_matching_name():
    client = _mock_client(json.dumps({"gear": 5}).encode())
    try:
        moment = await client.next_moment()
        assert moment.vehicle_gear() == 5
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_next_moment_other_name_ends_connection():
    client = _mock_client(json.dumps({"name": "Other"}).encode())
    try:
        assert await client.next_moment() is None
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_next_moment_bad_json_ends_connection():
    client = _mock_client(b"not json")
    try:
        assert await client.next_moment() is None
    finally:
        await client.aclose()


@contextlib.asynccontextmanager
async def _serve(body):
    async def handle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        head = (
            "HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
            f"Content-Length: {len(body)}\r\nConnection: close\r\n\r\n"
        )
        writer.write(head.encode() + body)
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield f"http://127.0.0.1:{port}/"
    finally:
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_try_connect_takes_name_from_server():
    async with _serve(json.dumps({"name": "TestSim", "in_pit_lane": True}).encode()) as uri:
        client = await GenericHttpClient.try_connect(uri)
        try:
            assert client.name() == "TestSim"
            moment = await client.next_moment()
            assert moment.is_vehicle_in_pit_lane() is True
        finally:
            await client.aclose()


@pytest.mark.asyncio
async def test_connect_succeeds_when_server_is_up():
    async with _serve(json.dumps({"name": "TestSim"}).encode()) as uri:
        client = await asyncio.wait_for(GenericHttpClient.connect(uri, 0.05), timeout=5)
        try:
            assert client.name() == "TestSim"
        finally:
            await client.aclose()


@pytest.mark.asyncio
async def test_try_connect_fails_without_server():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    with pytest.raises(httpx.HTTPError):
        await GenericHttpClient.try_connect(f"http://127.0.0.1:{port}/")