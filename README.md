# simetry

Read telemetry from racing simulators through one common interface.

simetry hands back *moments*: snapshots of the player's car such as gear,
speed, engine speed, pit-lane state, racing flags, indicators and pedal
inputs. Every value is optional, because not every sim reports every data
point.

Supported sources:

- **Assetto Corsa**, through its shared-memory pages (`simetry.assetto_corsa`)
- **DiRT Rally 2.0**, through its UDP telemetry packets (`simetry.dirt_rally_2`)
- **iRacing telemetry files** recorded to disk (`simetry.iracing`)
- **Any program serving readings as JSON over HTTP** (`simetry.generic_http`)

## Connecting to whatever is running

`simetry.connection.connect()` tries the supported live sources at once and
returns a client for the first one that answers. Each client has `name()`
and an async `next_moment()`, which returns `None` once the connection is
over.

Which sources `connect()` tries:

- Assetto Corsa, only on Windows, where its named shared-memory pages can be
  opened;
- DiRT Rally 2.0, by listening for UDP packets on `127.0.0.1:20777`;
- the generic HTTP source, only when a URI has been given with
  `with_generic_http_uri`.

```python
import asyncio

from simetry.connection import connect


async def main() -> None:
    client = await connect()
    print("Connected to", client.name())
    while (moment := await client.next_moment()) is not None:
        print(
            "gear:", moment.vehicle_gear(),
            "in pit lane:", moment.is_vehicle_in_pit_lane(),
            "flags:", moment.flags(),
        )


asyncio.run(main())
```

`SimetryConnectionBuilder` is an immutable set of settings; each `with_*`
method returns a new builder:

```python
import asyncio

from simetry.connection import SimetryConnectionBuilder


async def main() -> None:
    builder = (
        SimetryConnectionBuilder()
        .with_dirt_rally_2_uri("127.0.0.1:20777")
        .with_generic_http_uri("http://localhost:25055/")
        .with_retry_delay(2.0)
    )
    client = await builder.connect()
    print("Connected to", client.name())


asyncio.run(main())
```

The retry delay is in seconds (5.0 by default).

## The `Moment` interface

Every sim state implements `simetry.moment.Moment`. Methods return `None`
when the source does not provide the value:

- `vehicle_gear()`: `-1` reverse, `0` neutral, `1` and up forward gears
- `vehicle_velocity()`: a `Velocity` with `meters_per_second` and
  `kilometers_per_hour()`
- `vehicle_engine_rotation_speed()`, `vehicle_max_engine_rotation_speed()`,
  `shift_point()`: an `AngularVelocity` with `radians_per_second` and `rpm()`
- `is_pit_limiter_engaged()`, `is_vehicle_in_pit_lane()`
- `is_vehicle_left()`, `is_vehicle_right()`
- `flags()`: a `simetry.racing_flags.RacingFlags`
- `vehicle_brand_id()`, `vehicle_model_id()`, `vehicle_unique_id()`; by
  default the unique id is `"<brand>|<model>"` when both are known
- `is_left_turn_indicator_on()`, `is_right_turn_indicator_on()`,
  `is_hazard_indicator_on()`; by default hazards are on when both
  indicators are
- `is_ignition_on()`, `is_starter_on()`
- `pedals()` and `pedals_raw()`: a `simetry.moment.Pedals` with `throttle`,
  `brake` and `clutch`; `pedals_raw()` falls back to `pedals()`

## Using one source directly

**DiRT Rally 2.0.** `simetry.dirt_rally_2.Client.connect(address, retry_delay)`
binds a UDP socket and waits for the first packet; `next_sim_state()` returns
a decoded `SimState`, and `close()` releases the socket.
`SimState.from_bytes()` decodes a single 264-byte packet.

**Assetto Corsa.** `simetry.assetto_corsa.sim.Client.connect(static_memory,
physics_memory, graphics_memory, retry_delay)` takes the three pages as any
objects supporting the buffer protocol (for example `mmap` objects). It
waits until the sim's status is not off, checks the shared-memory version
(1.0 to 1.7) and then `next_sim_state()` returns a new state whenever the
physics or graphics packet id changes. The decoded records are in
`simetry.assetto_corsa.data`.

**Generic HTTP.** `simetry.generic_http.GenericHttpClient.connect(uri,
retry_delay)` fetches the URI and remembers the `name` it reports;
`next_moment()` returns `None` if a request fails, takes longer than two
seconds, or reports a different name. The JSON object may hold `name`,
`vehicle_left`, `vehicle_right`, `gear`, `speed` (m/s),
`engine_rotation_speed`, `max_engine_rotation_speed` and `shift_point`
(rad/s), `pit_limiter_engaged`, `in_pit_lane`, `flags`, `vehicle_brand_id`,
`vehicle_model_id`, `vehicle_unique_id`, `left_turn_indicator_on`,
`right_turn_indicator_on`, `hazard_indicator_on`, `ignition_on`,
`starter_on`, `pedals` and `pedals_raw`; missing or `null` fields are
unknown. `SimState.to_dict()` writes the same layout.

## Reading iRacing telemetry files

`simetry.iracing.disk_client.DiskClient` opens a recorded telemetry file,
exposes its `header`, `sub_header`, `variables` and `session_info`, and
yields one `SimState` per recorded sample.

```python
from simetry.iracing.disk_client import DiskClient
from simetry.iracing.var_data import parse_float

with DiskClient.open("session.ibt") as recording:
    for state in recording:
        print(state.read_name(parse_float, "RPM"), state.vehicle_gear())
```

Variables are read with a parser from `simetry.iracing.var_data`
(`parse_char`, `parse_bool`, `parse_int`, `parse_u32`, `parse_float`,
`parse_double`, `parse_bit_field`, `parse_car_positions`, `parse_value`, or
`parse_list(...)` to read every entry of an array). `describe_variables()`
lists every variable with its values rendered as text.

## What this package does not do

- It does not connect to a running iRacing session; only recorded telemetry
  files are read, and `connect()` does not try iRacing.
- It does not send commands to any sim (pit, camera, replay and the like).
- It does not open Assetto Corsa's shared memory outside Windows.
- It has no command-line tool; it is a library.

## Running the tests

Install the `test` extra and run pytest from the project root.