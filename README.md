# ubxgnss

Tools for working with u-blox GNSS receivers in the UBX binary protocol,
and a client that streams RTCM correction data from an NTRIP caster.

The package covers:

- **Types** (`ubxgnss.types`): the `UbxType` value types with
  `storage_size()`, the `MsgClass` message class identifiers, and `to_hex()`
  for formatting single bytes.
- **Frames** (`ubxgnss.frame`): `Frame` builds and parses UBX frames
  (`build()`, `Frame.from_bytes()`, `checksum()`), `ubx_checksum()` computes
  the 8-bit Fletcher checksum, `Payload` is the base class of all payloads,
  and `FrameContainer` / `FrameComms` pair a payload type with its poll
  frame. `get_polled_frame()` sends a poll frame and waits about one second
  for the answer.
- **Payload decoders**, each with a `from_bytes()` class method and a
  readable `str()`:
  - `ubxgnss.ack`: `AckAckPayload`, `AckNakPayload`
  - `ubxgnss.nav_position`: `NavCovPayload`, `NavHPPosECEFPayload`,
    `NavOdoPayload`, `NavPosECEFPayload`, `NavPosLLHPayload`
  - `ubxgnss.nav_velocity`: `NavVelECEFPayload`, `NavVelNEDPayload`
  - `ubxgnss.nav_relposned`: `NavRelPosNedPayload`
  - `ubxgnss.nav_status`: `NavStatusPayload`
  - `ubxgnss.nav_sat`: `NavSatPayload`
  - `ubxgnss.esf`: `ESFMeasPayload`, `ESFStatusPayload`, and
    `ESFMeasFullPayload`, which encodes sensor measurements to send to the
    receiver
  - `ubxgnss.mon`: `MonCommsPayload`, `MonVerPayload`
  - `ubxgnss.sec`: `SecSigPayload`, `SecSigLogPayload`, `SecUniqidPayload`
- **Configuration** (`ubxgnss.cfg`): `UbxCfg` assembles CFG-VALGET,
  CFG-VALSET and CFG-RST requests, with typed key/value encoding through
  `CfgItem`, `CfgKeyId` and `KeyValue`.
- **NTRIP** (`ubxgnss.ntrip`): `NtripClient` streams RTCM data from a caster
  over HTTP or HTTPS and hands each block it reads to a callback.

It has no third-party runtime dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Decoding a frame

```python
from ubxgnss.frame import Frame
from ubxgnss.nav_position import NavPosLLHPayload

frame = Frame.from_bytes(raw_bytes)        # a complete frame read from the receiver
position = NavPosLLHPayload.from_bytes(frame.payload)
print(position.lat, position.lon)
print(position)
```

`Frame.from_bytes()` keeps the checksum as received; compare it with
`frame.checksum()` to check it. Malformed or truncated input raises
`UbxValueError` from `ubxgnss.errors`. The UBX errors (`UbxValueError`,
`UbxAckNackError`, `UbxPayloadError`) derive from `UbxError`; the transport
errors are `UsbError` and `UsbTimeoutError`.

## Configuring the receiver

`UbxCfg` takes any object with a `write_buffer_async(data)` method and
writes the frames it builds to that object:

```python
from ubxgnss.cfg import CfgItem, Layer, UbxCfg
from ubxgnss.types import UbxType

rate = CfgItem("CFG-RATE-MEAS", 0x30210001, UbxType.U2)

cfg = UbxCfg(connection)
cfg.val_set_layer_ram(True)
cfg.val_set_key_append(rate, 100)
cfg.val_set_poll_async()

cfg.val_get_key_append(rate)
cfg.set_val_get_layer(Layer.RAM)
cfg.val_get_poll_async()
```

A value whose type does not match the storage size of its key raises
`UbxValueError`. Use `val_set_frame_poll()` to get the VALSET frame without
sending it.

## Streaming RTCM corrections

`NtripClient` connects to an NTRIP caster and calls your `publish` function
with an `RtcmMessage` (`stamp`, `frame_id`, `message`) for every block of
data it reads:

```python
import threading

from ubxgnss.ntrip import NtripClient, NtripConfig

client = NtripClient(NtripConfig(host="caster.example.com", port=2101,
                                 use_https=False, mountpoint="MOUNT"),
                     publish=print)
worker = threading.Thread(target=client.run)
worker.start()
...
client.stop()
worker.join()
```

Each request ends after ten blocks and is made again after a short pause;
a failed request is logged and retried after one second. `run()` keeps going
until `stop()` is called.

The same client runs from the command line and writes the RTCM bytes to
standard output:

```
ubxgnss-ntrip --host caster.example.com --port 2101 --no-use-https \
    --mountpoint MOUNT --username user --password password
```

Options: `--use-https/--no-use-https`, `--host`, `--port`, `--mountpoint`,
`--username`, `--password`, `--log-level` (anything other than `INFO` turns
on debug logging) and `--maxage-conn`.

## What it does not do

- It does not open or drive a USB (or serial) connection to a receiver.
  `UbxCfg`, `FrameComms` and `get_polled_frame()` work with a connection
  object you supply: one with `write_buffer_async(data)`, and for
  `get_polled_frame()` also `write_buffer(data)`, `read_chars(size)` and a
  `timeout_ms` attribute.
- It does not decode UBX-INF text messages.
- It does not forward RTCM corrections to a receiver by itself; pass a
  `publish` function that does.