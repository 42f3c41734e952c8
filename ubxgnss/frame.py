"""UBX frames, payload base class and frame/payload containers."""

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from ubxgnss.errors import UbxAckNackError, UbxPayloadError, UbxValueError, UsbTimeoutError
from ubxgnss.types import ACK_NAK, SYNC_CHAR_1, SYNC_CHAR_2, MsgClass

_SYNC = bytes([SYNC_CHAR_1, SYNC_CHAR_2])
_HEADER_SIZE = 6
_READ_SIZE = 64 * 100 + 1


def ubx_checksum(data):
    """Return the 8-bit Fletcher checksum (ck_a, ck_b) of the given bytes."""
    ck_a = ck_b = 0
    for byte in data:
        ck_a = (ck_a + byte) & 0xFF
        ck_b = (ck_b + ck_a) & 0xFF
    return ck_a, ck_b


@dataclass
class Frame:
    """A UBX frame: class, id, payload and checksum."""

    msg_class: int
    msg_id: int
    payload: bytes = b""
    ck_a: int | None = None
    ck_b: int | None = None

    def __post_init__(self):
        for name in ("msg_class", "msg_id"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise UbxValueError(f"{name} out of range: {value}")
        self.payload = bytes(self.payload)
        if len(self.payload) > 0xFFFF:
            raise UbxValueError(f"payload too long: {len(self.payload)} bytes")
        if self.ck_a is None or self.ck_b is None:
            self.ck_a, self.ck_b = self.checksum()

    @property
    def length(self):
        return len(self.payload)

    def _body(self):
        return struct.pack("<BBH", self.msg_class, self.msg_id, self.length) + self.payload

    def checksum(self):
        """Compute the checksum over class, id, length and payload."""
        return ubx_checksum(self._body())

    def build(self):
        """Return the frame as wire bytes, using the stored checksum."""
        return _SYNC + self._body() + bytes([self.ck_a, self.ck_b])

    @classmethod
    def from_bytes(cls, data):
        """Parse a frame from wire bytes; the checksum is taken as received."""
        data = bytes(data)
        if len(data) < _HEADER_SIZE + 2:
            raise UbxValueError(f"frame too short: {len(data)} bytes")
        if data[:2] != _SYNC:
            raise UbxValueError("frame does not start with UBX sync characters")
        msg_class, msg_id, length = struct.unpack_from("<BBH", data, 2)
        end = _HEADER_SIZE + length
        if len(data) < end + 2:
            raise UbxValueError(f"frame truncated: expected {end + 2} bytes, got {len(data)}")
        return cls(msg_class, msg_id, data[_HEADER_SIZE:end], data[end], data[end + 1])

    def to_hex(self):
        buf = self.build()
        return f"size: {len(buf)} '0x{buf.hex()}'"

    def payload_to_hex(self):
        return f"length: {self.length} '0x{self.payload.hex()}'"


def _class_id_text(prefix, frame):
    return f"{prefix}.msg_class: 0x{frame.msg_class:02x} {prefix}.msg_id: 0x{frame.msg_id:02x}"


def get_polled_frame(connection, poll_frame):
    """Send a poll frame and wait for the device's answer, about one second at most."""
    connection.write_buffer(poll_frame.build())
    max_retries = 1000 // connection.timeout_ms
    attempts = 0
    while True:
        attempts += 1
        try:
            data = connection.read_chars(_READ_SIZE)
        except UsbTimeoutError:
            data = b""
        if data[:2] == _SYNC:
            polled = Frame.from_bytes(data)
            ck_a, ck_b = polled.checksum()
            if ck_a != polled.ck_a and ck_b != polled.ck_b:
                raise UbxAckNackError("polled frame checksum failed")
            if polled.msg_class == MsgClass.ACK and polled.msg_id == ACK_NAK:
                raise UbxAckNackError(
                    "UBX_ACK_NAK fail sent "
                    + _class_id_text("poll_frame", poll_frame)
                    + " repsonse "
                    + _class_id_text("polled_frame", polled)
                )
            return polled
        if attempts >= max_retries:
            break
    raise UbxAckNackError(
        f"UBX_ACK_NAK wasnt received after {attempts} tries sent "
        + _class_id_text("poll_frame", poll_frame)
    )


@dataclass
class Payload:
    """Base for UBX payloads; subclasses set MSG_CLASS and MSG_ID."""

    MSG_CLASS: ClassVar[int | None] = None
    MSG_ID: ClassVar[int | None] = None

    raw: bytes = field(default=b"", repr=False, compare=False)

    @classmethod
    def from_bytes(cls, data):
        return cls(raw=bytes(data))

    def poll_payload(self):
        """Payload bytes sent when polling; empty unless overridden."""
        return b""

    def to_hex(self):
        return f"size: {len(self.raw)} '0x{self.raw.hex()}'"


class FrameContainer:
    """Holds the last received frame and payload, and the poll frame, of one type."""

    def __init__(self, payload_type):
        if payload_type.MSG_CLASS is None or payload_type.MSG_ID is None:
            raise UbxPayloadError(f"{payload_type.__name__} has no message class and id")
        self.payload_type = payload_type
        self.msg_class = payload_type.MSG_CLASS
        self.msg_id = payload_type.MSG_ID
        self.frame = None
        self.payload = payload_type()
        self.payload_poll = payload_type()
        self._frame_poll = None

    def frame_poll(self):
        if self._frame_poll is None:
            self.make_frame_poll()
        return self._frame_poll

    def make_frame_poll(self):
        if self.payload_poll is None:
            raise UbxPayloadError("No poll payload set!")
        self._frame_poll = Frame(self.msg_class, self.msg_id, self.payload_poll.poll_payload())
        return self._frame_poll

    def set_frame(self, frame):
        if frame.msg_class != self.msg_class or frame.msg_id != self.msg_id:
            raise UbxValueError("msg class & id for frame dont match frame type's")
        self.frame = frame
        self.payload = self.payload_type.from_bytes(frame.payload)


class FrameComms:
    """A frame container bound to a transport for asynchronous polling."""

    def __init__(self, payload_type, comms):
        self.comms = comms
        self.container = FrameContainer(payload_type)

    @property
    def frame(self):
        return self.container.frame

    @property
    def payload(self):
        return self.container.payload

    def set_frame(self, frame):
        self.container.set_frame(frame)

    def poll_async(self):
        self.comms.write_buffer_async(self.container.frame_poll().build())