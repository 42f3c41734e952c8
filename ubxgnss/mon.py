"""UBX-MON: communication port statistics and receiver version."""

import struct
from dataclasses import dataclass, field

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.types import MsgClass

MON_VER = 0x04
MON_COMMS = 0x36

_COMMS_HEADER = struct.Struct("<BBBx4B")
_PORT = struct.Struct("<HHIBBHIBBH4H8xI")
_SW_SIZE = 30
_HW_SIZE = 10
_EXT_SIZE = 30


def _cstr(data):
    return data.split(b"\x00", 1)[0].decode("ascii", errors="replace")


@dataclass(frozen=True)
class PortInfo:
    """Statistics of one communication port."""

    port_id: int
    tx_pending: int
    tx_bytes: int
    tx_usage: int
    tx_peak_usage: int
    rx_pending: int
    rx_bytes: int
    rx_usage: int
    rx_peak_usage: int
    overrun_errs: int
    msgs: tuple
    skipped: int


@dataclass
class MonCommsPayload(Payload):
    """Communication port information."""

    MSG_CLASS = MsgClass.MON
    MSG_ID = MON_COMMS

    version: int = 0
    n_ports: int = 0
    tx_errors: int = 0
    prot_ids: tuple = (0, 0, 0, 0)
    ports: list = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < _COMMS_HEADER.size:
            raise UbxValueError(
                f"MON-COMMS payload too short: expected {_COMMS_HEADER.size} bytes,"
                f" got {len(data)}"
            )
        version, n_ports, tx_errors, *prot_ids = _COMMS_HEADER.unpack_from(data)
        end = _COMMS_HEADER.size + n_ports * _PORT.size
        if len(data) < end:
            raise UbxValueError(
                f"MON-COMMS payload truncated: {n_ports} ports need {end} bytes,"
                f" got {len(data)}"
            )
        ports = []
        for values in _PORT.iter_unpack(data[_COMMS_HEADER.size:end]):
            head, msgs, skipped = values[:10], values[10:14], values[14]
            ports.append(PortInfo(*head, msgs=tuple(msgs), skipped=skipped))
        return cls(raw=data, version=version, n_ports=n_ports, tx_errors=tx_errors,
                   prot_ids=tuple(prot_ids), ports=ports)

    def __str__(self):
        text = f"version: {self.version} nPorts: {self.n_ports} txErrors: {self.tx_errors}"
        for port in self.ports:
            text += (
                f" PortID: {port.port_id} TxPending: {port.tx_pending}"
                f" TxBytes: {port.tx_bytes}"
            )
        return text


@dataclass
class MonVerPayload(Payload):
    """Receiver software, hardware and extension version strings."""

    MSG_CLASS = MsgClass.MON
    MSG_ID = MON_VER

    sw_version: str = ""
    hw_version: str = ""
    extension: list = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        head = _SW_SIZE + _HW_SIZE
        if len(data) < head:
            raise UbxValueError(
                f"MON-VER payload too short: expected {head} bytes, got {len(data)}"
            )
        extension = [
            _cstr(data[off:off + _EXT_SIZE]) for off in range(head, len(data), _EXT_SIZE)
        ]
        return cls(
            raw=data,
            sw_version=_cstr(data[:_SW_SIZE]),
            hw_version=_cstr(data[_SW_SIZE:head]),
            extension=extension,
        )

    def __str__(self):
        text = f"sw_version: {self.sw_version} hw_version: {self.hw_version}"
        return text + "".join(f" {ext}" for ext in self.extension)