"""UBX-ESF: external sensor fusion measurements and status."""

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.types import MsgClass

ESF_MEAS = 0x02
ESF_STATUS = 0x10

_MEAS_HEADER = struct.Struct("<IHH")
_U4 = struct.Struct("<I")
_STATUS_HEADER = struct.Struct("<IBBB5xB2xB")
_SENSOR = struct.Struct("<BBBB")


def _bit(value, position):
    return bool((value >> position) & 0x1)


def _enum(enum_type, value):
    try:
        return enum_type(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class MeasFlags:
    """Flags word of ESF-MEAS."""

    time_mark_sent: int = 0
    time_mark_edge: bool = False
    calib_ttag_valid: bool = False
    num_meas: int = 0

    @classmethod
    def from_int(cls, value):
        """Decode the 16-bit flags field."""
        return cls(
            time_mark_sent=value & 0x3,
            time_mark_edge=_bit(value, 2),
            calib_ttag_valid=_bit(value, 3),
            num_meas=(value >> 4) & 0x1F,
        )

    def to_int(self):
        """Encode as the 16-bit flags field."""
        return (
            (self.time_mark_sent & 0x3)
            | int(bool(self.time_mark_edge)) << 2
            | int(bool(self.calib_ttag_valid)) << 3
            | (self.num_meas & 0x1F) << 4
        )


@dataclass(frozen=True)
class MeasData:
    """One sensor measurement: 24-bit data field and 6-bit data type."""

    data_field: int = 0
    data_type: int = 0

    @classmethod
    def from_int(cls, value):
        return cls(data_field=value & 0xFFFFFF, data_type=(value >> 24) & 0x3F)

    def to_int(self):
        return (self.data_field & 0xFFFFFF) | (self.data_type & 0x3F) << 24


def _meas_text(time_tag, flags, datum):
    items = " |".join(f" field: {d.data_field} type: {d.data_type}" for d in datum)
    return (
        f"timeTag: {time_tag}"
        f" timeMarkSent: {flags.time_mark_sent}"
        f" timeMarkEdge: {int(flags.time_mark_edge)}"
        f" calibTragValid: {int(flags.calib_ttag_valid)}"
        f" numMeas: {flags.num_meas}"
        f" data: [{items} ]"
    )


@dataclass
class ESFMeasPayload(Payload):
    """Sensor measurements output by the receiver."""

    MSG_CLASS = MsgClass.ESF
    MSG_ID = ESF_MEAS

    time_tag: int = 0
    flags: MeasFlags = field(default_factory=MeasFlags)
    id: int = 0
    datum: list = field(default_factory=list)
    calib_ttag: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < _MEAS_HEADER.size:
            raise UbxValueError(
                f"ESF-MEAS payload too short: expected {_MEAS_HEADER.size} bytes,"
                f" got {len(data)}"
            )
        time_tag, flags_word, ident = _MEAS_HEADER.unpack_from(data)
        flags = MeasFlags.from_int(flags_word)
        end = _MEAS_HEADER.size + flags.num_meas * _U4.size
        if flags.calib_ttag_valid:
            end += _U4.size
        if len(data) < end:
            raise UbxValueError(
                f"ESF-MEAS payload truncated: expected {end} bytes, got {len(data)}"
            )
        offsets = range(_MEAS_HEADER.size, _MEAS_HEADER.size + flags.num_meas * 4, 4)
        datum = [MeasData.from_int(_U4.unpack_from(data, off)[0]) for off in offsets]
        calib_ttag = 0
        if flags.calib_ttag_valid:
            calib_ttag = _U4.unpack_from(data, end - _U4.size)[0]
        return cls(raw=data, time_tag=time_tag, flags=flags, id=ident, datum=datum,
                   calib_ttag=calib_ttag)

    def poll_payload(self):
        return b""

    def __str__(self):
        text = _meas_text(self.time_tag, self.flags, self.datum)
        if self.flags.calib_ttag_valid:
            text += f" {self.calib_ttag}"
        return text


@dataclass
class ESFMeasFullPayload(Payload):
    """Sensor measurements sent to the receiver as input."""

    MSG_CLASS = MsgClass.ESF
    MSG_ID = ESF_MEAS

    time_tag: int = 0
    flags: MeasFlags = field(default_factory=MeasFlags)
    id: int = 0
    datum: list = field(default_factory=list)
    calib_ttag: int = 0

    def load_from_msg(self, msg):
        """Fill from a measurement message; a zero num_meas means all of its data."""
        num_meas = msg.num_meas or len(msg.data)
        self.time_tag = msg.time_tag
        self.flags = MeasFlags(
            time_mark_sent=msg.time_mark_sent & 0x3,
            time_mark_edge=bool(msg.time_mark_edge),
            calib_ttag_valid=bool(msg.calib_ttag_valid),
            num_meas=num_meas & 0x1F,
        )
        self.id = msg.id
        self.datum = [
            MeasData(item.data_field & 0xFFFFFF, item.data_type & 0x3F) for item in msg.data
        ]
        self.calib_ttag = msg.calib_ttag if msg.calib_ttag_valid else 0

    def poll_payload(self):
        num_meas = self.flags.num_meas
        if num_meas > len(self.datum):
            raise UbxValueError(
                f"numMeas is {num_meas} but only {len(self.datum)} measurements are set"
            )
        out = _MEAS_HEADER.pack(self.time_tag, self.flags.to_int(), self.id)
        out += b"".join(_U4.pack(d.to_int()) for d in self.datum[:num_meas])
        if self.flags.calib_ttag_valid:
            out += _U4.pack(self.calib_ttag)
        return out

    def __str__(self):
        text = _meas_text(self.time_tag, self.flags, self.datum[:self.flags.num_meas])
        if self.flags.calib_ttag_valid:
            text += f" calibTtag: {self.calib_ttag}"
        return text


class FusionMode(IntEnum):
    """Sensor fusion mode."""

    INITIALIZATION = 0
    WORKING = 1
    SUSPENDED = 2
    DISABLED = 3


@dataclass(frozen=True)
class SensorStatus:
    """Status of one external sensor."""

    type: int = 0
    used: bool = False
    ready: bool = False
    calib_status: int = 0
    time_status: int = 0
    freq: int = 0
    bad_meas: bool = False
    bad_ttag: bool = False
    missing_meas: bool = False
    noisy_meas: bool = False

    @classmethod
    def from_bytes(cls, data):
        """Decode the four status bytes of one sensor."""
        status1, status2, freq, faults = _SENSOR.unpack(bytes(data))
        return cls(
            type=status1 & 0x3F,
            used=_bit(status1, 6),
            ready=_bit(status1, 7),
            calib_status=status2 & 0x3,
            time_status=(status2 >> 2) & 0x3,
            freq=freq,
            bad_meas=_bit(faults, 0),
            bad_ttag=_bit(faults, 1),
            missing_meas=_bit(faults, 2),
            noisy_meas=_bit(faults, 3),
        )


@dataclass
class ESFStatusPayload(Payload):
    """Sensor fusion initialisation state and per-sensor status."""

    MSG_CLASS = MsgClass.ESF
    MSG_ID = ESF_STATUS

    itow: int = 0
    version: int = 0
    wt_init_status: int = 0
    mnt_alg_status: int = 0
    ins_init_status: int = 0
    imu_init_status: int = 0
    fusion_mode: int = FusionMode.INITIALIZATION
    num_sens: int = 0
    sensor_statuses: list = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < _STATUS_HEADER.size:
            raise UbxValueError(
                f"ESF-STATUS payload too short: expected {_STATUS_HEADER.size} bytes,"
                f" got {len(data)}"
            )
        itow, version, init1, init2, fusion, num_sens = _STATUS_HEADER.unpack_from(data)
        end = _STATUS_HEADER.size + num_sens * _SENSOR.size
        if len(data) < end:
            raise UbxValueError(
                f"ESF-STATUS payload truncated: {num_sens} sensors need {end} bytes,"
                f" got {len(data)}"
            )
        sensors = [
            SensorStatus.from_bytes(data[off:off + _SENSOR.size])
            for off in range(_STATUS_HEADER.size, end, _SENSOR.size)
        ]
        return cls(
            raw=data,
            itow=itow,
            version=version,
            wt_init_status=init1 & 0x3,
            mnt_alg_status=(init1 >> 2) & 0x7,
            ins_init_status=(init1 >> 5) & 0x3,
            imu_init_status=init2 & 0x3,
            fusion_mode=_enum(FusionMode, fusion),
            num_sens=num_sens,
            sensor_statuses=sensors,
        )

    def __str__(self):
        sensors = " |".join(
            f" type: {s.type} used: {int(s.used)} ready: {int(s.ready)}"
            f" calib: {s.calib_status} time: {s.time_status} Hz: {s.freq}"
            f" badMeas: {int(s.bad_meas)} badTtag: {int(s.bad_ttag)}"
            f" missing: {int(s.missing_meas)} noisy: {int(s.noisy_meas)}"
            for s in self.sensor_statuses
        )
        return (
            f"iTOW: {self.itow} version: {self.version}"
            f" wtInit: {self.wt_init_status} mntAlg: {self.mnt_alg_status}"
            f" insInit: {self.ins_init_status} imuInit: {self.imu_init_status}"
            f" fusionMode: {int(self.fusion_mode)} numSens: {self.num_sens}"
            f" [{sensors} ]"
        )