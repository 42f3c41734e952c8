"""UBX-SEC: signal security state, security event log and unique chip id."""

import struct
from dataclasses import dataclass, field

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.types import MsgClass

SEC_UNIQID = 0x03
SEC_SIG = 0x09
SEC_SIGLOG = 0x10

_U4 = struct.Struct("<I")
_SIGLOG_EVENT = struct.Struct("<IBB2x")
_SIGLOG_EVENTS_START = 8
_UNIQID_START = 4
_UNIQID_SIZE = 5


def _bit(value, position):
    return bool((value >> position) & 0x1)


def _too_short(name, expected, got):
    return UbxValueError(f"{name} payload too short: expected {expected} bytes, got {got}")


@dataclass(frozen=True)
class JamFlags:
    """Jamming detection flags."""

    jam_det_enabled: bool = False
    jamming_state: int = 0

    @classmethod
    def from_int(cls, value):
        return cls(jam_det_enabled=_bit(value, 0), jamming_state=(value >> 1) & 0x3)


@dataclass(frozen=True)
class SpfFlags:
    """Spoofing detection flags."""

    spf_det_enabled: bool = False
    spoofing_state: int = 0

    @classmethod
    def from_int(cls, value):
        return cls(spf_det_enabled=_bit(value, 0), spoofing_state=(value >> 1) & 0x7)


@dataclass(frozen=True)
class JamStateCentFreq:
    """Jamming state at one centre frequency (kHz)."""

    cent_freq: int = 0
    jammed: bool = False

    @classmethod
    def from_int(cls, value):
        return cls(cent_freq=value & 0xFFFFFF, jammed=_bit(value, 24))


@dataclass
class SecSigPayload(Payload):
    """Jamming and spoofing state of the received signals."""

    MSG_CLASS = MsgClass.SEC
    MSG_ID = SEC_SIG

    version: int = 0
    jam_flags: JamFlags = field(default_factory=JamFlags)
    spf_flags: SpfFlags = field(default_factory=SpfFlags)
    jam_num_cent_freqs: int = 0
    jam_state_cent_freqs: list = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if not data:
            raise _too_short("SEC-SIG", 1, 0)
        version = data[0]
        header = 3 if version == 1 else 2
        if version >= 2:
            header = 4
        if len(data) < header:
            raise _too_short("SEC-SIG", header, len(data))
        if version == 1:
            jam_flags = JamFlags.from_int(data[1])
            spf_flags = SpfFlags.from_int(data[2])
        else:
            combined = data[1]
            jam_flags = JamFlags(_bit(combined, 0), (combined >> 1) & 0x3)
            spf_flags = SpfFlags(_bit(combined, 3), (combined >> 4) & 0x7)
        num = 0
        freqs = []
        if version >= 2:
            num = data[3]
            end = 4 + num * _U4.size
            if len(data) < end:
                raise UbxValueError(
                    f"SEC-SIG payload truncated: {num} centre frequencies need {end} bytes,"
                    f" got {len(data)}"
                )
            freqs = [JamStateCentFreq.from_int(v) for (v,) in _U4.iter_unpack(data[4:end])]
        return cls(raw=data, version=version, jam_flags=jam_flags, spf_flags=spf_flags,
                   jam_num_cent_freqs=num, jam_state_cent_freqs=freqs)

    def __str__(self):
        text = (
            f"version: {self.version}"
            f", jam_flags: {{jam_det_enabled: {int(self.jam_flags.jam_det_enabled)}"
            f", jamming_state: {self.jam_flags.jamming_state}}}"
            f", spf_flags: {{spf_det_enabled: {int(self.spf_flags.spf_det_enabled)}"
            f", spoofing_state: {self.spf_flags.spoofing_state}}}"
        )
        if self.version >= 2:
            items = "".join(
                (", " if index > 1 else "")
                + f"{{ {index}, {freq.cent_freq}, {int(freq.jammed)}}}"
                for index, freq in enumerate(self.jam_state_cent_freqs)
            )
            text += f", jam_num_cent_freqs: {self.jam_num_cent_freqs} [{items}]"
        return text


@dataclass(frozen=True)
class SigLogEvent:
    """One detected signal security event."""

    time_elapsed: int
    detection_type: int
    event_type: int


@dataclass
class SecSigLogPayload(Payload):
    """Log of recent signal security events."""

    MSG_CLASS = MsgClass.SEC
    MSG_ID = SEC_SIGLOG

    version: int = 0
    num_events: int = 0
    events: list = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < 2:
            raise _too_short("SEC-SIGLOG", 2, len(data))
        version, num_events = data[0], data[1]
        end = _SIGLOG_EVENTS_START + num_events * _SIGLOG_EVENT.size
        if num_events and len(data) < end:
            raise UbxValueError(
                f"SEC-SIGLOG payload truncated: {num_events} events need {end} bytes,"
                f" got {len(data)}"
            )
        events = []
        if num_events:
            events = [
                SigLogEvent(*values)
                for values in _SIGLOG_EVENT.iter_unpack(data[_SIGLOG_EVENTS_START:end])
            ]
        return cls(raw=data, version=version, num_events=num_events, events=events)

    def __str__(self):
        text = f"version: {self.version}, num_events: {self.num_events}"
        for index, event in enumerate(self.events):
            text += (
                f"\n  event {index}: time_elapsed: {event.time_elapsed},"
                f" detection_type: {event.detection_type}, event_type: {event.event_type}"
            )
        return text


@dataclass
class SecUniqidPayload(Payload):
    """Unique chip identifier of the receiver."""

    MSG_CLASS = MsgClass.SEC
    MSG_ID = SEC_UNIQID

    version: int = 0
    unique_id: bytes = bytes(_UNIQID_SIZE)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        end = _UNIQID_START + _UNIQID_SIZE
        if len(data) < end:
            raise _too_short("SEC-UNIQID", end, len(data))
        return cls(raw=data, version=data[0], unique_id=data[_UNIQID_START:end])

    def __str__(self):
        ident = "".join(f"{byte:x} " for byte in self.unique_id)
        return f"version: {self.version}, unique_id: {ident}"