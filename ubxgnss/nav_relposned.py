"""UBX-NAV-RELPOSNED: relative position of the rover to the reference station."""

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.types import MsgClass

NAV_RELPOSNED = 0x3C

_RELPOSNED = struct.Struct("<BxHIiiiii4xbbbbIIIII4xI")


class CarrierSolution(IntEnum):
    """Carrier phase range solution status."""

    NONE = 0
    FLOATING = 1
    FIXED = 2


def _carrier(value):
    try:
        return CarrierSolution(value)
    except ValueError:
        return value


def _bit(value, position):
    return bool((value >> position) & 0x1)


@dataclass(frozen=True)
class RelPosNedFlags:
    """Status flags of NAV-RELPOSNED."""

    gnss_fix_ok: bool = False
    diff_soln: bool = False
    rel_pos_valid: bool = False
    carr_soln: int = CarrierSolution.NONE
    is_moving: bool = False
    ref_pos_miss: bool = False
    ref_obs_miss: bool = False
    rel_pos_heading_valid: bool = False
    rel_pos_normalized: bool = False

    @classmethod
    def from_int(cls, value):
        """Decode the 32-bit flags field."""
        return cls(
            gnss_fix_ok=_bit(value, 0),
            diff_soln=_bit(value, 1),
            rel_pos_valid=_bit(value, 2),
            carr_soln=_carrier((value >> 3) & 0x3),
            is_moving=_bit(value, 5),
            ref_pos_miss=_bit(value, 6),
            ref_obs_miss=_bit(value, 7),
            rel_pos_heading_valid=_bit(value, 8),
            rel_pos_normalized=_bit(value, 9),
        )


@dataclass
class NavRelPosNedPayload(Payload):
    """Relative position in NED, cm with 0.1 mm high-precision parts."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_RELPOSNED

    version: int = 0
    ref_station_id: int = 0
    itow: int = 0
    rel_pos_n: int = 0
    rel_pos_e: int = 0
    rel_pos_d: int = 0
    rel_pos_length: int = 0
    rel_pos_heading: int = 0
    rel_pos_hp_n: int = 0
    rel_pos_hp_e: int = 0
    rel_pos_hp_d: int = 0
    rel_pos_hp_length: int = 0
    acc_n: int = 0
    acc_e: int = 0
    acc_d: int = 0
    acc_length: int = 0
    acc_heading: int = 0
    flags: RelPosNedFlags = field(default_factory=RelPosNedFlags)

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) < _RELPOSNED.size:
            raise UbxValueError(
                f"NAV-RELPOSNED payload too short: expected {_RELPOSNED.size} bytes,"
                f" got {len(data)}"
            )
        *values, flags = _RELPOSNED.unpack_from(data)
        return cls(data, *values, RelPosNedFlags.from_int(flags))

    def __str__(self):
        f = self.flags
        return (
            f"ver: {self.version} refStationId: {self.ref_station_id} iTOW: {self.itow}"
            f" relPos - N: {self.rel_pos_n} E: {self.rel_pos_e} D: {self.rel_pos_d}"
            f" length: {self.rel_pos_length}"
            f" heading:{self.rel_pos_heading * 1e-5:.5f}"
            f" relPosHP - N: {self.rel_pos_hp_n * 0.1:.1f}"
            f" E: {self.rel_pos_hp_e * 0.1:.1f}"
            f" D: {self.rel_pos_hp_d * 0.1:.1f}"
            f" length: {self.rel_pos_hp_length * 0.1:.1f}"
            f" precise HP - N: {self.rel_pos_n + self.rel_pos_hp_n * 1e-2:.2f}"
            f" E: {self.rel_pos_e + self.rel_pos_hp_e * 1e-2:.2f}"
            f" D: {self.rel_pos_d + self.rel_pos_hp_d * 1e-2:.2f}"
            f" length: {self.rel_pos_length + self.rel_pos_hp_length * 1e-2:.2f}"
            f" acc - N: {self.acc_n * 0.1:.1f}"
            f" E: {self.acc_e * 0.1:.1f}"
            f" D: {self.acc_d * 0.1:.1f}"
            f" length: {self.acc_length * 0.1:.1f}"
            f" heading: {self.acc_heading * 1e-5:.5f}"
            " flags - "
            f" gnssFixOK: {int(f.gnss_fix_ok)}"
            f" diffSoln: {int(f.diff_soln)}"
            f" relPosValid: {int(f.rel_pos_valid)}"
            f" carrSoln: {int(f.carr_soln)}"
            f" isMoving: {int(f.is_moving)}"
            f" refPosMiss: {int(f.ref_pos_miss)}"
            f" refObsMiss: {int(f.ref_obs_miss)}"
            f" relPosHeadingValid: {int(f.rel_pos_heading_valid)}"
            f" relPosNormalized: {int(f.rel_pos_normalized)}"
        )