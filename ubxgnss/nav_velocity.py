"""UBX-NAV velocity payloads in ECEF and NED frames."""

import struct
from dataclasses import dataclass

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.types import MsgClass

NAV_VELECEF = 0x11
NAV_VELNED = 0x12

_VELECEF = struct.Struct("<IiiiI")
_VELNED = struct.Struct("<IiiiIIiII")


def _unpack(layout, data, name):
    if len(data) < layout.size:
        raise UbxValueError(
            f"{name} payload too short: expected {layout.size} bytes, got {len(data)}"
        )
    return layout.unpack_from(data)


@dataclass
class NavVelECEFPayload(Payload):
    """Velocity in ECEF coordinates, in cm/s."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_VELECEF

    itow: int = 0
    ecef_vx: int = 0
    ecef_vy: int = 0
    ecef_vz: int = 0
    s_acc: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        return cls(data, *_unpack(_VELECEF, data, "NAV-VELECEF"))

    def __str__(self):
        return (
            f"iTOW: {self.itow} ecefVX: {self.ecef_vx} ecefVY: {self.ecef_vy}"
            f" ecefVZ: {self.ecef_vz} sAcc: {self.s_acc}"
        )


@dataclass
class NavVelNEDPayload(Payload):
    """Velocity in the local NED frame; headings in 1e-5 degrees."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_VELNED

    itow: int = 0
    vel_n: int = 0
    vel_e: int = 0
    vel_d: int = 0
    speed: int = 0
    g_speed: int = 0
    heading: int = 0
    s_acc: int = 0
    c_acc: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        return cls(data, *_unpack(_VELNED, data, "NAV-VELNED"))

    def __str__(self):
        return (
            f"iTOW: {self.itow} velN: {self.vel_n} velE: {self.vel_e}"
            f" velD: {self.vel_d} speed: {self.speed} gSpeed: {self.g_speed}"
            f" heading: {self.heading * 1e-5:.5f}"
            f" sAcc: {self.s_acc}"
            f" cAcc: {self.c_acc * 1e-5:.5f}"
        )