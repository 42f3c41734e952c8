"""UBX-NAV position payloads: covariance, ECEF, high-precision ECEF, LLH and odometer."""

import struct
from dataclasses import dataclass
from enum import IntFlag

from ubxgnss.errors import UbxValueError
from ubxgnss.frame import Payload
from ubxgnss.types import MsgClass

NAV_POSECEF = 0x01
NAV_POSLLH = 0x02
NAV_ODO = 0x09
NAV_HPPOSECEF = 0x13
NAV_COV = 0x36

_COV = struct.Struct("<IBBB9x12f")
_HPPOSECEF = struct.Struct("<B3xIiiibbbBI")
_ODO = struct.Struct("<B3xIIII")
_POSECEF = struct.Struct("<IiiiI")
_POSLLH = struct.Struct("<IiiiiII")


def _unpack(layout, data, name):
    if len(data) < layout.size:
        raise UbxValueError(
            f"{name} payload too short: expected {layout.size} bytes, got {len(data)}"
        )
    return layout.unpack_from(data)


@dataclass
class NavCovPayload(Payload):
    """Position and velocity covariance in the local NED frame (upper triangle)."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_COV

    itow: int = 0
    version: int = 0
    pos_cor_valid: int = 0
    vel_cor_valid: int = 0
    pos_cov_nn: float = 0.0
    pos_cov_ne: float = 0.0
    pos_cov_nd: float = 0.0
    pos_cov_ee: float = 0.0
    pos_cov_ed: float = 0.0
    pos_cov_dd: float = 0.0
    vel_cov_nn: float = 0.0
    vel_cov_ne: float = 0.0
    vel_cov_nd: float = 0.0
    vel_cov_ee: float = 0.0
    vel_cov_ed: float = 0.0
    vel_cov_dd: float = 0.0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        values = _unpack(_COV, data, "NAV-COV")
        return cls(data, *values)

    def __str__(self):
        head = (
            f"iTOW: {self.itow} ver: {self.version}"
            f" posCorValid: {self.pos_cor_valid} velCorValid: {self.vel_cor_valid}"
        )
        covs = [
            ("posCovNN", self.pos_cov_nn),
            ("posCovNE", self.pos_cov_ne),
            ("posCovND", self.pos_cov_nd),
            ("posCovEE", self.pos_cov_ee),
            ("posCovED", self.pos_cov_ed),
            ("posCovDD", self.pos_cov_dd),
            ("velCovNN", self.vel_cov_nn),
            ("velCovNE", self.vel_cov_ne),
            ("velCovND", self.vel_cov_nd),
            ("velCovEE", self.vel_cov_ee),
            ("velCovED", self.vel_cov_ed),
            ("velCovDD", self.vel_cov_dd),
        ]
        return head + "".join(f" {name}: {value:.3g}" for name, value in covs)


class InvalidEcefFlags(IntFlag):
    """Invalid-coordinate flags of NAV-HPPOSECEF."""

    ECEF_X = 0x01
    ECEF_Y = 0x02
    ECEF_Z = 0x04
    ECEF_X_HP = 0x08
    ECEF_Y_HP = 0x10
    ECEF_Z_HP = 0x20


@dataclass
class NavHPPosECEFPayload(Payload):
    """High-precision ECEF position; precise cm = coarse + hp * 1e-2."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_HPPOSECEF

    version: int = 0
    itow: int = 0
    ecef_x: int = 0
    ecef_y: int = 0
    ecef_z: int = 0
    ecef_x_hp: int = 0
    ecef_y_hp: int = 0
    ecef_z_hp: int = 0
    flags: InvalidEcefFlags = InvalidEcefFlags(0)
    p_acc: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        (version, itow, x, y, z, x_hp, y_hp, z_hp, flags, p_acc) = _unpack(
            _HPPOSECEF, data, "NAV-HPPOSECEF"
        )
        return cls(data, version, itow, x, y, z, x_hp, y_hp, z_hp,
                   InvalidEcefFlags(flags), p_acc)

    def _bit(self, flag):
        return int(bool(self.flags & flag))

    def __str__(self):
        return (
            f"ver: {self.version} iTOW: {self.itow}"
            f" ecefX: {self.ecef_x} ecefY: {self.ecef_y} ecefZ: {self.ecef_z}"
            f" ecefXHp: {self.ecef_x_hp} ecefYHp: {self.ecef_y_hp}"
            f" ecefZHp: {self.ecef_z_hp}"
            f" - flags invalid ecefX: {self._bit(InvalidEcefFlags.ECEF_X)}"
            f" ecefY: {self._bit(InvalidEcefFlags.ECEF_Y)}"
            f" ecefZ: {self._bit(InvalidEcefFlags.ECEF_Z)}"
            f" ecefXHp: {self._bit(InvalidEcefFlags.ECEF_X_HP)}"
            f" ecefYHp: {self._bit(InvalidEcefFlags.ECEF_Y_HP)}"
            f" ecefZHp: {self._bit(InvalidEcefFlags.ECEF_Z_HP)}"
            "  - precise"
            f" ecefX: {self.ecef_x + self.ecef_x_hp * 1e-2:.3f}"
            f" ecefY: {self.ecef_y + self.ecef_y_hp * 1e-2:.3f}"
            f" ecefZ: {self.ecef_z + self.ecef_z_hp * 1e-2:.3f}"
            f" pAcc: {self.p_acc * 0.1:.3f}"
        )


@dataclass
class NavOdoPayload(Payload):
    """Odometer distances in metres."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_ODO

    version: int = 0
    itow: int = 0
    distance: int = 0
    total_distance: int = 0
    distance_std: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        return cls(data, *_unpack(_ODO, data, "NAV-ODO"))

    def __str__(self):
        return (
            f"iTOW: {self.itow} distance: {self.distance}"
            f" totalDistance: {self.total_distance} distanceStd: {self.distance_std}"
        )


@dataclass
class NavPosECEFPayload(Payload):
    """Position in ECEF coordinates, in centimetres."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_POSECEF

    itow: int = 0
    ecef_x: int = 0
    ecef_y: int = 0
    ecef_z: int = 0
    p_acc: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        return cls(data, *_unpack(_POSECEF, data, "NAV-POSECEF"))

    def __str__(self):
        return (
            f"iTOW: {self.itow} ecefX: {self.ecef_x} ecefY: {self.ecef_y}"
            f" ecefZ: {self.ecef_z} pAcc: {self.p_acc}"
        )


@dataclass
class NavPosLLHPayload(Payload):
    """Geodetic position: lon/lat in 1e-7 degrees, heights and accuracies in mm."""

    MSG_CLASS = MsgClass.NAV
    MSG_ID = NAV_POSLLH

    itow: int = 0
    lon: int = 0
    lat: int = 0
    height: int = 0
    h_msl: int = 0
    h_acc: int = 0
    v_acc: int = 0

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        return cls(data, *_unpack(_POSLLH, data, "NAV-POSLLH"))

    def __str__(self):
        return (
            f"iTOW: {self.itow}"
            f" lon: {self.lon} {self.lon * 1e-7:.7f}"
            f" lat: {self.lat} {self.lat * 1e-7:.7f}"
            f" height: {self.height} hMSL: {self.h_msl}"
            f" hAcc: {self.h_acc} vAcc: {self.v_acc}"
        )